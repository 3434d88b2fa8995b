# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Grid model for the Box Pusher Environment.

A grid is a dense height x width array of cell kinds plus descriptive
metadata. Its shape is fixed at construction; only cell contents change
while a level is played.
"""

from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from ..errors import BoxTargetMismatchError, InvalidGridError, TooManyOrNoPlayersError
from ..models import Biome, CellKind, Difficulty

CellsLike = Union[np.ndarray, Sequence[Sequence[Union[CellKind, int]]]]

_VALID_CODES = np.array([kind.value for kind in CellKind])


class Grid:
    """
    Puzzle grid with validated invariants.

    Example:
        >>> grid = Grid("demo", [
        ...     [CellKind.PLAYER, CellKind.BOX, CellKind.TARGET],
        ... ])
        >>> grid.width, grid.height
        (3, 1)
        >>> grid.is_solved()
        False
    """

    def __init__(
        self,
        name: str,
        cells: CellsLike,
        biome: Biome = Biome.GRASS,
        difficulty: Difficulty = Difficulty.EASY,
    ):
        """
        Build a grid and check its invariants.

        Args:
            name: Level name, used as the key for progress and leaderboard
            cells: Rows of cell kinds, top row first
            biome: Descriptive biome tag
            difficulty: Difficulty tag

        Raises:
            InvalidGridError: If the cells are not a non-empty rectangle of known kinds
            TooManyOrNoPlayersError: If there is not exactly one player cell
            BoxTargetMismatchError: If box and target counts differ or are zero
        """
        self.name = name
        self.biome = Biome.parse(biome)
        self.difficulty = Difficulty.parse(difficulty)
        self._cells = _to_array(cells)
        self._validate()

    @classmethod
    def _from_trusted(cls, name: str, cells: np.ndarray, biome: Biome, difficulty: Difficulty) -> "Grid":
        grid = cls.__new__(cls)
        grid.name = name
        grid.biome = biome
        grid.difficulty = difficulty
        grid._cells = cells
        return grid

    def _validate(self) -> None:
        players = self.count(CellKind.PLAYER) + self.count(CellKind.PLAYER_ON_TARGET)
        if players != 1:
            raise TooManyOrNoPlayersError(
                f"Grid {self.name!r} has {players} player cells, expected exactly one"
            )

        boxes = self.count(CellKind.BOX) + self.count(CellKind.DONE_TARGET)
        targets = self.total_targets()
        if boxes != targets:
            raise BoxTargetMismatchError(
                f"Grid {self.name!r} has {boxes} boxes but {targets} targets"
            )
        if boxes == 0:
            raise BoxTargetMismatchError(f"Grid {self.name!r} has no boxes or targets")

    @property
    def width(self) -> int:
        return int(self._cells.shape[1])

    @property
    def height(self) -> int:
        return int(self._cells.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the cell codes, indexed [y, x]."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> CellKind:
        """Return the cell at (x, y); anything off the grid reads as AIR."""
        if not self.in_bounds(x, y):
            return CellKind.AIR
        return CellKind(int(self._cells[y, x]))

    def set(self, x: int, y: int, kind: CellKind) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is outside a {self.width}x{self.height} grid")
        self._cells[y, x] = CellKind(kind).value

    def count(self, kind: CellKind) -> int:
        return int(np.count_nonzero(self._cells == CellKind(kind).value))

    def total_targets(self) -> int:
        return (
            self.count(CellKind.TARGET)
            + self.count(CellKind.DONE_TARGET)
            + self.count(CellKind.PLAYER_ON_TARGET)
        )

    def done_targets(self) -> int:
        return self.count(CellKind.DONE_TARGET)

    def is_solved(self) -> bool:
        """True when no loose BOX cell is left."""
        return self.count(CellKind.BOX) == 0

    def player_position(self) -> Tuple[int, int]:
        """Return (x, y) of the single player cell."""
        mask = (self._cells == CellKind.PLAYER.value) | (self._cells == CellKind.PLAYER_ON_TARGET.value)
        ys, xs = np.nonzero(mask)
        return int(xs[0]), int(ys[0])

    def rows(self) -> List[List[CellKind]]:
        return [[CellKind(int(code)) for code in row] for row in self._cells]

    def clone(self) -> "Grid":
        return Grid._from_trusted(self.name, np.copy(self._cells), self.biome, self.difficulty)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.name == other.name
            and self.biome == other.biome
            and self.difficulty == other.difficulty
            and self.shape == other.shape
            and bool(np.array_equal(self._cells, other._cells))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Grid(name={self.name!r}, size={self.width}x{self.height}, "
            f"biome={self.biome.value}, difficulty={self.difficulty.value})"
        )


def _to_array(cells: CellsLike) -> np.ndarray:
    if isinstance(cells, np.ndarray):
        rows: Iterable = cells.tolist()
    else:
        rows = cells

    rows = [list(row) for row in rows]
    if not rows or not rows[0]:
        raise InvalidGridError("Grid needs at least one row and one column")
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise InvalidGridError("Grid rows must all have the same length")

    try:
        array = np.array([[int(cell) for cell in row] for row in rows], dtype=np.int8)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidGridError(f"Grid cells must be cell kinds: {e}") from e

    if not np.isin(array, _VALID_CODES).all():
        raise InvalidGridError("Grid contains unknown cell codes")
    return array
