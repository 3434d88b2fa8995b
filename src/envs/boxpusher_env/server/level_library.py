# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Level files on disk.

A library is a directory of ``<name>.xml`` level documents. It hands out
levels by name or at random within a difficulty, and keeps the progress
and leaderboard stores consistent when a level is saved over or deleted.
"""

import logging
import random
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import LevelNotFoundError
from ..models import CellKind, Difficulty
from . import level_codec
from .grid import Grid
from .leaderboard_store import LeaderboardStore
from .level_codec import validate_level_name
from .progress_store import ProgressStore

logger = logging.getLogger(__name__)

LEVEL_SUFFIX = ".xml"

# Editor widget identifiers -> the cell kind they paint.
EDITOR_PALETTE: Dict[str, CellKind] = {
    "Ground": CellKind.GROUND,
    "Air": CellKind.AIR,
    "Player": CellKind.PLAYER,
    "Box": CellKind.BOX,
    "Target": CellKind.TARGET,
    "DoneTarget": CellKind.DONE_TARGET,
    "PlayerOnTarget": CellKind.PLAYER_ON_TARGET,
}


def kind_for_identifier(identifier: str) -> CellKind:
    return EDITOR_PALETTE[identifier]


class LevelLibrary:
    """
    Directory-backed collection of levels.

    Example:
        >>> library = LevelLibrary("levels")
        >>> grid = library.random_level(Difficulty.EASY, rng=random.Random(7))
        >>> library.load(grid.name) == grid
        True
    """

    def __init__(
        self,
        levels_dir: Union[str, Path],
        progress_store: Optional[ProgressStore] = None,
        leaderboard_store: Optional[LeaderboardStore] = None,
    ):
        self.levels_dir = Path(levels_dir)
        self.progress_store = progress_store
        self.leaderboard_store = leaderboard_store

    def path_for(self, name: str) -> Path:
        return self.levels_dir / f"{validate_level_name(name)}{LEVEL_SUFFIX}"

    def names(self) -> List[str]:
        if not self.levels_dir.is_dir():
            return []
        return sorted(path.stem for path in self.levels_dir.glob(f"*{LEVEL_SUFFIX}"))

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Grid:
        path = self.path_for(name)
        if not path.is_file():
            raise LevelNotFoundError(f"No level named {name!r} in {self.levels_dir}")
        return level_codec.read_level_file(path)

    def save(self, grid: Grid) -> Path:
        """
        Write a level, replacing any previous version of it.

        Records and checkpoints made against the previous version no longer
        apply, so both are dropped.
        """
        path = level_codec.write_level_file(grid, self.path_for(grid.name))
        self._invalidate(grid.name)
        return path

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        if not path.is_file():
            raise LevelNotFoundError(f"No level named {name!r} in {self.levels_dir}")
        path.unlink()
        self._invalidate(name)
        logger.info(f"Deleted level {name!r}")

    def _invalidate(self, name: str) -> None:
        if self.leaderboard_store is not None:
            self.leaderboard_store.remove_all(name)
        if self.progress_store is not None:
            self.progress_store.clear(name)

    def by_difficulty(self, difficulty: Difficulty) -> List[Grid]:
        difficulty = Difficulty.parse(difficulty)
        levels = [self.load(name) for name in self.names()]
        return [grid for grid in levels if grid.difficulty == difficulty]

    def random_level(self, difficulty: Difficulty, rng: Optional[random.Random] = None) -> Grid:
        """
        Pick a random level of the given difficulty.

        Raises:
            LevelNotFoundError: If the library has no level of that difficulty
        """
        pool = self.by_difficulty(difficulty)
        if not pool:
            raise LevelNotFoundError(f"No {Difficulty.parse(difficulty).value} levels in {self.levels_dir}")
        grid = (rng or random).choice(pool)
        logger.info(f"Picked level {grid.name!r} from {len(pool)} {grid.difficulty.value} levels")
        return grid
