# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Data models for the Box Pusher Environment.

Box Pusher is a grid puzzle where the player pushes boxes onto target cells.
The player can move in four directions and push boxes (but not pull them).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, Tuple

if TYPE_CHECKING:
    from .server.grid import Grid


class CellKind(IntEnum):
    """Contents of a single grid cell."""

    GROUND = 0
    AIR = 1
    PLAYER = 2
    BOX = 3
    TARGET = 4
    DONE_TARGET = 5
    PLAYER_ON_TARGET = 6


PLAYER_KINDS = frozenset({CellKind.PLAYER, CellKind.PLAYER_ON_TARGET})
BOX_KINDS = frozenset({CellKind.BOX, CellKind.DONE_TARGET})
WALKABLE_KINDS = frozenset({CellKind.GROUND, CellKind.TARGET})
TARGET_KINDS = frozenset({CellKind.TARGET, CellKind.DONE_TARGET, CellKind.PLAYER_ON_TARGET})


class Biome(str, Enum):
    """Descriptive biome tag of a level. No effect on the rules."""

    GRASS = "Grass"
    DESERT = "Desert"
    WINTER = "Winter"
    ROCK = "Rock"
    LAVA = "Lava"

    @classmethod
    def parse(cls, value: str) -> "Biome":
        return _parse_tag(cls, value)


class Difficulty(str, Enum):
    """Difficulty tag, used to pick the pool a random level is drawn from."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        return _parse_tag(cls, value)


def _parse_tag(enum_cls, value):
    # Document attributes are matched case-insensitively.
    if isinstance(value, enum_cls):
        return value
    normalized = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == normalized:
            return member
    raise ValueError(f"{value!r} is not a valid {enum_cls.__name__}")


class Direction(Enum):
    """Player step direction as a unit (dx, dy) delta, origin top-left."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @classmethod
    def parse(cls, value: str) -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"{value!r} is not a valid direction") from None


@dataclass(frozen=True)
class MoveOutcome:
    """
    Result of a single player step.

    Attributes:
        moved: Whether the player changed cell
        pushed_box: Whether a box was pushed along
        entered_target: Whether the pushed box landed on a target
        exited_target: Whether the pushed box left a target
        solved: Whether the grid is solved after the step
        player_position: (x, y) of the player after the step
    """

    moved: bool
    pushed_box: bool = False
    entered_target: bool = False
    exited_target: bool = False
    solved: bool = False
    player_position: Tuple[int, int] = (0, 0)


@dataclass
class ProgressRecord:
    """A persisted mid-puzzle checkpoint. One per level."""

    level_name: str
    grid: "Grid"
    moves_taken: int


@dataclass(frozen=True)
class LeaderboardRecord:
    """A completed attempt at a level."""

    level_name: str
    moves_taken: int
    points: int
    timestamp: datetime

    @property
    def rank_key(self) -> Tuple[int, datetime]:
        return (self.points, self.timestamp)


@dataclass(kw_only=True)
class BoxPusherAction:
    """
    Action for the Box Pusher environment.

    Attributes:
        direction: The direction to move ("up", "down", "left", "right")
    """

    direction: Literal["up", "down", "left", "right"]


@dataclass(kw_only=True)
class BoxPusherObservation:
    """
    Observation from the Box Pusher environment.

    Attributes:
        level_name: Name of the level being played
        board: Letter-coded rows of the board, one string per row.
                G = ground, A = air, P = player, B = box,
                T = target, D = box on target, O = player on target
        board_shape: Shape of the board (height, width)
        num_boxes: Total number of boxes in the puzzle
        boxes_on_goals: Number of boxes currently on targets
        player_position: (x, y) position of the player
        moves_count: Number of successful moves taken so far
        pushes_count: Number of box pushes performed
        last_move: Outcome of the step that produced this observation
        is_solved: Whether all boxes are on targets
        points: Score recorded for the solve, if solved during this session
        done: Whether the episode is over
    """

    level_name: str
    board: List[str]
    board_shape: List[int]
    num_boxes: int
    boxes_on_goals: int
    player_position: List[int]
    moves_count: int = 0
    pushes_count: int = 0
    last_move: Optional[MoveOutcome] = None
    is_solved: bool = False
    points: Optional[int] = None
    done: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionState:
    """Bookkeeping of the current episode."""

    episode_id: Optional[str] = None
    step_count: int = 0
    level_name: Optional[str] = None
