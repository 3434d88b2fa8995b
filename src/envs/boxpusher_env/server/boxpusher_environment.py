# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Box Pusher Environment Implementation.

A grid puzzle where the player pushes boxes onto target cells. The
environment owns the grid being played, feeds direction events to the move
engine, checkpoints progress after each move and records a leaderboard
entry once the puzzle is solved.
"""

import logging
import random
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from ..models import (
    BoxPusherAction,
    BoxPusherObservation,
    Difficulty,
    Direction,
    LeaderboardRecord,
    MoveOutcome,
    SessionState,
)
from .grid import Grid
from .leaderboard_store import LeaderboardStore, score_grid
from .level_codec import encode_row, validate_level_name
from .level_library import LevelLibrary
from .move_engine import try_move
from .progress_store import ProgressStore

logger = logging.getLogger(__name__)

MoveListener = Callable[[MoveOutcome], None]
SolvedListener = Callable[[], None]


class BoxPusherEnvironment:
    """
    Box Pusher puzzle session.

    The goal is to push all boxes onto targets. The player can move in four
    directions. If there's a box in the direction of movement and free floor
    behind it, the box is pushed.

    Listeners registered with ``add_move_listener`` are called after every
    successful move; listeners registered with ``add_solved_listener`` once
    the puzzle is solved.

    Example:
        >>> env = BoxPusherEnvironment(library, progress, leaderboard)
        >>> obs = env.reset(level_name="first-steps")
        >>> print(f"Board size: {obs.board_shape}")
        >>>
        >>> obs = env.step(BoxPusherAction(direction="up"))
        >>> print(f"Boxes on goals: {obs.boxes_on_goals}/{obs.num_boxes}")
    """

    def __init__(
        self,
        library: Optional[LevelLibrary],
        progress_store: ProgressStore,
        leaderboard_store: LeaderboardStore,
    ):
        """
        Initialize the Box Pusher environment.

        Args:
            library: Level library used by reset(); may be None when levels
                are always handed in through load_level()
            progress_store: Store for mid-puzzle checkpoints
            leaderboard_store: Store for completed attempts
        """
        self.library = library
        self.progress_store = progress_store
        self.leaderboard_store = leaderboard_store

        self._state = SessionState(episode_id=str(uuid4()), step_count=0)
        self._grid: Optional[Grid] = None
        self._initial_grid: Optional[Grid] = None
        self._player_pos = (0, 0)
        self._moves_count = 0
        self._pushes_count = 0
        self._points: Optional[int] = None
        self._move_listeners: List[MoveListener] = []
        self._solved_listeners: List[SolvedListener] = []
        self._lock = threading.RLock()

        logger.info("BoxPusherEnvironment initialized")

    def add_move_listener(self, listener: MoveListener) -> None:
        self._move_listeners.append(listener)

    def add_solved_listener(self, listener: SolvedListener) -> None:
        self._solved_listeners.append(listener)

    @property
    def grid(self) -> Optional[Grid]:
        return self._grid

    @property
    def moves_count(self) -> int:
        return self._moves_count

    def load_level(self, grid: Grid, resume: bool = True) -> BoxPusherObservation:
        """
        Start playing the given level.

        Args:
            grid: Level in its initial state
            resume: Continue from the saved checkpoint of this level, if any

        Returns:
            BoxPusherObservation with the starting board state

        Raises:
            InvalidLevelNameError: If the grid's name cannot key its checkpoint
        """
        validate_level_name(grid.name)
        with self._lock:
            self._state = SessionState(episode_id=str(uuid4()), step_count=0, level_name=grid.name)
            self._initial_grid = grid.clone()
            self._grid = grid.clone()
            self._moves_count = 0
            self._pushes_count = 0
            self._points = None

            if resume:
                record = self.progress_store.load(grid.name)
                if record is not None:
                    self._grid = record.grid
                    self._moves_count = record.moves_taken
                    logger.info(f"Resuming {grid.name!r} at {record.moves_taken} moves")

            self._player_pos = self._grid.player_position()
            logger.info(f"Episode {self._state.episode_id} started on level {grid.name!r}")
            return self._get_observation()

    def reset(
        self,
        level_name: Optional[str] = None,
        difficulty: Difficulty = Difficulty.EASY,
        seed: Optional[int] = None,
        resume: bool = True,
    ) -> BoxPusherObservation:
        """
        Load a level from the library.

        Args:
            level_name: Level to load; a random one of ``difficulty`` when None
            difficulty: Pool to draw from when no name is given
            seed: Optional random seed for reproducible level picks
            resume: Continue from the saved checkpoint, if any

        Returns:
            BoxPusherObservation with the starting board state
        """
        if self.library is None:
            raise RuntimeError("reset() needs a level library; use load_level() instead")

        with self._lock:
            if level_name is not None:
                grid = self.library.load(level_name)
            else:
                rng = random.Random(seed) if seed is not None else None
                grid = self.library.random_level(difficulty, rng=rng)
            return self.load_level(grid, resume=resume)

    def restart(self) -> BoxPusherObservation:
        """Throw away the checkpoint and start the current level over."""
        with self._lock:
            grid = self._require_grid()
            self.progress_store.clear(grid.name)
            return self.load_level(self._initial_grid, resume=False)

    def step(self, action: BoxPusherAction) -> BoxPusherObservation:
        """
        Execute a step in the environment by moving the player.

        Move listeners hear every attempted move, rejected ones included;
        counters and the checkpoint only change when the player moved.

        Args:
            action: BoxPusherAction containing the direction to move

        Returns:
            BoxPusherObservation with the updated board state
        """
        direction = Direction.parse(action.direction)
        with self._lock:
            grid = self._require_grid()
            self._state.step_count += 1

            if grid.is_solved():
                logger.warning(f"Episode {self._state.episode_id} is already solved; ignoring {direction.name}")
                rejected = MoveOutcome(moved=False, solved=True, player_position=self._player_pos)
                return self._get_observation(rejected)

            outcome = try_move(grid, self._player_pos, direction)
            if outcome.moved:
                self._player_pos = outcome.player_position
                self._moves_count += 1
                if outcome.pushed_box:
                    self._pushes_count += 1

                if outcome.solved:
                    self._finish()
                else:
                    self.progress_store.save(grid, self._moves_count)

            for listener in self._move_listeners:
                listener(outcome)
            if outcome.solved:
                for listener in self._solved_listeners:
                    listener()

            logger.debug(
                f"Step {self._state.step_count}: Action={direction.name}, Moved={outcome.moved}, "
                f"Solved={outcome.solved}"
            )
            return self._get_observation(outcome)

    def _finish(self) -> None:
        grid = self._grid
        self._points = score_grid(grid, self._moves_count)
        record = LeaderboardRecord(
            level_name=grid.name,
            moves_taken=self._moves_count,
            points=self._points,
            timestamp=datetime.now(timezone.utc),
        )
        self.leaderboard_store.add_record(record)
        self.progress_store.clear(grid.name)
        logger.info(
            f"Episode {self._state.episode_id} solved {grid.name!r} in {self._moves_count} moves "
            f"for {self._points} points"
        )

    def _require_grid(self) -> Grid:
        if self._grid is None:
            raise RuntimeError("No level loaded; call reset() or load_level() first")
        return self._grid

    def _get_observation(self, last_move: Optional[MoveOutcome] = None) -> BoxPusherObservation:
        """Create an observation from the current board state."""
        grid = self._require_grid()
        is_solved = grid.is_solved()

        return BoxPusherObservation(
            level_name=grid.name,
            board=[encode_row(row) for row in grid.rows()],
            board_shape=[grid.height, grid.width],
            num_boxes=grid.total_targets(),
            boxes_on_goals=grid.done_targets(),
            player_position=list(self._player_pos),
            moves_count=self._moves_count,
            pushes_count=self._pushes_count,
            last_move=last_move,
            is_solved=is_solved,
            points=self._points,
            done=is_solved,
            metadata={
                "step": self._state.step_count,
                "biome": grid.biome.value,
                "difficulty": grid.difficulty.value,
            },
        )

    @property
    def state(self) -> SessionState:
        """
        Get the current environment state.

        Returns:
            Current SessionState with episode_id, step_count and level_name
        """
        return self._state
