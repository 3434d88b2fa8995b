# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Move engine for the Box Pusher Environment.

Applies a single player step to a grid. A step either applies fully or is
rejected without touching the grid; rejected steps are reported through
``MoveOutcome.moved`` rather than raised.
"""

import logging
from typing import Dict, Tuple

from ..models import BOX_KINDS, PLAYER_KINDS, WALKABLE_KINDS, CellKind, Direction, MoveOutcome
from .grid import Grid

logger = logging.getLogger(__name__)

# What a cell turns back into once its occupant leaves.
VACATED: Dict[CellKind, CellKind] = {
    CellKind.PLAYER: CellKind.GROUND,
    CellKind.PLAYER_ON_TARGET: CellKind.TARGET,
    CellKind.BOX: CellKind.GROUND,
    CellKind.DONE_TARGET: CellKind.TARGET,
}

# What a free cell becomes once the player stands on it.
WITH_PLAYER: Dict[CellKind, CellKind] = {
    CellKind.GROUND: CellKind.PLAYER,
    CellKind.TARGET: CellKind.PLAYER_ON_TARGET,
}

# What a free cell becomes once a box is pushed onto it.
WITH_BOX: Dict[CellKind, CellKind] = {
    CellKind.GROUND: CellKind.BOX,
    CellKind.TARGET: CellKind.DONE_TARGET,
}


def try_move(grid: Grid, player_pos: Tuple[int, int], direction: Direction) -> MoveOutcome:
    """
    Move the player one cell, pushing a box if one is in the way.

    Args:
        grid: Grid to mutate in place
        player_pos: (x, y) of the player cell
        direction: Direction of the step

    Returns:
        MoveOutcome describing what happened. ``moved`` is False for steps
        off the grid, into air, or pushes into anything but free floor.

    Raises:
        ValueError: If ``player_pos`` does not hold the player
    """
    px, py = player_pos
    here = grid.get(px, py)
    if here not in PLAYER_KINDS:
        raise ValueError(f"No player at {player_pos}, found {here.name}")

    dx, dy = direction.value
    dest_x, dest_y = px + dx, py + dy
    dest = grid.get(dest_x, dest_y)
    rejected = MoveOutcome(moved=False, solved=grid.is_solved(), player_position=(px, py))

    if dest in WALKABLE_KINDS:
        grid.set(px, py, VACATED[here])
        grid.set(dest_x, dest_y, WITH_PLAYER[dest])
        outcome = MoveOutcome(
            moved=True,
            solved=grid.is_solved(),
            player_position=(dest_x, dest_y),
        )
        logger.debug(f"Player stepped {direction.name} to {(dest_x, dest_y)}")
        return outcome

    if dest not in BOX_KINDS:
        logger.debug(f"Step {direction.name} from {player_pos} blocked by {dest.name}")
        return rejected

    beyond_x, beyond_y = dest_x + dx, dest_y + dy
    beyond = grid.get(beyond_x, beyond_y)
    if beyond not in WALKABLE_KINDS:
        logger.debug(f"Push {direction.name} from {player_pos} blocked by {beyond.name}")
        return rejected

    grid.set(beyond_x, beyond_y, WITH_BOX[beyond])
    grid.set(dest_x, dest_y, WITH_PLAYER[VACATED[dest]])
    grid.set(px, py, VACATED[here])

    outcome = MoveOutcome(
        moved=True,
        pushed_box=True,
        entered_target=beyond == CellKind.TARGET,
        exited_target=dest == CellKind.DONE_TARGET,
        solved=grid.is_solved(),
        player_position=(dest_x, dest_y),
    )
    logger.debug(f"Player pushed box {direction.name} to {(beyond_x, beyond_y)}")
    return outcome
