# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Box Pusher Environment - A grid block-pushing puzzle environment."""

from .client import BoxPusherEnv
from .models import BoxPusherAction, BoxPusherObservation, CellKind, Direction, MoveOutcome

__all__ = [
    "BoxPusherAction",
    "BoxPusherObservation",
    "BoxPusherEnv",
    "CellKind",
    "Direction",
    "MoveOutcome",
]
