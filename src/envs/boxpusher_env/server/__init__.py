# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Box Pusher core: grid, move engine, level codec and stores."""

from .boxpusher_environment import BoxPusherEnvironment
from .grid import Grid
from .leaderboard_store import MAX_RECORDS, LeaderboardStore, compute_points, score_grid
from .level_codec import decode, encode, import_legacy
from .level_library import EDITOR_PALETTE, LevelLibrary, kind_for_identifier
from .move_engine import try_move
from .progress_store import ProgressStore

__all__ = [
    "BoxPusherEnvironment",
    "EDITOR_PALETTE",
    "Grid",
    "LeaderboardStore",
    "LevelLibrary",
    "MAX_RECORDS",
    "ProgressStore",
    "compute_points",
    "decode",
    "encode",
    "import_legacy",
    "kind_for_identifier",
    "score_grid",
    "try_move",
]
