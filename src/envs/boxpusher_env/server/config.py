# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Server configuration, read from ``BOXPUSHER_*`` environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


@dataclass
class ServerConfig:
    """
    Paths and network settings for the Box Pusher server.

    Attributes:
        data_dir: Directory holding checkpoints and the leaderboard
        levels_dir: Directory of level documents
        log_dir: Directory of the server log file
        host: Interface to bind
        port: Port to listen on
    """

    data_dir: Path = Path("data")
    levels_dir: Path = Path("data/levels")
    log_dir: Path = Path("logs")
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.levels_dir = Path(self.levels_dir)
        self.log_dir = Path(self.log_dir)
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ValueError("port must be an integer between 1 and 65535")
        if not self.host:
            raise ValueError("host must be a non-empty string")

    @property
    def save_dir(self) -> Path:
        return self.data_dir / "save"

    @property
    def ranking_file(self) -> Path:
        return self.data_dir / "save" / "Ranking.xml"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        data_dir = Path(env.get("BOXPUSHER_DATA_DIR", "data"))
        try:
            port = int(env.get("BOXPUSHER_PORT", "8000"))
        except ValueError:
            raise ValueError(f"BOXPUSHER_PORT must be an integer, got {env['BOXPUSHER_PORT']!r}") from None
        return cls(
            data_dir=data_dir,
            levels_dir=Path(env.get("BOXPUSHER_LEVELS_DIR", data_dir / "levels")),
            log_dir=Path(env.get("BOXPUSHER_LOG_DIR", "logs")),
            host=env.get("BOXPUSHER_HOST", "0.0.0.0"),
            port=port,
        )
