# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Progress checkpoint storage.

Each level has at most one checkpoint: a level document with an extra
``moves`` attribute on the root, stored as ``<level name>_save.xml``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import StoreError
from ..models import ProgressRecord
from . import level_codec
from .grid import Grid

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Saves and restores an unsolved attempt per level.

    Example:
        >>> store = ProgressStore("save")
        >>> store.save(grid, moves_taken=12)
        >>> record = store.load(grid.name)
        >>> record.moves_taken
        12
    """

    def __init__(self, save_dir: Union[str, Path]):
        self.save_dir = Path(save_dir)

    def path_for(self, level_name: str) -> Path:
        return self.save_dir / f"{level_codec.validate_level_name(level_name)}_save.xml"

    def exists(self, level_name: str) -> bool:
        return self.path_for(level_name).is_file()

    def save(self, grid: Grid, moves_taken: int) -> Path:
        """
        Write a checkpoint, replacing any earlier one for the same level.

        Args:
            grid: Grid in its current state
            moves_taken: Moves made so far in this attempt

        Returns:
            Path of the checkpoint file
        """
        root = level_codec.to_element(grid)
        root.set("moves", str(int(moves_taken)))
        path = self.path_for(grid.name)
        try:
            self.save_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(level_codec.element_to_text(root), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Could not save progress for {grid.name!r}: {e}") from e

        logger.debug(f"Saved progress for {grid.name!r} after {moves_taken} moves")
        return path

    def load(self, level_name: str) -> Optional[ProgressRecord]:
        """
        Restore the checkpoint of a level.

        Returns:
            The ProgressRecord, or None when the level has no checkpoint

        Raises:
            StoreError: If the file exists but cannot be read
            CodecError: If the file is not a valid progress document
        """
        path = self.path_for(level_name)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Could not read progress for {level_name!r}: {e}") from e

        root = level_codec.parse_document(data)
        grid = level_codec.from_element(root, level_name)
        moves_taken = level_codec.int_attr(root, "moves")
        logger.info(f"Loaded progress for {level_name!r} at {moves_taken} moves")
        return ProgressRecord(level_name=level_name, grid=grid, moves_taken=moves_taken)

    def clear(self, level_name: str) -> None:
        """Delete the checkpoint of a level if there is one."""
        try:
            self.path_for(level_name).unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Could not clear progress for {level_name!r}: {e}") from e
        logger.debug(f"Cleared progress for {level_name!r}")
