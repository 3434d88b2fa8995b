# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Leaderboard storage and scoring.

All completed attempts live in one shared document:

    <Ranking>
      <Record map="level-1" moves="42" points="952" date="2026-10-19T12:00:00+00:00" />
    </Ranking>

Ranking is recomputed on every read: points descending, ties going to the
most recent record. Each level keeps at most ``MAX_RECORDS`` records.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from ..errors import MalformedAttributeError, StoreError
from ..models import LeaderboardRecord
from . import level_codec
from .grid import Grid

logger = logging.getLogger(__name__)

MAX_RECORDS = 20

RANKING_TAG = "Ranking"
RECORD_TAG = "Record"


def compute_points(total_targets: int, done_targets: int, moves_taken: int) -> int:
    """
    Score a solved attempt.

    ``points = round(100 * (total * 10) * (done / total) / (moves / 4))``

    The ``done / total`` factor is 1 for a solved grid. A zero-move attempt
    is scored as a one-move attempt.

    Args:
        total_targets: Number of target cells in the level
        done_targets: Number of boxes sitting on targets
        moves_taken: Moves made in the attempt

    Returns:
        Points for the attempt
    """
    if total_targets <= 0:
        raise ValueError("total_targets must be positive")
    moves = max(int(moves_taken), 1)
    return round(100 * (total_targets * 10) * (done_targets / total_targets) / (moves / 4))


def score_grid(grid: Grid, moves_taken: int) -> int:
    return compute_points(grid.total_targets(), grid.done_targets(), moves_taken)


def ranked(records: List[LeaderboardRecord]) -> List[LeaderboardRecord]:
    return sorted(records, key=lambda record: record.rank_key, reverse=True)


def _record_to_element(record: LeaderboardRecord) -> ET.Element:
    return ET.Element(
        RECORD_TAG,
        {
            "map": record.level_name,
            "moves": str(record.moves_taken),
            "points": str(record.points),
            "date": record.timestamp.astimezone(timezone.utc).isoformat(),
        },
    )


def _element_to_record(element: ET.Element) -> LeaderboardRecord:
    raw_date = element.get("date")
    if raw_date is None:
        raise MalformedAttributeError("Record is missing the 'date' attribute")
    try:
        timestamp = datetime.fromisoformat(raw_date)
    except ValueError:
        raise MalformedAttributeError(f"date attribute is not correct: {raw_date!r}") from None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return LeaderboardRecord(
        level_name=(element.get("map") or "").strip(),
        moves_taken=level_codec.int_attr(element, "moves"),
        points=level_codec.int_attr(element, "points"),
        timestamp=timestamp,
    )


class LeaderboardStore:
    """
    Capped, ranked history of completed attempts per level.

    Example:
        >>> store = LeaderboardStore("save/Ranking.xml")
        >>> store.add_record(LeaderboardRecord("level-1", 40, 1000, datetime.now(timezone.utc)))
        >>> store.get_best("level-1").points
        1000
    """

    def __init__(self, path: Union[str, Path], max_records: int = MAX_RECORDS):
        if max_records <= 0:
            raise ValueError("max_records must be a positive integer")
        self.path = Path(path)
        self.max_records = max_records

    def _load_root(self) -> ET.Element:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return ET.Element(RANKING_TAG)
        except OSError as e:
            raise StoreError(f"Could not read leaderboard {self.path}: {e}") from e

        root = level_codec.parse_document(data)
        if root.tag != RANKING_TAG:
            raise MalformedAttributeError(f"Expected <{RANKING_TAG}> root, found <{root.tag}>")
        return root

    def _save_root(self, root: ET.Element) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(level_codec.element_to_text(root), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Could not write leaderboard {self.path}: {e}") from e

    @staticmethod
    def _elements_for(root: ET.Element, level_name: str) -> List[ET.Element]:
        return [
            element
            for element in root.findall(RECORD_TAG)
            if (element.get("map") or "").strip() == level_name
        ]

    def add_record(self, record: LeaderboardRecord) -> None:
        """
        Append a record, evicting the lowest-ranked ones of the same level
        while the level holds more than ``max_records`` records.

        Timestamps are stored in UTC; a naive timestamp is taken as local time.
        """
        root = self._load_root()
        root.append(_record_to_element(record))

        elements = self._elements_for(root, record.level_name)
        if len(elements) > self.max_records:
            pairs = [(element, _element_to_record(element)) for element in elements]
            pairs.sort(key=lambda pair: pair[1].rank_key, reverse=True)
            for element, evicted in pairs[self.max_records:]:
                root.remove(element)
                logger.info(
                    f"Evicted record of {evicted.level_name!r} with {evicted.points} points "
                    f"from {evicted.timestamp.isoformat()}"
                )

        self._save_root(root)
        logger.info(
            f"Recorded {record.points} points in {record.moves_taken} moves for {record.level_name!r}"
        )

    def get_records(self, level_name: str) -> List[LeaderboardRecord]:
        """All records of a level, best first."""
        root = self._load_root()
        return ranked([_element_to_record(element) for element in self._elements_for(root, level_name)])

    def get_best(self, level_name: str) -> Optional[LeaderboardRecord]:
        records = self.get_records(level_name)
        return records[0] if records else None

    def remove_all(self, level_name: str) -> int:
        """Drop every record of a level. Returns how many were removed."""
        if not self.path.exists():
            return 0
        root = self._load_root()
        elements = self._elements_for(root, level_name)
        for element in elements:
            root.remove(element)
        if elements:
            self._save_root(root)
            logger.info(f"Removed {len(elements)} records of {level_name!r}")
        return len(elements)
