import random
from datetime import datetime, timedelta, timezone

import pytest

from envs.boxpusher_env.errors import MalformedAttributeError
from envs.boxpusher_env.models import LeaderboardRecord
from envs.boxpusher_env.server.leaderboard_store import (
    MAX_RECORDS,
    LeaderboardStore,
    compute_points,
    score_grid,
)

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def record(points, minutes=0, level="first-steps", moves=10):
    return LeaderboardRecord(level, moves, points, BASE_TIME + timedelta(minutes=minutes))


def test_compute_points_formula():
    assert compute_points(3, 3, 12) == 1000
    assert compute_points(1, 1, 3) == 1333
    assert compute_points(2, 2, 40) == 200


def test_zero_moves_scores_as_one_move():
    assert compute_points(1, 1, 0) == compute_points(1, 1, 1) == 4000


def test_compute_points_needs_targets():
    with pytest.raises(ValueError):
        compute_points(0, 0, 5)


def test_score_grid_uses_target_counts(make_grid):
    solved = make_grid(["GGG", "GPD", "GDB", "TGG"])

    assert score_grid(solved, 8) == compute_points(3, 2, 8)


def test_records_are_ranked_by_points_then_recency(leaderboard_store):
    leaderboard_store.add_record(record(500, minutes=0))
    leaderboard_store.add_record(record(900, minutes=1))
    leaderboard_store.add_record(record(500, minutes=5))
    leaderboard_store.add_record(record(700, minutes=2))

    ranked = leaderboard_store.get_records("first-steps")

    assert [(r.points, r.timestamp) for r in ranked] == [
        (900, BASE_TIME + timedelta(minutes=1)),
        (700, BASE_TIME + timedelta(minutes=2)),
        (500, BASE_TIME + timedelta(minutes=5)),
        (500, BASE_TIME + timedelta(minutes=0)),
    ]


def test_records_are_filtered_by_level(leaderboard_store):
    leaderboard_store.add_record(record(100, level="a"))
    leaderboard_store.add_record(record(200, level="b"))

    assert [r.points for r in leaderboard_store.get_records("a")] == [100]
    assert leaderboard_store.get_records("missing") == []


def test_cap_keeps_the_best_records(leaderboard_store):
    points = list(range(0, (MAX_RECORDS + 7) * 10, 10))
    random.Random(3).shuffle(points)
    for minute, value in enumerate(points):
        leaderboard_store.add_record(record(value, minutes=minute))

    kept = leaderboard_store.get_records("first-steps")

    assert len(kept) == MAX_RECORDS
    assert [r.points for r in kept] == sorted(points, reverse=True)[:MAX_RECORDS]


def test_cap_evicts_oldest_on_tied_points(tmp_path):
    store = LeaderboardStore(tmp_path / "Ranking.xml", max_records=2)
    store.add_record(record(100, minutes=0))
    store.add_record(record(100, minutes=1))
    store.add_record(record(100, minutes=2))

    assert [r.timestamp for r in store.get_records("first-steps")] == [
        BASE_TIME + timedelta(minutes=2),
        BASE_TIME + timedelta(minutes=1),
    ]


def test_cap_is_per_level(leaderboard_store):
    for minute in range(MAX_RECORDS):
        leaderboard_store.add_record(record(minute, minutes=minute, level="busy"))
    leaderboard_store.add_record(record(1, level="quiet"))

    assert len(leaderboard_store.get_records("busy")) == MAX_RECORDS
    assert len(leaderboard_store.get_records("quiet")) == 1


def test_get_best(leaderboard_store):
    assert leaderboard_store.get_best("first-steps") is None

    leaderboard_store.add_record(record(300))
    leaderboard_store.add_record(record(800, minutes=1))

    assert leaderboard_store.get_best("first-steps").points == 800


def test_remove_all_only_touches_one_level(leaderboard_store):
    leaderboard_store.add_record(record(100, level="a"))
    leaderboard_store.add_record(record(200, level="a"))
    leaderboard_store.add_record(record(300, level="b"))

    assert leaderboard_store.remove_all("a") == 2

    assert leaderboard_store.get_records("a") == []
    assert leaderboard_store.get_best("b").points == 300


def test_remove_all_without_file(leaderboard_store):
    assert leaderboard_store.remove_all("a") == 0


def test_records_persist_across_instances(tmp_path):
    path = tmp_path / "Ranking.xml"
    LeaderboardStore(path).add_record(record(450, moves=17))

    loaded = LeaderboardStore(path).get_best("first-steps")

    assert loaded == record(450, moves=17)


def test_corrupt_record_is_reported(tmp_path):
    path = tmp_path / "Ranking.xml"
    path.write_text('<Ranking><Record map="a" moves="x" points="1" date="2026-10-19T12:00:00+00:00" /></Ranking>')

    with pytest.raises(MalformedAttributeError):
        LeaderboardStore(path).get_records("a")


def test_naive_timestamp_keeps_its_instant(leaderboard_store):
    local = datetime(2026, 10, 19, 12, 0)
    leaderboard_store.add_record(LeaderboardRecord("first-steps", 5, 800, local))

    stored = leaderboard_store.get_best("first-steps").timestamp

    assert stored.tzinfo is not None
    assert stored == local.astimezone(timezone.utc)
