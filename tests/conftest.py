import pytest

from envs.boxpusher_env.models import Biome, Difficulty
from envs.boxpusher_env.server.grid import Grid
from envs.boxpusher_env.server.leaderboard_store import LeaderboardStore
from envs.boxpusher_env.server.level_codec import decode_row
from envs.boxpusher_env.server.level_library import LevelLibrary
from envs.boxpusher_env.server.progress_store import ProgressStore


FIRST_STEPS = [
    "AAAAAA",
    "AGGGGA",
    "APGBTA",
    "AGGGGA",
    "AAAAAA",
]


def build_grid(rows, name="level", biome=Biome.GRASS, difficulty=Difficulty.EASY):
    return Grid(name, [decode_row(row) for row in rows], biome, difficulty)


@pytest.fixture
def make_grid():
    return build_grid


@pytest.fixture
def first_steps():
    return build_grid(FIRST_STEPS, name="first-steps")


@pytest.fixture
def progress_store(tmp_path):
    return ProgressStore(tmp_path / "save")


@pytest.fixture
def leaderboard_store(tmp_path):
    return LeaderboardStore(tmp_path / "save" / "Ranking.xml")


@pytest.fixture
def library(tmp_path, progress_store, leaderboard_store, first_steps):
    library = LevelLibrary(tmp_path / "levels", progress_store=progress_store, leaderboard_store=leaderboard_store)
    library.save(first_steps)
    return library
