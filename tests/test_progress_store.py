import xml.etree.ElementTree as ET

import pytest

from envs.boxpusher_env.errors import CodecError, InvalidLevelNameError, MalformedAttributeError, StoreError
from envs.boxpusher_env.models import Direction
from envs.boxpusher_env.server.move_engine import try_move
from envs.boxpusher_env.server.progress_store import ProgressStore


def test_save_then_load_returns_same_grid_and_moves(progress_store, first_steps):
    try_move(first_steps, first_steps.player_position(), Direction.UP)
    progress_store.save(first_steps, moves_taken=7)

    record = progress_store.load("first-steps")

    assert record is not None
    assert record.level_name == "first-steps"
    assert record.grid == first_steps
    assert record.moves_taken == 7


def test_document_carries_moves_attribute(progress_store, first_steps):
    path = progress_store.save(first_steps, moves_taken=3)

    root = ET.fromstring(path.read_text(encoding="utf-8"))

    assert path.name == "first-steps_save.xml"
    assert root.get("moves") == "3"
    assert root.get("biome") == "Grass"


def test_load_without_checkpoint_is_none(tmp_path):
    store = ProgressStore(tmp_path / "does-not-exist")

    assert store.load("anything") is None
    assert not store.exists("anything")


def test_clear_then_load_is_none(progress_store, first_steps):
    progress_store.save(first_steps, moves_taken=1)
    assert progress_store.exists("first-steps")

    progress_store.clear("first-steps")

    assert not progress_store.exists("first-steps")
    assert progress_store.load("first-steps") is None


def test_clear_is_idempotent(progress_store):
    progress_store.clear("never-saved")
    progress_store.clear("never-saved")


def test_save_overwrites_previous_checkpoint(progress_store, first_steps):
    progress_store.save(first_steps, moves_taken=1)
    try_move(first_steps, first_steps.player_position(), Direction.DOWN)
    progress_store.save(first_steps, moves_taken=2)

    record = progress_store.load("first-steps")

    assert record.moves_taken == 2
    assert record.grid == first_steps


def test_corrupt_checkpoint_raises_codec_error(progress_store, first_steps):
    path = progress_store.save(first_steps, moves_taken=1)
    path.write_text("<SokobanLevel", encoding="utf-8")

    with pytest.raises(CodecError):
        progress_store.load("first-steps")


def test_checkpoint_without_moves_is_malformed(progress_store, first_steps):
    path = progress_store.save(first_steps, moves_taken=1)
    path.write_text(path.read_text(encoding="utf-8").replace(' moves="1"', ""), encoding="utf-8")

    with pytest.raises(MalformedAttributeError):
        progress_store.load("first-steps")


def test_unwritable_directory_raises_store_error(tmp_path, first_steps):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = ProgressStore(blocker / "save")

    with pytest.raises(StoreError):
        store.save(first_steps, moves_taken=1)


@pytest.mark.parametrize("name", ["../../escaped", "", "nested/level"])
def test_checkpoint_names_stay_inside_save_dir(tmp_path, make_grid, name):
    store = ProgressStore(tmp_path / "save")
    grid = make_grid(["PBT"], name=name)

    with pytest.raises(InvalidLevelNameError):
        store.save(grid, moves_taken=1)
    with pytest.raises(InvalidLevelNameError):
        store.load(name)

    assert list(tmp_path.rglob("*_save.xml")) == []
