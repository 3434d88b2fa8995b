import xml.etree.ElementTree as ET

import pytest

from envs.boxpusher_env.errors import (
    CodecError,
    DimensionMismatchError,
    InvalidLevelNameError,
    LevelIdNotFoundError,
    MalformedAttributeError,
    TooManyOrNoPlayersError,
)
from envs.boxpusher_env.models import Biome, CellKind, Difficulty
from envs.boxpusher_env.server import level_codec
from envs.boxpusher_env.server.level_codec import decode, encode, import_legacy


def level_document(rows, width=None, height=None, biome="Grass", difficulty="Easy"):
    width = len(rows[0]) if width is None else width
    height = len(rows) if height is None else height
    body = "".join(f"<Row>{row}</Row>" for row in rows)
    return (
        f'<SokobanLevel difficulty="{difficulty}" biome="{biome}">'
        f'<LevelStructure width="{width}" height="{height}">{body}</LevelStructure>'
        f"</SokobanLevel>"
    )


COLLECTION = """<?xml version="1.0" encoding="utf-8"?>
<SokobanLevels>
  <Title>Test collection</Title>
  <LevelCollection Copyright="nobody">
    <Level Id="1" Width="6" Height="3">
      <L>######</L>
      <L> #$.@</L>
      <L>######</L>
    </Level>
    <Level Id="interior" Width="8" Height="3">
      <L>  ######</L>
      <L>  #@ $.#</L>
      <L>  ######</L>
    </Level>
    <Level Id="stacked" Width="6" Height="1">
      <L>#+*$#</L>
    </Level>
    <Level Id="too-wide" Width="3" Height="1">
      <L>#@$.#</L>
    </Level>
  </LevelCollection>
</SokobanLevels>
"""


def test_encode_writes_attributes_and_rows(make_grid):
    grid = make_grid(["APBT", "GGGG"], biome=Biome.ROCK, difficulty=Difficulty.MEDIUM)

    root = ET.fromstring(encode(grid))

    assert root.tag == "SokobanLevel"
    assert root.get("difficulty") == "Medium"
    assert root.get("biome") == "Rock"
    structure = root.find("LevelStructure")
    assert structure.get("width") == "4"
    assert structure.get("height") == "2"
    assert [row.text for row in structure.findall("Row")] == ["APBT", "GGGG"]


def test_round_trip_keeps_every_cell_kind(make_grid):
    grid = make_grid(["ABGTD", "GOGBA"], name="mixed", biome=Biome.LAVA, difficulty=Difficulty.HARD)

    decoded = decode(encode(grid), name="mixed")

    assert decoded == grid
    assert decoded.get(1, 1) is CellKind.PLAYER_ON_TARGET
    assert decoded.get(4, 0) is CellKind.DONE_TARGET


def test_decode_is_case_insensitive_for_tags():
    grid = decode(level_document(["PBT"], biome="winter", difficulty="hard"), name="x")

    assert grid.biome is Biome.WINTER
    assert grid.difficulty is Difficulty.HARD


def test_decode_trims_row_whitespace():
    text = level_document(["PBT"]).replace("<Row>PBT</Row>", "<Row>\n   PBT  \n</Row>")

    assert decode(text, name="level").get(2, 0) is CellKind.TARGET


@pytest.mark.parametrize(
    "text",
    [
        level_document(["PBT"], biome="Jungle"),
        level_document(["PBT"], width="three"),
        '<SokobanLevel difficulty="Easy"><LevelStructure width="3" height="1"><Row>PBT</Row></LevelStructure></SokobanLevel>',
        '<SokobanLevel difficulty="Easy" biome="Grass"></SokobanLevel>',
        "<Level><Row>PBT</Row></Level>",
        "this is not xml",
    ],
)
def test_decode_rejects_malformed_documents(text):
    with pytest.raises(MalformedAttributeError):
        decode(text, name="level")


def test_decode_rejects_wrong_row_count():
    with pytest.raises(DimensionMismatchError):
        decode(level_document(["PBT", "GGG"], height=3), name="level")


def test_decode_rejects_wrong_row_length():
    with pytest.raises(DimensionMismatchError):
        decode(level_document(["PBT", "GG"], width=3), name="level")


def test_decode_rejects_unknown_letters():
    with pytest.raises(CodecError) as excinfo:
        decode(level_document(["PBX"]), name="level")

    assert not isinstance(excinfo.value, DimensionMismatchError)


def test_decode_propagates_grid_errors():
    with pytest.raises(TooManyOrNoPlayersError):
        decode(level_document(["PBT", "PBT"]), name="level")


def test_import_legacy_maps_leading_spaces_to_air():
    text = import_legacy(COLLECTION, "1", Biome.GRASS, Difficulty.EASY)
    grid = decode(text, name="1")

    rows = [level_codec.encode_row(row) for row in grid.rows()]
    assert rows == ["AAAAAA", "AABTPA", "AAAAAA"]
    assert grid.biome is Biome.GRASS
    assert grid.difficulty is Difficulty.EASY


def test_import_legacy_maps_interior_spaces_to_ground():
    grid = decode(import_legacy(COLLECTION, "interior", Biome.DESERT, Difficulty.MEDIUM), name="interior")

    assert [level_codec.encode_row(row) for row in grid.rows()][1] == "AAAPGBTA"
    assert grid.biome is Biome.DESERT


def test_import_legacy_handles_stacked_symbols():
    grid = decode(import_legacy(COLLECTION, "stacked"), name="stacked")

    assert [level_codec.encode_row(row) for row in grid.rows()] == ["AODBAA"]


def test_import_legacy_unknown_id():
    with pytest.raises(LevelIdNotFoundError):
        import_legacy(COLLECTION, "404")


def test_import_legacy_row_wider_than_declared():
    with pytest.raises(DimensionMismatchError):
        import_legacy(COLLECTION, "too-wide")


def test_level_files_are_named_after_their_stem(tmp_path, make_grid):
    grid = make_grid(["PBT"], name="garden")

    path = level_codec.write_level_file(grid, tmp_path / "nested" / "garden.xml")
    loaded = level_codec.read_level_file(path)

    assert loaded == grid
    assert loaded.name == "garden"


@pytest.mark.parametrize("name", ["", "  ", "../escaped", "a\\b", ".."])
def test_decode_rejects_unusable_names(name):
    with pytest.raises(InvalidLevelNameError):
        decode(level_document(["PBT"]), name=name)
