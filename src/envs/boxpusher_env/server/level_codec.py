# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Level document codec for the Box Pusher Environment.

Levels are stored as small XML documents:

    <SokobanLevel difficulty="Easy" biome="Grass">
      <LevelStructure width="4" height="2">
        <Row>PBTG</Row>
        <Row>AAAA</Row>
      </LevelStructure>
    </SokobanLevel>

Each row holds one letter per cell:
    G = ground, P = player, A = air, B = box,
    T = target, D = box on target, O = player on target

The codec can also pull a single level out of a multi-level collection
written in the common ``#$.*@+`` notation and re-encode it natively.
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import (
    CodecError,
    DimensionMismatchError,
    InvalidLevelNameError,
    LevelIdNotFoundError,
    MalformedAttributeError,
)
from ..models import Biome, CellKind, Difficulty
from .grid import Grid

logger = logging.getLogger(__name__)

LEVEL_TAG = "SokobanLevel"
STRUCTURE_TAG = "LevelStructure"
ROW_TAG = "Row"

LETTER_FOR_KIND: Dict[CellKind, str] = {
    CellKind.GROUND: "G",
    CellKind.PLAYER: "P",
    CellKind.AIR: "A",
    CellKind.BOX: "B",
    CellKind.TARGET: "T",
    CellKind.DONE_TARGET: "D",
    CellKind.PLAYER_ON_TARGET: "O",
}
KIND_FOR_LETTER: Dict[str, CellKind] = {letter: kind for kind, letter in LETTER_FOR_KIND.items()}

# Symbols of the collection notation, excluding space which depends on position.
LEGACY_SYMBOLS: Dict[str, str] = {
    "#": "A",
    "$": "B",
    ".": "T",
    "*": "D",
    "@": "P",
    "+": "O",
}

# Characters that are not allowed in level names on any common file system.
_INVALID_NAME = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def validate_level_name(name: str) -> str:
    """Return ``name`` if it can key level, checkpoint and record files."""
    if not name or not name.strip() or _INVALID_NAME.search(name) or name in (".", ".."):
        raise InvalidLevelNameError(f"Level name {name!r} is not correct")
    return name


def encode_row(cells: List[CellKind]) -> str:
    return "".join(LETTER_FOR_KIND[CellKind(cell)] for cell in cells)


def decode_row(row: str) -> List[CellKind]:
    try:
        return [KIND_FOR_LETTER[letter] for letter in row]
    except KeyError as e:
        raise CodecError(f"Unknown cell letter {e.args[0]!r} in row {row!r}") from None


def to_element(grid: Grid) -> ET.Element:
    """Build the XML element tree for a grid."""
    root = ET.Element(LEVEL_TAG, {"difficulty": grid.difficulty.value, "biome": grid.biome.value})
    structure = ET.SubElement(root, STRUCTURE_TAG, {"width": str(grid.width), "height": str(grid.height)})
    for row in grid.rows():
        ET.SubElement(structure, ROW_TAG).text = encode_row(row)
    return root


def element_to_text(root: ET.Element) -> str:
    ET.indent(root)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def encode(grid: Grid) -> str:
    """
    Serialize a grid to a level document.

    Args:
        grid: Grid to serialize

    Returns:
        XML text of the level document
    """
    return element_to_text(to_element(grid))


def parse_document(text: Union[str, bytes]) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedAttributeError(f"Level document is not well-formed XML: {e}") from e


def _required_attr(element: ET.Element, name: str) -> str:
    value = element.get(name)
    if value is None:
        raise MalformedAttributeError(f"<{element.tag}> is missing the {name!r} attribute")
    return value


def int_attr(element: ET.Element, name: str) -> int:
    value = _required_attr(element, name)
    try:
        return int(value.strip())
    except ValueError:
        raise MalformedAttributeError(f"{name} attribute is not correct: {value!r}") from None


def _tag_attr(element: ET.Element, name: str, enum_cls):
    value = _required_attr(element, name)
    try:
        return enum_cls.parse(value)
    except ValueError:
        raise MalformedAttributeError(f"{name} attribute is not correct: {value!r}") from None


def from_element(root: ET.Element, name: str) -> Grid:
    """
    Build a grid from a parsed level document.

    Raises:
        MalformedAttributeError: If tags or attributes are missing or invalid
        DimensionMismatchError: If rows disagree with the declared size
        CodecError: If a row contains an unknown letter
        InvalidGridError: If the cells break a grid invariant
    """
    if root.tag != LEVEL_TAG:
        raise MalformedAttributeError(f"Expected <{LEVEL_TAG}> root, found <{root.tag}>")

    biome = _tag_attr(root, "biome", Biome)
    difficulty = _tag_attr(root, "difficulty", Difficulty)

    structure = root.find(STRUCTURE_TAG)
    if structure is None:
        raise MalformedAttributeError(f"<{LEVEL_TAG}> has no <{STRUCTURE_TAG}> element")

    width = int_attr(structure, "width")
    height = int_attr(structure, "height")
    if width <= 0 or height <= 0:
        raise MalformedAttributeError(f"Level size must be positive, got {width}x{height}")

    rows = [(row.text or "").strip() for row in structure.findall(ROW_TAG)]
    if len(rows) != height:
        raise DimensionMismatchError(f"Declared height {height} but found {len(rows)} rows")
    for y, row in enumerate(rows):
        if len(row) != width:
            raise DimensionMismatchError(f"Row {y} has {len(row)} cells, declared width is {width}")

    return Grid(name, [decode_row(row) for row in rows], biome, difficulty)


def decode(text: Union[str, bytes], name: str) -> Grid:
    """
    Parse a level document into a grid.

    Args:
        text: XML text of the level document
        name: Level name to give the grid (documents do not carry one)

    Returns:
        The decoded, validated grid

    Raises:
        InvalidLevelNameError: If ``name`` is empty or not usable as a file name
    """
    validate_level_name(name)
    return from_element(parse_document(text), name)


def _convert_legacy_row(line: str, width: int) -> str:
    letters = []
    seen_wall = False
    for char in line:
        if char == " ":
            letters.append("G" if seen_wall else "A")
            continue
        seen_wall = True
        try:
            letters.append(LEGACY_SYMBOLS[char])
        except KeyError:
            raise CodecError(f"Unknown symbol {char!r} in level row {line!r}") from None

    if len(letters) > width:
        raise DimensionMismatchError(f"Row {line!r} is longer than the declared width {width}")
    return "".join(letters).ljust(width, "A")


def _find_legacy_level(root: ET.Element, level_id: str) -> Optional[ET.Element]:
    for level in root.iter("Level"):
        if level.get("Id") == level_id:
            return level
    return None


def import_legacy(
    text: Union[str, bytes],
    level_id: str,
    biome: Biome = Biome.GRASS,
    difficulty: Difficulty = Difficulty.EASY,
) -> str:
    """
    Convert one level of a ``SokobanLevels`` collection to a native document.

    Spaces before the first non-space character of a row are outside the
    level and become air; spaces after it are floor. Short rows are padded
    with air up to the declared width.

    Args:
        text: XML text of the collection
        level_id: Value of the ``Id`` attribute of the level to convert
        biome: Biome tag for the new document
        difficulty: Difficulty tag for the new document

    Returns:
        XML text of the native level document

    Raises:
        LevelIdNotFoundError: If no level has the given id
    """
    root = parse_document(text)
    level = _find_legacy_level(root, str(level_id))
    if level is None:
        raise LevelIdNotFoundError(f"Level with id {level_id!r} does not exist in the collection")

    width = int_attr(level, "Width")
    height = int_attr(level, "Height")
    lines = [line.text or "" for line in level]
    if len(lines) != height:
        raise DimensionMismatchError(f"Level {level_id!r} declares height {height} but has {len(lines)} rows")

    rows = [decode_row(_convert_legacy_row(line, width)) for line in lines]
    grid = Grid(str(level_id), rows, Biome.parse(biome), Difficulty.parse(difficulty))
    logger.info(f"Imported level {level_id!r} ({width}x{height}) from collection")
    return encode(grid)


def read_level_file(path: Union[str, Path]) -> Grid:
    """Load a level file; the level is named after the file stem."""
    path = Path(path)
    return decode(path.read_bytes(), name=path.stem)


def write_level_file(grid: Grid, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(encode(grid), encoding="utf-8")
    logger.info(f"Saved level {grid.name!r} to {path}")
    return path
