from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias

from .defs import LevelParseError, ParseError, XmlParseError
from .level import Level

logger = logging.getLogger(__name__)

LevelResult: TypeAlias = Level | LevelParseError


@dataclass(slots=True)
class LevelSet:
    """A named collection of levels. Entries that failed to parse are kept
    as LevelParseError values in place of their level."""

    name: str
    levels: list[LevelResult] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(isinstance(entry, LevelParseError) for entry in self.levels)

    def valid_levels(self) -> Iterator[tuple[int, Level]]:
        for index, entry in enumerate(self.levels):
            if isinstance(entry, Level):
                yield index, entry

    def __len__(self) -> int:
        return len(self.levels)

    @classmethod
    def from_str(cls, text: str) -> LevelSet:
        if text.startswith("<?xml"):
            return _read_from_xml(text)
        return _read_from_text(text)

    @classmethod
    def from_file(cls, path: str | Path) -> LevelSet:
        path_obj = Path(path)
        if not path_obj.exists():
            raise FileNotFoundError(path_obj)
        level_set = cls.from_str(path_obj.read_text(encoding="utf-8"))
        logger.debug(
            "loaded level set %r from %s: %d levels", level_set.name, path_obj, len(level_set)
        )
        return level_set


def _is_comment(line: str) -> bool:
    return line.startswith(";")


def _comment_text(line: str) -> str:
    return line[1:].strip()


def _skip_header(lines: list[str]) -> list[str]:
    """Drop the set description that precedes the first level or level name."""
    first_empty_line = False
    for index, line in enumerate(lines):
        if _is_comment(line):
            continue
        if line:
            if line[0].isalnum():
                continue
        elif not first_empty_line:
            first_empty_line = True
            continue
        return lines[index:]
    return []


def _parse_text_level(
    number: int, name: str, raw_lines: list[str]
) -> LevelResult:
    width = max(len(line) for line in raw_lines)
    try:
        return Level.from_lines(
            name, [line.rstrip(" ") for line in raw_lines], width=width
        )
    except ParseError as exc:
        logger.debug("level %d (%r) failed to parse: %s", number, name, exc)
        return LevelParseError(number, name, exc)


def _read_from_text(text: str) -> LevelSet:
    lines = text.splitlines()
    level_set = LevelSet(name="")
    if not lines:
        return level_set
    if _is_comment(lines[0]):
        level_set.name = _comment_text(lines[0])

    # Blank lines never end a level; only comments separate levels.
    body = [line for line in _skip_header(lines[1:]) if line.strip()]
    level_name = ""
    level_name_first = False
    index = 0
    while index < len(body):
        line = body[index]
        if _is_comment(line):
            level_name = _comment_text(line)
            if not level_set.levels:
                level_name_first = True
            if not level_name_first and level_set.levels:
                level_set.levels[-1].name = level_name
            index += 1
            # Only the first comment of a run names a level.
            while index < len(body) and _is_comment(body[index]):
                index += 1
            continue

        block: list[str] = []
        while index < len(body) and not _is_comment(body[index]):
            block.append(body[index])
            index += 1
        level_set.levels.append(
            _parse_text_level(len(level_set.levels), level_name, block)
        )

    return level_set


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _int_attribute(element: ET.Element, name: str) -> int:
    raw = element.get(name)
    if raw is None or not raw.strip():
        return 0
    try:
        value = int(raw)
    except ValueError as exc:
        raise XmlParseError(f"Level attribute {name} is not an integer: {raw!r}") from exc
    if value < 0:
        raise XmlParseError(f"Level attribute {name} is negative: {raw!r}")
    return value


def _parse_xml_level(number: int, element: ET.Element) -> LevelResult:
    name = element.get("Id", "")
    width = _int_attribute(element, "Width")
    height = _int_attribute(element, "Height")

    rows: list[str] = []
    for child in element:
        if _local_name(child.tag) != "L":
            continue
        if height and len(rows) == height:
            break
        row = (child.text or "").rstrip(" ")
        if width and len(row) > width:
            row = row[:width]
        rows.append(row)

    try:
        return Level.from_lines(
            name, rows, width=width or None, height=height or None
        )
    except ParseError as exc:
        logger.debug("level %d (%r) failed to parse: %s", number, name, exc)
        return LevelParseError(number, name, exc)


def _read_from_xml(text: str) -> LevelSet:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise XmlParseError(f"Malformed XML: {exc}") from exc

    if _local_name(root.tag) != "SokobanLevels":
        raise XmlParseError()

    level_set = LevelSet(name="")
    for child in root:
        tag = _local_name(child.tag)
        if tag in {"SokobanLevels", "Level"}:
            raise XmlParseError()
        if tag == "Title":
            level_set.name = (child.text or "").strip()
            continue
        if tag != "LevelCollection":
            continue
        for item in child:
            item_tag = _local_name(item.tag)
            if item_tag in {"SokobanLevels", "Title", "LevelCollection"}:
                raise XmlParseError()
            if item_tag == "Level":
                level_set.levels.append(_parse_xml_level(len(level_set.levels), item))

    return level_set
