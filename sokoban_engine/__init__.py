"""Sokoban rules engine: level validation and move/undo game state."""

from __future__ import annotations

from .defs import (
    MOVE_DIRECTIONS,
    Cell,
    CheckError,
    CheckErrorKind,
    CheckErrors,
    ContractViolation,
    Direction,
    EmptyLines,
    InvalidDirectionError,
    LevelParseError,
    ParseError,
    SokobanError,
    WrongField,
    WrongSize,
    XmlParseError,
)
from .level import Level, find_2x2_blocks, find_corner_locks
from .level_set import LevelResult, LevelSet
from .level_state import LevelState

__all__ = [
    "MOVE_DIRECTIONS",
    "Cell",
    "CheckError",
    "CheckErrorKind",
    "CheckErrors",
    "ContractViolation",
    "Direction",
    "EmptyLines",
    "InvalidDirectionError",
    "Level",
    "LevelParseError",
    "LevelResult",
    "LevelSet",
    "LevelState",
    "ParseError",
    "SokobanError",
    "WrongField",
    "WrongSize",
    "XmlParseError",
    "find_2x2_blocks",
    "find_corner_locks",
]
