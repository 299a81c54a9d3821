from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

Step: TypeAlias = tuple[int, int]


class SokobanError(Exception):
    """Base exception for Sokoban engine errors."""


class ContractViolation(SokobanError, RuntimeError):
    """Raised when the API is misused in a way that data alone cannot cause."""


class InvalidDirectionError(SokobanError, ValueError):
    """Raised when a move direction cannot be parsed."""


class Direction(Enum):
    """Move direction. Values are LURD notation characters."""

    LEFT = "l"
    RIGHT = "r"
    UP = "u"
    DOWN = "d"
    PUSH_LEFT = "L"
    PUSH_RIGHT = "R"
    PUSH_UP = "U"
    PUSH_DOWN = "D"
    NONE = ""

    @property
    def step(self) -> Step:
        return _STEPS[self.value.lower()]

    @property
    def is_push(self) -> bool:
        return self.value.isupper()

    def as_push(self) -> Direction:
        return Direction(self.value.upper())

    def as_move(self) -> Direction:
        return Direction(self.value.lower())

    @classmethod
    def parse(cls, value: object) -> Direction:
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            if value in _LURD:
                return cls(value)
            normalized = value.strip().lower().replace("-", "_")
            if normalized in _NAMES:
                return cls[normalized.upper()]
        raise InvalidDirectionError(
            "direction must be a Direction, a LURD character or a name "
            f"like 'left' or 'push_up', got {value!r}"
        )


_STEPS: dict[str, Step] = {
    "l": (-1, 0),
    "r": (1, 0),
    "u": (0, -1),
    "d": (0, 1),
    "": (0, 0),
}
_LURD = {"l", "r", "u", "d", "L", "R", "U", "D"}
_NAMES = {member.name.lower() for member in Direction if member.value}

MOVE_DIRECTIONS: tuple[Direction, ...] = (
    Direction.LEFT,
    Direction.RIGHT,
    Direction.UP,
    Direction.DOWN,
)


class Cell(Enum):
    """Content of one grid position. Values are XSB characters."""

    EMPTY = " "
    WALL = "#"
    BOX = "$"
    PLAYER = "@"
    TARGET = "."
    BOX_ON_TARGET = "*"
    PLAYER_ON_TARGET = "+"

    @property
    def char(self) -> str:
        return self.value

    def is_player(self) -> bool:
        return self in (Cell.PLAYER, Cell.PLAYER_ON_TARGET)

    def is_box(self) -> bool:
        return self in (Cell.BOX, Cell.BOX_ON_TARGET)

    def is_target(self) -> bool:
        return self in (Cell.TARGET, Cell.BOX_ON_TARGET, Cell.PLAYER_ON_TARGET)

    def with_player(self) -> Cell:
        """Return this cell with the player on it, replacing any occupant."""
        if self.is_target():
            return Cell.PLAYER_ON_TARGET
        return Cell.PLAYER

    def without_player(self) -> Cell:
        if self is Cell.PLAYER:
            return Cell.EMPTY
        if self is Cell.PLAYER_ON_TARGET:
            return Cell.TARGET
        raise ContractViolation(f"no player to remove from {self.name} cell")

    def with_box(self) -> Cell:
        """Return this cell with a box on it, replacing any occupant."""
        if self.is_target():
            return Cell.BOX_ON_TARGET
        return Cell.BOX

    def without_box(self) -> Cell:
        if self is Cell.BOX:
            return Cell.EMPTY
        if self is Cell.BOX_ON_TARGET:
            return Cell.TARGET
        raise ContractViolation(f"no box to remove from {self.name} cell")

    @classmethod
    def from_char(cls, char: str) -> Cell | None:
        return _CELL_BY_CHAR.get(char)


_CELL_BY_CHAR: dict[str, Cell] = {cell.value: cell for cell in Cell}


def first_invalid_char(text: str) -> int | None:
    for index, char in enumerate(text):
        if char not in _CELL_BY_CHAR:
            return index
    return None


def area_rows(width: int, area: Iterable[Cell]) -> list[str]:
    cells = list(area)
    if width <= 0:
        return []
    return [
        "".join(cell.char for cell in cells[start : start + width])
        for start in range(0, len(cells), width)
    ]


# Parse errors


class ParseError(SokobanError, ValueError):
    """Raised when a level source cannot be decoded into a grid."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.args))


class EmptyLines(ParseError):
    def __init__(self) -> None:
        super().__init__()

    def __str__(self) -> str:
        return "Empty lines"


class WrongField(ParseError):
    def __init__(self, x: int, y: int) -> None:
        super().__init__(x, y)
        self.x = x
        self.y = y

    def __str__(self) -> str:
        return f"Wrong field {self.x}x{self.y}"


class WrongSize(ParseError):
    def __init__(self, width: int, height: int) -> None:
        super().__init__(width, height)
        self.width = width
        self.height = height

    def __str__(self) -> str:
        return f"Wrong size {self.width}x{self.height}"


class LevelParseError(SokobanError, ValueError):
    """A level of a level set that failed to parse."""

    def __init__(self, number: int, name: str, error: ParseError) -> None:
        super().__init__(number, name, error)
        self.number = number
        self.name = name
        self.error = error

    def __str__(self) -> str:
        return f"Nr: {self.number}, Name: {self.name}, Error: {self.error}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelParseError):
            return NotImplemented
        return (self.number, self.name, self.error) == (
            other.number,
            other.name,
            other.error,
        )

    def __hash__(self) -> int:
        return hash((self.number, self.name, self.error))


class XmlParseError(SokobanError, ValueError):
    """Raised when an XML level collection has a bad structure."""

    def __init__(self, message: str = "Bad structure of XML") -> None:
        super().__init__(message)


# Check errors


class CheckErrorKind(Enum):
    NO_PLAYER = "no_player"
    TOO_MANY_PLAYERS = "too_many_players"
    LEVEL_OPEN = "level_open"
    TOO_FEW_PACKS = "too_few_packs"
    TOO_FEW_TARGETS = "too_few_targets"
    PACK_NOT_AVAILABLE = "pack_not_available"
    TARGET_NOT_AVAILABLE = "target_not_available"
    LOCKED_PACK_APART_WALLS = "locked_pack_apart_walls"
    LOCKED_2X2_BLOCK = "locked_2x2_block"


@dataclass(frozen=True, slots=True)
class CheckError:
    kind: CheckErrorKind
    x: int | None = None
    y: int | None = None
    required: int | None = None

    @classmethod
    def no_player(cls) -> CheckError:
        return cls(CheckErrorKind.NO_PLAYER)

    @classmethod
    def too_many_players(cls) -> CheckError:
        return cls(CheckErrorKind.TOO_MANY_PLAYERS)

    @classmethod
    def level_open(cls) -> CheckError:
        return cls(CheckErrorKind.LEVEL_OPEN)

    @classmethod
    def too_few_packs(cls, required: int) -> CheckError:
        return cls(CheckErrorKind.TOO_FEW_PACKS, required=required)

    @classmethod
    def too_few_targets(cls, required: int) -> CheckError:
        return cls(CheckErrorKind.TOO_FEW_TARGETS, required=required)

    @classmethod
    def pack_not_available(cls, x: int, y: int) -> CheckError:
        return cls(CheckErrorKind.PACK_NOT_AVAILABLE, x=x, y=y)

    @classmethod
    def target_not_available(cls, x: int, y: int) -> CheckError:
        return cls(CheckErrorKind.TARGET_NOT_AVAILABLE, x=x, y=y)

    @classmethod
    def locked_pack_apart_walls(cls, x: int, y: int) -> CheckError:
        return cls(CheckErrorKind.LOCKED_PACK_APART_WALLS, x=x, y=y)

    @classmethod
    def locked_2x2_block(cls, x: int, y: int) -> CheckError:
        return cls(CheckErrorKind.LOCKED_2X2_BLOCK, x=x, y=y)

    def __str__(self) -> str:
        kind = self.kind
        if kind is CheckErrorKind.NO_PLAYER:
            return "No player"
        if kind is CheckErrorKind.TOO_MANY_PLAYERS:
            return "Too many players"
        if kind is CheckErrorKind.LEVEL_OPEN:
            return "Level open"
        if kind is CheckErrorKind.TOO_FEW_PACKS:
            return f"Too few packs - required {self.required}"
        if kind is CheckErrorKind.TOO_FEW_TARGETS:
            return f"Too few targets - required {self.required}"
        if kind is CheckErrorKind.PACK_NOT_AVAILABLE:
            return f"Pack {self.x}x{self.y} not available"
        if kind is CheckErrorKind.TARGET_NOT_AVAILABLE:
            return f"Target {self.x}x{self.y} not available"
        if kind is CheckErrorKind.LOCKED_PACK_APART_WALLS:
            return f"Locked pack {self.x}x{self.y} apart walls"
        return f"Locked 2x2 block {self.x}x{self.y}"


class CheckErrors(SokobanError, ValueError):
    """All structural defects found while checking a level, in order."""

    def __init__(self, errors: Iterable[CheckError] = ()) -> None:
        self.errors: list[CheckError] = list(errors)
        super().__init__(self.errors)

    def __str__(self) -> str:
        if not self.errors:
            return ""
        return ". ".join(str(error) for error in self.errors) + "."

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CheckErrors):
            return self.errors == other.errors
        if isinstance(other, list):
            return self.errors == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self.errors))

    def __iter__(self) -> Iterator[CheckError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __getitem__(self, index: int) -> CheckError:
        return self.errors[index]

    def kinds(self) -> list[CheckErrorKind]:
        return [error.kind for error in self.errors]
