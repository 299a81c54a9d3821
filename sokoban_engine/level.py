from __future__ import annotations

from collections.abc import Sequence
from dataclasses import FrozenInstanceError, dataclass

from .defs import (
    Cell,
    CheckError,
    CheckErrors,
    EmptyLines,
    WrongField,
    WrongSize,
    area_rows,
    first_invalid_char,
)

# Flood fill neighbour order: left, right, down, up.
_FILL_STEPS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, 1), (0, -1))


def _fill_reachable(
    width: int,
    height: int,
    area: Sequence[Cell],
    start_x: int,
    start_y: int,
) -> tuple[list[bool], bool]:
    """Mark every non-wall cell 4-connected to the start position.

    Walks depth-first with an explicit stack. Each frame remembers which
    neighbour it tries next, so a cell is resumed rather than re-entered.
    The second value is True when the walk tried to step off the grid.
    """
    filled = [False] * (width * height)
    touched_frame = False
    stack: list[list[int]] = [[start_x, start_y, 0]]

    while stack:
        frame = stack[-1]
        x, y, next_step = frame
        index = y * width + x
        if area[index] is Cell.WALL or (filled[index] and next_step == 0):
            stack.pop()
            continue

        filled[index] = True
        if next_step == len(_FILL_STEPS):
            stack.pop()
            continue

        frame[2] = next_step + 1
        dx, dy = _FILL_STEPS[next_step]
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            stack.append([nx, ny, 0])
        else:
            touched_frame = True

    return filled, touched_frame


def find_2x2_blocks(width: int, height: int, area: Sequence[Cell]) -> list[CheckError]:
    """Return every 2x2 window made only of boxes and walls, unless solved."""
    errors: list[CheckError] = []
    for iy in range(height - 1):
        for ix in range(width - 1):
            window = (
                area[iy * width + ix],
                area[iy * width + ix + 1],
                area[(iy + 1) * width + ix],
                area[(iy + 1) * width + ix + 1],
            )
            if not all(cell.is_box() or cell is Cell.WALL for cell in window):
                continue
            boxes = sum(1 for cell in window if cell.is_box())
            boxes_on_target = sum(1 for cell in window if cell is Cell.BOX_ON_TARGET)
            if boxes_on_target != boxes:
                errors.append(CheckError.locked_2x2_block(ix, iy))
    return errors


def find_corner_locks(width: int, height: int, area: Sequence[Cell]) -> list[CheckError]:
    """Return every box off target pinned into a wall corner."""
    errors: list[CheckError] = []
    for iy in range(1, height - 1):
        for ix in range(1, width - 1):
            if area[iy * width + ix] is not Cell.BOX:
                continue
            up = area[(iy - 1) * width + ix] is Cell.WALL
            down = area[(iy + 1) * width + ix] is Cell.WALL
            left = area[iy * width + ix - 1] is Cell.WALL
            right = area[iy * width + ix + 1] is Cell.WALL
            if (
                (up and (left or right))
                or (down and (left or right))
                or (left and (up or down))
                or (right and (up or down))
            ):
                errors.append(CheckError.locked_pack_apart_walls(ix, iy))
    return errors


@dataclass(slots=True)
class Level:
    """A level grid. Only the name may change after construction.

    The area lists cells from top to bottom and from left to right.
    """

    name: str
    width: int
    height: int
    area: tuple[Cell, ...] = ()

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise WrongSize(self.width, self.height)
        object.__setattr__(self, "area", tuple(self.area))
        if len(self.area) != self.width * self.height:
            raise WrongSize(self.width, self.height)

    def __setattr__(self, name: str, value: object) -> None:
        # The grid is fixed once set; only the name may change.
        if name != "name" and hasattr(self, name):
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        object.__setattr__(self, name, value)

    @classmethod
    def empty(cls) -> Level:
        return cls("", 0, 0, ())

    @classmethod
    def from_str(cls, name: str, width: int, height: int, text: str) -> Level:
        """Decode a level from exactly ``width * height`` XSB characters."""
        if len(text) != width * height:
            raise WrongSize(width, height)
        offset = first_invalid_char(text)
        if offset is not None:
            raise WrongField(offset % width, offset // width)
        return cls(name, width, height, tuple(Cell(char) for char in text))

    @classmethod
    def from_lines(
        cls,
        name: str,
        lines: Sequence[str],
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> Level:
        """Decode a level from XSB rows, padding short rows with empty cells."""
        if not lines:
            raise EmptyLines()
        resolved_width = max(len(line) for line in lines) if width is None else width
        resolved_height = len(lines) if height is None else height

        area = [Cell.EMPTY] * (resolved_width * resolved_height)
        for y, line in enumerate(lines[:resolved_height]):
            x = first_invalid_char(line[:resolved_width])
            if x is not None:
                raise WrongField(x, y)
            for x, char in enumerate(line[:resolved_width]):
                area[y * resolved_width + x] = Cell(char)
        return cls(name, resolved_width, resolved_height, tuple(area))

    def cell(self, x: int, y: int) -> Cell:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) is outside {self.width}x{self.height}")
        return self.area[y * self.width + x]

    def player_position(self) -> tuple[int, int] | None:
        for index, cell in enumerate(self.area):
            if cell.is_player():
                return (index % self.width, index // self.width)
        return None

    def rows(self) -> list[str]:
        return area_rows(self.width, self.area)

    def to_xsb(self) -> str:
        return "\n".join(self.rows())

    def _check_by_fill(self, px: int, py: int, errors: list[CheckError]) -> None:
        filled, touched_frame = _fill_reachable(
            self.width, self.height, self.area, px, py
        )
        if touched_frame:
            errors.append(CheckError.level_open())
        for index, cell in enumerate(self.area):
            if cell is Cell.BOX and not filled[index]:
                errors.append(
                    CheckError.pack_not_available(index % self.width, index // self.width)
                )
        for index, cell in enumerate(self.area):
            if cell is Cell.TARGET and not filled[index]:
                errors.append(
                    CheckError.target_not_available(
                        index % self.width, index // self.width
                    )
                )

    def collect_errors(self) -> list[CheckError]:
        """Return every structural defect of the level, in check order."""
        errors: list[CheckError] = []

        players = sum(1 for cell in self.area if cell.is_player())
        if players == 0:
            errors.append(CheckError.no_player())
        elif players > 1:
            errors.append(CheckError.too_many_players())

        boxes = sum(1 for cell in self.area if cell.is_box())
        targets = sum(1 for cell in self.area if cell.is_target())
        if boxes < targets:
            errors.append(CheckError.too_few_packs(targets))
        elif targets < boxes:
            errors.append(CheckError.too_few_targets(boxes))

        player = self.player_position()
        if player is not None:
            self._check_by_fill(player[0], player[1], errors)

        errors.extend(find_2x2_blocks(self.width, self.height, self.area))
        errors.extend(find_corner_locks(self.width, self.height, self.area))
        return errors

    def check(self) -> None:
        """Raise CheckErrors listing every defect if the level is not playable."""
        errors = self.collect_errors()
        if errors:
            raise CheckErrors(errors)

    def is_valid(self) -> bool:
        return not self.collect_errors()

