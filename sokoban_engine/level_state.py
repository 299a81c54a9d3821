from __future__ import annotations

from typing import Any

from .defs import (
    MOVE_DIRECTIONS,
    Cell,
    CheckError,
    CheckErrors,
    ContractViolation,
    Direction,
    InvalidDirectionError,
    area_rows,
)
from .level import Level, find_2x2_blocks, find_corner_locks


class LevelState:
    """Play session over a level.

    The working area starts as a copy of the level's area and changes as the
    player moves. Every move is logged so it can be undone; push moves are
    logged with their push direction.
    """

    def __init__(self, level: Level) -> None:
        position = level.player_position()
        if position is None:
            raise CheckErrors([CheckError.no_player()])
        level.check()

        self._level = level
        self.player_x, self.player_y = position
        self._area: list[Cell] = list(level.area)
        self._moves: list[Direction] = []
        self.pushes_count = 0

    @property
    def level(self) -> Level:
        return self._level

    @property
    def area(self) -> tuple[Cell, ...]:
        return tuple(self._area)

    @property
    def moves(self) -> tuple[Direction, ...]:
        return tuple(self._moves)

    @property
    def moves_count(self) -> int:
        return len(self._moves)

    @property
    def boxes_on_targets(self) -> int:
        return sum(1 for cell in self._area if cell is Cell.BOX_ON_TARGET)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelState):
            return NotImplemented
        return self._level is other._level and self.snapshot() == other.snapshot()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"LevelState(level={self._level.name!r}, "
            f"player=({self.player_x}, {self.player_y}), "
            f"moves={self.moves_as_lurd()!r}, pushes={self.pushes_count})"
        )

    def snapshot(
        self,
    ) -> tuple[int, int, tuple[Cell, ...], tuple[Direction, ...], int]:
        return (
            self.player_x,
            self.player_y,
            self.area,
            self.moves,
            self.pushes_count,
        )

    def copy(self) -> LevelState:
        clone = LevelState.__new__(LevelState)
        clone._level = self._level
        clone.player_x = self.player_x
        clone.player_y = self.player_y
        clone._area = list(self._area)
        clone._moves = list(self._moves)
        clone.pushes_count = self.pushes_count
        return clone

    def reset(self) -> None:
        """Undo all moves by restoring the level's original area."""
        position = self._level.player_position()
        if position is None:
            raise ContractViolation("level has no player")
        self._moves = []
        self.player_x, self.player_y = position
        self._area = list(self._level.area)
        self.pushes_count = 0

    def is_done(self) -> bool:
        boxes = sum(1 for cell in self._area if cell.is_box())
        targets = sum(1 for cell in self._area if cell.is_target())
        boxes_on_targets = self.boxes_on_targets
        return boxes == boxes_on_targets and targets == boxes_on_targets

    def _offset(self, x: int, y: int, steps: int, direction: Direction) -> int | None:
        dx, dy = direction.step
        nx = x + dx * steps
        ny = y + dy * steps
        if 0 <= nx < self._level.width and 0 <= ny < self._level.height:
            return ny * self._level.width + nx
        return None

    def make_move(self, direction: Direction | str) -> tuple[bool, bool]:
        """Move the player one cell, pushing a box if there is one.

        Returns ``(moved, pushed)``. A blocked move changes nothing.
        """
        parsed = Direction.parse(direction)
        if parsed is Direction.NONE:
            raise InvalidDirectionError("cannot move without a direction")
        move = parsed.as_move()

        width = self._level.width
        this_pos = self.player_y * width + self.player_x
        next_pos = self._offset(self.player_x, self.player_y, 1, move)
        if next_pos is None:
            return (False, False)

        target = self._area[next_pos]
        if target in (Cell.EMPTY, Cell.TARGET):
            self._area[next_pos] = target.with_player()
            self._area[this_pos] = self._area[this_pos].without_player()
            self._moves.append(move)
            self.player_x = next_pos % width
            self.player_y = next_pos // width
            return (True, False)

        if target.is_box():
            next2_pos = self._offset(self.player_x, self.player_y, 2, move)
            if next2_pos is None:
                return (False, False)
            beyond = self._area[next2_pos]
            if beyond is Cell.WALL or beyond.is_box():
                return (False, False)
            self._area[next2_pos] = beyond.with_box()
            self._area[next_pos] = target.with_player()
            self._area[this_pos] = self._area[this_pos].without_player()
            self._moves.append(move.as_push())
            self.pushes_count += 1
            self.player_x = next_pos % width
            self.player_y = next_pos // width
            return (True, True)

        return (False, False)

    def undo_move(self) -> bool:
        """Revert the last logged move. Returns False if nothing was moved."""
        if not self._moves:
            return False
        direction = self._moves.pop()
        if direction is Direction.NONE:
            raise ContractViolation("move log holds no direction")

        width = self._level.width
        this_pos = self.player_y * width + self.player_x
        dx, dy = direction.step
        prev_pos = self._offset(self.player_x, self.player_y, 1, _reverse(direction))
        if prev_pos is None:
            raise ContractViolation(
                f"cannot undo {direction.name}: player at frame "
                f"({self.player_x}, {self.player_y})"
            )

        if direction.is_push:
            box_pos = self._offset(self.player_x, self.player_y, 1, direction)
            if box_pos is None:
                raise ContractViolation(
                    f"cannot undo {direction.name}: pushed box is off the grid"
                )
            self._area[box_pos] = self._area[box_pos].without_box()
            self._area[this_pos] = self._area[this_pos].with_box()
            self.pushes_count -= 1
        else:
            self._area[this_pos] = self._area[this_pos].without_player()

        self._area[prev_pos] = self._area[prev_pos].with_player()
        self.player_x -= dx
        self.player_y -= dy
        return True

    def legal_moves(self) -> list[Direction]:
        """Return the moves make_move would accept, as they would be logged."""
        legal: list[Direction] = []
        for direction in MOVE_DIRECTIONS:
            next_pos = self._offset(self.player_x, self.player_y, 1, direction)
            if next_pos is None:
                continue
            target = self._area[next_pos]
            if target in (Cell.EMPTY, Cell.TARGET):
                legal.append(direction)
                continue
            if not target.is_box():
                continue
            next2_pos = self._offset(self.player_x, self.player_y, 2, direction)
            if next2_pos is None:
                continue
            beyond = self._area[next2_pos]
            if beyond is not Cell.WALL and not beyond.is_box():
                legal.append(direction.as_push())
        return legal

    def find_locks(self) -> list[CheckError]:
        """Return 2x2 blocks and wall-corner locks in the current area."""
        width = self._level.width
        height = self._level.height
        return find_2x2_blocks(width, height, self._area) + find_corner_locks(
            width, height, self._area
        )

    def moves_as_lurd(self) -> str:
        return "".join(direction.value for direction in self._moves)

    def rows(self) -> list[str]:
        return area_rows(self._level.width, self._area)

    def to_xsb(self) -> str:
        return "\n".join(self.rows())

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self._level.name,
            "width": self._level.width,
            "height": self._level.height,
            "player": [self.player_x, self.player_y],
            "moves": self.moves_as_lurd(),
            "pushes": self.pushes_count,
            "boxes_on_targets": self.boxes_on_targets,
            "done": self.is_done(),
            "xsb": self.to_xsb(),
        }


_REVERSE: dict[Direction, Direction] = {
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
}


def _reverse(direction: Direction) -> Direction:
    return _REVERSE[direction.as_move()]
