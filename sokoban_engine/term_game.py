from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from .config import DEFAULT_CONFIG, normalize_keys
from .defs import Direction
from .level_state import LevelState

_MOVE_ACTIONS: dict[str, Direction] = {
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
    "up": Direction.UP,
    "down": Direction.DOWN,
}


class GameResult(Enum):
    SOLVED = "solved"
    QUIT = "quit"


class TermGame:
    """Line-oriented terminal game over a level state.

    Each input line is a sequence of keys applied in order. The board is
    printed after every line.
    """

    def __init__(
        self,
        state: LevelState,
        *,
        keys: dict[str, str] | None = None,
        input_fn: Callable[[str], str] | None = None,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self.state = state
        self.keys = normalize_keys(DEFAULT_CONFIG["keys"] if keys is None else keys)
        self._input = input_fn
        self._output = output_fn

    def _key_for(self, action: str) -> str:
        for key, mapped in self.keys.items():
            if mapped == action:
                return key
        return "-"

    def help_text(self) -> str:
        parts = [
            f"{self._key_for(action)}={action}"
            for action in ("left", "right", "up", "down", "undo", "reset", "quit")
        ]
        return "Keys: " + " ".join(parts)

    def render(self) -> str:
        state = self.state
        lines = [
            f"Level: {state.level.name}" if state.level.name else "Level:",
            state.to_xsb(),
            f"Moves: {state.moves_count}  Pushes: {state.pushes_count}",
        ]
        locks = state.find_locks()
        if locks:
            lines.append("Warning: " + "; ".join(str(lock) for lock in locks))
        return "\n".join(lines)

    def apply_key(self, key: str) -> GameResult | None:
        action = self.keys.get(key)
        if action is None:
            self._output(f"Unknown key: {key!r}")
            return None
        if action == "quit":
            return GameResult.QUIT
        if action == "undo":
            if not self.state.undo_move():
                self._output("Nothing to undo.")
            return None
        if action == "reset":
            self.state.reset()
            return None

        moved, _pushed = self.state.make_move(_MOVE_ACTIONS[action])
        if not moved:
            self._output(f"Cannot move {action}.")
        return None

    def start(self) -> GameResult:
        self._output(self.help_text())
        try:
            while True:
                self._output(self.render())
                if self.state.is_done():
                    self._output("Solved!")
                    return GameResult.SOLVED
                read = input if self._input is None else self._input
                line = read("> ")
                for key in line.strip():
                    result = self.apply_key(key)
                    if result is not None:
                        return result
                    if self.state.is_done():
                        break
        except (EOFError, KeyboardInterrupt):
            self._output("")
            return GameResult.QUIT
