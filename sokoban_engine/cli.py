from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from .config import resolve_config
from .defs import CheckErrors, LevelParseError, SokobanError
from .level import Level
from .level_set import LevelSet
from .level_state import LevelState
from .term_game import GameResult, TermGame

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _common_parser(command: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"sokoban {command}", description=description)
    parser.add_argument("levelset", help="Level set file (text or XML).")
    parser.add_argument(
        "--config",
        default=None,
        help="JSON config with tile_size, label_grid and keys overrides.",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    return parser


def _load_level_set(path: str) -> LevelSet | None:
    try:
        return LevelSet.from_file(path)
    except FileNotFoundError:
        print(f"Level set not found: {path}")
    except SokobanError as exc:
        print(f"Cannot read level set {path}: {exc}")
    return None


def _select_level(level_set: LevelSet, index: int) -> Level | None:
    if not 0 <= index < len(level_set):
        print(f"Level index {index} is out of range (0-{len(level_set) - 1})")
        return None
    entry = level_set.levels[index]
    if isinstance(entry, LevelParseError):
        print(f"Level {index} cannot be parsed: {entry}")
        return None
    return entry


def _describe(index: int, entry: Level | LevelParseError) -> tuple[bool, str]:
    if isinstance(entry, LevelParseError):
        return False, f"[{index}] {entry.name or '<unnamed>'}: {entry.error}"
    errors = entry.collect_errors()
    label = f"[{index}] {entry.name or '<unnamed>'} ({entry.width}x{entry.height})"
    if errors:
        return False, f"{label}: {CheckErrors(errors)}"
    return True, f"{label}: ok"


def check_main(argv: list[str] | None = None) -> int:
    parser = _common_parser("check", "Parse a level set and check every level.")
    parser.add_argument(
        "--level", type=int, default=None, help="Check only this level index."
    )
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    level_set = _load_level_set(args.levelset)
    if level_set is None:
        return 2

    entries = list(enumerate(level_set.levels))
    if args.level is not None:
        if not 0 <= args.level < len(entries):
            print(f"Level index {args.level} is out of range (0-{len(entries) - 1})")
            return 2
        entries = [entries[args.level]]

    print(f"Level set: {level_set.name or Path(args.levelset).name}")
    failures = 0
    for index, entry in entries:
        ok, line = _describe(index, entry)
        if not ok:
            failures += 1
        print(line)

    if failures:
        print(f"{failures} of {len(entries)} levels failed.")
        return 2
    print(f"All {len(entries)} levels passed.")
    return 0


def play_main(argv: list[str] | None = None) -> int:
    parser = _common_parser("play", "Play a level in the terminal.")
    parser.add_argument("index", type=int, help="Level index (0-based).")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = resolve_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"Invalid config {args.config}: {exc}")
        return 2
    level_set = _load_level_set(args.levelset)
    if level_set is None:
        return 2
    level = _select_level(level_set, args.index)
    if level is None:
        return 2

    try:
        state = LevelState(level)
    except CheckErrors as exc:
        print(f"Level {args.index} is not playable: {exc}")
        return 2

    logger.info("playing %r level %d", level_set.name, args.index)
    result = TermGame(state, keys=config["keys"]).start()
    print(f"result={result.value} summary={json.dumps(state.to_dict())}")
    return 0 if result is GameResult.SOLVED else 1


def render_main(argv: list[str] | None = None) -> int:
    from .vision import render_level_image

    parser = _common_parser("render", "Render a level as a PNG image.")
    parser.add_argument("index", type=int, help="Level index (0-based).")
    parser.add_argument("--out", required=True, help="Output PNG path.")
    parser.add_argument("--tile-size", type=int, default=None)
    parser.add_argument("--no-labels", action="store_true")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = resolve_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"Invalid config {args.config}: {exc}")
        return 2
    level_set = _load_level_set(args.levelset)
    if level_set is None:
        return 2
    level = _select_level(level_set, args.index)
    if level is None:
        return 2

    tile_size = args.tile_size if args.tile_size is not None else config["tile_size"]
    if tile_size < 8:
        print(f"Invalid tile size {tile_size}: must be >= 8")
        return 2
    image = render_level_image(
        level,
        tile_size=tile_size,
        label_grid=config["label_grid"] and not args.no_labels,
    )
    path = image.save(args.out)
    logger.info("wrote %dx%d image to %s", image.width, image.height, path)
    print(f"Wrote {path}")
    return 0


COMMANDS: dict[str, tuple[str, Callable[[list[str]], int]]] = {
    "check": ("Parse and check every level of a level set", check_main),
    "play": ("Play a level in the terminal", play_main),
    "render": ("Render a level to PNG", render_main),
}


def _print_help() -> None:
    print("sokoban <command> [args]\n")
    print("Commands:")
    for name, (desc, _) in COMMANDS.items():
        print(f"  {name:20s} {desc}")


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in {"-h", "--help"}:
        _print_help()
        return 0

    command = args.pop(0)
    if command not in COMMANDS:
        print(f"Unknown command: {command}\n")
        _print_help()
        return 2

    _, handler = COMMANDS[command]
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
