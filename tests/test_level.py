from __future__ import annotations

import unittest

from sokoban_engine import (
    Cell,
    CheckError,
    CheckErrorKind,
    CheckErrors,
    EmptyLines,
    Level,
    WrongField,
    WrongSize,
    find_2x2_blocks,
    find_corner_locks,
)


def _level(rows: list[str], name: str = "git") -> Level:
    return Level.from_str(name, len(rows[0]), len(rows), "".join(rows))


BASIC = [
    " ###### ",
    "#      #",
    "#@  ...#",
    "#   $$$#",
    "#      #",
    " ###### ",
]


class TestLevelDecoding(unittest.TestCase):
    def test_from_str(self) -> None:
        level = _level(BASIC)
        E, W, B, P, T = Cell.EMPTY, Cell.WALL, Cell.BOX, Cell.PLAYER, Cell.TARGET
        expected = (
            E, W, W, W, W, W, W, E,
            W, E, E, E, E, E, E, W,
            W, P, E, E, T, T, T, W,
            W, E, E, E, B, B, B, W,
            W, E, E, E, E, E, E, W,
            E, W, W, W, W, W, W, E,
        )  # fmt: skip
        self.assertEqual(level, Level("git", 8, 6, expected))
        self.assertEqual(level.rows(), BASIC)
        self.assertEqual(level.to_xsb(), "\n".join(BASIC))

    def test_from_str_reports_first_bad_field(self) -> None:
        rows = list(BASIC)
        rows[4] = "#  x   #"
        with self.assertRaises(WrongField) as ctx:
            _level(rows)
        self.assertEqual(ctx.exception, WrongField(3, 4))

    def test_from_str_wrong_size(self) -> None:
        with self.assertRaises(WrongSize) as ctx:
            Level.from_str("git", 8, 7, "".join(BASIC))
        self.assertEqual(ctx.exception, WrongSize(8, 7))

    def test_wrong_size_is_checked_before_fields(self) -> None:
        with self.assertRaises(WrongSize):
            Level.from_str("git", 3, 1, "abcd")

    def test_from_lines_pads_short_rows(self) -> None:
        level = Level.from_lines("pad", ["####", "#@.#", "#$", "####"])
        self.assertEqual((level.width, level.height), (4, 4))
        self.assertEqual(level.rows()[2], "#$  ")

    def test_from_lines_truncates_to_declared_size(self) -> None:
        level = Level.from_lines("cut", ["#####", "#@$.#", "#####", "xx"], width=4, height=3)
        self.assertEqual(level.rows(), ["####", "#@$.", "####"])

    def test_from_lines_ignores_characters_past_declared_width(self) -> None:
        level = Level.from_lines("cut", ["####?", "#@$.#", "####"], width=4)
        self.assertEqual(level.rows(), ["####", "#@$.", "####"])

    def test_from_lines_errors(self) -> None:
        with self.assertRaises(EmptyLines):
            Level.from_lines("none", [])
        with self.assertRaises(WrongField) as ctx:
            Level.from_lines("bad", ["###", "#?#"])
        self.assertEqual(ctx.exception, WrongField(1, 1))

    def test_constructor_checks_area_size(self) -> None:
        with self.assertRaises(WrongSize):
            Level("bad", 2, 2, (Cell.WALL,))
        with self.assertRaises(WrongSize):
            Level("bad", -1, 0, ())

    def test_empty_level(self) -> None:
        level = Level.empty()
        self.assertEqual((level.name, level.width, level.height, level.area), ("", 0, 0, ()))
        self.assertEqual(level.rows(), [])
        self.assertIsNone(level.player_position())

    def test_accessors(self) -> None:
        level = _level(BASIC)
        self.assertEqual(level.player_position(), (1, 2))
        self.assertIs(level.cell(4, 3), Cell.BOX)
        with self.assertRaises(IndexError):
            level.cell(8, 0)

    def test_name_can_change(self) -> None:
        level = _level(BASIC)
        level.name = "renamed"
        self.assertEqual(level.name, "renamed")

    def test_grid_is_read_only(self) -> None:
        level = Level.from_str("a", 3, 1, "#@#")
        with self.assertRaises(AttributeError):
            level.width = 99
        with self.assertRaises(AttributeError):
            level.height = 2
        with self.assertRaises(AttributeError):
            level.area = (Cell.WALL,) * 3
        self.assertEqual((level.width, level.height), (3, 1))
        self.assertEqual(level.rows(), ["#@#"])


class TestLevelCheck(unittest.TestCase):
    def assertChecks(self, rows: list[str], expected: list[CheckError]) -> None:
        level = _level(rows)
        self.assertEqual(level.collect_errors(), expected)
        if expected:
            with self.assertRaises(CheckErrors) as ctx:
                level.check()
            self.assertEqual(ctx.exception, expected)
            self.assertFalse(level.is_valid())
        else:
            level.check()
            self.assertTrue(level.is_valid())

    def test_valid_levels(self) -> None:
        self.assertChecks(BASIC, [])
        self.assertChecks(
            [
                " ######    ",
                "#      ### ",
                "#@  ...#**#",
                "#   $$$### ",
                "#      #   ",
                " ######    ",
            ],
            [],
        )
        self.assertChecks(
            [
                " ###### ",
                "#      #",
                "#@  .*.#",
                "#   $ $#",
                "#      #",
                " ###### ",
            ],
            [],
        )

    def test_fill_passes_through_boxes(self) -> None:
        self.assertChecks(["#####", "#@$.#", "#####"], [])
        self.assertChecks(
            [
                "#######",
                "#@ $ .#",
                "### ###",
                "  #$#  ",
                "  #.#  ",
                "  ###  ",
            ],
            [],
        )

    def test_level_open(self) -> None:
        self.assertChecks(
            [
                " ### ## ",
                "#      #",
                "#@  ...#",
                "#   $$$#",
                "#      #",
                " ###### ",
            ],
            [CheckError.level_open()],
        )

    def test_player_count(self) -> None:
        no_player = list(BASIC)
        no_player[2] = "#   ...#"
        self.assertChecks(no_player, [CheckError.no_player()])

        on_target = list(BASIC)
        on_target[2] = "#@  +..#"
        self.assertChecks(on_target, [CheckError.too_many_players()])

        two_players = list(BASIC)
        two_players[1] = "#  @   #"
        self.assertChecks(two_players, [CheckError.too_many_players()])

    def test_box_target_counts(self) -> None:
        few_targets = list(BASIC)
        few_targets[2] = "#@  .. #"
        self.assertChecks(few_targets, [CheckError.too_few_targets(3)])

        few_packs = list(BASIC)
        few_packs[1] = "#     .#"
        few_packs[3] = "#   $$ #"
        self.assertChecks(few_packs, [CheckError.too_few_packs(4)])

    def test_unreachable_boxes_and_targets(self) -> None:
        self.assertChecks(
            [
                " ######### ",
                "#      #..#",
                "#@  ...#$$#",
                "#   $$$### ",
                "#      #   ",
                " ######    ",
            ],
            [
                CheckError.pack_not_available(8, 2),
                CheckError.pack_not_available(9, 2),
                CheckError.target_not_available(8, 1),
                CheckError.target_not_available(9, 1),
                CheckError.locked_2x2_block(7, 2),
                CheckError.locked_2x2_block(8, 2),
                CheckError.locked_pack_apart_walls(8, 2),
                CheckError.locked_pack_apart_walls(9, 2),
            ],
        )

    def test_2x2_blocks(self) -> None:
        self.assertChecks(
            [
                " ###### ",
                "#   ...#",
                "#@  $$.#",
                "#   $$ #",
                "#      #",
                " ###### ",
            ],
            [CheckError.locked_2x2_block(4, 2)],
        )
        self.assertChecks(
            [
                " ###### ",
                "#      #",
                "#@  **.#",
                "#   *$ #",
                "#      #",
                " ###### ",
            ],
            [CheckError.locked_2x2_block(4, 2)],
        )
        # A block of boxes that are all on targets is solved, not locked.
        self.assertChecks(
            [
                " ###### ",
                "#      #",
                "#@  ** #",
                "#   ** #",
                "#   $ .#",
                " ###### ",
            ],
            [],
        )

    def test_corner_locks(self) -> None:
        self.assertChecks(
            [
                " ###### ",
                "#$  ..*#",
                "#@    .#",
                "#      #",
                "#$    $#",
                " ###### ",
            ],
            [
                CheckError.locked_pack_apart_walls(1, 1),
                CheckError.locked_pack_apart_walls(1, 4),
                CheckError.locked_pack_apart_walls(6, 4),
            ],
        )

    def test_larger_levels(self) -> None:
        self.assertChecks(
            [
                " ####     ",
                "##  ##### ",
                "#  $  $ # ",
                "# $*..* ##",
                "#  *$$.  #",
                "#@ *.*.  #",
                "####   ###",
                "   #####  ",
            ],
            [],
        )
        self.assertChecks(
            [
                "####################",
                "#..#    #          #",
                "#.$  $  #$$  $## $##",
                "#.$#  ###  ## ##   #",
                "#  # $ #  $$   $   #",
                "# ###  # #  #$  ####",
                "#  ## # $   #@ #   #",
                "# $    $  ##.##  $ #",
                "#  # $# $# $     ###",
                "#  #  #  #   ###   #",
                "#  ######## #      #",
                "#           #  #.#.#",
                "##$########$#   ...#",
                "#    .*  #    ##.#.#",
                "# .*...*   $  .....#",
                "####################",
            ],
            [],
        )

    def test_every_category_is_reported(self) -> None:
        self.assertChecks(
            [
                " ###### ",
                "#$  .. #",
                "#      #",
                "#   $$ #",
                "#      #",
                " ###### ",
            ],
            [
                CheckError.no_player(),
                CheckError.too_few_targets(3),
                CheckError.locked_pack_apart_walls(1, 1),
            ],
        )

    def test_empty_level_has_no_player(self) -> None:
        level = Level.empty()
        self.assertEqual(
            [error.kind for error in level.collect_errors()], [CheckErrorKind.NO_PLAYER]
        )

    def test_lock_finders_ignore_solved_and_frame_cells(self) -> None:
        rows = ["$$", "$$"]
        area = _level(rows).area
        self.assertEqual(find_2x2_blocks(2, 2, area), [CheckError.locked_2x2_block(0, 0)])
        self.assertEqual(find_corner_locks(2, 2, area), [])
        solved = _level(["**", "**"]).area
        self.assertEqual(find_2x2_blocks(2, 2, solved), [])


if __name__ == "__main__":
    unittest.main()
