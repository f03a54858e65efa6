import json

import pytest

from board import EMPTY, Board
from errors import LevelError
from game import Game, board_from_cars, load_level_file, parse_rows, validate_board
from moves import EXIT
from puzzles import BUILTIN_PUZZLES, get_puzzle

ONE_BLOCKER_TEXT = """\
# one car in the way
......
.....A
...XXA
......
......
......
"""


def test_parse_rows_accepts_dots_and_pads_short_rows():
    board = parse_rows(ONE_BLOCKER_TEXT.splitlines())

    assert board == get_puzzle("one-blocker")
    assert parse_rows(["AA", "", "XX.", "B"]).rows() == ["AA ", "XX ", "B  "]


@pytest.mark.parametrize(
    "lines, exit_row",
    [
        ([], 2),
        (["# only a comment"], 2),
        (["AAAA", "XX"], 1),
        (["AA", "XX"], 2),
    ],
)
def test_parse_rows_rejects_bad_grids(lines, exit_row):
    with pytest.raises(LevelError):
        parse_rows(lines, exit_row)


def test_board_from_cars_places_every_car():
    board = board_from_cars(
        {
            "X": {"x": 3, "y": 2, "dir": "H", "len": 2},
            "A": {"x": 5, "y": 1, "heading": "S", "len": 2},
        }
    )

    assert board == get_puzzle("one-blocker")


@pytest.mark.parametrize(
    "cars",
    [
        {"X": {"x": 5, "y": 2, "dir": "H", "len": 2}},
        {"X": {"x": 0, "y": 2, "dir": "H", "len": 2}, "A": {"x": 1, "y": 1, "dir": "V", "len": 2}},
        {"XY": {"x": 0, "y": 2, "dir": "H", "len": 2}},
        {"X": {"x": 0, "y": 2, "dir": "diagonal", "len": 2}},
        {"X": {"x": 0, "y": 2, "dir": "H"}},
    ],
)
def test_board_from_cars_rejects_bad_cars(cars):
    with pytest.raises(LevelError):
        board_from_cars(cars)


@pytest.mark.parametrize(
    "rows, goal",
    [
        (["      ", "      ", "   XXA", "      ", "      ", "      "], "X"),
        (["      ", "      ", "   XX ", "      ", "      ", "      "], "Z"),
        (["   X  ", "   X  ", "   X  ", "      ", "      ", "      "], "X"),
        (["      ", "   XX ", "      ", "      ", "      ", "      "], "X"),
        (["      ", "  A   ", "XXA A ", "      ", "      ", "      "], "X"),
    ],
)
def test_validate_board_rejects_unplayable_boards(rows, goal):
    with pytest.raises(LevelError):
        validate_board(Board(rows), goal)


@pytest.mark.parametrize("name", sorted(BUILTIN_PUZZLES))
def test_builtin_puzzles_are_valid(name):
    validate_board(get_puzzle(name))


def test_unknown_puzzle_is_reported():
    with pytest.raises(LevelError, match="Unknown puzzle"):
        get_puzzle("no-such-card")


def test_load_text_level(tmp_path):
    path = tmp_path / "card.txt"
    path.write_text(ONE_BLOCKER_TEXT, encoding="utf-8")

    board, goal = load_level_file(path)

    assert board == get_puzzle("one-blocker")
    assert goal == "X"


def test_load_json_level_with_cars(tmp_path):
    path = tmp_path / "card.json"
    path.write_text(
        json.dumps(
            {
                "board": {"size": 6, "exit": {"row": 2}},
                "goal": "X",
                "cars": {
                    "X": {"x": 3, "y": 2, "dir": "H", "len": 2},
                    "A": {"x": 5, "y": 1, "dir": "V", "len": 2},
                },
            }
        ),
        encoding="utf-8",
    )

    board, goal = load_level_file(path)

    assert board == get_puzzle("one-blocker")
    assert goal == "X"


def test_load_legacy_flat_json_level(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(
        json.dumps(
            {
                "X": {"x": 3, "y": 2, "dir": "H", "len": 2},
                "A": {"x": 5, "y": 1, "dir": "V", "len": 2},
            }
        ),
        encoding="utf-8",
    )

    board, _ = load_level_file(path)

    assert board == get_puzzle("one-blocker")


def test_load_json_level_with_rows_and_custom_goal(tmp_path):
    path = tmp_path / "rows.json"
    path.write_text(
        json.dumps(
            {
                "board": {"exit": {"row": 0}},
                "goal": "R",
                "rows": ["..RR", "....", "....", "...."],
            }
        ),
        encoding="utf-8",
    )

    board, goal = load_level_file(path)

    assert goal == "R"
    assert board.size == 4
    assert board.exit_row == 0


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_load_rejects_broken_json(tmp_path, content):
    path = tmp_path / "broken.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(LevelError):
        load_level_file(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(LevelError):
        load_level_file(tmp_path / "missing.txt")


def test_game_load_level_can_override_the_goal(tmp_path):
    path = tmp_path / "card.txt"
    path.write_text("......\n......\nAA.XX.\n......\n......\n......\n", encoding="utf-8")
    game = Game()

    game.load_level(path, exit_row=2, goal_car="A")

    assert game.goal_car == "A"


def test_get_valid_moves_returns_independent_boards():
    game = Game()
    game.load_puzzle("drive-off")

    moves = game.get_valid_moves()

    assert [(car, direction) for car, direction, _ in moves] == [
        ("C", "left"),
        ("X", "right"),
        ("C", "right"),
        ("C", EXIT),
    ]
    assert len({board.key() for _, _, board in moves}) == 4
    assert game.current_board == get_puzzle("drive-off")


def test_move_car_applies_only_legal_moves():
    game = Game()
    game.load_puzzle("one-blocker")

    assert not game.move_car("X", "right")
    assert not game.move_car("Q", "up")
    assert game.move_car("A", "up")
    assert game.move_car("X", "right")
    assert game.is_solved


def test_solve_then_step_through_the_solution():
    game = Game()
    game.load_puzzle("one-blocker")

    result = game.solve()

    assert result.solved
    assert game.nodes_expanded == result.explored
    assert game.current_board == game.initial_board
    assert game.step_solution()
    assert game.current_board.cell_at(0, 5) == "A"
    assert game.step_solution()
    assert game.is_solved
    assert not game.step_solution()

    assert game.step_back()
    assert game.solution_index == 1
    assert not game.is_solved
    game.reset()
    assert game.solution_index == 0
    assert game.current_board == get_puzzle("one-blocker")
    assert not game.step_back()


def test_solve_without_a_level():
    with pytest.raises(LevelError):
        Game().solve()


def test_unsolvable_game_has_no_solution_to_step():
    game = Game()
    game.load_puzzle("boxed-in")

    result = game.solve()

    assert not result.solved
    assert game.solution == []
    assert not game.step_solution()
    assert game.current_board.cell_at(2, 3) == EMPTY


@pytest.mark.parametrize(
    "payload",
    [
        {"board": None, "cars": {}},
        {"board": {"exit": "east"}, "cars": {}},
        {"board": {"exit": {"row": "two"}}, "cars": {}},
        {"board": {"size": [6]}, "cars": {}},
        {"board": {"size": 6}, "cars": ["X"]},
        {"board": {"size": 6}, "cars": {"X": 3}},
        {"rows": "XX"},
    ],
)
def test_load_rejects_malformed_json_fields(tmp_path, payload):
    path = tmp_path / "card.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(LevelError):
        load_level_file(path)


@pytest.mark.parametrize("exit_row", [-1, 6])
def test_puzzle_exit_row_must_be_on_the_board(exit_row):
    with pytest.raises(LevelError, match="Exit row"):
        get_puzzle("one-blocker", exit_row)
