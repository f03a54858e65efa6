from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from board import BOARD_SIZE, EMPTY, EXIT_ROW, GOAL_CAR, Board
from errors import LevelError
from moves import successors
from puzzles import get_puzzle
from search import PROGRESS_EVERY, ProgressCallback, SearchResult, Solver, Step

MoveTuple = Tuple[str, str, Board]

EMPTY_MARKERS = (".", EMPTY)
_HORIZONTAL_HEADINGS = {"H", "E", "W"}
_VERTICAL_HEADINGS = {"V", "N", "S"}


def _normalize_axis(value: str) -> str:

    heading = str(value).upper()
    if heading in _HORIZONTAL_HEADINGS:
        return "H"
    if heading in _VERTICAL_HEADINGS:
        return "V"
    raise LevelError(f"Unsupported heading value: {value!r}")


def parse_rows(lines: Iterable[str], exit_row: int = EXIT_ROW) -> Board:
    """Build a board from text rows, one row per line.

    ``.`` and spaces are empty cells. Lines are padded with empty cells to the
    board size, which is the number of rows. Blank lines and lines starting
    with ``#`` are ignored.
    """

    rows: List[str] = []
    for line in lines:
        text = line.rstrip("\r\n")
        if not text.strip() or text.lstrip().startswith("#"):
            continue
        rows.append("".join(EMPTY if cell in EMPTY_MARKERS else cell for cell in text))

    size = len(rows)
    if size == 0:
        raise LevelError("Level has no rows")
    for index, row in enumerate(rows):
        if len(row) > size:
            raise LevelError(f"Row {index} has {len(row)} cells; expected at most {size}")
    if not 0 <= exit_row < size:
        raise LevelError(f"Exit row {exit_row} is outside a {size}x{size} board")
    return Board((row.ljust(size, EMPTY) for row in rows), exit_row=exit_row)


def board_from_cars(
    cars: Mapping[str, Mapping[str, object]],
    size: int = BOARD_SIZE,
    exit_row: int = EXIT_ROW,
) -> Board:
    """Place cars given as ``{"x", "y", "dir", "len"}`` entries on an empty board."""

    if not 0 <= exit_row < size:
        raise LevelError(f"Exit row {exit_row} is outside a {size}x{size} board")
    board = Board.empty(size, exit_row)
    for car_id, attrs in cars.items():
        if len(car_id) != 1 or car_id in EMPTY_MARKERS:
            raise LevelError(f"Car id {car_id!r} must be a single non-empty character")
        try:
            x = int(attrs["x"])
            y = int(attrs["y"])
            length = int(attrs["len"])
        except (KeyError, TypeError, ValueError) as exc:
            raise LevelError(f"Car {car_id} needs integer x, y and len: {exc}") from exc
        axis = _normalize_axis(str(attrs.get("heading", attrs.get("dir", "H"))))
        dx, dy = (1, 0) if axis == "H" else (0, 1)
        for offset in range(length):
            col, row = x + dx * offset, y + dy * offset
            if not board.on_board(row, col):
                raise LevelError(f"Car {car_id} extends beyond the board at ({col}, {row})")
            occupant = board.cell_at(row, col)
            if occupant != EMPTY:
                raise LevelError(f"Cars {car_id} and {occupant} overlap at ({col}, {row})")
            board.set_cell(row, col, car_id)
    return board


def validate_board(board: Board, goal_car: str = GOAL_CAR) -> None:

    cars = board.cars()
    cells: Dict[str, set] = {}
    for row in range(board.size):
        for col in range(board.size):
            identifier = board.cell_at(row, col)
            if identifier != EMPTY:
                cells.setdefault(identifier, set()).add((col, row))

    for identifier, car in cars.items():
        if car.length < 2:
            raise LevelError(f"Car {identifier} has length {car.length}; cars need at least 2 cells")
        if set(car.occupy_cells()) != cells[identifier]:
            raise LevelError(f"Car {identifier} is not a single straight run of cells")

    goal = cars.get(goal_car)
    if goal is None:
        raise LevelError(f"Missing goal car {goal_car!r}")
    if goal.orientation != "H":
        raise LevelError(f"Goal car {goal_car!r} must be horizontal")
    if goal.y != board.exit_row:
        raise LevelError(f"Goal car {goal_car!r} should be on row {board.exit_row}")


def load_level_file(file_path: Path, exit_row: Optional[int] = None) -> Tuple[Board, str]:
    """Read a ``.json`` or text level; returns the board and its goal car id."""

    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LevelError(f"Cannot read level {path}: {exc}") from exc

    if path.suffix.lower() != ".json":
        return parse_rows(text.splitlines(), EXIT_ROW if exit_row is None else exit_row), GOAL_CAR

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LevelError(f"Level {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LevelError(f"Level {path} must contain a JSON object")

    board_data = data.get("board", {})
    if not isinstance(board_data, dict):
        raise LevelError(f"Level {path}: 'board' must be an object")
    exit_info = board_data.get("exit", {})
    if not isinstance(exit_info, dict):
        raise LevelError(f"Level {path}: 'board.exit' must be an object")
    try:
        if exit_row is None:
            exit_row = int(exit_info.get("row", EXIT_ROW))
        size = int(board_data.get("size", board_data.get("width", BOARD_SIZE)))
    except (TypeError, ValueError) as exc:
        raise LevelError(f"Level {path} needs integer board size and exit row: {exc}") from exc
    goal_car = str(data.get("goal", GOAL_CAR))

    if "rows" in data:
        rows = data["rows"]
        if not isinstance(rows, list) or not all(isinstance(row, str) for row in rows):
            raise LevelError(f"Level {path}: 'rows' must be a list of strings")
        return parse_rows(rows, exit_row), goal_car

    cars_payload = data.get("cars")
    if cars_payload is None:
        cars_payload = {
            key: value
            for key, value in data.items()
            if isinstance(value, dict) and {"x", "y", "len"}.issubset(value.keys())
        }
    if not isinstance(cars_payload, dict) or not all(
        isinstance(attrs, dict) for attrs in cars_payload.values()
    ):
        raise LevelError(f"Level {path}: 'cars' must map car ids to objects")
    return board_from_cars(cars_payload, size, exit_row), goal_car


class Game:
    """A loaded puzzle plus the position within its solution."""

    def __init__(self, goal_car: str = GOAL_CAR) -> None:

        self.goal_car = goal_car
        self.initial_board: Optional[Board] = None
        self.current_board: Optional[Board] = None
        self.solution: List[Step] = []
        self.solution_index: int = 0
        self.nodes_expanded: int = 0

    def load_level(
        self, file_path: Path, exit_row: Optional[int] = None, goal_car: Optional[str] = None
    ) -> None:

        board, level_goal = load_level_file(file_path, exit_row)
        self.goal_car = goal_car or level_goal
        self.load_board(board)

    def load_rows(self, lines: Iterable[str], exit_row: int = EXIT_ROW) -> None:

        self.load_board(parse_rows(lines, exit_row))

    def load_puzzle(self, name: str, exit_row: int = EXIT_ROW) -> None:

        self.load_board(get_puzzle(name, exit_row))

    def load_board(self, board: Board) -> None:

        validate_board(board, self.goal_car)
        self.initial_board = board.copy()
        self.current_board = board.copy()
        self.solution = []
        self.solution_index = 0
        self.nodes_expanded = 0

    @property
    def is_solved(self) -> bool:

        return self.current_board is not None and self.current_board.is_solved(self.goal_car)

    def get_valid_moves(self, board: Optional[Board] = None) -> List[MoveTuple]:

        active = board or self.current_board
        if active is None:
            return []
        return [
            (move.car, move.direction, move.board.copy())
            for move in successors(active.copy(), self.goal_car)
        ]

    def move_car(self, car_id: str, direction: str) -> bool:

        if self.current_board is None:
            return False
        for candidate_id, candidate_dir, next_board in self.get_valid_moves():
            if candidate_id == car_id and candidate_dir == direction:
                self.current_board = next_board
                return True
        return False

    def solve(
        self,
        progress: Optional[ProgressCallback] = None,
        progress_every: int = PROGRESS_EVERY,
    ) -> SearchResult:

        if self.initial_board is None:
            raise LevelError("No level loaded")
        result = Solver(self.initial_board, self.goal_car, progress, progress_every).run()
        self.nodes_expanded = result.explored
        self.apply_solution(result)
        return result

    def apply_solution(self, result: SearchResult) -> None:

        self.solution = list(result.steps)
        self.solution_index = 0
        if self.initial_board is not None:
            self.current_board = self.initial_board.copy()

    def step_solution(self) -> bool:

        if self.solution_index >= len(self.solution):
            return False
        self.current_board = self.solution[self.solution_index].next_board
        self.solution_index += 1
        return True

    def step_back(self) -> bool:

        if self.solution_index == 0:
            return False
        self.solution_index -= 1
        self.current_board = self.solution[self.solution_index].board
        return True

    def reset(self) -> None:

        if self.initial_board is None:
            return
        self.current_board = self.initial_board.copy()
        self.solution_index = 0
