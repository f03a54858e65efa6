from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Tuple

from board import EMPTY, GOAL_CAR, Board
from errors import InvalidMove

LEFT = "left"
RIGHT = "right"
UP = "up"
DOWN = "down"
EXIT = "exit"

# Directions (dx, dy) scanned away from an empty cell, in generation order.
# The car found along a scan direction moves the opposite way.
SCAN_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

_MOVE_NAMES = {(1, 0): LEFT, (-1, 0): RIGHT, (0, 1): UP, (0, -1): DOWN}
_ARROW_NAMES = {">": RIGHT, "<": LEFT, "v": DOWN, "^": UP}


@dataclass(frozen=True)
class Move:
    """A candidate successor.

    ``board`` is the generator's working board and only holds the successor
    until the generator is resumed; copy it to keep it.
    """

    car: str
    direction: str
    board: Board
    solves: bool = False


@contextmanager
def _slid(board: Board, car: str, row: int, col: int, far_row: int, far_col: int) -> Iterator[Board]:

    board.set_cell(row, col, car)
    board.set_cell(far_row, far_col, EMPTY)
    try:
        yield board
    finally:
        board.set_cell(row, col, EMPTY)
        board.set_cell(far_row, far_col, car)


@contextmanager
def _driven_off(board: Board, car: str, row: int, first_col: int) -> Iterator[Board]:

    for col in range(first_col, board.size):
        board.set_cell(row, col, EMPTY)
    try:
        yield board
    finally:
        for col in range(first_col, board.size):
            board.set_cell(row, col, car)


def successors(board: Board, goal_car: str = GOAL_CAR) -> Iterator[Move]:
    """Yield every move from ``board``, using ``board`` itself as scratch space.

    The board is back in its original state whenever the generator is
    resumed, exhausted or closed.
    """

    for row in range(board.size):
        for col in range(board.size):
            if board.cell_at(row, col) != EMPTY:
                continue
            for dx, dy in SCAN_DIRECTIONS:
                yield from moves_into(board, row, col, dx, dy, goal_car)


def moves_into(
    board: Board, row: int, col: int, dx: int, dy: int, goal_car: str = GOAL_CAR
) -> Iterator[Move]:
    """Moves that slide a car into the empty cell at ``row, col``.

    The car is looked for along ``(dx, dy)``: the two cells next to the
    empty cell in that direction must hold the same car.
    """

    far_col = col + 2 * dx
    far_row = row + 2 * dy
    if not board.on_board(far_row, far_col):
        return
    car = board.cell_at(far_row, far_col)
    if car == EMPTY or board.cell_at(far_row - dy, far_col - dx) != car:
        return

    while board.on_board(far_row + dy, far_col + dx) and board.cell_at(far_row + dy, far_col + dx) == car:
        far_col += dx
        far_row += dy

    direction = _MOVE_NAMES[(dx, dy)]
    with _slid(board, car, row, col, far_row, far_col):
        at_exit = dx == -1 and col == board.size - 1 and row == board.exit_row
        if not at_exit:
            yield Move(car, direction, board)
        elif car == goal_car:
            yield Move(car, direction, board, solves=True)
        else:
            yield Move(car, direction, board)
            with _driven_off(board, car, row, far_col + 1):
                yield Move(car, EXIT, board)


def describe_move(before: Board, after: Board) -> Tuple[str, str]:
    """Name the car and direction of the single move from ``before`` to ``after``."""

    if before.size != after.size:
        raise InvalidMove("Boards have different sizes")

    vanished = None
    for row in range(before.size):
        for col in range(before.size):
            old = before.cell_at(row, col)
            new = after.cell_at(row, col)
            if old == new:
                continue
            if old == EMPTY:
                arrow = before.entry_arrow(row, col, new)
                if arrow is None:
                    raise InvalidMove(f"{new} cannot slide into ({row}, {col})")
                return new, _ARROW_NAMES[arrow]
            if new == EMPTY and vanished is None:
                vanished = old

    if vanished is None:
        raise InvalidMove("Boards are identical")
    return vanished, EXIT

