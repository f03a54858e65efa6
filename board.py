from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from errors import InvalidMove

BOARD_SIZE = 6
EXIT_ROW = 2
EMPTY = " "
GOAL_CAR = "X"

# (row offset, column offset) of the neighbour a car enters from, per glyph.
_ARROW_SOURCES: Tuple[Tuple[str, int, int], ...] = (
    (">", 0, -1),
    ("<", 0, 1),
    ("v", -1, 0),
    ("^", 1, 0),
)


@dataclass(frozen=True)
class Car:

    identifier: str
    x: int
    y: int
    orientation: str
    length: int

    def occupy_cells(self) -> Iterator[Tuple[int, int]]:

        if self.orientation == "H":
            for offset in range(self.length):
                yield self.x + offset, self.y
        else:
            for offset in range(self.length):
                yield self.x, self.y + offset


@total_ordering
class Board:
    """Square grid of one-character cells, indexed ``[row][col]``.

    Boards compare, order and hash by their contents so they can be kept in
    sets. Only transient working copies are ever mutated; a board that has
    been put in a set must not be changed afterwards.
    """

    __slots__ = ("size", "exit_row", "_cells")

    def __init__(self, rows: Iterable[Iterable[str]], exit_row: int = EXIT_ROW) -> None:

        grid = [list(row) for row in rows]
        size = len(grid)
        if size == 0 or any(len(row) != size for row in grid):
            raise ValueError("Board must be a non-empty square grid")
        if not 0 <= exit_row < size:
            raise ValueError(f"Exit row {exit_row} is outside a {size}x{size} board")
        self.size = size
        self.exit_row = exit_row
        self._cells: List[str] = [cell for row in grid for cell in row]

    @classmethod
    def empty(cls, size: int = BOARD_SIZE, exit_row: int = EXIT_ROW) -> "Board":

        return cls([EMPTY * size] * size, exit_row=exit_row)

    def copy(self) -> "Board":

        clone = Board.__new__(Board)
        clone.size = self.size
        clone.exit_row = self.exit_row
        clone._cells = list(self._cells)
        return clone

    def on_board(self, row: int, col: int) -> bool:

        return 0 <= row < self.size and 0 <= col < self.size

    def cell_at(self, row: int, col: int) -> str:

        if not self.on_board(row, col):
            raise IndexError(f"Cell ({row}, {col}) is off a {self.size}x{self.size} board")
        return self._cells[row * self.size + col]

    def cell_at_or_default(self, row: int, col: int) -> str:

        if not self.on_board(row, col):
            return EMPTY
        return self._cells[row * self.size + col]

    def set_cell(self, row: int, col: int, value: str) -> None:

        if not self.on_board(row, col):
            raise IndexError(f"Cell ({row}, {col}) is off a {self.size}x{self.size} board")
        self._cells[row * self.size + col] = value

    def rows(self) -> List[str]:

        size = self.size
        return ["".join(self._cells[row * size:(row + 1) * size]) for row in range(size)]

    def key(self) -> str:

        return "".join(self._cells)

    def __eq__(self, other: object) -> bool:

        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self._cells == other._cells

    def __lt__(self, other: "Board") -> bool:

        if not isinstance(other, Board):
            return NotImplemented
        return (self.size, self._cells) < (other.size, other._cells)

    def __hash__(self) -> int:

        return hash(self.key())

    def __repr__(self) -> str:

        return f"Board({self.rows()!r}, exit_row={self.exit_row})"

    def __str__(self) -> str:

        return self.render()

    def cars(self) -> Dict[str, Car]:
        """Describe every car by its top-left cell, orientation and length."""

        cars: Dict[str, Car] = {}
        for row in range(self.size):
            for col in range(self.size):
                identifier = self.cell_at(row, col)
                if identifier == EMPTY or identifier in cars:
                    continue
                if self.cell_at_or_default(row, col + 1) == identifier:
                    orientation, dx, dy = "H", 1, 0
                else:
                    orientation, dx, dy = "V", 0, 1
                length = 1
                while self.cell_at_or_default(row + dy * length, col + dx * length) == identifier:
                    length += 1
                cars[identifier] = Car(identifier, col, row, orientation, length)
        return cars

    def is_solved(self, goal_car: str = GOAL_CAR) -> bool:

        last = self.size - 1
        return (
            self.cell_at(self.exit_row, last) == goal_car
            and self.cell_at_or_default(self.exit_row, last - 1) == goal_car
        )

    def without_car(self, identifier: str) -> "Board":

        clone = self.copy()
        clone._cells = [EMPTY if cell == identifier else cell for cell in clone._cells]
        return clone

    def entry_arrow(self, row: int, col: int, identifier: str) -> Optional[str]:
        """Arrow for ``identifier`` sliding into the empty cell at ``row, col``."""

        for glyph, d_row, d_col in _ARROW_SOURCES:
            if self.cell_at_or_default(row + d_row, col + d_col) == identifier:
                return glyph
        return None

    def render(self, next_board: Optional["Board"] = None, indent: str = "") -> str:

        target = next_board if next_board is not None else self
        lines: List[str] = []
        for row in range(self.size):
            out: List[str] = []
            col = 0
            while col < self.size:
                current = self.cell_at(row, col)
                following = target.cell_at(row, col)
                if current != following:
                    if current == EMPTY:
                        arrow = self.entry_arrow(row, col, following)
                        if arrow is None:
                            raise InvalidMove(
                                f"Cell ({row}, {col}) cannot be reached by a single slide"
                            )
                        current = arrow
                    elif self._departs(target, row, col, current):
                        while col < self.size and self.cell_at(row, col) == current:
                            out.append(current)
                            col += 1
                        out.append(">" * (self.size + 1 - col))
                        break
                out.append(current)
                col += 1
            lines.append(indent + "".join(out))
        return "\n".join(lines)

    def _departs(self, target: "Board", row: int, col: int, identifier: str) -> bool:

        if target.cell_at(row, col) != EMPTY or row != self.exit_row or col >= self.size - 1:
            return False
        for ahead in range(col + 1, self.size):
            if target.cell_at(row, ahead) != EMPTY:
                return False
            if self.cell_at(row, ahead) not in (EMPTY, identifier):
                return False
        return True

