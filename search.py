from __future__ import annotations

import enum
import logging
from contextlib import closing
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional, Set

from board import GOAL_CAR, Board
from errors import SearchInvariantError
from moves import describe_move, successors

logger = logging.getLogger(__name__)

ROOT = -1
PROGRESS_EVERY = 100

ProgressCallback = Callable[[int], None]


class FrontierEntry(NamedTuple):

    board: Board
    origin: int


class SolverPhase(enum.Enum):

    INITIALIZING = "initializing"
    EXPLORING = "exploring"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Step:

    number: int
    board: Board
    next_board: Board
    car: str
    direction: str

    def render(self, indent: str = "  ") -> str:

        return self.board.render(self.next_board, indent)


@dataclass
class SearchResult:

    status: SolverPhase
    boards: List[Board] = field(default_factory=list)
    steps: List[Step] = field(default_factory=list)
    explored: int = 0
    discovered: int = 0

    @property
    def solved(self) -> bool:

        return self.status is SolverPhase.SOLVED

    @property
    def moves(self) -> int:

        return len(self.steps)


class SearchState:
    """The BFS frontier and the set of boards already discovered.

    The frontier is append-only and doubles as the queue: entries are
    explored in index order, which is also non-decreasing move depth.
    """

    def __init__(self) -> None:

        self.frontier: List[FrontierEntry] = []
        self.visited: Set[Board] = set()

    def __len__(self) -> int:

        return len(self.frontier)

    def register_if_novel(self, board: Board, origin: int) -> bool:

        if board in self.visited:
            if logger.isEnabledFor(logging.DEBUG):
                found = next(
                    index for index, entry in enumerate(self.frontier) if entry.board == board
                )
                logger.debug(
                    "  Rejected move, already found state %d\n%s",
                    found,
                    self.frontier[origin].board.render(board, "    "),
                )
            return False

        stored = board.copy()
        self.visited.add(stored)
        self.frontier.append(FrontierEntry(stored, origin))
        if len(self.visited) != len(self.frontier):
            raise SearchInvariantError(
                f"Visited set holds {len(self.visited)} boards "
                f"but the frontier holds {len(self.frontier)}"
            )

        if origin >= 0 and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "  Added state %d (previous %d)\n%s",
                len(self.frontier) - 1,
                origin,
                self.frontier[origin].board.render(stored, "    "),
            )
        return True


def reconstruct_path(frontier: List[FrontierEntry], index: int) -> List[Board]:
    """Walk origin pointers back from ``index`` and return the boards root-first."""

    if not 0 <= index < len(frontier):
        raise SearchInvariantError(f"No frontier entry at index {index}")

    boards: List[Board] = []
    while index != ROOT:
        board, origin = frontier[index]
        if not ROOT <= origin < index:
            raise SearchInvariantError(
                f"Entry {index} points at origin {origin}, which is not an earlier entry"
            )
        boards.append(board)
        index = origin
    boards.reverse()
    return boards


def solution_steps(boards: List[Board]) -> List[Step]:

    steps: List[Step] = []
    for number, (board, next_board) in enumerate(zip(boards, boards[1:]), start=1):
        car, direction = describe_move(board, next_board)
        steps.append(Step(number, board, next_board, car, direction))
    return steps


class Solver:
    """Breadth-first search from one starting board.

    ``progress`` is called with the number of boards explored so far every
    ``progress_every`` boards; it has no influence on the search.
    """

    def __init__(
        self,
        board: Board,
        goal_car: str = GOAL_CAR,
        progress: Optional[ProgressCallback] = None,
        progress_every: int = PROGRESS_EVERY,
    ) -> None:

        if progress_every < 1:
            raise ValueError("progress_every must be at least 1")
        self.board = board
        self.goal_car = goal_car
        self.progress = progress
        self.progress_every = progress_every
        self.phase = SolverPhase.INITIALIZING
        self.state = SearchState()
        self.explored = 0

    def run(self) -> SearchResult:

        if self.phase is not SolverPhase.INITIALIZING:
            raise RuntimeError("Solver.run() can only be called once")

        if not self.state.register_if_novel(self.board, ROOT):
            raise SearchInvariantError("Starting board was rejected by an empty search")
        if self.board.is_solved(self.goal_car):
            return self._finish(0)

        self.phase = SolverPhase.EXPLORING
        cursor = 0
        while cursor < len(self.state):
            if self.progress is not None and cursor % self.progress_every == 0:
                self.progress(cursor)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Exploring state %d\n%s", cursor, self.state.frontier[cursor].board.render(indent="  ")
                )

            scratch = self.state.frontier[cursor].board.copy()
            self.explored = cursor + 1
            with closing(successors(scratch, self.goal_car)) as moves:
                for move in moves:
                    added = self.state.register_if_novel(move.board, cursor)
                    if move.solves:
                        if not added:
                            raise SearchInvariantError("Winning board was already in the frontier")
                        return self._finish(len(self.state) - 1)
            cursor += 1

        self.phase = SolverPhase.EXHAUSTED
        logger.info("Search exhausted after %d boards", self.explored)
        return SearchResult(
            status=SolverPhase.EXHAUSTED,
            explored=self.explored,
            discovered=len(self.state),
        )

    def _finish(self, index: int) -> SearchResult:

        self.phase = SolverPhase.SOLVED
        boards = reconstruct_path(self.state.frontier, index)
        logger.info("Solved in %d moves after exploring %d boards", len(boards) - 1, self.explored)
        return SearchResult(
            status=SolverPhase.SOLVED,
            boards=boards,
            steps=solution_steps(boards),
            explored=self.explored,
            discovered=len(self.state),
        )


def solve(
    board: Board,
    goal_car: str = GOAL_CAR,
    progress: Optional[ProgressCallback] = None,
    progress_every: int = PROGRESS_EVERY,
) -> SearchResult:

    return Solver(board, goal_car, progress, progress_every).run()
