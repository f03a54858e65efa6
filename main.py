"""Command-line front-end: load a board, search for the shortest escape, print it."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from board import EXIT_ROW, GOAL_CAR
from errors import LevelError
from game import Game
from puzzles import BUILTIN_PUZZLES, DEFAULT_PUZZLE
from search import PROGRESS_EVERY, SearchResult

EXIT_SOLVED = 0
EXIT_UNSOLVABLE = 1
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:

    parser = argparse.ArgumentParser(
        prog="rush-hour",
        description="Find the shortest sequence of moves that frees the goal car.",
    )
    parser.add_argument(
        "level",
        nargs="?",
        type=Path,
        help="Level file: a .json level or a text grid ('.' or space for empty cells).",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--puzzle", help=f"Built-in puzzle name (default: {DEFAULT_PUZZLE}).")
    source.add_argument("--stdin", action="store_true", help="Read a text grid from standard input.")
    parser.add_argument("--list", action="store_true", help="List built-in puzzles and exit.")
    parser.add_argument("--goal", default=None, help=f"Goal car identifier (default: {GOAL_CAR}).")
    parser.add_argument("--exit-row", type=int, default=None, help=f"Exit row (default: {EXIT_ROW}).")
    parser.add_argument(
        "--progress-every",
        type=int,
        default=PROGRESS_EVERY,
        help="Report progress every N explored boards.",
    )
    parser.add_argument("--quiet", action="store_true", help="Do not print progress lines.")
    parser.add_argument("--trace", action="store_true", help="Log every added and rejected board.")
    parser.add_argument("--gui", action="store_true", help="Replay the solution in a pygame window.")
    return parser


def load_game(args: argparse.Namespace) -> Game:

    game = Game(goal_car=args.goal or GOAL_CAR)
    if args.level is not None:
        if args.puzzle or args.stdin:
            raise LevelError("Give either a level file, --puzzle or --stdin, not several")
        game.load_level(args.level, args.exit_row, args.goal)
    elif args.stdin:
        game.load_rows(sys.stdin, EXIT_ROW if args.exit_row is None else args.exit_row)
    else:
        game.load_puzzle(
            args.puzzle or DEFAULT_PUZZLE, EXIT_ROW if args.exit_row is None else args.exit_row
        )
    return game


def format_solution(result: SearchResult) -> List[str]:

    lines: List[str] = []
    for step in result.steps:
        lines.append(f"Solution step {step.number} ({step.car} {step.direction})")
        lines.append(step.render("  "))
        lines.append("")
    if result.boards:
        lines.append("Final board state:")
        lines.append(result.boards[-1].render(indent="  "))
        lines.append("")
    return lines


def main(argv: Optional[Sequence[str]] = None) -> int:

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.trace else logging.WARNING,
        format="%(message)s",
    )

    if args.list:
        for name, rows in sorted(BUILTIN_PUZZLES.items()):
            print(name)
            print("\n".join(f"  {row}" for row in rows))
            print()
        return EXIT_SOLVED
    if args.progress_every < 1:
        parser.error("--progress-every must be at least 1")

    try:
        game = load_game(args)
    except LevelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT

    print("Initial board state:")
    print(game.initial_board.render(indent="  "))
    print()

    def report(explored: int) -> None:
        print(f"...explored {explored} board states")

    start = time.perf_counter()
    result = game.solve(progress=None if args.quiet else report, progress_every=args.progress_every)
    elapsed = time.perf_counter() - start

    if not result.solved:
        print("Cannot find solution!")
        print(f"Explored {result.explored} board states in {elapsed:.3f}s")
        return EXIT_UNSOLVABLE

    print()
    for line in format_solution(result):
        print(line)
    print(
        f"Solved in {result.moves} moves "
        f"({result.explored} explored, {result.discovered} discovered, {elapsed:.3f}s)"
    )

    if args.gui:
        from viewer import SolutionViewer

        SolutionViewer(game).run()
    return EXIT_SOLVED


if __name__ == "__main__":
    sys.exit(main())
