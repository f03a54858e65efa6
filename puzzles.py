"""Built-in Rush Hour boards, keyed by name."""

from __future__ import annotations

from typing import Dict, List

from board import EXIT_ROW, Board
from errors import LevelError

BUILTIN_PUZZLES: Dict[str, List[str]] = {
    # Card #1 (beginner)
    "beginner-01": [
        "AA   O",
        "P  Q O",
        "PXXQ O",
        "P  Q  ",
        "B   CC",
        "B RRR ",
    ],
    # Card #93 (expert)
    "expert-93": [
        " AAB O",
        "CD B O",
        "CDXXEO",
        "FGGHE ",
        "F IHJJ",
        "  IPPP",
    ],
    # Card #155 (genius)
    "genius-155": [
        "OOOA P",
        "  BA P",
        "XXBIIP",
        " DEEFF",
        "GDH CC",
        "G H JJ",
    ],
    "one-blocker": [
        "      ",
        "     A",
        "   XXA",
        "      ",
        "      ",
        "      ",
    ],
    "drive-off": [
        "      ",
        "      ",
        "XX CC ",
        "      ",
        "      ",
        "      ",
    ],
    "boxed-in": [
        "  A   ",
        "  A   ",
        "XXA   ",
        "  B   ",
        "  B   ",
        "  B   ",
    ],
}

DEFAULT_PUZZLE = "genius-155"


def get_puzzle(name: str, exit_row: int = EXIT_ROW) -> Board:

    try:
        rows = BUILTIN_PUZZLES[name]
    except KeyError:
        known = ", ".join(sorted(BUILTIN_PUZZLES))
        raise LevelError(f"Unknown puzzle {name!r}; choose one of: {known}") from None
    if not 0 <= exit_row < len(rows):
        raise LevelError(f"Exit row {exit_row} is outside a {len(rows)}x{len(rows)} board")
    return Board(rows, exit_row=exit_row)
