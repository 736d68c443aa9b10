"""Board model for classic 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Mark = str  # "Cross" or "Nought"
Line = Tuple[int, int, int]

CROSS: Mark = "Cross"
NOUGHT: Mark = "Nought"
EMPTY: Optional[Mark] = None

BOARD_SIZE = 9

WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

# Row first, then column, then the diagonals through the cell (corners and centre only)
LINES_THROUGH: Dict[int, Tuple[Line, ...]] = {
    index: tuple(line for line in WINNING_LINES if index in line)
    for index in range(BOARD_SIZE)
}


class InvalidCellError(ValueError):
    """Raised when a cell index is out of range or already occupied."""


def other_mark(mark: Mark) -> Mark:
    return NOUGHT if mark == CROSS else CROSS


@dataclass
class Board:
    cells: List[Optional[Mark]] = field(default_factory=lambda: [EMPTY] * BOARD_SIZE)
    _empty: int = field(default=BOARD_SIZE, init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.cells) != BOARD_SIZE:
            raise ValueError(f"A board has exactly {BOARD_SIZE} cells")
        self._empty = sum(1 for c in self.cells if c is EMPTY)

    # ---- mutation ----

    def mark(self, index: int, mark: Mark) -> None:
        """Place ``mark`` at ``index`` or raise :class:`InvalidCellError`."""
        if not 0 <= index < BOARD_SIZE:
            raise InvalidCellError(f"Cell {index} is outside the board")
        if self.cells[index] is not EMPTY:
            raise InvalidCellError(f"Cell {index} is already occupied")
        self.cells[index] = mark
        self._empty -= 1

    def place(self, index: int, mark: Mark) -> bool:
        """Place ``mark`` at ``index``; report failure instead of raising."""
        try:
            self.mark(index, mark)
        except InvalidCellError:
            return False
        return True

    def retract(self, index: int) -> None:
        # Only for cells the caller placed itself (search backtracking)
        self.cells[index] = EMPTY
        self._empty += 1

    def reset(self) -> None:
        for index in range(BOARD_SIZE):
            self.cells[index] = EMPTY
        self._empty = BOARD_SIZE

    # ---- queries ----

    def empty_count(self) -> int:
        return self._empty

    def is_full(self) -> bool:
        return self._empty == 0

    def available_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c is EMPTY]

    def check_win(self, last_index: int) -> Optional[Line]:
        """
        Return the first completed line passing through ``last_index``.

        Only the row, the column and (for corners and the centre) the
        diagonals through the cell are examined, since a new line can only be
        completed by the most recent move.
        """
        if not 0 <= last_index < BOARD_SIZE:
            raise InvalidCellError(f"Cell {last_index} is outside the board")
        cells = self.cells
        for a, b, c in LINES_THROUGH[last_index]:
            v = cells[a]
            if v is not EMPTY and v == cells[b] == cells[c]:
                return (a, b, c)
        return None

    def find_line(self) -> Optional[Line]:
        """Full-board scan for any completed line."""
        cells = self.cells
        for a, b, c in WINNING_LINES:
            v = cells[a]
            if v is not EMPTY and v == cells[b] == cells[c]:
                return (a, b, c)
        return None

    def winner(self) -> Optional[Mark]:
        line = self.find_line()
        return self.cells[line[0]] if line is not None else None

    def __str__(self) -> str:
        symbols = {CROSS: "X", NOUGHT: "O", EMPTY: "."}
        rows = [
            "".join(symbols[c] for c in self.cells[row : row + 3])
            for row in range(0, BOARD_SIZE, 3)
        ]
        return "/".join(rows)
