"""Exhaustive minimax opponent for classic tic-tac-toe."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Tuple

from .board import BOARD_SIZE, Board, Mark

logger = logging.getLogger(__name__)

# (score, depth) relative to the maximizing player
Result = Tuple[int, int]

WIN, LOSS, DRAW = 1, -1, 0


@dataclass
class MinimaxAI:
    """Perfect-play opponent using plain recursive backtracking.

    The search walks every continuation of the position, placing and
    retracting marks on the caller's board rather than cloning it. Among moves
    of equal score the one decided at the shallowest depth wins, so the engine
    finishes a won game as quickly as it can.

    Public surface:
      - MinimaxAI(rng=random.Random(seed))
      - choose(board, player, opponent) -> cell index
    """

    rng: random.Random = field(default_factory=random.Random, repr=False)
    nodes_evaluated: int = field(default=0, init=False)

    # ---- public API ----

    def choose(self, board: Board, player: Mark, opponent: Mark) -> int:
        if board.is_full():
            raise ValueError("No empty cells left to play")
        if board.find_line() is not None:
            raise ValueError("The game on this board is already won")

        # Every opening is equivalent under perfect play
        if board.empty_count() == BOARD_SIZE:
            index = self.rng.randrange(BOARD_SIZE)
            logger.debug("%s opens at cell %d", player, index)
            return index

        self.nodes_evaluated = 0
        best_result: Result = (LOSS - 1, 0)
        best_index = -1

        for index in range(BOARD_SIZE):
            if not board.place(index, player):
                continue
            try:
                result = self._search(board, index, 1, False, player, opponent)
            finally:
                board.retract(index)
            if self._improves_max(result, best_result):
                best_result, best_index = result, index

        logger.debug(
            "%s plays %d on %s (score=%d, depth=%d, nodes=%d)",
            player,
            best_index,
            board,
            best_result[0],
            best_result[1],
            self.nodes_evaluated,
        )
        return best_index

    # ---- core search ----

    def _search(
        self,
        board: Board,
        last_index: int,
        depth: int,
        maximizing: bool,
        player: Mark,
        opponent: Mark,
    ) -> Result:
        self.nodes_evaluated += 1

        # Terminal: whoever moved last completed a line
        if board.check_win(last_index) is not None:
            return (LOSS if maximizing else WIN, depth)
        if board.is_full():
            return (DRAW, depth)

        mover = player if maximizing else opponent
        best: Result = (LOSS - 1, 0) if maximizing else (WIN + 1, 0)

        for index in range(BOARD_SIZE):
            if not board.place(index, mover):
                continue
            try:
                result = self._search(
                    board, index, depth + 1, not maximizing, player, opponent
                )
            finally:
                board.retract(index)
            if maximizing:
                if self._improves_max(result, best):
                    best = result
            elif self._improves_min(result, best):
                best = result
        return best

    @staticmethod
    def _improves_max(candidate: Result, best: Result) -> bool:
        return candidate[0] > best[0] or (
            candidate[0] == best[0] and candidate[1] < best[1]
        )

    @staticmethod
    def _improves_min(candidate: Result, best: Result) -> bool:
        return candidate[0] < best[0] or (
            candidate[0] == best[0] and candidate[1] < best[1]
        )
