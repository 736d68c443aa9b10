"""Tests for the ClassicXO minimax AI."""

import random
from functools import lru_cache
from typing import Optional, Tuple

import pytest

from classicxo.ai import MinimaxAI
from classicxo.board import CROSS, NOUGHT, WINNING_LINES, Board, other_mark


def make_board(crosses=(), noughts=()) -> Board:
    board = Board()
    for index in crosses:
        board.mark(index, CROSS)
    for index in noughts:
        board.mark(index, NOUGHT)
    return board


@lru_cache(maxsize=None)
def solve(cells: Tuple[Optional[str], ...], to_move: str) -> int:
    """Game value for ``to_move``: 1 win, 0 draw, -1 loss."""
    for a, b, c in WINNING_LINES:
        if cells[a] is not None and cells[a] == cells[b] == cells[c]:
            return 1 if cells[a] == to_move else -1
    empties = [i for i, c in enumerate(cells) if c is None]
    if not empties:
        return 0
    best = -1
    for index in empties:
        child = list(cells)
        child[index] = to_move
        best = max(best, -solve(tuple(child), other_mark(to_move)))
    return best


def test_ai_takes_immediate_win():
    board = make_board(crosses=(0, 1), noughts=(3, 4))
    assert MinimaxAI().choose(board, CROSS, NOUGHT) == 2


def test_ai_blocks_immediate_threat():
    board = make_board(crosses=(0, 1), noughts=(4,))
    assert MinimaxAI().choose(board, NOUGHT, CROSS) == 2


def test_ai_prefers_winning_over_blocking():
    board = make_board(crosses=(0, 1, 8), noughts=(3, 4))
    assert MinimaxAI().choose(board, NOUGHT, CROSS) == 5


def test_ai_answers_corner_opening_with_centre():
    board = make_board(crosses=(0,))
    assert MinimaxAI().choose(board, NOUGHT, CROSS) == 4


def test_search_restores_board():
    board = make_board(crosses=(0, 8), noughts=(4,))
    before = list(board.cells)
    ai = MinimaxAI()
    ai.choose(board, NOUGHT, CROSS)
    assert board.cells == before
    assert board.empty_count() == 6
    assert ai.nodes_evaluated > 0


def test_opening_uses_rng():
    expected = random.Random(7).randrange(9)
    ai = MinimaxAI(rng=random.Random(7))
    assert ai.choose(Board(), CROSS, NOUGHT) == expected


def test_rejects_full_board():
    board = make_board(crosses=(0, 2, 3, 7, 8), noughts=(1, 4, 5, 6))
    with pytest.raises(ValueError):
        MinimaxAI().choose(board, NOUGHT, CROSS)


def test_rejects_won_board():
    board = make_board(crosses=(0, 1, 2), noughts=(3, 4))
    with pytest.raises(ValueError):
        MinimaxAI().choose(board, NOUGHT, CROSS)


@pytest.mark.parametrize("opening", range(9))
def test_reply_to_any_opening_never_loses(opening):
    board = make_board(crosses=(opening,))
    move = MinimaxAI().choose(board, NOUGHT, CROSS)
    assert board.cells[move] is None

    board.mark(move, NOUGHT)
    assert solve(tuple(board.cells), CROSS) <= 0


@pytest.mark.parametrize("reply", [1, 2, 4, 5, 8])
def test_ai_keeps_best_available_value(reply):
    board = make_board(crosses=(0,), noughts=(reply,))
    value = solve(tuple(board.cells), CROSS)

    move = MinimaxAI().choose(board, CROSS, NOUGHT)
    assert board.cells[move] is None
    board.mark(move, CROSS)
    assert -solve(tuple(board.cells), NOUGHT) == value


@pytest.mark.parametrize("opening", [0, 1, 4])
def test_self_play_is_a_draw(opening):
    board = make_board(crosses=(opening,))
    ai = MinimaxAI()
    mover = NOUGHT
    while not board.is_full():
        move = ai.choose(board, mover, other_mark(mover))
        board.mark(move, mover)
        assert board.check_win(move) is None
        mover = other_mark(mover)
    assert board.winner() is None
