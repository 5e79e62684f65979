"""
Difficulty tiers for the AI opponent.

EASY plays a uniformly random legal move, MEDIUM looks one ply ahead for wins
and blocks, HARD runs the full minimax search.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional, Union

import numpy as np

from .board import Board
from .search import find_best_move
from .tactics import blocking_moves, immediate_winning_moves

RngLike = Union[np.random.Generator, int, None]


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union[str, "Difficulty"]) -> "Difficulty":
        if isinstance(value, Difficulty):
            return value
        key = str(value).strip().lower()
        for d in cls:
            if d.value == key:
                return d
        names = ", ".join(d.value for d in cls)
        raise ValueError(f"Unknown difficulty {value!r}. Choose one of {names}.")


def make_rng(rng: RngLike = None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def easy_move(board: Board, rng: RngLike = None) -> Optional[int]:
    if board.is_terminal():
        return None
    moves = board.legal_moves()
    return int(make_rng(rng).choice(moves))


def medium_move(board: Board, rng: RngLike = None) -> Optional[int]:
    if board.is_terminal():
        return None
    wins = immediate_winning_moves(board, board.turn)
    if wins:
        return wins[0]
    blocks = blocking_moves(board)
    if blocks:
        return blocks[0]
    return easy_move(board, rng)


@lru_cache(maxsize=None)
def _solved_move(board: Board) -> Optional[int]:
    return find_best_move(board)


def hard_move(board: Board, rng: RngLike = None) -> Optional[int]:
    move = _solved_move(board)
    if move is None:
        return easy_move(board, rng)
    return move


_POLICIES = {
    Difficulty.EASY: easy_move,
    Difficulty.MEDIUM: medium_move,
    Difficulty.HARD: hard_move,
}


def best_move(board: Board, difficulty: Union[str, Difficulty], rng: RngLike = None) -> Optional[int]:
    """Move for the side to move at the given difficulty; None when the game is over."""
    return _POLICIES[Difficulty.parse(difficulty)](board, rng)
