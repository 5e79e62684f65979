"""
Play a full game between two move policies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .board import Board, InvalidMove, Mark
from .policies import Difficulty, RngLike, best_move, make_rng

Policy = Callable[[Board], Optional[int]]


@dataclass
class GameRecord:
    start: Board
    final: Board
    moves: List[int] = field(default_factory=list)

    @property
    def winner(self) -> Optional[Mark]:
        return self.final.winner()

    @property
    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        return self.final.winning_line()

    @property
    def is_draw(self) -> bool:
        return self.final.is_draw()

    @property
    def plies(self) -> int:
        return len(self.moves)

    def to_row(self) -> Dict[str, Any]:
        w = self.winner
        return {
            "start": self.start.to_string(),
            "final": self.final.to_string(),
            "winner": "draw" if w is None else w.symbol,
            "plies": self.plies,
            "moves": " ".join(map(str, self.moves)),
        }


def difficulty_policy(difficulty: Difficulty, rng: RngLike = None) -> Policy:
    gen = make_rng(rng)
    d = Difficulty.parse(difficulty)

    def _policy(board: Board) -> Optional[int]:
        return best_move(board, d, gen)

    return _policy


def play_game(x_policy: Policy, o_policy: Policy, start: Optional[Board] = None) -> GameRecord:
    board = start if start is not None else Board()
    record = GameRecord(start=board, final=board)
    while not board.is_terminal():
        policy = x_policy if board.turn is Mark.X else o_policy
        mv = policy(board)
        if mv is None:
            raise InvalidMove(f"{board.turn.symbol} policy returned no move on a live board")
        board = board.move(mv)
        record.moves.append(mv)
    record.final = board
    return record
