"""
Minimax search with alpha-beta pruning, from the perspective of the side to move at the root.
Scoring policy:
- A win for the root player scores +(10 - depth), a loss -(10 - depth), a draw 0.
- The root's children sit at depth 0, so an immediate win scores 10.
- Depth adjustment prefers faster wins and slower losses.
Tie-break policy:
- Candidates are tried in ascending index order; only a strictly greater score
  replaces the current best, so ties go to the lowest index.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from .board import Board, Mark

WIN_SCORE = 10


@dataclass
class SearchStats:
    nodes: int = 0


@dataclass(frozen=True)
class SearchResult:
    move: Optional[int]
    score: Optional[int]
    nodes: int


def terminal_score(board: Board, original_player: Mark, depth: int) -> Optional[int]:
    """Score of a finished game, or None if play continues."""
    if board.is_win():
        # turn has already flipped, so the side that completed the line is the opponent
        if board.opponent == original_player:
            return WIN_SCORE - depth
        return -(WIN_SCORE - depth)
    if board.is_draw():
        return 0
    return None


def evaluate(
    board: Board,
    maximizing: bool,
    original_player: Mark,
    depth: int = 0,
    alpha: float = -math.inf,
    beta: float = math.inf,
    prune: bool = True,
    stats: Optional[SearchStats] = None,
) -> int:
    if stats is not None:
        stats.nodes += 1
    score = terminal_score(board, original_player, depth)
    if score is not None:
        return score

    best: Optional[int] = None
    for mv in board.legal_moves():
        result = evaluate(
            board.move(mv), not maximizing, original_player, depth + 1, alpha, beta, prune, stats
        )
        if maximizing:
            if best is None or result > best:
                best = result
            alpha = max(alpha, best)
        else:
            if best is None or result < best:
                best = result
            beta = min(beta, best)
        if prune and beta <= alpha:
            break
    if best is None:
        raise RuntimeError(f"no legal moves on a non-terminal board: {board.to_string()}")
    return best


def find_best_move(board: Board, prune: bool = True, stats: Optional[SearchStats] = None) -> Optional[int]:
    """Best move for ``board.turn``, or None when the game is already over."""
    if board.is_terminal():
        return None
    best_score: Optional[int] = None
    best_move: Optional[int] = None
    for mv in board.legal_moves():
        # Raising alpha to the best score so far keeps scores exact for any
        # candidate that beats it; the rest come back as bounds <= alpha.
        alpha = -math.inf if best_score is None else best_score
        score = evaluate(board.move(mv), False, board.turn, 0, alpha, math.inf, prune, stats)
        if best_score is None or score > best_score:
            best_score = score
            best_move = mv
    return best_move


def score_moves(board: Board, prune: bool = True) -> Dict[int, int]:
    """Exact minimax score of every legal move for the side to move."""
    if board.is_terminal():
        return {}
    return {
        mv: evaluate(board.move(mv), False, board.turn, 0, prune=prune)
        for mv in board.legal_moves()
    }


def search(board: Board, prune: bool = True) -> SearchResult:
    stats = SearchStats()
    move = find_best_move(board, prune=prune, stats=stats)
    score = None
    if move is not None:
        score = evaluate(board.move(move), False, board.turn, 0, prune=prune)
    logging.debug("search board=%s move=%s score=%s nodes=%d prune=%s",
                  board.to_string(), move, score, stats.nodes, prune)
    return SearchResult(move=move, score=score, nodes=stats.nodes)
