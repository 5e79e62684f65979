"""
Tactics and simple motifs: immediate wins/blocks, forks, safety checks.
Teaching notes:
- One-ply motifs are all the Medium opponent looks at; Hard relies on full search instead.
"""
from typing import List

from .board import Board, Mark, line_winner


def immediate_winning_moves(board: Board, mark: Mark) -> List[int]:
    wins: List[int] = []
    for i in board.legal_moves():
        if line_winner(board.place(i, mark)) == mark:
            wins.append(i)
    return wins


def blocking_moves(board: Board) -> List[int]:
    """Cells the side to move must take to stop an immediate win by the opponent."""
    return immediate_winning_moves(board, board.opponent)


def fork_moves(board: Board, mark: Mark) -> List[int]:
    forks: List[int] = []
    for i in board.legal_moves():
        after = Board(cells=board.place(i, mark), turn=mark)
        if after.is_win():
            continue
        if len(immediate_winning_moves(after, mark)) >= 2:
            forks.append(i)
    return forks


def gives_opponent_immediate_win(board: Board, move: int) -> bool:
    if board.cells[move] is not Mark.EMPTY:
        return False
    child = board.move(move)
    if child.is_win():
        return False
    return len(immediate_winning_moves(child, child.turn)) > 0
