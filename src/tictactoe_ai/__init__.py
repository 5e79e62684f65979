"""tictactoe_ai package.

Immutable board, minimax search with alpha-beta pruning, difficulty tiers,
game play-out, an arena for batch evaluation, and a simple CLI.

Convenience imports are exposed for common workflows.
"""

from .board import Board, InvalidBoard, InvalidMove, Mark
from .match import GameRecord, play_game
from .policies import Difficulty, best_move
from .search import evaluate, find_best_move, score_moves

__all__ = [
    "Board",
    "Mark",
    "InvalidMove",
    "InvalidBoard",
    "Difficulty",
    "best_move",
    "evaluate",
    "find_best_move",
    "score_moves",
    "play_game",
    "GameRecord",
]
