from tictactoe_ai.board import Board, Mark
from tictactoe_ai.tactics import (
    blocking_moves,
    fork_moves,
    gives_opponent_immediate_win,
    immediate_winning_moves,
)


def test_immediate_wins_for_both_sides():
    b = Board.from_string("110220000")  # X to move
    assert immediate_winning_moves(b, Mark.X) == [2]
    assert immediate_winning_moves(b, Mark.O) == [5]
    assert blocking_moves(b) == [5]


def test_no_tactics_on_empty_board():
    b = Board()
    assert immediate_winning_moves(b, Mark.X) == []
    assert blocking_moves(b) == []
    assert fork_moves(b, Mark.X) == []


def test_fork_moves():
    # X on two corners, O in the center
    b = Board.from_string("100020001")
    assert fork_moves(b, Mark.X) == [2, 6]


def test_gives_opponent_immediate_win():
    b = Board.from_string("110020000")  # O to move, X threatens 2
    assert b.turn is Mark.O
    assert gives_opponent_immediate_win(b, 3) is True
    assert gives_opponent_immediate_win(b, 2) is False
    # occupied cells are never "giving" anything
    assert gives_opponent_immediate_win(b, 0) is False
