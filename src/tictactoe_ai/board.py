"""
Board representation, rules, winner/draw checks, serialization, validity.
Teaching notes:
- A Board is an immutable value: 9 cells (row-major), the mark to move, and the last move.
- Every transition returns a new Board; the old one is never touched.
- Board strings use 9 digits: 0=empty, 1=X, 2=O. X always starts.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple


class InvalidMove(ValueError):
    """Raised when a move targets an occupied or out-of-range cell."""


class InvalidBoard(ValueError):
    """Raised when a board cannot be built from the given cells or string."""


def _as_index(value) -> int:
    """Plain int for any integer-like index (numpy ints included); TypeError otherwise."""
    if isinstance(value, (bool, str)):
        raise TypeError(f"not a cell index: {value!r}")
    return operator.index(value)


class Mark(IntEnum):
    EMPTY = 0
    X = 1
    O = 2

    @property
    def opponent(self) -> "Mark":
        if self is Mark.EMPTY:
            raise ValueError("EMPTY has no opponent")
        return Mark.O if self is Mark.X else Mark.X

    @property
    def symbol(self) -> str:
        return {Mark.EMPTY: ".", Mark.X: "X", Mark.O: "O"}[self]


WIN_PATTERNS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

_CHAR_TO_MARK = {
    "0": Mark.EMPTY, ".": Mark.EMPTY, "-": Mark.EMPTY, "_": Mark.EMPTY,
    "1": Mark.X, "x": Mark.X,
    "2": Mark.O, "o": Mark.O,
}


def _coerce_cells(cells: Iterable[object]) -> Tuple[Mark, ...]:
    out: List[Mark] = []
    for c in cells:
        try:
            out.append(Mark(c))
        except ValueError as exc:
            raise InvalidBoard(f"Invalid cell value: {c!r}") from exc
    if len(out) != 9:
        raise InvalidBoard(f"A board has 9 cells, got {len(out)}")
    return tuple(out)


@dataclass(frozen=True)
class Board:
    cells: Tuple[Mark, ...] = field(default=(Mark.EMPTY,) * 9)
    turn: Mark = Mark.X
    last_move: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", _coerce_cells(self.cells))
        try:
            turn = Mark(self.turn)
        except ValueError as exc:
            raise InvalidBoard(f"Invalid turn: {self.turn!r}") from exc
        if turn is Mark.EMPTY:
            raise InvalidBoard("Turn must be X or O")
        object.__setattr__(self, "turn", turn)
        if self.last_move is not None:
            try:
                last = _as_index(self.last_move)
            except TypeError as exc:
                raise InvalidBoard(f"last_move must be an int index, got {self.last_move!r}") from exc
            if not 0 <= last < 9:
                raise InvalidBoard(f"last_move out of range: {last!r}")
            if self.cells[last] is Mark.EMPTY:
                raise InvalidBoard(f"last_move {last} points at an empty cell")
            object.__setattr__(self, "last_move", last)

    # ---- construction / serialization ----

    @classmethod
    def from_string(cls, raw: str, turn: Optional[Mark] = None) -> "Board":
        """Parse a 9-character board string such as ``"100020000"`` or ``"X...O...."``.

        When ``turn`` is omitted it is derived from piece counts: X moves when
        counts are equal, O otherwise.
        """
        s = raw.strip().lower()
        if len(s) != 9 or any(c not in _CHAR_TO_MARK for c in s):
            raise InvalidBoard("Invalid board string. Must be 9 chars of 0/1/2 (or ./x/o).")
        cells = tuple(_CHAR_TO_MARK[c] for c in s)
        if turn is None:
            turn = Mark.X if cells.count(Mark.X) == cells.count(Mark.O) else Mark.O
        return cls(cells=cells, turn=turn)

    def to_string(self) -> str:
        return "".join(str(int(c)) for c in self.cells)

    def pretty(self) -> str:
        rows = [" ".join(c.symbol for c in self.cells[r * 3:r * 3 + 3]) for r in range(3)]
        return "\n".join(rows)

    # ---- queries ----

    @property
    def opponent(self) -> Mark:
        return self.turn.opponent

    def legal_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c is Mark.EMPTY]

    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        for line in WIN_PATTERNS:
            a, b, c = line
            v = self.cells[a]
            if v is not Mark.EMPTY and v == self.cells[b] and v == self.cells[c]:
                return line
        return None

    def winner(self) -> Optional[Mark]:
        line = self.winning_line()
        return None if line is None else self.cells[line[0]]

    def is_win(self) -> bool:
        return self.winning_line() is not None

    def is_draw(self) -> bool:
        return not self.is_win() and Mark.EMPTY not in self.cells

    def is_terminal(self) -> bool:
        return self.is_win() or Mark.EMPTY not in self.cells

    def piece_counts(self) -> Tuple[int, int]:
        return self.cells.count(Mark.X), self.cells.count(Mark.O)

    def is_reachable(self) -> bool:
        """True if the position can arise from the empty board with X moving first."""
        x_count, o_count = self.piece_counts()
        if not (x_count == o_count or x_count == o_count + 1):
            return False
        expected_turn = Mark.X if x_count == o_count else Mark.O
        if self.turn is not expected_turn:
            return False

        def count_wins(p: Mark) -> int:
            return sum(1 for pat in WIN_PATTERNS if all(self.cells[i] == p for i in pat))

        x_wins, o_wins = count_wins(Mark.X), count_wins(Mark.O)
        if x_wins and o_wins:
            return False
        if x_wins and x_count != o_count + 1:
            return False
        if o_wins and x_count != o_count:
            return False
        return True

    # ---- transitions ----

    def move(self, location: int) -> "Board":
        try:
            location = _as_index(location)
        except TypeError as exc:
            raise InvalidMove(f"Move must be an int index, got {location!r}") from exc
        if not 0 <= location < 9:
            raise InvalidMove(f"Move {location} is out of range [0, 9)")
        if self.cells[location] is not Mark.EMPTY:
            raise InvalidMove(f"Cell {location} is already occupied by {self.cells[location].symbol}")
        cells = list(self.cells)
        cells[location] = self.turn
        return Board(cells=tuple(cells), turn=self.opponent, last_move=location)

    def place(self, location: int, mark: Mark) -> Tuple[Mark, ...]:
        """Cells after ``mark`` occupies ``location``, without changing whose turn it is.

        Used for one-ply "what if the other side played here" checks.
        """
        if self.cells[location] is not Mark.EMPTY:
            raise InvalidMove(f"Cell {location} is already occupied")
        cells = list(self.cells)
        cells[location] = mark
        return tuple(cells)


def line_winner(cells: Tuple[Mark, ...]) -> Optional[Mark]:
    for a, b, c in WIN_PATTERNS:
        v = cells[a]
        if v is not Mark.EMPTY and v == cells[b] and v == cells[c]:
            return v
    return None
