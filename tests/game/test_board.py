"""Unit tests for ttt_online/game/board.py"""

import pytest

from ttt_online.core.exceptions import GameStateError
from ttt_online.core.shared_types import Mark
from ttt_online.game.board import Board, winning_lines


@pytest.mark.parametrize("size", [1, 2, 3, 4, 7])
def test_number_of_winning_lines(size: int) -> None:
    """Every row, every column and both diagonals."""
    lines = winning_lines(size)
    assert len(lines) == 2 * size + 2
    assert all(len(line) == size for line in lines)


def test_winning_lines_order_for_size_3() -> None:
    """Rows, then columns, then the two diagonals."""
    assert winning_lines(3) == (
        (0, 1, 2),
        (3, 4, 5),
        (6, 7, 8),
        (0, 3, 6),
        (1, 4, 7),
        (2, 5, 8),
        (0, 4, 8),
        (2, 4, 6),
    )


@pytest.mark.parametrize("size", [1, 3, 5])
def test_empty_board(size: int) -> None:
    board = Board.empty(size)
    assert len(board.cells) == size * size
    assert all(cell is None for cell in board.cells)
    assert not board.is_full()


@pytest.mark.parametrize("size", [0, -3])
def test_empty_board_rejects_bad_size(size: int) -> None:
    with pytest.raises(GameStateError):
        _ = Board.empty(size)


def test_from_cells_parses_marks() -> None:
    board = Board.from_cells(2, ["X", None, None, "O"])
    assert board.get(0, 0) == Mark.X
    assert board.get(1, 1) == Mark.O
    assert board.to_cells() == ["X", None, None, "O"]


def test_from_cells_size_mismatch() -> None:
    """A stored board must hold exactly size * size cells."""
    with pytest.raises(GameStateError):
        _ = Board.from_cells(3, [None] * 4)


def test_from_cells_unknown_mark() -> None:
    with pytest.raises(GameStateError):
        _ = Board.from_cells(1, ["Z"])


@pytest.mark.parametrize(
    "row, col, expected",
    [(0, 0, True), (2, 2, True), (3, 0, False), (0, 3, False), (-1, 0, False)],
)
def test_in_bounds(row: int, col: int, expected: bool) -> None:
    assert Board.empty(3).in_bounds(row, col) is expected


def test_place_and_index() -> None:
    """Row-major indexing."""
    board = Board.empty(3)
    board.place(Mark.O, 1, 2)
    assert board.index(1, 2) == 5
    assert board.cells[5] == Mark.O
    assert not board.is_empty_at(1, 2)


def test_line_owner() -> None:
    board = Board.from_cells(3, ["X", "X", "X", "O", None, "O", None, None, None])
    assert board.line_owner((0, 1, 2)) == Mark.X
    assert board.line_owner((3, 4, 5)) is None
    assert board.line_owner((6, 7, 8)) is None


def test_is_full() -> None:
    board = Board.from_cells(2, ["X", "O", "O", "X"])
    assert board.is_full()
