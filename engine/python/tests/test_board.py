"""Tests for board functionality."""

import pytest

from friendtris_core.board import Board, SABOTAGE_CELL
from friendtris_core.piece import Piece, PieceKind


def test_board_initialization():
    """Test board starts empty."""
    board = Board()
    assert (board.rows, board.cols) == (20, 10)
    assert all(cell == 0 for cell in board.cells), "Board should start empty"


def test_board_rejects_empty_size():
    with pytest.raises(ValueError):
        Board(0, 10)


def test_out_of_bounds_reads_as_solid():
    board = Board()
    assert board.get(-1, 0) != 0
    assert board.get(0, 20) != 0
    assert board.occupied(0, 10)


def test_collision_detection():
    """Test collision with boundaries and blocks."""
    board = Board()

    assert board.fits(Piece(PieceKind.T, 0, x=4, y=18)), "Valid position should fit"
    assert not board.fits(Piece(PieceKind.T, 0, x=-1, y=10)), "Left wall"
    assert not board.fits(Piece(PieceKind.T, 0, x=8, y=10)), "Right wall"
    assert not board.fits(Piece(PieceKind.T, 0, x=4, y=19)), "Floor"

    board.set(5, 11, 1)
    assert not board.fits(Piece(PieceKind.T, 0, x=4, y=10)), "Locked cell"


def test_cells_above_top_are_allowed():
    board = Board()
    assert board.fits(Piece(PieceKind.T, 0, x=4, y=-1))
    assert board.fits(Piece(PieceKind.I, 1, x=0, y=-3))


def test_lock_piece():
    """Test locking a piece onto the board."""
    board = Board()
    piece = Piece(PieceKind.I, 0, x=3, y=0)

    board.lock_piece(piece)

    for x, y in piece.get_cells():
        assert board.get(x, y) == int(PieceKind.I) + 1


def test_lock_piece_drops_cells_above_top():
    board = Board()
    board.lock_piece(Piece(PieceKind.T, 0, x=4, y=-1))

    assert sum(1 for cell in board.cells if cell) == 3
    assert [board.get(x, 0) for x in (4, 5, 6)] == [int(PieceKind.T) + 1] * 3


def test_line_clearing():
    """Test clearing complete lines."""
    board = Board()

    for x in range(board.cols):
        board.set(x, 19, 1)
    board.set(0, 18, 2)

    lines_cleared = board.clear_lines()
    assert lines_cleared == 1, "Should clear one line"

    # Block above moved down into the cleared row
    assert board.get(0, 19) == 2
    assert all(board.get(x, 19) == 0 for x in range(1, board.cols))
    assert all(board.get(x, 18) == 0 for x in range(board.cols))


def test_multiple_line_clearing():
    """Test clearing non-adjacent lines."""
    board = Board()

    for x in range(board.cols):
        board.set(x, 19, 1)
        board.set(x, 17, 1)
    board.set(3, 18, 5)

    assert board.clear_lines() == 2
    assert board.get(3, 19) == 5
    assert sum(1 for cell in board.cells if cell) == 1


def test_toggle():
    board = Board()
    board.toggle(2, 3)
    assert board.get(2, 3) == SABOTAGE_CELL
    board.toggle(2, 3)
    assert board.get(2, 3) == 0

    board.toggle(-1, 3)  # Out of bounds is ignored
    assert board.to_list() == [0] * 200


def test_copy_is_independent():
    board = Board()
    clone = board.copy()
    clone.set(0, 0, 1)
    assert board.get(0, 0) == 0


def test_from_rows_round_trip():
    rows = [[0, 1, 0], [8, 0, 0]]
    board = Board.from_rows(rows)
    assert (board.rows, board.cols) == (2, 3)
    assert board.occupied(0, 1)
    assert board.occupied(1, 0)
    assert board.to_rows() == rows


def test_from_rows_rejects_ragged_input():
    with pytest.raises(ValueError):
        Board.from_rows([[0, 0], [0]])
    with pytest.raises(ValueError):
        Board.from_rows([])
