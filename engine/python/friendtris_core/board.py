"""Playfield board with collision detection and line clearing."""

from typing import List, Sequence

from friendtris_core.piece import Piece
from friendtris_core import rules

# Value written by the sabotage cursor; locked pieces use kind + 1 (1-7)
SABOTAGE_CELL = 8


class Board:
    """rows x cols playfield, row 0 at the top."""

    def __init__(self, rows: int = 20, cols: int = 10):
        """Initialize an empty board.

        Args:
            rows: Board height
            cols: Board width
        """
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Board must be non-empty, got {rows}x{cols}")
        self._rows = rows
        self._cols = cols
        # cells[y * cols + x] represents the cell at (x, y)
        # 0 = empty, >0 = filled
        self.cells: List[int] = [0] * (rows * cols)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    def get(self, x: int, y: int) -> int:
        """Get cell value at (x, y).

        Args:
            x: Column
            y: Row (0 at top)

        Returns:
            Cell value (0 = empty, >0 = filled)
        """
        if not self.in_bounds(x, y):
            return 1  # Out of bounds treated as solid
        return self.cells[y * self._cols + x]

    def set(self, x: int, y: int, value: int) -> None:
        """Set cell value at (x, y). Out-of-bounds writes are ignored."""
        if self.in_bounds(x, y):
            self.cells[y * self._cols + x] = value

    def occupied(self, row: int, col: int) -> bool:
        return self.get(col, row) != 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._cols and 0 <= y < self._rows

    def fits(self, piece: Piece) -> bool:
        """Check if a piece can sit where it is.

        Cells above the top row are allowed, so freshly spawned or rotated
        pieces may poke out of the visible board.
        """
        return rules.fits(self, piece.kind, piece.rotation, piece.x, piece.y)

    def lock_piece(self, piece: Piece) -> None:
        """Lock a piece onto the board.

        Cells above the top row are dropped.
        """
        value = int(piece.kind) + 1
        for x, y in piece.get_cells():
            self.set(x, y, value)

    def toggle(self, x: int, y: int, value: int = SABOTAGE_CELL) -> None:
        """Flip a cell between empty and value."""
        if self.in_bounds(x, y):
            self.set(x, y, 0 if self.get(x, y) else value)

    def clear_lines(self) -> int:
        """Clear all complete lines and return count.

        Returns:
            Number of lines cleared
        """
        lines_cleared = 0
        y = self._rows - 1  # Start from bottom

        while y >= 0:
            if self.is_line_full(y):
                self.remove_line(y)
                lines_cleared += 1
                # Don't decrement y; check the same row again
            else:
                y -= 1

        return lines_cleared

    def is_line_full(self, y: int) -> bool:
        return all(self.get(x, y) != 0 for x in range(self._cols))

    def remove_line(self, line_y: int) -> None:
        """Remove a line and shift everything above down.

        Args:
            line_y: Row to remove
        """
        cols = self._cols
        for y in range(line_y, 0, -1):
            self.cells[y * cols:(y + 1) * cols] = self.cells[(y - 1) * cols:y * cols]

        # Clear the top line
        self.cells[0:cols] = [0] * cols

    def copy(self) -> "Board":
        """Create a deep copy of the board."""
        new_board = Board(self._rows, self._cols)
        new_board.cells = self.cells.copy()
        return new_board

    def to_list(self) -> List[int]:
        """Export board as flat list (for serialization)."""
        return self.cells.copy()

    def to_rows(self) -> List[List[int]]:
        cols = self._cols
        return [self.cells[y * cols:(y + 1) * cols] for y in range(self._rows)]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """Create board from a list of rows (top row first).

        Raises:
            ValueError: If rows are empty or ragged
        """
        if not rows or not rows[0]:
            raise ValueError("Board rows must be non-empty")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All board rows must have the same length")
        board = cls(len(rows), width)
        board.cells = [int(cell) for row in rows for cell in row]
        return board

    def __repr__(self) -> str:
        return f"Board({self._rows}x{self._cols})"
