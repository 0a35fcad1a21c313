"""ASCII scene fixtures: a board plus one piece, drawn as text.

    .  empty cell
    #  locked cell
    X  piece cell
    @  piece cell sitting on the shape's anchor

Example (T piece in spawn state, anchor at row 2, column 1)::

    .....
    .X...
    X@X..
    .....

Rotation never reads anchors; they only line shapes up with fixtures.
"""

from typing import Set, Tuple

from friendtris_core.board import Board, SABOTAGE_CELL
from friendtris_core.piece import Piece, PieceKind, anchor_of, art_rows, cells_of


def parse_scene(ascii: str, kind: int) -> Tuple[Board, Piece]:
    """Parse a scene into a board and the piece drawn on it.

    The rotation state is the first one (0..3) whose shape, placed with its
    anchor on '@', covers exactly the marked piece cells.

    Args:
        ascii: Scene text; surrounding indentation is ignored
        kind: Kind of the drawn piece

    Returns:
        (board without the piece, piece)

    Raises:
        ValueError: If the scene has no '@' or no rotation state matches
    """
    lines = art_rows(ascii)
    kind = PieceKind(kind)

    piece_cells: Set[Tuple[int, int]] = set()
    center = None
    for row, line in enumerate(lines):
        for col, ch in enumerate(line):
            if ch == "@":
                center = (row, col)
                piece_cells.add((row, col))
            elif ch == "X":
                piece_cells.add((row, col))

    if center is None:
        raise ValueError("Scene must have an '@' anchor marker")

    board = Board.from_rows([[SABOTAGE_CELL if ch == "#" else 0 for ch in line] for line in lines])

    for rot in range(4):
        anchor_row, anchor_col = anchor_of(kind, rot)
        px = center[1] - anchor_col
        py = center[0] - anchor_row
        shape_cells = {(py + dy, px + dx) for dx, dy in cells_of(kind, rot)}
        if shape_cells == piece_cells:
            return board, Piece(kind, rot, px, py)

    raise ValueError(f"Could not match {kind.name} piece to any rotation state")


def render_scene(board: Board, piece: Piece) -> str:
    """Render a board and piece back to scene text."""
    grid = [["." if cell == 0 else "#" for cell in row] for row in board.to_rows()]
    anchor_row, anchor_col = anchor_of(piece.kind, piece.rotation)

    for dx, dy in cells_of(piece.kind, piece.rotation):
        x = piece.x + dx
        y = piece.y + dy
        if board.in_bounds(x, y):
            grid[y][x] = "@" if (dy, dx) == (anchor_row, anchor_col) else "X"

    return "\n".join("".join(row) for row in grid)
