"""Tetromino shape table and piece values.

Each piece kind has 4 rotation states (0=spawn, 1=R, 2=flipped, 3=L).
Shapes are authored as ASCII art and parsed once at import time:

    #  filled cell
    O  filled cell that marks the anchor
    .  empty cell

The anchor lines a shape up against authored scene fixtures
(see friendtris_core.scene) and is published by the /shapes endpoint.
Rotation and collision read the occupied cells and nothing else.
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple

# Shape grid: rows of booleans, row 0 at the top
Grid = Tuple[Tuple[bool, ...], ...]

# Type alias for piece coordinates
Coords = Tuple[Tuple[int, int], ...]


class PieceKind(IntEnum):
    """The 7 tetromino kinds."""
    I = 0
    O = 1
    T = 2
    S = 3
    Z = 4
    J = 5
    L = 6


# Piece shapes in 4 rotation states (0=spawn, 1=R, 2=2, 3=L)
SHAPE_ART: Dict[PieceKind, Tuple[str, str, str, str]] = {
    PieceKind.I: (
        """
        ....
        #O##
        ....
        ....
        """,
        """
        ..#.
        ..O.
        ..#.
        ..#.
        """,
        """
        ....
        ....
        ##O#
        ....
        """,
        """
        .#..
        .#..
        .O..
        .#..
        """,
    ),
    # O never changes shape; its anchor sits bottom-left of the square
    PieceKind.O: (
        """
        .##.
        .O#.
        ....
        """,
    ) * 4,
    PieceKind.T: (
        """
        .#.
        #O#
        ...
        """,
        """
        .#.
        .O#
        .#.
        """,
        """
        ...
        #O#
        .#.
        """,
        """
        .#.
        #O.
        .#.
        """,
    ),
    PieceKind.S: (
        """
        .##
        #O.
        ...
        """,
        """
        .#.
        .O#
        ..#
        """,
        """
        ...
        .O#
        ##.
        """,
        """
        #..
        #O.
        .#.
        """,
    ),
    PieceKind.Z: (
        """
        ##.
        .O#
        ...
        """,
        """
        ..#
        .O#
        .#.
        """,
        """
        ...
        #O.
        .##
        """,
        """
        .#.
        #O.
        #..
        """,
    ),
    PieceKind.J: (
        """
        #..
        #O#
        ...
        """,
        """
        .##
        .O.
        .#.
        """,
        """
        ...
        #O#
        ..#
        """,
        """
        .#.
        .O.
        ##.
        """,
    ),
    PieceKind.L: (
        """
        ..#
        #O#
        ...
        """,
        """
        .#.
        .O.
        .##
        """,
        """
        ...
        #O#
        #..
        """,
        """
        ##.
        .O.
        .#.
        """,
    ),
}


def art_rows(art: str) -> List[str]:
    """Split an ASCII block into stripped, non-empty rows."""
    return [line.strip() for line in art.strip().splitlines() if line.strip()]


def _parse_art(art: str) -> Tuple[Grid, Tuple[int, int]]:
    rows = art_rows(art)
    grid = tuple(tuple(ch in "#O" for ch in row) for row in rows)
    anchor = next(
        (r, c) for r, row in enumerate(rows) for c, ch in enumerate(row) if ch == "O"
    )
    return grid, anchor


_PARSED = {
    kind: tuple(_parse_art(art) for art in arts) for kind, arts in SHAPE_ART.items()
}

# (kind, rotation) -> occupancy grid
SHAPES: Dict[PieceKind, Tuple[Grid, ...]] = {
    kind: tuple(grid for grid, _ in states) for kind, states in _PARSED.items()
}

# (kind, rotation) -> (row, col) of the anchor inside the grid
ANCHORS: Dict[PieceKind, Tuple[Tuple[int, int], ...]] = {
    kind: tuple(anchor for _, anchor in states) for kind, states in _PARSED.items()
}

# (kind, rotation) -> (dx, dy) offsets of occupied cells from the grid's top-left
SHAPE_CELLS: Dict[PieceKind, Tuple[Coords, ...]] = {
    kind: tuple(
        tuple((c, r) for r, row in enumerate(grid) for c, filled in enumerate(row) if filled)
        for grid in grids
    )
    for kind, grids in SHAPES.items()
}


def shape_of(kind: int, rotation: int) -> Grid:
    """Occupancy grid for a piece kind in a rotation state."""
    return SHAPES[kind][rotation]


def cells_of(kind: int, rotation: int) -> Coords:
    """Occupied (dx, dy) offsets for a piece kind in a rotation state."""
    return SHAPE_CELLS[kind][rotation]


def anchor_of(kind: int, rotation: int) -> Tuple[int, int]:
    """(row, col) of the anchor cell. Used by scene fixtures and the shape API."""
    return ANCHORS[kind][rotation]


@dataclass(frozen=True)
class Piece:
    """A tetromino at a board position.

    x, y locate the top-left corner of the shape grid (y=0 is the top row).
    Pieces are never mutated; moving or rotating produces a new value.
    """
    kind: PieceKind
    rotation: int = 0
    x: int = 0
    y: int = 0

    def __post_init__(self):
        # Raises ValueError for anything outside the 7 kinds
        object.__setattr__(self, "kind", PieceKind(self.kind))
        object.__setattr__(self, "rotation", self.rotation % 4)

    @property
    def name(self) -> str:
        return self.kind.name

    def get_cells(self) -> List[Tuple[int, int]]:
        """Get absolute board coordinates of all 4 cells.

        Returns:
            List of (x, y) tuples in board coordinates
        """
        return [(self.x + dx, self.y + dy) for dx, dy in cells_of(self.kind, self.rotation)]

    def move(self, dx: int, dy: int) -> "Piece":
        """Return a new piece moved by the given delta."""
        return replace(self, x=self.x + dx, y=self.y + dy)


def get_spawn_position(kind: int, cols: int = 10) -> Tuple[int, int]:
    """Get the spawn position for a piece kind.

    The shape grid is centred horizontally and its top row sits on row 0.

    Args:
        kind: Piece kind
        cols: Board width

    Returns:
        (x, y) spawn coordinates
    """
    width = len(shape_of(kind, 0)[0])
    return (cols // 2 - width // 2, 0)
