"""SRS (Super Rotation System) wall kicks and game rules.

SRS defines how pieces rotate and what wall kick offsets to try
when a rotation would otherwise collide.
Reference: https://tetris.wiki/Super_Rotation_System

Everything in this module is a pure function of its arguments. The
board is only ever read.
"""

from dataclasses import replace
from typing import Optional, Protocol, Tuple

from friendtris_core.piece import Piece, PieceKind, cells_of

Offset = Tuple[int, int]
StateOffsets = Tuple[Offset, Offset, Offset, Offset, Offset]

CLOCKWISE = 1
COUNTER_CLOCKWISE = -1

# SRS offset data: per rotation state, 5 offsets.
# Kick i for a transition A->B is offsets[A][i] - offsets[B][i].
# Values are in SRS convention where +y is UP.

# J, L, S, T, Z pieces share the same offset data
JLSTZ_OFFSETS: Tuple[StateOffsets, ...] = (
    ((0, 0), (0, 0), (0, 0), (0, 0), (0, 0)),        # 0
    ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),       # R
    ((0, 0), (0, 0), (0, 0), (0, 0), (0, 0)),        # 2
    ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),    # L
)

# I piece has its own offset data
I_OFFSETS: Tuple[StateOffsets, ...] = (
    ((0, 0), (-1, 0), (2, 0), (-1, 0), (2, 0)),      # 0
    ((-1, 0), (0, 0), (0, 0), (0, -1), (0, 2)),      # R
    ((-1, -1), (1, -1), (-2, -1), (1, 0), (-2, 0)),  # 2
    ((0, -1), (0, -1), (0, -1), (0, 1), (0, -2)),    # L
)

# O piece never kicks
O_OFFSETS: Tuple[StateOffsets, ...] = (((0, 0),) * 5,) * 4


class BoardView(Protocol):
    """Read-only board surface the rotation engine needs."""

    @property
    def rows(self) -> int: ...

    @property
    def cols(self) -> int: ...

    def occupied(self, row: int, col: int) -> bool: ...


def get_offsets(kind: int) -> Tuple[StateOffsets, ...]:
    """Get the offset table for a piece kind's family."""
    if kind == PieceKind.I:
        return I_OFFSETS
    elif kind == PieceKind.O:
        return O_OFFSETS
    else:
        return JLSTZ_OFFSETS


def get_wall_kicks(kind: int, from_rot: int, to_rot: int) -> Tuple[Offset, ...]:
    """Kick translations to try, in order, for a rotation.

    SRS offset data has +y pointing up; the board has +y pointing down,
    so the y difference is negated here and nowhere else.

    Args:
        kind: Piece kind
        from_rot: Current rotation state
        to_rot: Target rotation state

    Returns:
        5 (dx, dy) translations in board coordinates
    """
    offsets = get_offsets(kind)
    kicks = []
    for (fx, fy), (tx, ty) in zip(offsets[from_rot], offsets[to_rot]):
        dx = fx - tx
        dy = -(fy - ty)
        kicks.append((dx or 0, dy or 0))
    return tuple(kicks)


def rotate_state(current: int, direction: int) -> int:
    """Next rotation state; direction is +1 (clockwise) or -1."""
    return (current + direction + 4) % 4


def fits(board: BoardView, kind: int, rotation: int, x: int, y: int) -> bool:
    """Check whether a shape placed at (x, y) is legal on the board.

    Cells above the top row are allowed; walls and the floor are not.
    """
    rows = board.rows
    cols = board.cols
    for dx, dy in cells_of(kind, rotation):
        col = x + dx
        row = y + dy
        if col < 0 or col >= cols or row >= rows:
            return False
        if row >= 0 and board.occupied(row, col):
            return False
    return True


def try_rotate(board: BoardView, piece: Piece, direction: int) -> Optional[Piece]:
    """Attempt to rotate a piece with wall kicks.

    Kicks are tried in table order; the first one that fits wins. The
    unkicked position is always the first candidate.

    Args:
        board: Current board state
        piece: Piece to rotate
        direction: +1 for clockwise, -1 for counter-clockwise

    Returns:
        Rotated piece if successful, None if rotation impossible
    """
    target = rotate_state(piece.rotation, direction)
    for dx, dy in get_wall_kicks(piece.kind, piece.rotation, target):
        x = piece.x + dx
        y = piece.y + dy
        if fits(board, piece.kind, target, x, y):
            return replace(piece, rotation=target, x=x, y=y)
    return None


# Points per number of lines cleared at once, multiplied by level
LINE_SCORES = (0, 100, 300, 500, 800)
SOFT_DROP_SCORE = 1
HARD_DROP_SCORE = 2
LINES_PER_LEVEL = 10


def calculate_score(lines_cleared: int, level: int = 1) -> int:
    """Score for a single lock.

    Args:
        lines_cleared: Number of lines cleared simultaneously
        level: Current level multiplier

    Returns:
        Score points
    """
    if lines_cleared >= len(LINE_SCORES):
        lines_cleared = len(LINE_SCORES) - 1
    return LINE_SCORES[lines_cleared] * level


def level_for_lines(lines_total: int) -> int:
    return lines_total // LINES_PER_LEVEL + 1


def fall_interval_ms(level: int) -> int:
    """Milliseconds between gravity steps at a level."""
    return max(100, 800 - (level - 1) * 70)
