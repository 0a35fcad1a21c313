"""Seeded next-piece selector.

Each piece is drawn uniformly at random from the 7 kinds. The same seed
always replays the same sequence.
"""

import random

from friendtris_core.piece import PieceKind


class PieceSelector:
    """Deterministic uniform piece generator."""

    PIECES = list(PieceKind)

    def __init__(self, seed: int):
        """Initialize with a seed for deterministic replay.

        Args:
            seed: Random seed for reproducibility
        """
        self.seed = seed
        self.rng = random.Random(seed)

    def next(self) -> PieceKind:
        """Get the next piece kind."""
        return self.rng.choice(self.PIECES)

    def reset(self, seed: int) -> None:
        """Reset the selector with a new seed.

        Args:
            seed: New random seed
        """
        self.seed = seed
        self.rng = random.Random(seed)
