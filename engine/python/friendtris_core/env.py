"""Friendtris game environment with a gym-like interface.

Provides reset() and step() for the player, plus sabotage() for the
second player in multiplayer games.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from friendtris_core.board import Board
from friendtris_core.piece import Piece, PieceKind, get_spawn_position
from friendtris_core.rng import PieceSelector
from friendtris_core.rules import (
    CLOCKWISE,
    COUNTER_CLOCKWISE,
    HARD_DROP_SCORE,
    SOFT_DROP_SCORE,
    calculate_score,
    fall_interval_ms,
    level_for_lines,
    try_rotate,
)

logger = logging.getLogger(__name__)

# piece_mode value meaning "let the selector choose"
RANDOM_PIECES = -1


class FrameAction(Enum):
    """Frame-by-frame control actions."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    CW = "CW"        # Clockwise rotation
    CCW = "CCW"      # Counter-clockwise rotation
    SOFT = "SOFT"    # Soft drop (move down)
    HARD = "HARD"    # Hard drop (instant lock)
    NOOP = "NOOP"    # No operation


class SabotageAction(Enum):
    """Second-player controls."""
    TOGGLE_MODE = "TOGGLE_MODE"  # Switch between pieces and draw mode
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    TOGGLE_CELL = "TOGGLE_CELL"  # Draw mode: flip the cell under the cursor


class SabotageMode(str, Enum):
    PIECES = "pieces"  # UP/DOWN pick the next piece kind
    DRAW = "draw"      # arrows move a cursor, TOGGLE_CELL edits the board


@dataclass
class Observation:
    """Complete game state observation."""
    schema_version: str
    tick: int
    board: Board
    current: Optional[Piece]
    ghost_y: Optional[int]
    next_kind: Optional[PieceKind]
    score: int
    lines_total: int
    level: int
    game_over: bool
    seed: int
    multiplayer: bool
    sabotage_mode: SabotageMode
    piece_mode: int
    cursor: Tuple[int, int]

    def to_dict(self) -> Dict[str, Any]:
        """Convert observation to dictionary for serialization."""
        current = None
        if self.current is not None:
            current = {
                "kind": int(self.current.kind),
                "type": self.current.name,
                "x": self.current.x,
                "y": self.current.y,
                "rot": self.current.rotation,
                "cells": [list(cell) for cell in self.current.get_cells()],
            }
        next_piece = None
        if self.next_kind is not None:
            next_piece = {"kind": int(self.next_kind), "type": self.next_kind.name}

        return {
            "schema_version": self.schema_version,
            "tick": self.tick,
            "board": {
                "w": self.board.cols,
                "h": self.board.rows,
                "cells": self.board.to_list(),
            },
            "current": current,
            "ghost_y": self.ghost_y,
            "next": next_piece,
            "episode": {
                "score": self.score,
                "lines_total": self.lines_total,
                "level": self.level,
                "game_over": self.game_over,
                "seed": self.seed,
            },
            "sabotage": {
                "enabled": self.multiplayer,
                "mode": self.sabotage_mode.value,
                "piece_mode": self.piece_mode,
                "cursor": list(self.cursor),
            },
            "config": {
                "fall_interval_ms": fall_interval_ms(self.level),
            },
        }


@dataclass
class StepResult:
    """Result of a step() call."""
    obs: Observation
    reward: float  # score gained during the step
    done: bool
    info: Dict[str, Any]


class FriendtrisEnv:
    """Friendtris game environment."""

    SCHEMA_VERSION = "f1.0.0"
    TICKS_PER_SECOND = 60
    TICK_MS = 1000 / TICKS_PER_SECOND

    def __init__(self, rows: int = 20, cols: int = 10, multiplayer: bool = False):
        """Initialize the environment.

        Args:
            rows: Board height
            cols: Board width
            multiplayer: Enable second-player sabotage controls
        """
        self.rows = rows
        self.cols = cols
        self.multiplayer = multiplayer

        self.board = Board(rows, cols)
        self.selector: Optional[PieceSelector] = None

        self.current_piece: Optional[Piece] = None
        self.next_kind: Optional[PieceKind] = None

        self.tick = 0
        self.score = 0
        self.lines_total = 0
        self.level = 1
        self.done = False
        self.seed = 0
        self.gravity_ms = 0.0

        self._reset_sabotage()

    def _reset_sabotage(self) -> None:
        self.piece_mode = RANDOM_PIECES
        self.sabotage_mode = SabotageMode.PIECES
        self.cursor = (self.cols // 2, self.rows // 2)

    def reset(self, seed: int, multiplayer: Optional[bool] = None) -> Observation:
        """Reset the environment with a new seed.

        Args:
            seed: Random seed for reproducibility
            multiplayer: Override the multiplayer flag for this game

        Returns:
            Initial observation
        """
        if multiplayer is not None:
            self.multiplayer = multiplayer
        self.seed = seed
        self.selector = PieceSelector(seed)
        self.board = Board(self.rows, self.cols)

        self.tick = 0
        self.score = 0
        self.lines_total = 0
        self.level = 1
        self.done = False
        self.gravity_ms = 0.0
        self._reset_sabotage()

        self.next_kind = self._next_piece_kind()
        self._spawn_piece()

        return self._build_observation()

    def step(self, action: FrameAction) -> StepResult:
        """Execute one tick of game time with the given action.

        Args:
            action: Frame action to execute

        Returns:
            Step result with observation, reward, done, info
        """
        if self.done or self.current_piece is None:
            return StepResult(self._build_observation(), 0.0, True, {"error": "Game over"})

        events: List[str] = []
        lines_cleared = 0
        score_before = self.score

        if action == FrameAction.LEFT:
            self._try_move(-1, 0)
        elif action == FrameAction.RIGHT:
            self._try_move(1, 0)
        elif action in (FrameAction.CW, FrameAction.CCW):
            direction = CLOCKWISE if action == FrameAction.CW else COUNTER_CLOCKWISE
            events.append("rotate" if self._try_rotate(direction) else "rotate_blocked")
        elif action == FrameAction.SOFT:
            if self._try_move(0, 1):  # Soft drop moves DOWN (increasing y)
                self.score += SOFT_DROP_SCORE
                self.gravity_ms = 0.0
        elif action == FrameAction.HARD:
            lines_cleared = self._hard_drop(events)
            self.gravity_ms = 0.0
        # NOOP does nothing

        # Gravity (hard drop already locked this tick)
        if action != FrameAction.HARD and not self.done:
            self.gravity_ms += self.TICK_MS
            if self.gravity_ms > fall_interval_ms(self.level):
                self.gravity_ms = 0.0
                if not self._try_move(0, 1):
                    lines_cleared = self._lock_current(events)

        self.tick += 1

        info = {
            "lines_cleared": lines_cleared,
            "events": events,
        }
        return StepResult(
            self._build_observation(), float(self.score - score_before), self.done, info
        )

    def sabotage(self, action: SabotageAction) -> StepResult:
        """Apply a second-player action.

        Args:
            action: Sabotage action

        Returns:
            Step result; info["error"] is set when sabotage is unavailable
        """
        if not self.multiplayer:
            return StepResult(
                self._build_observation(), 0.0, self.done,
                {"error": "Sabotage requires a multiplayer game"},
            )
        if self.done:
            return StepResult(self._build_observation(), 0.0, True, {"error": "Game over"})

        if action == SabotageAction.TOGGLE_MODE:
            self.sabotage_mode = (
                SabotageMode.DRAW if self.sabotage_mode == SabotageMode.PIECES
                else SabotageMode.PIECES
            )
        elif self.sabotage_mode == SabotageMode.PIECES:
            if action == SabotageAction.UP:
                self.piece_mode += 1
                if self.piece_mode > PieceKind.L:
                    self.piece_mode = RANDOM_PIECES
                self.next_kind = self._next_piece_kind()
            elif action == SabotageAction.DOWN:
                self.piece_mode -= 1
                if self.piece_mode < RANDOM_PIECES:
                    self.piece_mode = int(PieceKind.L)
                self.next_kind = self._next_piece_kind()
        else:
            cx, cy = self.cursor
            if action == SabotageAction.UP:
                cy = max(0, cy - 1)
            elif action == SabotageAction.DOWN:
                cy = min(self.rows - 1, cy + 1)
            elif action == SabotageAction.LEFT:
                cx = max(0, cx - 1)
            elif action == SabotageAction.RIGHT:
                cx = min(self.cols - 1, cx + 1)
            elif action == SabotageAction.TOGGLE_CELL:
                self.board.toggle(cx, cy)
            self.cursor = (cx, cy)

        return StepResult(
            self._build_observation(), 0.0, self.done,
            {"events": ["sabotage"], "action": action.value},
        )

    def ghost_y(self) -> Optional[int]:
        """Row the current piece would land on if hard dropped."""
        if not self.current_piece:
            return None
        piece = self.current_piece
        while self.board.fits(piece.move(0, 1)):
            piece = piece.move(0, 1)
        return piece.y

    def _next_piece_kind(self) -> PieceKind:
        if self.piece_mode == RANDOM_PIECES:
            return self.selector.next()
        return PieceKind(self.piece_mode)

    def _spawn_piece(self) -> None:
        """Spawn the queued piece and queue another."""
        kind = self.next_kind
        self.next_kind = self._next_piece_kind()
        x, y = get_spawn_position(kind, self.cols)
        self.current_piece = Piece(kind, 0, x, y)

    def _try_move(self, dx: int, dy: int) -> bool:
        """Try to move the current piece.

        Returns:
            True if move succeeded
        """
        if not self.current_piece:
            return False

        new_piece = self.current_piece.move(dx, dy)
        if self.board.fits(new_piece):
            self.current_piece = new_piece
            return True
        return False

    def _try_rotate(self, direction: int) -> bool:
        """Try to rotate the current piece with wall kicks.

        Returns:
            True if rotation succeeded
        """
        if not self.current_piece:
            return False

        rotated = try_rotate(self.board, self.current_piece, direction)
        if rotated is None:
            return False
        self.current_piece = rotated
        return True

    def _hard_drop(self, events: List[str]) -> int:
        """Drop the current piece to the floor and lock it.

        Returns:
            Lines cleared
        """
        landing_y = self.ghost_y()
        distance = landing_y - self.current_piece.y
        self.current_piece = self.current_piece.move(0, distance)
        self.score += HARD_DROP_SCORE * distance
        events.append("hard_drop")
        return self._lock_current(events)

    def _lock_current(self, events: List[str]) -> int:
        """Lock the current piece, clear lines, score and spawn.

        Returns:
            Lines cleared
        """
        self.board.lock_piece(self.current_piece)
        events.append("lock")

        lines_cleared = self.board.clear_lines()
        if lines_cleared > 0:
            events.append("clear")
            self.score += calculate_score(lines_cleared, self.level)
            self.lines_total += lines_cleared
            self.level = level_for_lines(self.lines_total)
            logger.debug("Cleared %d lines (total=%d, level=%d)", lines_cleared, self.lines_total, self.level)

        self._spawn_piece()
        events.append("spawn")

        if not self.board.fits(self.current_piece):
            self.done = True
            events.append("game_over")
            logger.debug("Game over: seed=%d score=%d lines=%d", self.seed, self.score, self.lines_total)

        return lines_cleared

    def _build_observation(self) -> Observation:
        """Build the current observation."""
        return Observation(
            schema_version=self.SCHEMA_VERSION,
            tick=self.tick,
            board=self.board.copy(),
            current=self.current_piece,
            ghost_y=self.ghost_y(),
            next_kind=self.next_kind,
            score=self.score,
            lines_total=self.lines_total,
            level=self.level,
            game_over=self.done,
            seed=self.seed,
            multiplayer=self.multiplayer,
            sabotage_mode=self.sabotage_mode,
            piece_mode=self.piece_mode,
            cursor=self.cursor,
        )
