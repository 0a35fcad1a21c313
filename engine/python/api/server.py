"""FastAPI WebSocket server for Friendtris."""

import json
import os
import random
import logging
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from friendtris_core.env import FriendtrisEnv, FrameAction, SabotageAction, StepResult
from friendtris_core.piece import PieceKind, anchor_of, shape_of
from api.protocol import (
    HelloRequest,
    HelloResponse,
    ResetRequest,
    StepRequest,
    SabotageRequest,
    ObservationResponse,
    ErrorResponse,
    ErrorCode,
    parse_message,
    to_dict,
)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"  # Vite default ports

app = FastAPI(title="Friendtris API", version="0.1.0")

# Enable CORS for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("FRIENDTRIS_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SessionError(Exception):
    """Session-level failure reported to the client with an error code."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class GameSession:
    """Manages a single game session."""

    def __init__(self):
        self.env: Optional[FriendtrisEnv] = None
        self.initialized = False

    def reset(self, seed: Optional[int] = None, multiplayer: bool = False) -> ObservationResponse:
        """Reset the game environment.

        Args:
            seed: Random seed (generates one if None)
            multiplayer: Enable sabotage controls

        Returns:
            Initial observation response
        """
        if seed is None:
            seed = random.randint(0, 1_000_000)

        if self.env is None:
            self.env = FriendtrisEnv()

        obs = self.env.reset(seed, multiplayer=multiplayer)
        self.initialized = True
        logger.info(f"[Session] Reset: seed={seed}, multiplayer={multiplayer}")

        return ObservationResponse(
            data=obs.to_dict(),
            reward=0.0,
            done=False,
            info={"event": "reset", "seed": seed},
        )

    def step(self, action: str) -> ObservationResponse:
        """Execute a game step.

        Args:
            action: Frame action string

        Returns:
            Step result as observation response

        Raises:
            SessionError: If game not initialized or already over
            ValueError: If action invalid
        """
        self._require_playing()
        try:
            frame_action = FrameAction[action]
        except (KeyError, TypeError):
            raise ValueError(f"Invalid action: {action}")

        return self._to_response(self.env.step(frame_action))

    def sabotage(self, action: str) -> ObservationResponse:
        """Apply a second-player action.

        Raises:
            SessionError: If no game is running or it is not multiplayer
            ValueError: If action invalid
        """
        self._require_playing()
        if not self.env.multiplayer:
            raise SessionError(
                ErrorCode.SABOTAGE_DISABLED, "Sabotage requires a multiplayer game"
            )
        try:
            sabotage_action = SabotageAction[action]
        except (KeyError, TypeError):
            raise ValueError(f"Invalid sabotage action: {action}")

        return self._to_response(self.env.sabotage(sabotage_action))

    def _require_playing(self) -> None:
        if not self.initialized or self.env is None:
            raise SessionError(
                ErrorCode.GAME_NOT_INITIALIZED, "Game not initialized. Send reset first."
            )
        if self.env.done:
            raise SessionError(ErrorCode.GAME_OVER, "Game over. Send reset to play again.")

    @staticmethod
    def _to_response(result: StepResult) -> ObservationResponse:
        return ObservationResponse(
            data=result.obs.to_dict(),
            reward=result.reward,
            done=result.done,
            info=result.info,
        )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "friendtris-api", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/shapes")
async def shapes():
    """Shape table, so clients draw pieces from the same geometry the engine uses."""
    return {
        kind.name: [
            {
                "kind": int(kind),
                "rotation": rot,
                "rows": ["".join("#" if filled else "." for filled in row) for row in shape_of(kind, rot)],
                "anchor": list(anchor_of(kind, rot)),
            }
            for rot in range(4)
        ]
        for kind in PieceKind
    }


async def send_error(websocket: WebSocket, code: str, message: str) -> None:
    error = ErrorResponse(code=code, message=message)
    await websocket.send_text(json.dumps(to_dict(error)))


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for game communication."""
    await websocket.accept()
    session = GameSession()

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = parse_message(json.loads(data))
            except json.JSONDecodeError as e:
                await send_error(websocket, ErrorCode.INVALID_MESSAGE, f"Invalid JSON: {str(e)}")
                continue
            except ValueError as e:
                await send_error(websocket, ErrorCode.INVALID_MESSAGE, str(e))
                continue

            try:
                if isinstance(message, HelloRequest):
                    response = HelloResponse()
                elif isinstance(message, ResetRequest):
                    response = session.reset(message.seed, message.multiplayer)
                elif isinstance(message, StepRequest):
                    response = session.step(message.action)
                elif isinstance(message, SabotageRequest):
                    response = session.sabotage(message.action)
                else:
                    await send_error(
                        websocket, ErrorCode.INVALID_MESSAGE,
                        f"Unknown message type: {type(message)}",
                    )
                    continue

                await websocket.send_text(json.dumps(to_dict(response)))

            except SessionError as e:
                await send_error(websocket, e.code, str(e))

            except ValueError as e:
                await send_error(websocket, ErrorCode.INVALID_ACTION, str(e))

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
        try:
            await send_error(websocket, ErrorCode.INTERNAL_ERROR, f"Server error: {str(e)}")
        except Exception:
            logger.warning("Could not report server error; client likely gone")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("FRIENDTRIS_HOST", "0.0.0.0"),
        port=int(os.getenv("FRIENDTRIS_PORT", "8000")),
    )
