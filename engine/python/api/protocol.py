"""Protocol data classes for WebSocket communication."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Literal
from enum import Enum

PROTOCOL_VERSION = "f1.0.0"


class MessageType(str, Enum):
    """WebSocket message types."""
    HELLO = "hello"
    RESET = "reset"
    STEP = "step"
    SABOTAGE = "sabotage"
    OBS = "obs"
    ERROR = "error"


@dataclass
class HelloRequest:
    """Client hello message."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION


@dataclass
class HelloResponse:
    """Server hello response."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION
    server: str = "friendtris-core-py"


@dataclass
class ResetRequest:
    """Request to reset the game."""
    seed: Optional[int] = None
    multiplayer: bool = False
    type: Literal["reset"] = "reset"


@dataclass
class StepRequest:
    """Request to step the game with an action."""
    action: str  # Frame action: LEFT, RIGHT, CW, CCW, SOFT, HARD, NOOP
    type: Literal["step"] = "step"


@dataclass
class SabotageRequest:
    """Second-player action."""
    action: str  # TOGGLE_MODE, UP, DOWN, LEFT, RIGHT, TOGGLE_CELL
    type: Literal["sabotage"] = "sabotage"


@dataclass
class ObservationResponse:
    """Game state observation response."""
    data: Dict[str, Any]  # Observation dict from Observation.to_dict()
    reward: float
    done: bool
    info: Dict[str, Any]
    type: Literal["obs"] = "obs"


@dataclass
class ErrorResponse:
    """Error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    type: Literal["error"] = "error"


class ErrorCode:
    """Standard error codes."""
    INVALID_MESSAGE = "INVALID_MESSAGE"
    INVALID_ACTION = "INVALID_ACTION"
    GAME_NOT_INITIALIZED = "GAME_NOT_INITIALIZED"
    GAME_OVER = "GAME_OVER"
    SABOTAGE_DISABLED = "SABOTAGE_DISABLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Expected field types per request; bool is rejected where an int is expected
_FIELD_TYPES = {
    "version": (str,),
    "seed": (int, type(None)),
    "multiplayer": (bool,),
    "action": (str,),
}

_REQUESTS = {
    MessageType.HELLO: HelloRequest,
    MessageType.RESET: ResetRequest,
    MessageType.STEP: StepRequest,
    MessageType.SABOTAGE: SabotageRequest,
}


def parse_message(data: Dict[str, Any]) -> Any:
    """Parse incoming WebSocket message.

    Args:
        data: JSON message dict

    Returns:
        Parsed message object

    Raises:
        ValueError: If message type or fields are invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    msg_type = data.get("type")
    try:
        request_cls = _REQUESTS[MessageType(msg_type)]
    except (ValueError, KeyError):
        raise ValueError(f"Unknown message type: {msg_type}")

    try:
        message = request_cls(**data)
    except TypeError as e:
        raise ValueError(f"Invalid {msg_type} message: {e}")

    for field, value in data.items():
        expected = _FIELD_TYPES.get(field)
        if expected is None:
            continue
        if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
            raise ValueError(f"Invalid {msg_type} message: bad type for '{field}'")

    return message


def to_dict(obj: Any) -> Dict[str, Any]:
    """Convert dataclass to dict for JSON serialization."""
    return asdict(obj)
