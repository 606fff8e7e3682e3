"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
The arbiter, the repository and the API layer all send/receive GameModel, so none of them depends on
the data model specific to another layer (DB rows, pydantic models, the engine's internals).
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional, Self
from uuid import uuid4

# Type aliases to make GameModel easier to read
CallerId = str
Cell = Optional[str]


@dataclass(frozen=True)
class MoveIntent:
    """Unvalidated move proposal waiting for the arbiter."""

    caller_id: CallerId
    row: int
    col: int
    intent_id: str = field(default_factory=lambda: uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            caller_id=data["caller_id"],
            row=int(data["row"]),
            col=int(data["col"]),
            intent_id=data["intent_id"],
        )


@dataclass
class GameModel:
    """Transport-safe representation of one game record used between API, Service, Arbiter and DB layers."""

    size: int
    board: list[Cell]
    current_player: str
    winner: Optional[str]
    is_game_over: bool
    is_draw: bool
    player_x: CallerId
    player_o: Optional[CallerId]
    status: str
    pending_intent: Optional[MoveIntent] = None
    created_at: Optional[datetime] = None
    version: int = 0
