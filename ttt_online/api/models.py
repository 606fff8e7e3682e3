"""Requests and Response models"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from ttt_online.core.exceptions import InvalidRequestError
from ttt_online.core.models import GameModel
from ttt_online.core.shared_types import Mark, Status

CallerId = str


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    caller_id: Optional[CallerId] = None
    size: Optional[int] = None

    @field_validator("size")
    @classmethod
    def validate_size(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        if value < 1:
            raise InvalidRequestError(f"Board size must be at least 1, got {value}.")
        return value


class JoinGameRequest(BaseModel):
    caller_id: Optional[CallerId] = None
    game_id: UUID


class MoveIntentRequest(BaseModel):
    caller_id: Optional[CallerId] = None
    game_id: UUID
    row: int
    col: int

    @field_validator(*["row", "col"])
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        # the upper bound depends on the stored board size, the arbiter checks that one
        if value < 0:
            raise InvalidRequestError(f"Coordinates cannot be negative, got {value}.")
        return value


class ResetGameRequest(BaseModel):
    caller_id: Optional[CallerId] = None
    game_id: UUID


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class CreateGameResponse(BaseModel):
    game_id: UUID


class GameResponse(BaseModel):
    game_id: UUID
    size: int
    board: list[Optional[Mark]]
    current_player: Mark
    winner: Optional[Mark]
    is_game_over: bool
    is_draw: bool
    player_x: CallerId
    player_o: Optional[CallerId]
    status: Status
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, game_id: UUID, model: GameModel) -> "GameResponse":
        """The pending intent and the store's version token stay server side."""
        return cls(
            game_id=game_id,
            size=model.size,
            board=list(model.board),
            current_player=model.current_player,
            winner=model.winner,
            is_game_over=model.is_game_over,
            is_draw=model.is_draw,
            player_x=model.player_x,
            player_o=model.player_o,
            status=model.status,
            created_at=model.created_at,
        )
