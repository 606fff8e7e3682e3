"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    size: Mapped[int]
    board: Mapped[list[Optional[str]]] = mapped_column(JSON)
    current_player: Mapped[str]
    winner: Mapped[Optional[str]]
    is_game_over: Mapped[bool] = mapped_column(default=False)
    is_draw: Mapped[bool] = mapped_column(default=False)
    player_x: Mapped[str]
    player_o: Mapped[Optional[str]]
    status: Mapped[str]
    pending_intent: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    # concurrency token for conditional updates
    version: Mapped[int] = mapped_column(default=1)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
