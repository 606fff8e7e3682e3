"""Implementation of (Game)Repository using SQLAlchemy"""

import logging
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from ttt_online.core.exceptions import StaleStateError
from ttt_online.core.models import GameModel, MoveIntent
from ttt_online.db.change_feed import GameFeed
from ttt_online.db.database import get_db
from ttt_online.db.schema import DBGame, utc_now

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """
    Data stored using SQL / methods implemented using SQLAlchemy.
    ----
    Every operation runs in its own short-lived session, so the repository can be shared between threads.
    Every committed write is published on the feed.
    """

    def __init__(
        self, session_factory: sessionmaker[Session], feed: Optional[GameFeed] = None
    ) -> None:
        self.session_factory = session_factory
        self.feed = feed

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        with get_db(self.session_factory) as db:
            game_db = self._fetch_game(db, game_id)
            if game_db:
                return self._to_model(game_db)
            return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        with get_db(self.session_factory) as db:
            game_db = DBGame(
                id=new_id,
                version=1,
                created_at=utc_now(),
                **self._column_values(game),
            )
            db.add(game_db)
            db.flush()
            stored = self._to_model(game_db)
            db.commit()
        self._publish(new_id, stored)
        return stored, new_id

    def update_game(
        self, game_id: UUID, game: GameModel, expected_version: int
    ) -> GameModel | None:
        """Compare-and-swap on the version column: UPDATE ... WHERE id = :id AND version = :expected."""
        query = (
            update(DBGame)
            .where(DBGame.id == game_id, DBGame.version == expected_version)
            .values(
                version=expected_version + 1,
                updated_at=utc_now(),
                **self._column_values(game),
            )
            .execution_options(synchronize_session=False)
        )
        with get_db(self.session_factory) as db:
            result = db.execute(query)

            if result.rowcount == 0:
                current = self._fetch_game(db, game_id)
                stored_version = current.version if current is not None else None
                db.rollback()
                if stored_version is None:
                    return None
                logger.debug(
                    "Conditional write on game %s rejected (expected version %d, stored %d)",
                    game_id,
                    expected_version,
                    stored_version,
                )
                raise StaleStateError(
                    f"Game {game_id} is at version {stored_version}, write expected {expected_version}."
                )

            # read back inside the same transaction: this is exactly the row just written
            game_db = self._fetch_game(db, game_id)
            stored = self._to_model(game_db)
            db.commit()

        logger.debug("Committed game %s at version %d", game_id, stored.version)
        self._publish(game_id, stored)
        return stored

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        with get_db(self.session_factory) as db:
            game_db = self._fetch_game(db, game_id)
            if not game_db:
                return None
            game_model = self._to_model(game_db)
            db.delete(game_db)
            db.commit()
        return game_model

    @staticmethod
    def _fetch_game(db: Session, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return db.scalar(query)

    def _publish(self, game_id: UUID, game: GameModel) -> None:
        if self.feed is not None:
            self.feed.publish(game_id, game)

    @staticmethod
    def _column_values(game: GameModel) -> dict:
        """GameModel fields that map 1:1 onto columns (version and timestamps are owned by the store)."""
        return {
            "size": game.size,
            "board": [str(cell) if cell is not None else None for cell in game.board],
            "current_player": str(game.current_player),
            "winner": str(game.winner) if game.winner is not None else None,
            "is_game_over": game.is_game_over,
            "is_draw": game.is_draw,
            "player_x": game.player_x,
            "player_o": game.player_o,
            "status": str(game.status),
            "pending_intent": (
                game.pending_intent.to_dict() if game.pending_intent else None
            ),
        }

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            size=game_db.size,
            board=list(game_db.board),
            current_player=game_db.current_player,
            winner=game_db.winner,
            is_game_over=game_db.is_game_over,
            is_draw=game_db.is_draw,
            player_x=game_db.player_x,
            player_o=game_db.player_o,
            status=game_db.status,
            pending_intent=(
                MoveIntent.from_dict(game_db.pending_intent)
                if game_db.pending_intent
                else None
            ),
            created_at=game_db.created_at,
            version=game_db.version,
        )
