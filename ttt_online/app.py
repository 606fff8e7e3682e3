"""Composition root: the process entry point builds and owns the database engine, the feed and the service."""

from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from ttt_online.core.config import Settings
from ttt_online.core.logging_config import configure_logging
from ttt_online.db.change_feed import GameFeed
from ttt_online.db.database import init_db, make_engine, make_session_factory
from ttt_online.db.sql_repository import SQLGameRepository
from ttt_online.services.game_service import GameService
from ttt_online.services.move_arbiter import MoveArbiter


def build_service(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
) -> GameService:
    """Wire everything together. Pass a session factory to reuse an existing database (tests)."""
    settings = settings or Settings.from_env()
    configure_logging(settings.LOG_LEVEL)

    if session_factory is None:
        engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        init_db(engine)
        session_factory = make_session_factory(engine)

    feed = GameFeed()
    repository = SQLGameRepository(session_factory, feed=feed)
    arbiter = MoveArbiter(repository)
    return GameService(repository, arbiter=arbiter, feed=feed, settings=settings)
