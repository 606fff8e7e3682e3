"""Database engine and session factories. The process entry point owns their lifecycle."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ttt_online.db.schema import Base

# seconds a SQLite writer waits on a locked database file before failing
SQLITE_BUSY_TIMEOUT = 30


def make_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo)

    # sessions are opened from whichever thread handles the request
    connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
    if ":memory:" in database_url:
        # a single shared connection, otherwise every session sees its own empty database
        return create_engine(
            database_url,
            echo=echo,
            connect_args=connect_args,
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Ensure all tables are created"""
    Base.metadata.create_all(bind=engine)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)


@contextmanager
def get_db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Short-lived session for one unit of work."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
