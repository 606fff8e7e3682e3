"""Unit tests for ttt_online/db/database.py"""

from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ttt_online.db.database import get_db, init_db, make_engine, make_session_factory


def test_in_memory_engine_shares_one_database() -> None:
    """Tables created through one connection are visible to every session."""
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    assert "games" in inspect(engine).get_table_names()

    factory = make_session_factory(engine)
    with get_db(factory) as db:
        assert isinstance(db, Session)
        assert inspect(db.get_bind()).has_table("games")


def test_file_engine(tmp_path: Path) -> None:
    engine = make_engine(f"sqlite:///{tmp_path / 'games.db'}")
    init_db(engine)
    with get_db(make_session_factory(engine)) as db:
        assert inspect(db.get_bind()).has_table("games")
    engine.dispose()
