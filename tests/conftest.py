"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import threading
from copy import deepcopy
from typing import Iterator, Optional
from uuid import UUID, uuid4

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ttt_online.core.exceptions import StaleStateError
from ttt_online.core.models import GameModel
from ttt_online.core.shared_types import Mark, Status
from ttt_online.db.change_feed import GameFeed
from ttt_online.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def session_factory() -> Iterator[sessionmaker[Session]]:
    """Session factory bound to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


class MockRepository:
    """Mock the GameRepository using a dictionary of game models. Conditional writes are guarded by a lock."""

    def __init__(self, feed: Optional[GameFeed] = None) -> None:
        self._games: dict[UUID, GameModel] = {}
        self._lock = threading.Lock()
        self.feed = feed
        self.writes = 0

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        game_id = uuid4()
        stored = deepcopy(game)
        stored.version = 1
        with self._lock:
            self._games[game_id] = stored
        self._publish(game_id, stored)
        return deepcopy(stored), game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        with self._lock:
            game = self._games.get(game_id)
            return deepcopy(game) if game is not None else None

    def update_game(
        self, game_id: UUID, game: GameModel, expected_version: int
    ) -> GameModel | None:
        """Replace the record if nobody wrote since expected_version."""
        with self._lock:
            current = self._games.get(game_id)
            if current is None:
                return None
            if current.version != expected_version:
                raise StaleStateError(
                    f"stored version {current.version}, expected {expected_version}"
                )
            stored = deepcopy(game)
            stored.version = expected_version + 1
            stored.created_at = current.created_at
            self._games[game_id] = stored
            self.writes += 1
        self._publish(game_id, stored)
        return deepcopy(stored)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        with self._lock:
            return self._games.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        with self._lock:
            self._games.clear()

    def _publish(self, game_id: UUID, game: GameModel) -> None:
        if self.feed is not None:
            self.feed.publish(game_id, game)


@pytest.fixture
def feed() -> GameFeed:
    return GameFeed()


@pytest.fixture
def mock_repository(feed: GameFeed) -> Iterator[MockRepository]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository(feed=feed)
    try:
        yield repo
    finally:
        repo.clear()


def make_game(
    size: int = 3,
    board: Optional[list[Optional[str]]] = None,
    current_player: str = Mark.X,
    player_x: str = "alice",
    player_o: Optional[str] = "bob",
    status: str = Status.ACTIVE,
    **overrides,
) -> GameModel:
    """Build a GameModel without going through the service."""
    values = dict(
        size=size,
        board=board if board is not None else [None] * (size * size),
        current_player=current_player,
        winner=None,
        is_game_over=False,
        is_draw=False,
        player_x=player_x,
        player_o=player_o,
        status=status,
        pending_intent=None,
    )
    values.update(overrides)
    return GameModel(**values)
