"""Protocol repository (the SQLAlchemy implementation lives in sql_repository.py)"""

from typing import Protocol
from uuid import UUID

from ttt_online.core.models import GameModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(
        self, game_id: UUID, game: GameModel, expected_version: int
    ) -> GameModel | None:
        """
        Conditionally replace an existing record.
        ----
        Writes only if the stored version still equals expected_version, and bumps the version.
        Returns None for an unknown game, raises StaleStateError if someone else wrote first.
        """
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        ...
