"""Orchestration of communication from the API models to the arbiter, the engine and the persistence layer (and the reverse direction)."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from ttt_online.api.models import (
    CreateGameRequest,
    CreateGameResponse,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    JoinGameRequest,
    MoveIntentRequest,
    ResetGameRequest,
)
from ttt_online.core.config import Settings
from ttt_online.core.exceptions import (
    GameNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
    StaleStateError,
    UnauthenticatedError,
)
from ttt_online.core.models import GameModel, MoveIntent
from ttt_online.core.shared_types import Status
from ttt_online.db.change_feed import GameFeed, Subscription
from ttt_online.db.repository import GameRepository
from ttt_online.game.engine import TicTacToe
from ttt_online.services.move_arbiter import MoveArbiter

logger = logging.getLogger(__name__)


class GameService:
    """Orchestration of layers for an online game."""

    def __init__(
        self,
        repository: GameRepository,
        arbiter: Optional[MoveArbiter] = None,
        feed: Optional[GameFeed] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repo = repository
        self.arbiter = arbiter or MoveArbiter(repository)
        self.feed = feed
        self.settings = settings or Settings()

    # -- API operations ---
    def create_game(self, request: CreateGameRequest) -> CreateGameResponse:
        """First player requested to create a new game. They will play X."""
        caller_id = self._require_identity(request.caller_id)

        size = request.size if request.size is not None else self.settings.DEFAULT_BOARD_SIZE
        if size > self.settings.MAX_BOARD_SIZE:
            raise InvalidRequestError(
                f"Board size {size} exceeds the maximum of {self.settings.MAX_BOARD_SIZE}."
            )

        new_game = self._fresh_record(size, player_x=caller_id, player_o=None, status=Status.WAITING)
        _, game_id = self.repo.create_game(new_game)
        logger.info("Game %s created by %s (size %d)", game_id, caller_id, size)
        return CreateGameResponse(game_id=game_id)

    def join_game(self, request: JoinGameRequest) -> GameResponse:
        """Second player requested to join a game. They will play O."""
        caller_id = self._require_identity(request.caller_id)

        def bind_second_player(current: GameModel) -> Optional[GameModel]:
            if current.player_x == caller_id:
                raise PermissionDeniedError("You can't join your own game.")
            if current.player_o is not None:
                if current.player_o == caller_id:
                    return None
                raise PermissionDeniedError("This game is already full.")
            return replace(current, player_o=caller_id, status=Status.ACTIVE)

        stored = self._transact(request.game_id, bind_second_player)
        logger.info("Player %s joined game %s", caller_id, request.game_id)
        return GameResponse.from_model(request.game_id, stored)

    def submit_move_intent(self, request: MoveIntentRequest) -> None:
        """
        Write a move intent into the game's single-slot mailbox and let the arbiter process it.
        ----
        The intent is not validated here. An illegal intent is cleared by the arbiter and the board simply
        does not change; the caller observes the outcome through get_game_state / on_state_change.
        """
        caller_id = self._require_identity(request.caller_id)
        before = self._fetch_game(request.game_id)

        intent = MoveIntent(caller_id=caller_id, row=request.row, col=request.col)
        # a newer intent replaces any unprocessed one
        with_intent = replace(before, pending_intent=intent)
        try:
            after = self.repo.update_game(request.game_id, with_intent, before.version)
        except StaleStateError:
            logger.info(
                "Move intent %s on game %s raced with another write, dropped",
                intent.intent_id,
                request.game_id,
            )
            return
        if after is None:
            raise GameNotFoundError(f"Game with game_id={request.game_id} not found.")

        self.arbiter.handle_change(request.game_id, before, after)

    def reset_game(self, request: ResetGameRequest) -> GameResponse:
        """The host (player X) asks for a rematch on a finished game."""
        caller_id = self._require_identity(request.caller_id)

        def fresh_board(current: GameModel) -> GameModel:
            if current.player_x != caller_id:
                raise PermissionDeniedError("Only the host can reset the game.")
            if current.status != Status.FINISHED:
                raise PermissionDeniedError("Only a finished game can be reset.")
            return self._fresh_record(
                current.size,
                player_x=current.player_x,
                player_o=current.player_o,
                status=Status.ACTIVE,
                created_at=current.created_at,
            )

        stored = self._transact(request.game_id, fresh_board)
        logger.info("Game %s reset by %s", request.game_id, caller_id)
        return GameResponse.from_model(request.game_id, stored)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Retrieve the current authoritative record."""
        game_model = self._fetch_game(request.game_id)
        return GameResponse.from_model(request.game_id, game_model)

    def on_state_change(self, game_id: UUID) -> Subscription:
        """
        Subscribe to a game's committed records.
        ----
        The subscription first yields the current record, then every committed change until cancelled.
        A commit that lands between the read and the priming delivery is already queued; the older read is dropped.
        """
        if self.feed is None:
            raise RuntimeError("GameService was built without a change feed.")
        subscription = self.feed.subscribe(game_id)
        current = self.repo.get_game(game_id)
        if current is None:
            subscription.cancel()
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        subscription.deliver(current)
        return subscription

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record. Its subscriptions are cancelled."""
        _ = self._fetch_game(request.game_id)
        self.repo.delete_game(request.game_id)
        if self.feed is not None:
            self.feed.close(request.game_id)
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _transact(
        self, game_id: UUID, mutate: Callable[[GameModel], Optional[GameModel]]
    ) -> GameModel:
        """
        Read -> validate/mutate -> conditional write, re-run from a fresh read when another writer got in first.
        ----
        `mutate` raises to abort, or returns None when the stored record already is the desired outcome.
        """
        for attempt in range(1, self.settings.TRANSACTION_ATTEMPTS + 1):
            current = self._fetch_game(game_id)
            updated = mutate(current)
            if updated is None:
                return current
            try:
                stored = self.repo.update_game(game_id, updated, current.version)
            except StaleStateError:
                logger.debug("Transaction on game %s conflicted (attempt %d)", game_id, attempt)
                continue
            if stored is None:
                raise GameNotFoundError(f"Game with {game_id=} not found.")
            return stored
        raise StaleStateError(
            f"Game {game_id} kept changing, gave up after {self.settings.TRANSACTION_ATTEMPTS} attempts."
        )

    @staticmethod
    def _fresh_record(
        size: int,
        player_x: str,
        player_o: Optional[str],
        status: Status,
        created_at: Optional[datetime] = None,
    ) -> GameModel:
        snapshot = TicTacToe(size).snapshot()
        return GameModel(
            size=snapshot.size,
            board=list(snapshot.board),
            current_player=snapshot.current_player,
            winner=snapshot.winner,
            is_game_over=snapshot.is_game_over,
            is_draw=snapshot.is_draw,
            player_x=player_x,
            player_o=player_o,
            status=status,
            pending_intent=None,
            created_at=created_at,
        )

    @staticmethod
    def _require_identity(caller_id: Optional[str]) -> str:
        if not caller_id:
            raise UnauthenticatedError("You must be signed in.")
        return caller_id

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return game_model
