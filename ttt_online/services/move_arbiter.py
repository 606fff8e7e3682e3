"""
The MoveArbiter is the single point of truth that turns an untrusted move intent into a committed game record.

It never trusts the record the client wrote: every decision is taken against the last committed state,
using a TicTacToe engine rebuilt from that state. The decision is committed with a conditional write,
so of two decisions taken against the same record at most one lands.
"""

import logging
from dataclasses import replace
from typing import Optional
from uuid import UUID

from ttt_online.core.exceptions import InvalidMoveError, StaleStateError
from ttt_online.core.models import GameModel, MoveIntent
from ttt_online.core.shared_types import Mark, Status
from ttt_online.db.repository import GameRepository
from ttt_online.game.engine import TicTacToe

logger = logging.getLogger(__name__)


class MoveArbiter:
    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # --- TRIGGER ---
    def handle_change(
        self, game_id: UUID, before: GameModel, after: GameModel
    ) -> Optional[GameModel]:
        """
        React to a change of a game record.
        ----
        before: last committed state (what the decision is validated against)
        after: the record as written by the proposer (only its pending intent and version are used)

        Returns the newly committed record, or None when there was nothing to do or the write lost a race.
        """
        decision = self.process_intent(before, after.pending_intent)
        if decision is None:
            return None
        return self.commit(game_id, decision, expected_version=after.version)

    # --- DECISION ---
    def process_intent(
        self, before: GameModel, new_intent: Optional[MoveIntent]
    ) -> Optional[GameModel]:
        """
        Decide what the next authoritative record is.
        ----
        1. No intent, or the intent already reflected in `before` -> None (no transition)
        2. Illegal intent -> `before` with the intent cleared
        3. Legal intent -> `before` with the move applied and the intent cleared
        """
        if new_intent is None or new_intent == before.pending_intent:
            return None

        try:
            self._validate(before, new_intent)
        except InvalidMoveError as exc:
            logger.warning("Rejected move intent %s: %s", new_intent.intent_id, exc)
            return self._cleared(before)

        engine = TicTacToe.from_model(before)
        if not engine.apply_move(new_intent.row, new_intent.col):
            # _validate already covers every reason the engine refuses a move
            logger.warning(
                "Engine refused move intent %s at (%d, %d)",
                new_intent.intent_id,
                new_intent.row,
                new_intent.col,
            )
            return self._cleared(before)

        snapshot = engine.snapshot()
        logger.info(
            "Accepted move %s at (%d, %d) by %s",
            before.current_player,
            new_intent.row,
            new_intent.col,
            new_intent.caller_id,
        )
        return replace(
            before,
            board=list(snapshot.board),
            current_player=snapshot.current_player,
            winner=snapshot.winner,
            is_game_over=snapshot.is_game_over,
            is_draw=snapshot.is_draw,
            status=Status.FINISHED if snapshot.is_game_over else Status.ACTIVE,
            pending_intent=None,
        )

    # --- COMMIT ---
    def commit(
        self, game_id: UUID, decision: GameModel, expected_version: int
    ) -> Optional[GameModel]:
        """Conditionally write the decision. Losing the race is not an error: the decision is dropped, never retried."""
        try:
            return self.repo.update_game(game_id, decision, expected_version)
        except StaleStateError:
            logger.info(
                "Discarding stale decision for game %s (expected version %d)",
                game_id,
                expected_version,
            )
            return None

    # -- PRIVATE HELPERS ---
    @staticmethod
    def expected_caller(state: GameModel) -> Optional[str]:
        """Identity bound to the mark whose turn it is."""
        return state.player_x if state.current_player == Mark.X else state.player_o

    def _validate(self, before: GameModel, intent: MoveIntent) -> None:
        if before.is_game_over:
            raise InvalidMoveError("game is already over")

        if before.status == Status.WAITING:
            raise InvalidMoveError("waiting for a second player")

        expected = self.expected_caller(before)
        if intent.caller_id != expected:
            raise InvalidMoveError(
                f"out of turn: {before.current_player} to move, proposed by {intent.caller_id}"
            )

        if not (0 <= intent.row < before.size and 0 <= intent.col < before.size):
            raise InvalidMoveError(
                f"({intent.row}, {intent.col}) is off a {before.size}x{before.size} board"
            )

        if before.board[intent.row * before.size + intent.col] is not None:
            raise InvalidMoveError(f"cell ({intent.row}, {intent.col}) is occupied")

    @staticmethod
    def _cleared(before: GameModel) -> GameModel:
        return replace(before, pending_intent=None)
