"""
Client side copy of a game, as seen by one player.

The authoritative record always wins: whatever arrives from the change feed replaces the view wholesale,
including any optimistic mark the player placed while their intent was in flight.
"""

from copy import deepcopy
from typing import Optional
from uuid import UUID

from ttt_online.api.models import MoveIntentRequest
from ttt_online.core.models import GameModel
from ttt_online.core.shared_types import Mark, Status


class LocalGameView:
    def __init__(self, game_id: UUID, caller_id: str) -> None:
        self.game_id = game_id
        self.caller_id = caller_id
        self.authoritative: Optional[GameModel] = None
        self.optimistic: Optional[tuple[int, int]] = None

    def apply_authoritative(self, game: GameModel) -> None:
        self.authoritative = deepcopy(game)
        self.optimistic = None

    # --- DERIVED STATE ---
    @property
    def my_mark(self) -> Mark:
        if self.authoritative is not None and self.authoritative.player_x == self.caller_id:
            return Mark.X
        return Mark.O

    @property
    def is_my_turn(self) -> bool:
        game = self.authoritative
        if game is None or game.status != Status.ACTIVE:
            return False
        expected = game.player_x if game.current_player == Mark.X else game.player_o
        return expected == self.caller_id

    @property
    def board(self) -> list[Optional[str]]:
        """Authoritative board with the pending optimistic mark (if any) drawn on top."""
        if self.authoritative is None:
            return []
        cells = list(self.authoritative.board)
        if self.optimistic is not None:
            row, col = self.optimistic
            cells[row * self.authoritative.size + col] = str(self.my_mark)
        return cells

    @property
    def status_message(self) -> str:
        game = self.authoritative
        if game is None:
            return "Loading game..."
        if game.status == Status.WAITING:
            return "Waiting for an opponent..."
        if game.status == Status.FINISHED:
            if game.winner is not None:
                return "You win!" if game.winner == self.my_mark else "Opponent wins!"
            return "It's a draw!"
        if self.is_my_turn:
            return f"Your turn ({self.my_mark})"
        return f"Opponent's turn ({game.current_player})"

    # --- INPUT ---
    def propose(self, row: int, col: int) -> Optional[MoveIntentRequest]:
        """
        Place an optimistic mark and build the intent to submit.
        ----
        Returns None for clicks the server would certainly reject (not our turn, off the board, taken cell).
        """
        game = self.authoritative
        if game is None or not self.is_my_turn or self.optimistic is not None:
            return None
        if not (0 <= row < game.size and 0 <= col < game.size):
            return None
        if game.board[row * game.size + col] is not None:
            return None
        self.optimistic = (row, col)
        return MoveIntentRequest(
            caller_id=self.caller_id, game_id=self.game_id, row=row, col=col
        )
