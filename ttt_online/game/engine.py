"""
The TicTacToe engine is the pure rule set the arbiter relies on.
It knows nothing about identities, storage or time: two abstract marks, a board and whose turn it is.
"""

from dataclasses import dataclass
from typing import Optional, Self

from ttt_online.core.exceptions import GameStateError
from ttt_online.core.models import GameModel
from ttt_online.core.shared_types import Mark
from ttt_online.game.board import Board, Line, winning_lines


@dataclass(frozen=True)
class EngineSnapshot:
    """Immutable copy of the engine's record. The board is a tuple, so callers cannot reach engine storage."""

    size: int
    board: tuple[Optional[str], ...]
    current_player: str
    winner: Optional[str]
    is_game_over: bool
    is_draw: bool


class TicTacToe:
    FIRST_MARK = Mark.X

    def __init__(self, size: int = 3) -> None:
        self.size = size
        self.lines: tuple[Line, ...] = ()
        self.reset(size)

    # --- CONSTRUCTION ---
    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Rebuild an engine from the last committed record."""
        engine = cls(model.size)
        engine.hydrate(model)
        return engine

    def hydrate(self, model: GameModel) -> None:
        """Load stored state into this engine. The stored board must match the stored size."""
        board = Board.from_cells(model.size, model.board)
        try:
            current_player = Mark(model.current_player)
            winner = Mark(model.winner) if model.winner is not None else None
        except ValueError as exc:
            raise GameStateError(f"Invalid mark in stored game: {exc}") from exc

        if model.size != self.size:
            self.size = model.size
            self.lines = winning_lines(model.size)
        self.board = board
        self.current_player = current_player
        self.winner = winner
        self.is_game_over = model.is_game_over
        self.is_draw = model.is_draw

    def reset(self, size: Optional[int] = None) -> None:
        """Empty board, X to move, nothing decided."""
        size = self.size if size is None else size
        self.board = Board.empty(size)
        if size != self.size or not self.lines:
            self.lines = winning_lines(size)
            self.size = size
        self.current_player = self.FIRST_MARK
        self.winner: Optional[Mark] = None
        self.is_game_over = False
        self.is_draw = False

    # --- PLAY ---
    def apply_move(self, row: int, col: int) -> bool:
        """
        Place the current player's mark.
        ----
        Returns False and leaves the state untouched if the coordinates are off the board,
        the game is over, or the cell is taken.
        """
        if not self.board.in_bounds(row, col):
            return False
        if self.is_game_over or not self.board.is_empty_at(row, col):
            return False

        self.board.place(self.current_player, row, col)

        if self._find_winner() is not None:
            self.winner = self.current_player
            self.is_game_over = True
        elif self.board.is_full():
            self.is_draw = True
            self.is_game_over = True
        else:
            self.current_player = self.current_player.opponent
        return True

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            size=self.size,
            board=tuple(self.board.to_cells()),
            current_player=str(self.current_player),
            winner=str(self.winner) if self.winner is not None else None,
            is_game_over=self.is_game_over,
            is_draw=self.is_draw,
        )

    # -- PRIVATE HELPERS ---
    def _find_winner(self) -> Optional[Mark]:
        """First line (rows -> columns -> diagonals) fully held by one mark."""
        for line in self.lines:
            owner = self.board.line_owner(line)
            if owner is not None:
                return owner
        return None
