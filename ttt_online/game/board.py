"""Board of size x size cells, stored row-major."""

from dataclasses import dataclass
from typing import Optional, Self, Sequence

from ttt_online.core.exceptions import GameStateError
from ttt_online.core.shared_types import Mark

Line = tuple[int, ...]


def winning_lines(size: int) -> tuple[Line, ...]:
    """
    All index sequences that win the game: rows, then columns, then the main diagonal, then the anti-diagonal.
    ----
    There are exactly 2 * size + 2 of them. (For size 1 the four "lines" are all the single cell.)
    """
    rows = [tuple(r * size + c for c in range(size)) for r in range(size)]
    cols = [tuple(r * size + c for r in range(size)) for c in range(size)]
    diagonal = tuple(i * size + i for i in range(size))
    anti_diagonal = tuple(i * size + (size - 1 - i) for i in range(size))
    return tuple(rows + cols + [diagonal, anti_diagonal])


@dataclass
class Board:
    size: int
    cells: list[Optional[Mark]]

    @classmethod
    def empty(cls, size: int) -> Self:
        if size < 1:
            raise GameStateError(f"Board size must be at least 1, got {size}.")
        return cls(size=size, cells=[None] * (size * size))

    @classmethod
    def from_cells(cls, size: int, cells: Sequence[Optional[str]]) -> Self:
        """Parse stored cells (None / "X" / "O") back into a Board."""
        if size < 1:
            raise GameStateError(f"Board size must be at least 1, got {size}.")
        if len(cells) != size * size:
            raise GameStateError(
                f"Board size mismatch: expected {size * size} cells for size {size}, got {len(cells)}."
            )
        try:
            parsed = [Mark(cell) if cell is not None else None for cell in cells]
        except ValueError as exc:
            raise GameStateError(f"Unknown mark on board: {exc}") from exc
        return cls(size=size, cells=parsed)

    def to_cells(self) -> list[Optional[str]]:
        return [str(cell) if cell is not None else None for cell in self.cells]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def index(self, row: int, col: int) -> int:
        return row * self.size + col

    def get(self, row: int, col: int) -> Optional[Mark]:
        return self.cells[self.index(row, col)]

    def is_empty_at(self, row: int, col: int) -> bool:
        return self.get(row, col) is None

    def place(self, mark: Mark, row: int, col: int) -> None:
        """Put a mark on an empty cell. Callers check bounds and emptiness first."""
        self.cells[self.index(row, col)] = mark

    def is_full(self) -> bool:
        return all(cell is not None for cell in self.cells)

    def line_owner(self, line: Line) -> Optional[Mark]:
        """Mark occupying every cell of the line, if any."""
        first = self.cells[line[0]]
        if first is None:
            return None
        if all(self.cells[i] == first for i in line):
            return first
        return None
