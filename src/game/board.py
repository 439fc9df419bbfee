"""The Board evaluates a tic-tac-toe grid: has a player completed a line, or is the board full?"""

from dataclasses import dataclass
from typing import Self, Sequence

from src.core.exceptions import InvalidBoardError
from src.core.shared_types import (
    BOARD_SIZE,
    EMPTY,
    PLAYER_IDS,
    Grid,
    Outcome,
    PlayerID,
)

Rows = tuple[tuple[int, ...], ...]


def validate_grid(grid: Sequence[Sequence[int]]) -> Rows:
    """Check shape and cell values of a grid, return it as an immutable tuple of rows."""
    if (
        not isinstance(grid, (list, tuple))
        or len(grid) != BOARD_SIZE
        or any(not isinstance(row, (list, tuple)) or len(row) != BOARD_SIZE for row in grid)
    ):
        raise InvalidBoardError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}, got {grid!r}")
    allowed = (EMPTY, *PLAYER_IDS)
    for row_idx, row in enumerate(grid):
        for col_idx, value in enumerate(row):
            # bool is an int subclass, but True/False on the board is a client bug
            if isinstance(value, bool) or not isinstance(value, int) or value not in allowed:
                raise InvalidBoardError(
                    f"Invalid cell value {value!r} at ({row_idx}, {col_idx})."
                )
    return tuple(tuple(row) for row in grid)


def _validate_player(player_id: PlayerID) -> None:
    if player_id not in PLAYER_IDS:
        raise InvalidBoardError(f"Unknown player id: {player_id!r}")


def evaluate(grid: Sequence[Sequence[int]], player_id: PlayerID) -> Outcome:
    """Classify the grid from the point of view of the player that just moved.

    Lines are checked in a fixed order (columns, rows, main diagonal, anti-diagonal), the first
    complete line wins. Only then does an empty cell mean the game goes on, and a full board
    without a line is a stalemate.
    """
    rows = validate_grid(grid)
    _validate_player(player_id)

    for col in range(BOARD_SIZE):
        if all(rows[row][col] == player_id for row in range(BOARD_SIZE)):
            return Outcome.WIN

    for row in range(BOARD_SIZE):
        if all(cell == player_id for cell in rows[row]):
            return Outcome.WIN

    if all(rows[i][i] == player_id for i in range(BOARD_SIZE)):
        return Outcome.WIN

    if all(rows[i][BOARD_SIZE - 1 - i] == player_id for i in range(BOARD_SIZE)):
        return Outcome.WIN

    if any(cell == EMPTY for row in rows for cell in row):
        return Outcome.NONE

    return Outcome.STALEMATE


@dataclass(frozen=True)
class Board:
    rows: Rows

    @classmethod
    def empty(cls) -> Self:
        return cls(tuple((EMPTY,) * BOARD_SIZE for _ in range(BOARD_SIZE)))

    @classmethod
    def from_rows(cls, grid: Sequence[Sequence[int]]) -> Self:
        return cls(validate_grid(grid))

    def to_rows(self) -> Grid:
        """Mutable copy, e.g. to put into a MoveMessage"""
        return [list(row) for row in self.rows]

    def cell(self, row: int, col: int) -> int:
        self._check_bounds(row, col)
        return self.rows[row][col]

    def place(self, row: int, col: int, player_id: PlayerID) -> Self:
        """New board with the player's mark added. The board itself is never changed."""
        _validate_player(player_id)
        if self.cell(row, col) != EMPTY:
            raise InvalidBoardError(f"Cell ({row}, {col}) is already taken.")
        grid = self.to_rows()
        grid[row][col] = player_id
        return type(self)(validate_grid(grid))

    def is_full(self) -> bool:
        return all(cell != EMPTY for row in self.rows for cell in row)

    def evaluate(self, player_id: PlayerID) -> Outcome:
        return evaluate(self.rows, player_id)

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
            raise InvalidBoardError(f"Cell ({row}, {col}) is outside the board.")
