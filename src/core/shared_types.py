"""
Type definitions used across layers
"""

from enum import StrEnum

# Type aliases to make the grid / message code easier to read
PlayerID = int
Cell = tuple[int, int]
Grid = list[list[int]]

EMPTY: int = 0
PLAYER_ONE: PlayerID = 1
PLAYER_TWO: PlayerID = 2
PLAYER_IDS: tuple[PlayerID, PlayerID] = (PLAYER_ONE, PLAYER_TWO)

# Tic-tac-toe board is always 3x3
BOARD_SIZE = 3

# Target cell sent along with status / control messages: "no move was made"
NO_MOVE: Cell = (-1, -1)


class Outcome(StrEnum):
    NONE = "none"
    WIN = "win"
    STALEMATE = "stalemate"


class SessionState(StrEnum):
    HANDSHAKE = "handshake"
    RELAYING = "relaying"
    TERMINATED = "terminated"


class TerminationReason(StrEnum):
    WIN = "win"
    STALEMATE = "stalemate"
    TRANSPORT_ERROR = "transport error"
    DECODE_ERROR = "decode error"
    INVALID_BOARD = "invalid board"


def opponent_of(player_id: PlayerID) -> PlayerID:
    return PLAYER_TWO if player_id == PLAYER_ONE else PLAYER_ONE
