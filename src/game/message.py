"""
The MoveMessage is the unit of exchange between a player and the relay session.

A player sends one after each move: where they placed their mark, and what the board looks like
on their side afterwards. The session may add a winner / stalemate annotation before passing it
on to the opponent. Messages targeting NO_MOVE (-1, -1) are control messages: they carry a status
(handshake, notices from the server, whatever the clients agree on) and are never evaluated.

Fields are strict: a JSON `true` or `"1"` is not a player id. Unknown fields are kept, so that
clients can put whatever they agree on into their control messages.
"""

from typing import Any, Optional, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StrictBool,
    StrictInt,
    field_validator,
    model_validator,
)

from src.core.shared_types import (
    BOARD_SIZE,
    EMPTY,
    NO_MOVE,
    PLAYER_IDS,
    Cell,
    Grid,
    PlayerID,
)


def _empty_grid() -> Grid:
    return [[EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]


class MoveMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    sender: Optional[StrictInt] = None
    target: tuple[StrictInt, StrictInt] = NO_MOVE
    # NOTE: not typed on purpose. Control messages may carry anything here, and the board of a
    # move is checked by the Board when evaluating (InvalidBoardError, not a decode failure)
    board: Any = Field(default_factory=_empty_grid)
    running: StrictBool = True
    winner: Optional[StrictInt] = None
    stalemate: StrictBool = False
    notice: Optional[str] = None

    # Payload a control message arrived with, sent on as it is
    _received_payload: Optional[bytes] = PrivateAttr(default=None)

    @field_validator("sender", "winner")
    @classmethod
    def validate_player_id(cls, value: Optional[PlayerID]) -> Optional[PlayerID]:
        if value is not None and value not in PLAYER_IDS:
            raise ValueError(f"Unknown player id: {value!r}")
        return value

    @field_validator("target")
    @classmethod
    def validate_target(cls, value: Cell) -> Cell:
        if value == NO_MOVE:
            return value
        row, col = value
        if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
            raise ValueError(
                f"Target {value} is neither a cell on the board nor the no-move sentinel {NO_MOVE}."
            )
        return value

    @model_validator(mode="after")
    def validate_move_has_sender(self) -> Self:
        if not self.is_control_message() and self.sender is None:
            raise ValueError("A move must name the player who made it.")
        return self

    def __eq__(self, other: object) -> bool:
        # the received payload is transport bookkeeping, two messages with the same content are equal
        if not isinstance(other, MoveMessage):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    # --- Factories for messages created by the server ---
    @classmethod
    def paired(cls) -> Self:
        """First message of a session, sent to player 1 once an opponent has been found."""
        return cls()

    @classmethod
    def termination_notice(cls, reason: str) -> Self:
        """Tells a player the session is over for a reason other than the game ending."""
        return cls(running=False, notice=reason)

    # --- Wire payload of control messages ---
    @property
    def received_payload(self) -> Optional[bytes]:
        return self._received_payload

    def keep_received_payload(self, payload: bytes) -> None:
        """Remember the exact bytes of a received control message. Moves never keep theirs:
        the session may annotate them, and then the original bytes would be a lie.
        """
        if self.is_control_message():
            self._received_payload = payload

    # --- Inspection / annotation ---
    def is_control_message(self) -> bool:
        return tuple(self.target) == NO_MOVE

    def has_verdict(self) -> bool:
        """True if the message claims the game ended (winner or stalemate)"""
        return self.winner is not None or self.stalemate

    def without_verdict(self) -> Self:
        """Copy with any winner / stalemate claim removed: only the server decides those."""
        return self.model_copy(update={"winner": None, "stalemate": False})

    def with_winner(self, player_id: PlayerID) -> Self:
        """Copy announcing the winner. The game is over, so the copy is no longer running."""
        return self.model_copy(update={"winner": player_id, "running": False})

    def with_stalemate(self) -> Self:
        return self.model_copy(update={"stalemate": True, "running": False})

    def describe(self) -> str:
        """One line for the logs. Not part of the wire format."""
        if self.is_control_message():
            kind = f"control notice={self.notice!r}" if self.notice else "control"
        else:
            kind = f"move target={self.target}"
        try:
            board = "/".join("".join(str(cell) for cell in row) for row in self.board)
        except TypeError:
            board = repr(self.board)
        return (
            f"{kind} sender={self.sender} running={self.running} winner={self.winner} "
            f"stalemate={self.stalemate} board={board}"
        )
