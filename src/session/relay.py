"""
The Session relays one game between two connected players.

Player 1 is told that an opponent was found, then the session alternates strictly: one message
from player 1 is checked and forwarded to player 2, one message from player 2 is checked and
forwarded to player 1, and so on. A session ends when a forwarded move wins or fills the board, or
when anything goes wrong with one of the players (connection lost, garbage received, impossible
board). Sessions never share state, each one runs on its own thread.

---
NOTE: Win / stalemate detection looks at the board as *reported by the player who moved*. Unless
`authoritative_board` is switched on, a client that lies about the board can fake a win.
"""

import threading
from typing import Optional
from uuid import uuid4

from src.core.config import RelaySettings
from src.core.exceptions import (
    DecodeError,
    InconsistentMoveError,
    InvalidBoardError,
    RelayError,
    TransportError,
)
from src.core.logging_config import get_logger
from src.core.shared_types import (
    PLAYER_ONE,
    PLAYER_TWO,
    Outcome,
    PlayerID,
    SessionState,
    TerminationReason,
    opponent_of,
)
from src.game.board import Board, evaluate
from src.game.message import MoveMessage
from src.transport.base import Transport

FAILURE_REASONS: dict[type[RelayError], TerminationReason] = {
    TransportError: TerminationReason.TRANSPORT_ERROR,
    DecodeError: TerminationReason.DECODE_ERROR,
    InvalidBoardError: TerminationReason.INVALID_BOARD,
}


class Session:
    """State machine HANDSHAKE -> RELAYING -> TERMINATED for one pair of players."""

    def __init__(
        self,
        player_one: Transport,
        player_two: Transport,
        *,
        settings: Optional[RelaySettings] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.transports: dict[PlayerID, Transport] = {
            PLAYER_ONE: player_one,
            PLAYER_TWO: player_two,
        }
        self.settings = settings or RelaySettings()
        self.session_id = session_id or str(uuid4())
        self.state = SessionState.HANDSHAKE
        self.termination: Optional[TerminationReason] = None

        # Alternation bookkeeping: messages taken from a player / delivered to a player
        self.received_from: dict[PlayerID, int] = {PLAYER_ONE: 0, PLAYER_TWO: 0}
        self.forwarded_to: dict[PlayerID, int] = {PLAYER_ONE: 0, PLAYER_TWO: 0}

        # Only used with settings.authoritative_board
        self.board = Board.empty()

        self.log = get_logger("Session", self.session_id)
        # Player whose connection / data we are dealing with right now: blamed if it fails
        self._current_player: PlayerID = PLAYER_ONE

    # --- Entry points ---
    def run(self) -> None:
        """Play the session to its end on the calling thread. Both transports are closed afterwards."""
        try:
            self._handshake()
            player = PLAYER_ONE
            while self.state == SessionState.RELAYING:
                self._relay_turn(player)
                player = opponent_of(player)
        except (TransportError, DecodeError, InvalidBoardError) as exc:
            self._fail(exc)
        finally:
            self._close_transports()

    def start(self) -> threading.Thread:
        """Run the session in a daemon thread of its own."""
        thread = threading.Thread(
            target=self.run, name=f"session-{self.session_id}", daemon=True
        )
        thread.start()
        return thread

    # --- Protocol steps ---
    def _handshake(self) -> None:
        self.log.info("Players paired, notifying player %s", PLAYER_ONE)
        self._current_player = PLAYER_ONE
        self.transports[PLAYER_ONE].send(MoveMessage.paired())
        self.state = SessionState.RELAYING

    def _relay_turn(self, source: PlayerID) -> None:
        """Receive one message from `source`, check it, pass it on to the opponent."""
        destination = opponent_of(source)

        self._current_player = source
        message = self.transports[source].receive()
        self.received_from[source] += 1

        message, outcome = self.verify_move(source, message)

        self._current_player = destination
        self.transports[destination].send(message)
        self.forwarded_to[destination] += 1
        self.log.debug("Player %s -> player %s: %s", source, destination, message.describe())

        if outcome == Outcome.WIN:
            self.log.info("Player %s won", message.winner)
            self._terminate(TerminationReason.WIN)
        elif outcome == Outcome.STALEMATE:
            self.log.info("Board is full, stalemate")
            self._terminate(TerminationReason.STALEMATE)

    def verify_move(
        self, source: PlayerID, message: MoveMessage
    ) -> tuple[MoveMessage, Outcome]:
        """Work out the outcome of a move from the sender's board and annotate the message with it.

        Only the outcome computed here ends a session: a winner or stalemate set by the client is
        dropped before evaluating. Control messages, and moves from a player that no longer
        considers the game running, are returned untouched with Outcome.NONE. With
        `authoritative_board` the latter are checked and evaluated like any other move.
        """
        if message.is_control_message():
            return message, Outcome.NONE
        if not message.running and not self.settings.authoritative_board:
            return message, Outcome.NONE

        if message.has_verdict():
            self.log.warning(
                "Player %s claims the game is over, ignoring the claim", source
            )
            message = message.without_verdict()

        if self.settings.authoritative_board:
            self._apply_to_authoritative_board(source, message)

        # MoveMessage validation guarantees a move names its sender
        player = message.sender if message.sender is not None else source
        outcome = evaluate(message.board, player)
        if outcome == Outcome.WIN:
            return message.with_winner(player), outcome
        if outcome == Outcome.STALEMATE:
            return message.with_stalemate(), outcome
        return message, outcome

    def _apply_to_authoritative_board(self, source: PlayerID, message: MoveMessage) -> None:
        """Accept the reported board only if it is our board plus the sender's single new mark."""
        if message.sender != source:
            raise InconsistentMoveError(
                f"Player {source} sent a move in the name of player {message.sender}."
            )
        row, col = message.target
        try:
            expected = self.board.place(row, col, source)
        except InvalidBoardError as exc:
            raise InconsistentMoveError(
                f"Player {source} cannot move to {message.target}: {exc}"
            ) from exc

        if Board.from_rows(message.board) != expected:
            raise InconsistentMoveError(
                f"Board reported by player {source} does not match the moves played so far."
            )
        self.board = expected

    # --- Termination ---
    def _terminate(self, reason: TerminationReason) -> None:
        self.state = SessionState.TERMINATED
        self.termination = reason
        self.log.info("Session terminated: %s", reason)

    def _fail(self, exc: TransportError | DecodeError | InvalidBoardError) -> None:
        reason = next(
            reason
            for error_type, reason in FAILURE_REASONS.items()
            if isinstance(exc, error_type)
        )
        self.log.error(
            "Session failed (%s) while handling player %s: %s",
            reason,
            self._current_player,
            exc,
            exc_info=exc,
        )
        self._terminate(reason)
        if self.settings.notify_on_termination:
            self._notify_survivor(opponent_of(self._current_player), reason)

    def _notify_survivor(self, player: PlayerID, reason: TerminationReason) -> None:
        notice = MoveMessage.termination_notice(
            f"Session terminated: {reason} (player {opponent_of(player)})"
        )
        try:
            self.transports[player].send(notice)
        except TransportError as exc:
            self.log.warning("Could not notify player %s of the termination: %s", player, exc)

    def _close_transports(self) -> None:
        for transport in self.transports.values():
            transport.close()
