"""Protocol transport (a session only needs to send, receive, and hang up)"""

from typing import Protocol

from src.game.message import MoveMessage


class Transport(Protocol):
    """Duplex, reliable and ordered channel to one player."""

    def send(self, message: MoveMessage) -> None:
        """Deliver a message to the player. Raises TransportError on failure."""
        ...

    def receive(self) -> MoveMessage:
        """Block until the player's next message arrives.

        Raises TransportError when the connection fails (or times out), DecodeError when the
        player sent something that is not a MoveMessage.
        """
        ...

    def close(self) -> None:
        """Release the connection. Calling it more than once is fine."""
        ...
