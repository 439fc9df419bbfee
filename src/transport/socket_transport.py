"""Implementation of Transport on top of a connected stream socket"""

import socket
import time
from typing import Optional

from src.core.exceptions import TransportError
from src.game.message import MoveMessage
from src.transport.codec import (
    DEFAULT_MAX_FRAME_BYTES,
    HEADER_SIZE,
    decode_payload,
    encode_message,
    read_frame_length,
)


class SocketTransport:
    """Length-prefixed JSON frames over a socket.

    receive_timeout bounds each receive() call as a whole (seconds). None blocks until the player sends.
    """

    def __init__(
        self,
        sock: socket.socket,
        *,
        receive_timeout: Optional[float] = None,
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
    ) -> None:
        self.sock = sock
        self.receive_timeout = receive_timeout
        self.max_frame_bytes = max_frame_bytes
        self._closed = False
        self.sock.settimeout(receive_timeout)

    def send(self, message: MoveMessage) -> None:
        if self._closed:
            raise TransportError("Cannot send on a closed transport.")
        try:
            self.sock.settimeout(self.receive_timeout)
            self.sock.sendall(encode_message(message))
        except OSError as exc:
            raise TransportError(f"Sending to player failed: {exc}") from exc

    def receive(self) -> MoveMessage:
        if self._closed:
            raise TransportError("Cannot receive on a closed transport.")
        # the timeout covers the whole message, not each chunk of it
        deadline = (
            None
            if self.receive_timeout is None
            else time.monotonic() + self.receive_timeout
        )
        header = self._receive_exactly(HEADER_SIZE, deadline)
        length = read_frame_length(header, self.max_frame_bytes)
        return decode_payload(self._receive_exactly(length, deadline))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected by the other side
            pass
        self.sock.close()

    def _receive_exactly(self, size: int, deadline: Optional[float]) -> bytes:
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            if deadline is not None:
                time_left = deadline - time.monotonic()
                if time_left <= 0:
                    raise self._timed_out()
                self.sock.settimeout(time_left)
            try:
                chunk = self.sock.recv(remaining)
            except socket.timeout as exc:
                raise self._timed_out() from exc
            except OSError as exc:
                raise TransportError(f"Receiving from player failed: {exc}") from exc
            if not chunk:
                raise TransportError("Player closed the connection.")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _timed_out(self) -> TransportError:
        return TransportError(
            f"No message from player within {self.receive_timeout} seconds."
        )
