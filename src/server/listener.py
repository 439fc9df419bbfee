"""
Accept loop of the relay server.

Connections are paired in order of arrival: the first one waits, the second one becomes its
opponent. The pair is handed to a new Session running on its own thread, and the listener goes
back to accepting. Whatever happens inside a session stays there.
"""

import socket
import threading
from typing import Optional

from src.core.config import RelaySettings
from src.core.logging_config import get_logger
from src.session.relay import Session
from src.transport.socket_transport import SocketTransport

# How often the accept loop checks whether it was asked to stop (seconds)
ACCEPT_POLL_SECONDS = 0.2


class PairingServer:
    def __init__(self, settings: Optional[RelaySettings] = None) -> None:
        self.settings = settings or RelaySettings()
        self.log = get_logger("Listener")

        self._listener = socket.create_server((self.settings.host, self.settings.port))
        self._listener.settimeout(ACCEPT_POLL_SECONDS)
        self._waiting: Optional[socket.socket] = None
        self._sessions: list[tuple[Session, threading.Thread]] = []
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def address(self) -> tuple[str, int]:
        """Address actually bound (useful when the configured port is 0)"""
        host, port = self._listener.getsockname()[:2]
        return host, port

    @property
    def active_sessions(self) -> list[Session]:
        self._prune_sessions()
        return [session for session, _ in self._sessions]

    # --- Running ---
    def serve_forever(self) -> None:
        """Accept and pair connections until shutdown() is called."""
        host, port = self.address
        self.log.info("Listening on %s:%s", host, port)
        try:
            while not self._stopped.is_set():
                try:
                    conn, addr = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    if self._stopped.is_set():
                        break
                    self.log.error("Accepting a connection failed: %s", exc)
                    continue
                self._handle_connection(conn, addr)
        finally:
            self._close()

    def start(self) -> threading.Thread:
        """serve_forever() in a background thread"""
        self._thread = threading.Thread(
            target=self.serve_forever, name="pairing-server", daemon=True
        )
        self._thread.start()
        return self._thread

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop accepting connections. Sessions already running are left to finish."""
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._close()

    # --- Internal helpers ---
    def _handle_connection(self, conn: socket.socket, addr: tuple) -> None:
        if self._waiting is None:
            self._waiting = conn
            self.log.info("Player connected from %s:%s, waiting for an opponent", *addr[:2])
            return

        first, self._waiting = self._waiting, None
        session = Session(
            self._transport(first), self._transport(conn), settings=self.settings
        )
        self.log.info(
            "Player connected from %s:%s, starting session %s", *addr[:2], session.session_id
        )
        thread = session.start()
        self._prune_sessions()
        self._sessions.append((session, thread))

    def _transport(self, conn: socket.socket) -> SocketTransport:
        return SocketTransport(
            conn,
            receive_timeout=self.settings.turn_timeout,
            max_frame_bytes=self.settings.max_frame_bytes,
        )

    def _prune_sessions(self) -> None:
        """Forget sessions whose thread has finished"""
        self._sessions = [(s, t) for s, t in self._sessions if t.is_alive()]

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._waiting is not None:
            self._waiting.close()
            self._waiting = None
        self._listener.close()
        self.log.info("Listener closed")
