"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket with the three operations a request needs:
one bounded read, writes, and a close that happens exactly once.

=============================================================================
ONE READ, ONE REQUEST
=============================================================================

Every connection carries exactly one request and is closed after the
response. The request is taken from a single recv() of at most
buffer_size bytes:

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   settimeout(timeout)         ← read deadline (30s by default)  │
    │   recv(buffer_size)           ← ONE call                        │
    │      │                                                           │
    │      ├── data      → handed to the parser as the whole request  │
    │      ├── b""       → peer closed, nothing to answer             │
    │      └── timeout / reset → ConnectionError, nothing to answer   │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

A request larger than buffer_size is truncated to its first buffer_size
bytes. For browser GETs the request line and the headers that matter
arrive in the first segment, which is all this server needs.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │             │            │           ▲
     └─────────┴─────────────┴────────────┴───────────┘
                     (any failure closes)

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and tests."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Waiting for the request bytes
    PROCESSING = "processing"  # Request in hand, building the response
    WRITING = "writing"        # Sending header / body
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


class ConnectionReadError(ConnectionError):
    """The request could not be read: timeout, reset, or peer closed."""


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log correlation.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Maximum bytes taken by read_request().
        timeout: Read deadline in seconds.
        drain_timeout: How long close() waits for unread client data.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: float = 30.0
    drain_timeout: float = 0.5

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read the request with a single recv() bounded by the deadline.

        Returns:
            Up to buffer_size bytes. Never empty.

        Raises:
            ConnectionReadError: On timeout, socket error, or if the peer
                                 closed without sending anything.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout as e:
            raise ConnectionReadError(f"Read timed out after {self.timeout}s") from e
        except OSError as e:
            raise ConnectionReadError(f"Read failed: {e}") from e

        if not data:
            raise ConnectionReadError("Connection closed by peer")

        self.state = ConnectionState.PROCESSING
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Send all of data.

        Raises:
            OSError: If the peer is gone. The caller decides whether that
                     matters.
        """
        self.state = ConnectionState.WRITING
        # sendall() loops until every byte is queued or the socket fails
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR)  → FIN to the client, response is complete
        2. drain              → discard anything the client still sends,
                                so unread data doesn't turn the close into
                                a RST that could eat the response. Bounded
                                by drain_timeout in total, however the
                                client paces its writes
        3. close()            → release the file descriptor
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        deadline = time.monotonic() + self.drain_timeout
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "Connection":
        """
        Use with 'with' so every exit path closes the socket:

            with conn:
                data = conn.read_request()
                conn.send(response)
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
