"""
=============================================================================
CONNECTION WRAPPER
=============================================================================

Wraps one accepted client socket with the few operations the connection
handler needs, in the order it needs them:

    read_once()       One recv() of at most N bytes
    shutdown_read()   Half-close: we will not read any more
    send_response()   sendall() the serialized response
    close()           Release the socket

=============================================================================
ONE READ, THEN HALF-CLOSE
=============================================================================

Requests are small and bounded (request_max_bytes), so the server reads
exactly once and never loops on recv():

    Client                                Server
       │  GET /hello.htm HTTP/1.1 ...  ──►  │  recv(request_max_bytes + 1)
       │                                    │  shutdown(SHUT_RD)
       │                                    │  ...build response...
       │  ◄──  HTTP/1.1 200 OK ...          │  sendall()
       │                                    │  close()

Shutting down the read side straight after the read tells the stack we
are done with whatever the client is still sending. Writing the response
while unread input is pending can make some network stacks drop the
response, so the read side is always closed BEFORE anything is written.

=============================================================================
NO TIMEOUTS
=============================================================================

The socket is put in plain blocking mode with no timeout. A client that
connects and never sends anything holds its worker until it disconnects.
See DESIGN.md, "Open questions".

=============================================================================
"""

import socket
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


UNKNOWN_PEER = "Unknown"


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Strictly linear: a connection never goes back to an earlier state.
    """

    NEW = "new"              # Just accepted
    READING = "reading"      # Inside the single recv()
    PROCESSING = "processing"  # Read side closed, building the response
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Peer address from accept(), if known.
        id: Short identifier for log correlation.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: Optional[tuple] = None

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's timeout on some
        # platforms; force plain blocking mode.
        self.socket.setblocking(True)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def peer(self) -> str:
        """Peer address as "ip:port", or "Unknown" if it cannot be determined."""
        address = self.address
        if address is None:
            try:
                address = self.socket.getpeername()
            except OSError:
                return UNKNOWN_PEER

        if isinstance(address, tuple) and len(address) >= 2:
            host, port = address[0], address[1]
            return f"[{host}]:{port}" if ":" in str(host) else f"{host}:{port}"
        return str(address) if address else UNKNOWN_PEER

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_once(self, max_bytes: int) -> bytes:
        """
        Perform a single recv() of at most ``max_bytes``.

        Raises:
            OSError: The read failed (reset, refused, ...).
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(max_bytes)
        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    def shutdown_read(self):
        """
        Close the read direction, discarding unread input.

        Failures are only traced: the peer may already be gone, and the
        response is still worth attempting.
        """
        self.state = ConnectionState.PROCESSING
        try:
            self.socket.shutdown(socket.SHUT_RD)
        except OSError as e:
            logger.debug(f"[{self.id}] Read shutdown failed: {e}")

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response.

        Returns:
            True if everything was sent, False if the write failed. Write
            failures are logged here and not retried.
        """
        self.state = ConnectionState.WRITING
        try:
            # sendall() loops until every byte is written or an error occurs
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Write error: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """Close the connection. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            # FIN to the client: the response is complete
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError as e:
            logger.debug(f"[{self.id}] Close failed: {e}")

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
