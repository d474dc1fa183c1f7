"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted client is
wrapped in a Connection and handed to a callback; the accept loop itself
never reads or writes request data.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create the listening socket
    2. bind()      Reserve host:port          ── failure is fatal
    3. listen()    Kernel starts queueing connections (the backlog)
    4. accept()    Take the next queued connection
                   └─ failure is logged and the loop carries on
    5. close()     On shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── bound to listen_addr
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client 1  │         │ Client 2  │         │ Client 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
WHEN EVERY WORKER IS BUSY
=============================================================================

The callback blocks until a worker is free, which pauses the accept loop.
Meanwhile the kernel keeps completing TCP handshakes and queues them in
the listen backlog. There is no queue, limit or rejection in this process.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM stop the accept loop. Python only allows
signal handlers in the main thread, so they are installed only when
start() runs there (tests run the server in a background thread).

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Callable, Optional

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


# Seconds accept() may block before re-checking the running flag
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    TCP listener and accept loop.

    Usage:
        def on_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(on_connection)   # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig, backlog: int = 128):
        self.config = config
        self.backlog = backlog

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening; tests wait on it
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Optional[tuple]:
        """The bound (host, port), with the real port if 0 was configured."""
        if self._socket is None:
            return None
        try:
            return self._socket.getsockname()[:2]
        except OSError:
            return None

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening."""
        return self._ready_event.wait(timeout)

    def _create_socket(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)

        # Restart without waiting for TIME_WAIT to expire
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in a single sendall(); send them right away
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # Only the ACCEPT has a timeout, so shutdown() is noticed.
        # Accepted sockets are switched back to blocking by Connection.
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        return sock

    def _setup_signals(self):
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen, and run the accept loop until shutdown().

        Raises:
            OSError: The socket could not be bound. Logged before raising;
                the caller decides how to exit.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Couldn't bind to addr {self.config.listen_addr}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running
                continue
            except OSError as e:
                if not self._running or self._socket.fileno() == -1:
                    break
                logger.error(f"Failed to accept connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address}")
            connection_handler(Connection(socket=client_socket, address=client_address))

    def shutdown(self):
        """Stop the accept loop. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")
