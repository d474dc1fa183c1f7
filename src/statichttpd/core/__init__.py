"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    socket_server.py   Listening socket and accept loop
    connection.py      Per-client socket wrapper (read once, half-close, send)
    thread_pool.py     Fixed-size worker pool

Concurrency model: one accept loop thread, ``threads_max`` worker threads,
one connection per worker at a time. No event loop, no async.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
