"""
=============================================================================
STATICHTTPD - Minimal static file HTTP/1.1 server
=============================================================================

Serves files from a document root in answer to GET requests, one request
per connection, on a fixed pool of worker threads.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    statichttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m statichttpd)
    ├── server.py            # ConnectionHandler + HTTPServer
    ├── config.py            # ServerConfig dataclass, web.toml loading
    ├── access_log.py        # One log line per connection
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   ├── connection.py    # Client socket wrapper
    │   └── thread_pool.py   # Fixed-size worker pool
    ├── http/
    │   ├── request.py       # Request line parser
    │   ├── response.py      # Response model, error page, serialization
    │   ├── status_codes.py  # Status codes and reason phrases
    │   └── mime_types.py    # Extension → MIME type
    └── handlers/
        └── static.py        # Webroot lookup

=============================================================================
QUICK START
=============================================================================

    from statichttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(listen_addr="127.0.0.1:7878", webroot="public"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, ConnectionHandler
from .config import ServerConfig, ConfigError, load_config

__all__ = [
    "HTTPServer", "ConnectionHandler",
    "ServerConfig", "ConfigError", "load_config",
    "__version__",
]
