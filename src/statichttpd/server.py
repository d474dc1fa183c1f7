"""
=============================================================================
STATIC FILE HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ── accept() ──► HTTPServer._dispatch
                                      │
                                      │ ThreadPool.submit (blocks when full)
                                      ▼
                             ConnectionHandler.handle(conn)   (worker thread)

=============================================================================
ONE CONNECTION, FIVE STEPS
=============================================================================

    1. READ         one recv() of request_max_bytes + 1 bytes
                      read error              → 400 (I/O error text)
                      >= request_max_bytes    → 413
    2. HALF-CLOSE   shutdown(SHUT_RD), whatever step 1 produced
    3. PARSE/SERVE  only if step 1 gave a usable buffer
                      bad request line        → 400
                      method != GET           → 501
                      version != HTTP/1.1     → 505
                      file unreadable         → 404 (I/O error text)
                      file read               → 200
    4. LOG          one access log line: peer + status code
    5. SEND         serialize, sendall(); write errors are logged only

No step is retried and nothing escapes handle(): every failure becomes a
Response at the point it is detected.

Why + 1 on the read size? A request of exactly request_max_bytes - 1
bytes must still be served. Reading one byte more than the limit lets us
tell "fits" from "too big" in a single recv() without cutting a
borderline request short.

=============================================================================
"""

import logging
import time
from typing import Optional, Union

from .access_log import log_access
from .config import ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .handlers import StaticFileHandler
from .http import (
    HTTPStatus, Request, Response, ResponseBuilder, TextBody, parse_request,
)


logger = logging.getLogger(__name__)


SUPPORTED_METHOD = "GET"
SUPPORTED_VERSION = "HTTP/1.1"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConnectionHandler:
    """
    Runs the full lifecycle of one connection.

    Shared by all workers; holds only read-only state (config, the file
    handler and the response builder), so no locking is needed.
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self.static = StaticFileHandler(config.webroot)
        self.builder = ResponseBuilder(error_page=config.error_page)

    def handle(self, conn: Connection) -> None:
        """Serve one connection. Never raises."""
        start_time = time.time()

        try:
            with conn:
                response, request = self.respond(conn)

                log_access(
                    peer=conn.peer,
                    status_code=response.code,
                    method=request.method if request else None,
                    resource=request.resource if request else None,
                    duration_ms=(time.time() - start_time) * 1000,
                    log_format=self.config.log_format,
                )

                conn.send_response(self.builder.build(response))
        except Exception as e:
            # Worker thread boundary
            logger.exception(f"[{conn.id}] Connection error: {e}")

    def respond(self, conn: Connection) -> tuple[Response, Optional[Request]]:
        """
        Steps 1-3: read, half-close, then parse and serve.

        Returns the response plus the parsed request (None when the request
        line never parsed).
        """
        buffer = self.read(conn)

        # Step 2 happens before ANY response is built
        conn.shutdown_read()

        if isinstance(buffer, Response):
            return buffer, None

        return self.process(buffer)

    def read(self, conn: Connection) -> Union[bytes, Response]:
        """Step 1: a single bounded read, or the error response it earned."""
        limit = self.config.request_max_bytes

        try:
            data = conn.read_once(limit + 1)
        except OSError as e:
            return Response(
                code=HTTPStatus.BAD_REQUEST,
                body=TextBody(
                    f"The network stream didn't stay valid long enough "
                    f"for the server to read it: {e}"
                ),
            )

        if len(data) >= limit:
            logger.debug(f"[{conn.id}] Request of {len(data)} bytes exceeds limit of {limit}")
            return Response(code=HTTPStatus.PAYLOAD_TOO_LARGE)

        return data

    def process(self, buffer: bytes) -> tuple[Response, Optional[Request]]:
        """Step 3: parse the request line, apply method/version policy, serve."""
        parsed = parse_request(buffer)
        if isinstance(parsed, Response):
            return parsed, None

        request = parsed
        if request.method != SUPPORTED_METHOD:
            return Response(
                code=HTTPStatus.NOT_IMPLEMENTED,
                body=TextBody(f"Method {request.method} is not supported, only {SUPPORTED_METHOD}"),
            ), request

        if request.http_version != SUPPORTED_VERSION:
            return Response(
                code=HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
                body=TextBody(f"Only {SUPPORTED_VERSION} is supported"),
            ), request

        return self.static.handle(request), request


class HTTPServer:
    """
    Static file server: SocketServer + ThreadPool + ConnectionHandler.

    Usage:
        server = HTTPServer(ServerConfig(webroot="public"))
        server.run()    # Blocks until stop() or SIGINT/SIGTERM
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(size=self.config.threads_max)
        self._handler = ConnectionHandler(self.config)

    @property
    def address(self) -> Optional[tuple]:
        """Bound (host, port) once listening."""
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def run(self):
        """
        Serve until stopped.

        Raises:
            OSError: The listen address could not be bound.
        """
        self._thread_pool.start()

        try:
            self._socket_server.start(self._dispatch)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask the accept loop to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def _dispatch(self, conn: Connection):
        """Hand a connection to the pool; blocks while every worker is busy."""
        try:
            self._thread_pool.submit(self._handler.handle, args=(conn,))
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Dropping connection: {e}")
            conn.close()

    def _shutdown(self):
        self._thread_pool.shutdown(wait=True, timeout=5.0)
        logger.info("Server stopped")


def setup_logging(level: str = "INFO"):
    """Configure the root logger once, for the whole process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("statichttpd").setLevel(level.upper())
