"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

from statichttpd import HTTPServer, ServerConfig
from statichttpd.core import Connection


ERROR_TEMPLATE = (
    "<html><head><title>{}</title></head>"
    "<body><h1>{}</h1><p>{}</p></body></html>"
)

# A PNG header: not valid UTF-8
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /hello.htm HTTP/1.1\r\n"
        b"Host: localhost:7878\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def webroot(tmp_path: Path) -> Path:
    """A webroot with a text page, a binary image and a subdirectory."""
    root = tmp_path / "webroot"
    root.mkdir()
    (root / "hello.htm").write_text("<html><body>Hello!</body></html>", encoding="utf-8")
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "notes.zzz").write_text("plain notes", encoding="utf-8")
    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body { color: red; }", encoding="utf-8")
    return root


@pytest.fixture
def error_page(tmp_path: Path) -> Path:
    """An error.html template file."""
    path = tmp_path / "error.html"
    path.write_text(ERROR_TEMPLATE, encoding="utf-8")
    return path


@pytest.fixture
def config(webroot: Path, error_page: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        listen_addr="127.0.0.1:0",  # Let OS pick a free port
        webroot=str(webroot),
        error_page=str(error_page),
        threads_max=4,
        request_max_bytes=1000,
    )


class FakeSocket:
    """
    Socket stand-in that records every call, in order.

    recv() returns the queued data, or raises ``recv_error`` if set.
    """

    def __init__(self, data: bytes = b"", recv_error: Exception = None,
                 send_error: Exception = None, peer=None):
        self.data = data
        self.recv_error = recv_error
        self.send_error = send_error
        self.peer = peer
        self.calls: list[str] = []
        self.sent = b""

    def setblocking(self, flag):
        pass

    def recv(self, bufsize):
        self.calls.append("recv")
        if self.recv_error:
            raise self.recv_error
        chunk, self.data = self.data[:bufsize], self.data[bufsize:]
        return chunk

    def shutdown(self, how):
        self.calls.append({socket.SHUT_RD: "shutdown_rd", socket.SHUT_WR: "shutdown_wr"}.get(how, "shutdown"))

    def sendall(self, data):
        self.calls.append("sendall")
        if self.send_error:
            raise self.send_error
        self.sent += data

    def getpeername(self):
        if self.peer is None:
            raise OSError("Transport endpoint is not connected")
        return self.peer

    def close(self):
        self.calls.append("close")


@pytest.fixture
def fake_socket_factory():
    return FakeSocket


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """A connected (server_side, client_side) pair of real sockets."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for s in (server_side, client_side):
        try:
            s.close()
        except OSError:
            pass


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


@pytest.fixture
def exchange(socket_pair):
    """Send a request through a socket pair, run the handler, return the raw response."""
    server_side, client_side = socket_pair

    def _exchange(handler, request: bytes) -> bytes:
        client_side.sendall(request)
        handler.handle(Connection(socket=server_side, address=("127.0.0.1", 40000)))
        return recv_all(client_side)

    return _exchange


class RunningServer:
    """Server running in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            return recv_all(s)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """Start a server on a free port."""
    srv = RunningServer(HTTPServer(config))
    srv.start()
    yield srv
    srv.stop()
