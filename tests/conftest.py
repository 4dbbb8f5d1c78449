"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vsws import WebServer, ServerConfig
from vsws.core import Connection


INDEX_HTML = b"<html><body><h1>Hello from VSWS</h1></body></html>"
STYLE_CSS = b"body { color: #333; }\n"
ERROR_TEMPLATE = "<html><body><h1>Error ${ErrorCode}</h1><p>${ErrorMessage}</p></body></html>"


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """
    A content root with:

        index.html
        error.html     (ErrorCode / ErrorMessage template)
        style.css
        docs/readme.txt
        music/          (directory, must not be served)
    """
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "error.html").write_text(ERROR_TEMPLATE, encoding="utf-8")
    (tmp_path / "style.css").write_bytes(STYLE_CSS)
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "readme.txt").write_bytes(b"read me\n")
    (tmp_path / "music").mkdir()
    return tmp_path


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request as a browser would send it."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:9999\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def config(content_root: Path) -> ServerConfig:
    """Server configuration pointing at the test content root."""
    return ServerConfig(
        host="127.0.0.1",
        root=str(content_root),
        timeout=2.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


# =============================================================================
# SOCKETPAIR HELPERS
# =============================================================================


class ConnectionPair:
    """
    A Connection on one end of a socketpair, a plain client socket on the
    other. Lets handler tests run without a listener.
    """

    def __init__(self, buffer_size: int = 1024, timeout: float = 2.0):
        server_sock, self.client = socket.socketpair()
        self.client.settimeout(5.0)
        self.conn = Connection(
            socket=server_sock,
            address=("127.0.0.1", 54321),
            buffer_size=buffer_size,
            timeout=timeout,
            drain_timeout=0.05,
        )

    def send(self, data: bytes):
        self.client.sendall(data)

    def receive_all(self) -> bytes:
        """Read until the server side closes."""
        chunks = []
        while True:
            try:
                chunk = self.client.recv(65536)
            except ConnectionResetError:
                break
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def close(self):
        self.client.close()
        self.conn.close()


@pytest.fixture
def connection_pair() -> Generator[ConnectionPair, None, None]:
    pair = ConnectionPair()
    yield pair
    pair.close()


@pytest.fixture
def make_connection_pair():
    """Factory for ConnectionPair with custom buffer_size / timeout."""
    return ConnectionPair


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def parse_response():
    """The split_response helper, for test modules."""
    return split_response


# =============================================================================
# LIVE SERVER
# =============================================================================


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw request bytes on a fresh connection, return everything read."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running server on a free port, serving content_root."""
    config.port = free_port
    config.shutdown_timeout = 2.0

    test_srv = TestServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
