"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tcpwebserver import WebServer, ServerConfig
from tcpwebserver.http import MimeRegistry, ResponseBuilder
from tcpwebserver.handlers import PathResolver, StaticFileHandler


# Exactly 200 bytes, so Content-Length assertions have a known value.
_INDEX_PREFIX = "<html><head><title>Test Site</title></head><body><h1>Hello</h1><p>"
_INDEX_SUFFIX = "</p></body></html>\n"
INDEX_HTML = _INDEX_PREFIX + "x" * (200 - len(_INDEX_PREFIX) - len(_INDEX_SUFFIX)) + _INDEX_SUFFIX

STYLES_CSS = "body {\n    color: #333;\n}\n"
SCRIPT_JS = "console.log('loaded');\n"
SECRET = "top secret\n"


@pytest.fixture
def webroot(tmp_path: Path) -> Path:
    """
    A small site plus a file just outside it:

        tmp_path/
        ├── secret.txt          ← must never be served
        └── site/               ← the web root
            ├── index.html      (200 bytes)
            ├── styles.css
            ├── script.js
            ├── data.bin        (exists, extension not allowed)
            └── docs/
                └── page.html
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML.encode("utf-8"))
    (root / "styles.css").write_bytes(STYLES_CSS.encode("utf-8"))
    (root / "script.js").write_bytes(SCRIPT_JS.encode("utf-8"))
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    (root / "docs").mkdir()
    (root / "docs" / "page.html").write_bytes(b"<p>nested</p>\n")
    (tmp_path / "secret.txt").write_bytes(SECRET.encode("utf-8"))
    return root


@pytest.fixture
def mime_types() -> MimeRegistry:
    return MimeRegistry()


@pytest.fixture
def resolver(webroot: Path, mime_types: MimeRegistry) -> PathResolver:
    return PathResolver(webroot, mime_types)


@pytest.fixture
def static_handler(resolver: PathResolver) -> StaticFileHandler:
    return StaticFileHandler(resolver, ResponseBuilder())


@pytest.fixture
def config(webroot: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(webroot),
        create_root=False,
        drain_timeout=2.0,
        log_level="WARNING",
    )


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.port

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:
            self.error = e

    def start(self):
        """Start server in background thread and wait until it accepts."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error!r}")

    def stop(self):
        """Stop the server and wait for run() to return."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    @property
    def stopped(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A WebServer serving the webroot fixture on an OS-picked port."""
    test_srv = RunningServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


def _exchange(port: int, payload: bytes, timeout: float = 5.0) -> bytes:
    """Send payload, half-close, read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        if payload:
            s.sendall(payload)
        s.shutdown(socket.SHUT_WR)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def http_exchange() -> Callable[[int, bytes], bytes]:
    return _exchange


def _split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


@pytest.fixture
def split_response() -> Callable[[bytes], tuple[str, dict, bytes]]:
    return _split_response


@pytest.fixture
def server_factory() -> Generator[Callable[[ServerConfig], RunningServer], None, None]:
    """Start WebServers with custom configs; all are stopped at teardown."""
    started = []

    def start(config: ServerConfig) -> RunningServer:
        test_srv = RunningServer(WebServer(config))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()
