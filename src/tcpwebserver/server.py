"""
=============================================================================
MAIN WEB SERVER
=============================================================================

The orchestrator that wires every component into a running static file
server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WEB SERVER ARCHITECTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │    WebServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            │                    │                    │              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │  Connection  │    │  Connection  │        │
    │    │  (Listener)  │    │   Workers    │    │   Handler    │        │
    │    └──────────────┘    └──────────────┘    └──────┬───────┘        │
    │                                                   │                 │
    │                 ┌─────────────────┬───────────────┼──────────┐      │
    │                 ▼                 ▼               ▼          ▼      │
    │          ┌────────────┐   ┌─────────────┐  ┌──────────┐ ┌────────┐ │
    │          │  Request   │   │ StaticFile  │  │ Response │ │ Access │ │
    │          │  Parser    │   │ Handler     │  │ Builder  │ │ Logger │ │
    │          └────────────┘   └──────┬──────┘  └──────────┘ └────────┘ │
    │                                  ▼                                  │
    │                          ┌──────────────┐                           │
    │                          │ PathResolver │──► MimeRegistry           │
    │                          └──────────────┘                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection

    2. DISPATCH
       └── ConnectionWorkers starts a thread for it

    3. READ + PARSE (worker thread)
       └── One recv(), RequestParser extracts method and target

    4. RESOLVE
       └── PathResolver: method, traversal, extension, existence gates

    5. RESPOND
       └── ResponseBuilder renders the file or an error page

    6. SEND + CLOSE
       └── One sendall(), then the connection is closed

=============================================================================
INTERVIEW QUESTIONS ABOUT WEB SERVERS
=============================================================================

Q: "Explain how a request flows through your server."
A: "1. Accept TCP connection on listening socket
   2. Start a thread for the connection
   3. Read the request bytes once and parse the request line
   4. Map the target to a file inside the web root, or to an error
   5. Build the response: status line, headers, body
   6. sendall() the bytes, close the connection"

Q: "How do you handle concurrent connections?"
A: "A thread per connection. No pool and no cap: the only shared state
   (MIME table, root path) is read-only, so threads never contend."

Q: "What happens during graceful shutdown?"
A: "1. Set the stop flag, close the listening socket
   2. The accept loop wakes up and exits
   3. Wait (bounded) for in-flight connections
   4. Daemon threads cannot keep the process alive past that"

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from .access_log import AccessLogger
from .bootstrap import ensure_webroot
from .config import ServerConfig
from .core import Connection, ConnectionHandler, ConnectionWorkers, SocketServer
from .handlers import PathResolver, StaticFileHandler
from .http import MimeRegistry, RequestParser, ResponseBuilder


logger = logging.getLogger(__name__)


class WebServer:
    """
    Static file web server.

    =========================================================================
    FEATURES
    =========================================================================

    - GET-only static file serving from one root directory
    - Extension allow-list doubling as the MIME table
    - Path traversal protection
    - One thread per connection, one request per connection
    - Graceful shutdown (SIGINT/SIGTERM or stop())

    =========================================================================
    USAGE
    =========================================================================

        # Blocking, Ctrl+C to stop
        WebServer(ServerConfig(port=8080, root_dir="./webroot")).run()

        # Background thread (tests, embedding)
        server = WebServer(ServerConfig(port=0, root_dir=tmp))
        thread = threading.Thread(target=server.run)
        thread.start()
        server.wait_until_ready()
        ...
        server.stop()
        thread.join()

    A WebServer runs once. Create a new one to serve again.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, mime_types: Optional[MimeRegistry] = None):
        """
        Build every component. Nothing touches the network yet.

        Args:
            config:     Server configuration. Defaults if not provided.
            mime_types: Extension allow-list. Defaults to html/css/js.

        Raises:
            ValueError: Invalid config, or a missing root with
                        create_root disabled.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        # ─────────────────────────────────────────────────────────────────
        # CONTENT
        # ─────────────────────────────────────────────────────────────────

        if self.config.create_root:
            root = ensure_webroot(self.config.root_dir)
        else:
            root = Path(self.config.root_dir)

        self._mime_types = mime_types or MimeRegistry()

        # ─────────────────────────────────────────────────────────────────
        # REQUEST PIPELINE
        # ─────────────────────────────────────────────────────────────────

        self._parser = RequestParser(buffer_size=self.config.buffer_size)
        self._builder = ResponseBuilder(server_name=self.config.server_name)
        self._resolver = PathResolver(
            root,
            self._mime_types,
            index_file=self.config.index_file,
        )
        self._static = StaticFileHandler(self._resolver, self._builder)
        self._handler = ConnectionHandler(
            parser=self._parser,
            static=self._static,
            builder=self._builder,
            server_name=self.config.server_name,
            access_log=AccessLogger(log_format=self.config.log_format),
        )

        # ─────────────────────────────────────────────────────────────────
        # NETWORKING
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._workers = ConnectionWorkers()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def port(self) -> int:
        """Bound port (the OS-picked one when the config says 0)."""
        return self._socket_server.port

    @property
    def root_directory(self) -> Path:
        return self._resolver.root_dir

    @property
    def mime_types(self) -> MimeRegistry:
        return self._mime_types

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def active_connections(self) -> int:
        return self._workers.active

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting. Returns False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after stop() (or SIGINT/SIGTERM) once in-flight
        connections finished or drain_timeout expired.

        Raises:
            OSError: If the port cannot be bound.
            RuntimeError: If this server already ran.
        """
        self._setup_logging()

        logger.info(f"Serving files from: {self.root_directory}")

        try:
            self._socket_server.start(self._dispatch)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
            self._socket_server.shutdown()
        finally:
            self._drain()

    def stop(self):
        """
        Request shutdown. Returns immediately; run() returns once the
        accept loop has exited and connections have drained.

        Safe to call from any thread, and more than once.
        """
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tcpwebserver").setLevel(level)

    def _drain(self):
        active = self._workers.active
        if active:
            logger.info(f"Waiting up to {self.config.drain_timeout}s for {active} connection(s)")
        self._workers.join(timeout=self.config.drain_timeout)
        logger.info(
            f"Server stopped ({self._workers.spawned} connections, "
            f"{self._workers.failed} handler failures)"
        )

    def _dispatch(self, conn: Connection):
        """Called on the accept thread for each new connection."""
        self._workers.spawn(self._handler, conn)
