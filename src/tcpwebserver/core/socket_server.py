"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener loop: bind, listen, accept forever, hand each client socket
to a callback, stop when told to.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve IP:PORT         ← failure here is FATAL
    3. listen()    Start queueing clients
    4. accept()    Block until a client connects, get a NEW socket for it
    5. close()     Release the listening socket (on stop)

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Bound to 0.0.0.0:8080
                    └───────────┬───────────┘     Never sends/receives data
                                │
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client    │         │ Client    │         │ Client    │
    │ Socket 1  │         │ Socket 2  │         │ Socket 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
STOPPING A BLOCKED accept()
=============================================================================

shutdown() may be called from a signal handler or from another thread
while the loop sits in accept(). Two things happen:

    1. The stop flag (a threading.Event) is set.
    2. The listening socket is shut down and closed.

On Linux, shutdown() on a listening socket wakes a blocked accept() with
an error. Elsewhere close() alone may not, so accept() also has a 1 second
timeout and the loop re-checks the flag each time it expires.

Either way accept() ends with an OSError. If the stop flag is set, that
error IS the shutdown and is not reported. If it is not set, it is logged
and the loop keeps accepting.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, kill) trigger shutdown().
Python only allows installing signal handlers from the main thread, so
when the server runs on any other thread (tests, embedding) the
handlers are skipped and the owner calls shutdown() itself.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY             │
    │        ├──► bind()             OSError → logged and re-raised        │
    │        ├──► listen()                                                 │
    │        ├──► _setup_signals()   main thread only                      │
    │        └──► _accept_loop()     blocks until shutdown()               │
    │                 └──► callback(Connection(...))                       │
    │                                                                      │
    │    shutdown()                                                        │
    │        ├──► _stopping.set()                                          │
    │        └──► close listening socket (wakes accept)                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    A SocketServer runs once. After shutdown() it cannot be started again.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, buffer size).

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once, by shutdown(); read by the accept loop on another thread.
        self._stopping = threading.Event()
        # Set once the socket is listening, so callers can wait for it.
        self._ready = threading.Event()
        self._started = False
        self._start_lock = threading.Lock()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._ready.is_set() and not self._stopping.is_set()

    @property
    def is_stopped(self) -> bool:
        return self._stopping.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port). With port 0 in the config this is the port
        the OS actually picked, once the server is listening.
        """
        return self._bound_address or (self.config.host, self.config.port)

    @property
    def port(self) -> int:
        return self.address[1]

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready.wait(timeout)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: rebind right after a restart, despite TIME_WAIT.
        # SO_REUSEPORT is NOT set: a second server on the same port must
        # fail to bind, not silently share the port.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: send the response immediately.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that call shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread, leaving signal handlers alone")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                self._original_handlers[sig] = signal.signal(sig, shutdown_handler)
            except (ValueError, OSError) as e:
                logger.debug(f"Cannot install handler for {sig!r}: {e}")

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection on the
                                accept thread. It must hand the connection
                                off quickly (HTTP handling happens on a
                                worker thread).

        Raises:
            RuntimeError: If this server was already started or stopped.
            OSError: If binding or listening fails (e.g. port in use).
        """
        with self._start_lock:
            if self._started or self._stopping.is_set():
                raise RuntimeError("SocketServer cannot be restarted")
            self._started = True

        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(
                f"Failed to bind to {self.config.host}:{self.config.port}: {e}. "
                f"Is the port already in use?"
            )
            self._stopping.set()
            self._close_socket()
            raise

        self._bound_address = self._socket.getsockname()[:2]
        self._setup_signals()
        self._ready.set()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept until the stop flag is set.

        ┌─────────────────────────────────────────────────────────────────┐
        │   while not stopping:                                            │
        │       accept()  ── timeout ──► loop (re-check flag)              │
        │          │      ── OSError ──► stopping? break : log, continue   │
        │          ▼                                                       │
        │       Connection(client_socket)                                  │
        │       connection_handler(conn)                                   │
        └─────────────────────────────────────────────────────────────────┘
        """
        while not self._stopping.is_set():
            sock = self._socket
            if sock is None:
                break

            try:
                client_socket, client_address = sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._stopping.is_set():
                    break  # Expected: shutdown() closed the socket
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )

            try:
                connection_handler(conn)
            except Exception as e:
                # Dispatch failed: nobody owns this connection now
                logger.exception(f"[{conn.id}] Failed to dispatch connection: {e}")
                conn.close()

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from a signal handler, from another thread, and more
        than once. Connections already handed off are not touched.
        """
        if self._stopping.is_set():
            return
        logger.info("Shutting down socket server...")
        self._stopping.set()
        self._close_socket()

    def _close_socket(self):
        sock = self._socket
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Not connected / already closed
        try:
            sock.close()
        except OSError:
            pass

    def _cleanup(self):
        self._restore_signals()
        self._close_socket()
        self._socket = None
        logger.info("Socket server stopped")
