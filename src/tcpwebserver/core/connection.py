"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: a single read, a single write, and a
close that happens exactly once.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP does not preserve message boundaries. A client that sends

    GET /index.html HTTP/1.1\r\n

may be received as one recv() or as "GET /ind" followed by
"ex.html HTTP/1.1\r\n". This server does ONE recv() of up to buffer_size
bytes and parses whatever it got. In practice a request line fits in the
first segment, and browsers and curl send it in one write. A client that
dribbles it out byte by byte gets a 400.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    CONNECTED ──► READING ──► PARSED ──► RESOLVED ──► RESPONDING ──┐
                     │           │           │                      │
                     │           └─── error ─┴──────► RESPONDING    │
                     │                                 (error page) │
                     │  0 bytes read                                │
                     ▼                                              ▼
                   CLOSED ◄─────────────────────────────────────────┘

- An empty read goes straight to CLOSED: the client opened and closed
  without a request, there is nobody to answer.
- Parse or resolution failures still go through RESPONDING with an error
  page.
- CLOSED is reached on every path, exactly once, via close() (usually
  through the context manager).

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
import uuid


logger = logging.getLogger(__name__)


# Upper bounds for the drain in close(), whatever the client keeps sending.
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Tracked for logging and to make close() idempotent.
    """
    CONNECTED = "connected"    # Just accepted, nothing read yet
    READING = "reading"        # Waiting on recv()
    PARSED = "parsed"          # Request line parsed (maybe as malformed)
    RESOLVED = "resolved"      # Response decided
    RESPONDING = "responding"  # Sending response bytes
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. SINGLE READ                                                      │
    │     └── One recv() of at most buffer_size bytes                      │
    │     └── b"" means the client left without sending anything           │
    │                                                                      │
    │  2. STATE TRACKING                                                   │
    │     └── Which phase of the pipeline this connection is in            │
    │                                                                      │
    │  3. SINGLE WRITE                                                     │
    │     └── sendall() of the serialized response                         │
    │                                                                      │
    │  4. CLOSE EXACTLY ONCE                                               │
    │     └── shutdown(SHUT_WR), drain, close()                            │
    │     └── Safe to call again; later calls do nothing                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    No timeout is set on the socket. The read blocks until data arrives,
    the peer closes, or the connection errors out.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Maximum bytes taken by the single read.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.CONNECTED
    created_at: float = field(default_factory=time.time)
    buffer_size: int = 4096

    def __post_init__(self):
        # Blocking with no timeout, whatever the listening socket had.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def client_port(self) -> int:
        return self.address[1] if self.address and len(self.address) > 1 else 0

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Perform the single read.

        Returns:
            Up to buffer_size bytes. b"" when the client closed (or reset)
            the connection before sending anything.

        Raises:
            OSError: For socket errors other than a reset/broken pipe.
        """
        self.state = ConnectionState.READING
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response.

        Uses sendall(): plain send() may write only part of the buffer.

        Returns:
            True if every byte was handed to the kernel, False if the
            client was gone.
        """
        self.state = ConnectionState.RESPONDING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR)  → FIN to the client: "response complete"
        2. Drain              → discard anything the client still sends
        3. close()            → release the file descriptor

        ┌─────────────────────────────────────────────────────────────────┐
        │   Server                              Client                     │
        │      │   FIN ──────────────────────────► │  (shutdown SHUT_WR)  │
        │      │ ◄───────────────────────── ACK   │                       │
        │      │ ◄───────────────────────── FIN   │  (client closes)      │
        │      │   ACK ──────────────────────────► │                       │
        │   (socket closed)                  (socket closed)               │
        └─────────────────────────────────────────────────────────────────┘

        Closing with unread data in the kernel buffer makes the OS send
        RST instead of FIN, and the client may lose the tail of the
        response. Hence the drain. It stops after DRAIN_TIMEOUT seconds in
        total or DRAIN_LIMIT bytes, so a client that keeps trickling data
        cannot hold the thread here.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset: either way we are done reading

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
            # closed here, whatever happened inside
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
