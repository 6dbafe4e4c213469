"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs one accepted connection through the whole pipeline, on its own
thread:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   with conn:                                                         │
    │       raw = conn.read_request()          READING                     │
    │       │                                                              │
    │       ├── b""  ──────────────────────────────────────► CLOSED        │
    │       │                                   (no response at all)       │
    │       ▼                                                              │
    │   parser.parse(raw)                      PARSED                      │
    │       ▼                                                              │
    │   static.handle(request)                 RESOLVED                    │
    │       │   400 / 403 / 404 / 405 come back as error pages             │
    │       │   any other exception becomes a 500                          │
    │       ▼                                                              │
    │   conn.send_response(bytes)              RESPONDING                  │
    │                                                                      │
    │   (leaving the with-block)               CLOSED                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing raised in here reaches the accept loop. A broken request, a
vanished file or a bug in a handler costs one connection, never the
server.

=============================================================================
"""

import time
import logging
from typing import Optional

from ..access_log import AccessLogger, RequestLog
from ..handlers.static import StaticFileHandler
from ..http.errors import RequestError
from ..http.request import HTTPRequest, RequestParser
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import HTTPStatus
from .connection import Connection, ConnectionState


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Owns a connection end-to-end: read, parse, resolve, respond, close.

    One instance is shared by all connection threads. It holds only
    collaborators that are read-only after startup (parser, static
    handler, builder), so no locking is needed.
    """

    def __init__(
        self,
        parser: RequestParser,
        static: StaticFileHandler,
        builder: ResponseBuilder,
        server_name: str,
        access_log: Optional[AccessLogger] = None,
    ):
        self.parser = parser
        self.static = static
        self.builder = builder
        self.server_name = server_name
        self.access_log = access_log or AccessLogger()

    def __call__(self, conn: Connection) -> None:
        self.handle(conn)

    def handle(self, conn: Connection) -> None:
        """
        Process one connection. Always leaves it CLOSED.

        Args:
            conn: Freshly accepted connection.
        """
        with conn:
            start_time = time.time()

            try:
                raw = conn.read_request()
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if not raw:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            request, response = self._respond(conn, raw)

            conn.send_response(response.to_bytes(self.server_name))

            self._log_access(conn, raw, request, response, start_time)

    def _respond(self, conn: Connection, raw: bytes) -> tuple[Optional[HTTPRequest], HTTPResponse]:
        """
        Turn the bytes of the read into a response.

        Returns:
            (request, response). request is None when the bytes could
            not even be decoded.
        """
        request = None
        try:
            request = self.parser.parse(raw)
            conn.state = ConnectionState.PARSED
            response = self.static.handle(request)
        except RequestError as e:
            logger.warning(f"[{conn.id}] {type(e).__name__}: {e}")
            response = self.builder.from_error(e)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            response = self.builder.build_error(HTTPStatus.INTERNAL_SERVER_ERROR)

        conn.state = ConnectionState.RESOLVED
        return request, response

    def _log_access(
        self,
        conn: Connection,
        raw: bytes,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        start_time: float,
    ) -> None:
        if request is None:
            request = HTTPRequest.malformed(raw=raw)

        if request.well_formed:
            method, target = request.method, request.target
        else:
            # Raw request line in place of method and target
            method, target = "", request.request_line[:200]

        self.access_log.log(RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=method,
            target=target,
            status_code=response.status_code,
            content_length=len(response.body_bytes),
            duration_ms=(time.time() - start_time) * 1000,
            timestamp=AccessLogger.timestamp(),
        ))
