"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the two kinds of response this server sends: a file, or an error
page. Both end up as the same immutable HTTPResponse value.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                     ← status line            │
    │    Content-Type: text/css\r\n              ← from MimeRegistry      │
    │    Content-Length: 312\r\n                 ← UTF-8 byte count       │
    │    Date: Fri, 16 Oct 2026 12:00:00 GMT\r\n                          │
    │    Server: TCPWebServer/1.0\r\n                                     │
    │    Connection: close\r\n                   ← one request per conn   │
    │    \r\n                                                              │
    │    body { font-family: Arial ... }         ← file text / error page │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Content-Length counts BYTES, not characters. "café" is 4 characters but
5 bytes in UTF-8, and a client that trusts a character count will cut the
body short.

=============================================================================
ERROR PAGES
=============================================================================

Every error is rendered from one small HTML template:

    <h1>404 Not Found</h1>
    <hr>
    <p>TCPWebServer/1.0</p>

The page says nothing about WHY a request was refused. A traversal attempt
and a disallowed extension get the identical 403 body.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import html
import logging

from .errors import RequestError
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


DEFAULT_SERVER_NAME = "TCPWebServer/1.0"
ERROR_CONTENT_TYPE = "text/html; charset=utf-8"

ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>{code} {text}</title>
  </head>
  <body>
    <h1>{code} {text}</h1>
    <hr>
    <p>{signature}</p>
  </body>
</html>
"""


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        ResponseBuilder          to_bytes()              Connection
        returns          ─────►  serializes    ─────►    sendall()
        HTTPResponse             raw bytes               then close

    =========================================================================

    Frozen: handlers build it once and nothing downstream may edit it.
    """

    status_code: int
    status_text: str
    content_type: str
    body: str = ""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {self.status_code} {self.status_text}"

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the response for socket.sendall().

        Args:
            server_name: Value of the Server header.

        Returns:
            Status line, headers, blank line and the UTF-8 body.
        """
        body = self.body_bytes
        headers = {
            "Content-Type": self.content_type,
            "Content-Length": str(len(body)),
            "Date": format_http_date(datetime.now(timezone.utc)),
            "Server": server_name,
            "Connection": "close",
        }

        lines = [self.status_line]
        for name, value in headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + body


class ResponseBuilder:
    """
    Produces success and error responses.

    Usage:
        builder = ResponseBuilder(server_name="TCPWebServer/1.0")

        builder.build_success(Path("webroot/index.html"), "text/html")
        builder.build_error(HTTPStatus.NOT_FOUND)
        builder.from_error(PathTraversal("/../etc/passwd"))

    The builder keeps no per-request state; one instance serves every
    connection thread.
    """

    def __init__(self, server_name: str = DEFAULT_SERVER_NAME):
        """
        Args:
            server_name: Signature printed at the bottom of error pages.
        """
        self.server_name = server_name

    def build_success(self, path: str | Path, content_type: str) -> HTTPResponse:
        """
        Read a file that the path resolver has already approved.

        The resolver checked the file existed, but it can disappear (or
        turn out unreadable, or not be UTF-8) before we get here. Any of
        those is an internal failure, not a 404: the request itself was
        fine.

        Args:
            path: Verified absolute path inside the web root.
            content_type: Content type from the MIME registry.

        Returns:
            200 response with the file text, or a 500 error page.
        """
        # Not read_text(): line endings must reach the client untranslated.
        try:
            body = Path(path).read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return self.build_error(HTTPStatus.INTERNAL_SERVER_ERROR)

        return HTTPResponse(
            status_code=int(HTTPStatus.OK),
            status_text=HTTPStatus.OK.phrase,
            content_type=content_type,
            body=body,
        )

    def build_error(self, status_code: int, status_text: Optional[str] = None) -> HTTPResponse:
        """
        Render the fixed error page.

        Args:
            status_code: HTTP status code, e.g. 404.
            status_text: Reason phrase. Defaults to the standard phrase
                         for known codes.

        Returns:
            HTTPResponse with a text/html; charset=utf-8 body.
        """
        if status_text is None:
            try:
                status_text = HTTPStatus(status_code).phrase
            except ValueError:
                status_text = "Error"

        body = ERROR_PAGE_TEMPLATE.format(
            code=int(status_code),
            text=html.escape(status_text),
            signature=html.escape(self.server_name),
        )
        return HTTPResponse(
            status_code=int(status_code),
            status_text=status_text,
            content_type=ERROR_CONTENT_TYPE,
            body=body,
        )

    def from_error(self, error: RequestError) -> HTTPResponse:
        """Error page for a member of the request error taxonomy."""
        return self.build_error(error.status_code, error.status.phrase)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Fri, 16 Oct 2026 12:00:00 GMT

    HTTP dates are always GMT, never local time, and always English, so
    strftime (which follows the locale) is not used.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def build_error(status_code: int, status_text: Optional[str] = None) -> HTTPResponse:
    """Error page with the default server signature."""
    return ResponseBuilder().build_error(status_code, status_text)
