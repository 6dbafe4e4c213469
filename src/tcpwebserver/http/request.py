"""
=============================================================================
HTTP REQUEST-LINE PARSER
=============================================================================

Turns the bytes of a single socket read into an HTTPRequest.

=============================================================================
WHAT WE PARSE (AND WHAT WE DON'T)
=============================================================================

Only the first line of the request matters to a static file server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /styles.css HTTP/1.1\r\n        ← REQUEST LINE (parsed)       │
    │    ─┬─ ─────┬───── ────┬───                                          │
    │     │       │          │                                             │
    │   Method  Target    Version (not validated)                          │
    │                                                                      │
    │    Host: localhost:8080\r\n            ← headers (ignored)           │
    │    User-Agent: curl/8.4.0\r\n                                        │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Headers and body are never looked at. There is no keep-alive, no
Content-Length, no chunked encoding: one request line in, one response
out, connection closed.

=============================================================================
PARSING RULES
=============================================================================

1. Empty buffer             → None (client connected and left; no reply)
2. Split on \r\n, \r or \n  → on the raw bytes; headers are never decoded
3. Decode the line as UTF-8 → undecodable bytes raise InternalError (500)
4. Split line on " "        → fewer than 3 fields is malformed
5. Target                   → query/fragment dropped, then percent-decoded
6. Method                   → upper-cased; GET-only is enforced later (405)

=============================================================================
THE SINGLE-READ LIMITATION
=============================================================================

The connection does ONE recv() of at most buffer_size bytes and hands it
here. A request line split across TCP segments, or longer than the buffer,
is not reassembled. If the buffer came back full and contains no line
terminator we know the line was cut off and report it as malformed rather
than guessing at a truncated target.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote
import re

from .errors import InternalError


DEFAULT_BUFFER_SIZE = 4096


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request line.

    Attributes:
        method:      Upper-cased method ("GET", "POST", ...). Empty when
                     the request is malformed.
        target:      Percent-decoded path, e.g. "/my page.html". Empty
                     when the request is malformed.
        well_formed: False if the request line could not be parsed.
        raw:         The bytes it was parsed from (kept out of repr).

    Invariant: target is non-empty only if well_formed is True.
    """

    method: str
    target: str
    well_formed: bool = True
    raw: bytes = b""

    def __post_init__(self):
        if self.target and not self.well_formed:
            raise ValueError("a malformed request cannot carry a target")

    @classmethod
    def malformed(cls, raw: bytes = b"") -> "HTTPRequest":
        return cls(method="", target="", well_formed=False, raw=raw)

    @property
    def request_line(self) -> str:
        """The first line of the raw request, for logging."""
        line = RequestParser.LINE_BREAK.split(self.raw, maxsplit=1)[0]
        return line.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return (
            f"HTTPRequest(method={self.method!r}, target={self.target!r}, "
            f"well_formed={self.well_formed})"
        )


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

        Raw bytes (one recv)
              │
              ▼
        ┌────────────────────────────────────────────────────────────┐
        │  1. Empty?                 → None                          │
        │  2. First line (bytes)     → malformed if truncated        │
        │  3. Decode line as UTF-8   → InternalError on bad bytes    │
        │  4. METHOD SP TARGET SP .. → malformed if < 3 fields       │
        │  5. Decode target          → malformed if empty or NUL     │
        └────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    The parser holds no per-request state, so one instance is shared by
    every connection thread.
    """

    # Any of CRLF, bare CR, bare LF ends the request line. CRLF must come
    # first in the alternation or "\r\n" would split twice.
    LINE_BREAK = re.compile(rb"\r\n|\r|\n")

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE):
        """
        Args:
            buffer_size: Size of the single read the connection performs.
                         A buffer this full with no line break means the
                         request line was cut off.
        """
        self.buffer_size = buffer_size

    def parse(self, data: bytes) -> Optional[HTTPRequest]:
        """
        Parse the bytes of a single read.

        Args:
            data: Bytes returned by one recv() on the client socket.

        Returns:
            None if data is empty (no request at all), otherwise an
            HTTPRequest, possibly with well_formed=False.

        Raises:
            InternalError: If the request line is not valid UTF-8.
        """
        if not data:
            return None

        lines = self.LINE_BREAK.split(data, maxsplit=1)
        if len(lines) == 1 and len(data) >= self.buffer_size:
            return HTTPRequest.malformed(raw=data)

        # Only the request line is decoded: header values may carry
        # Latin-1 obs-text that is legal HTTP but not UTF-8.
        try:
            line = lines[0].decode("utf-8")
        except UnicodeDecodeError as e:
            raise InternalError(f"Failed to decode request line: {e}") from e

        fields = line.split(" ")
        if len(fields) < 3:
            return HTTPRequest.malformed(raw=data)

        method, uri = fields[0], fields[1]
        target = self._decode_target(uri)
        if not target:
            return HTTPRequest.malformed(raw=data)

        return HTTPRequest(method=method.upper(), target=target, raw=data)

    def _decode_target(self, uri: str) -> str:
        """
        Strip query and fragment, then percent-decode.

            "/my%20page.html?v=2#top"  →  "/my page.html"

        Returns "" for targets we refuse to interpret (empty path, or a
        NUL byte hidden behind %00).

        The target is an origin-form path, never a URL: "//docs/a.html"
        keeps "docs" as a directory instead of reading it as a host.
        Leading separators are the resolver's business.

        Raises:
            InternalError: If the percent-escapes decode to invalid UTF-8.
        """
        path = uri.partition("?")[0].partition("#")[0]
        if not path:
            return ""
        try:
            decoded = unquote(path, errors="strict")
        except UnicodeDecodeError as e:
            raise InternalError(f"Failed to decode target {uri!r}: {e}") from e
        if "\x00" in decoded:
            return ""
        return decoded


def parse_request(data: bytes, buffer_size: int = DEFAULT_BUFFER_SIZE) -> Optional[HTTPRequest]:
    """Parse request bytes with a throwaway RequestParser."""
    return RequestParser(buffer_size=buffer_size).parse(data)
