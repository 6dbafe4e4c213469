"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server can answer with, plus their
reason phrases for the status line.

=============================================================================
WHICH CODES, AND WHEN
=============================================================================

    ┌────────┬──────────────────────────┬──────────────────────────────────┐
    │  Code  │  Phrase                  │  Produced when                   │
    ├────────┼──────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                      │  File found and read             │
    │  400   │  Bad Request             │  Request line unparseable        │
    │  403   │  Forbidden               │  Traversal or extension refused  │
    │  404   │  Not Found               │  Allowed type, but no such file  │
    │  405   │  Method Not Allowed      │  Anything other than GET         │
    │  500   │  Internal Server Error   │  Unexpected failure              │
    └────────┴──────────────────────────┴──────────────────────────────────┘

A static file server has no use for redirects, 201 Created or 304 Not
Modified (caching headers are out of scope), so the enum stays small.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200                        # File served

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400               # Malformed request line
    FORBIDDEN = 403                 # Policy rejection (traversal, extension)
    NOT_FOUND = 404                 # Resource doesn't exist
    METHOD_NOT_ALLOWED = 405        # Only GET is served

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500     # Unexpected server error (catch-all)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase is the text that appears after the status code
        in an HTTP response line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └───── Reason phrase
                      └──────────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
