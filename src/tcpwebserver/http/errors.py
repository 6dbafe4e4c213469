"""
=============================================================================
REQUEST ERROR TAXONOMY
=============================================================================

Every way a request can fail is an exception that carries the HTTP status
it should be answered with. The connection handler catches RequestError,
turns it into an error page, and the connection still gets a well-formed
response.

    RequestError
    ├── MalformedRequest      400  request line unparseable
    ├── MethodNotAllowed      405  anything but GET
    ├── Forbidden             403
    │   ├── PathTraversal          target escapes the web root
    │   └── TypeNotAllowed         extension not in the allow-list
    ├── ResourceMissing       404  allowed type, no file
    └── InternalError         500  I/O or decoding failure after validation

Both Forbidden kinds render the same generic 403 page. The subclass only
exists so the server can log which policy fired.

=============================================================================
"""

from .status_codes import HTTPStatus


class RequestError(Exception):
    """
    Base class for failures that map onto an HTTP error response.

    Subclasses pin `status`; the message is for logs, never for the client.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message or self.status.phrase)

    @property
    def status_code(self) -> int:
        return int(self.status)


class MalformedRequest(RequestError):
    status = HTTPStatus.BAD_REQUEST


class MethodNotAllowed(RequestError):
    status = HTTPStatus.METHOD_NOT_ALLOWED


class Forbidden(RequestError):
    status = HTTPStatus.FORBIDDEN


class PathTraversal(Forbidden):
    """Target resolves outside the web root."""


class TypeNotAllowed(Forbidden):
    """Target has no extension, or one missing from the MIME registry."""


class ResourceMissing(RequestError):
    status = HTTPStatus.NOT_FOUND


class InternalError(RequestError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
