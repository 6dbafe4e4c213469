"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything that knows about HTTP but nothing about sockets:

    request.py       bytes of one read  → HTTPRequest
    response.py      file / error       → HTTPResponse → bytes
    mime_types.py    extension          → content type (and allow-list)
    status_codes.py  HTTPStatus enum with reason phrases
    errors.py        RequestError taxonomy, one class per status

=============================================================================
"""

from .errors import (
    RequestError,
    MalformedRequest,
    MethodNotAllowed,
    Forbidden,
    PathTraversal,
    TypeNotAllowed,
    ResourceMissing,
    InternalError,
)
from .mime_types import MimeRegistry, DEFAULT_MIME_TYPES
from .request import HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, ResponseBuilder, build_error, format_http_date
from .status_codes import HTTPStatus

__all__ = [
    # Errors
    "RequestError",
    "MalformedRequest",
    "MethodNotAllowed",
    "Forbidden",
    "PathTraversal",
    "TypeNotAllowed",
    "ResourceMissing",
    "InternalError",
    # MIME types
    "MimeRegistry",
    "DEFAULT_MIME_TYPES",
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "build_error",
    "format_http_date",
    # Status codes
    "HTTPStatus",
]
