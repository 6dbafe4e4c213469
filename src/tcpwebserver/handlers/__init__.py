"""
=============================================================================
HANDLERS MODULE
=============================================================================

A handler takes a parsed HTTPRequest and returns an HTTPResponse. This
server has exactly one: the static file handler, which resolves the
target inside the web root and serves it.

    from tcpwebserver.handlers import serve_static

    handler = serve_static("./webroot")
    response = handler.handle(request)

=============================================================================
"""

from .static import PathResolver, ResolvedTarget, StaticFileHandler, serve_static

__all__ = [
    "PathResolver",
    "ResolvedTarget",
    "StaticFileHandler",
    "serve_static",
]
