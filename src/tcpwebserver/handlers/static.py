"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Resolves a request target to a file inside the web root and answers with
its contents, or refuses.

=============================================================================
THE RESOLUTION GATES
=============================================================================

Every request passes the same gates, in this order. The first one that
fails decides the response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /css/../styles.css                                             │
    │     │                                                                │
    │     ├─ 1. METHOD ─────────── not GET?              → 405             │
    │     │                        (file system untouched)                 │
    │     │                                                                │
    │     ├─ 2. NORMALIZE ──────── strip leading "/" and "\"               │
    │     │                        nothing left ("/", "//")? → index.html  │
    │     │                                                                │
    │     ├─ 3. TRAVERSAL ──────── has "..", a separator, or is absolute?  │
    │     │                        └─ resolve it; outside the root? → 403  │
    │     │                                                                │
    │     ├─ 4. EXTENSION ──────── not in MimeRegistry?  → 403             │
    │     │                                                                │
    │     └─ 5. EXISTENCE ──────── no such file?         → 404             │
    │                                                                      │
    │   ResolvedTarget(absolute_path=/srv/webroot/styles.css, ".css")      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY TWO TRAVERSAL CHECKS?
=============================================================================

The substring test in gate 3 is cheap and catches the obvious cases, but
on its own it proves nothing: "%2e%2e" arrives here already decoded,
"....//" games and symlinks exist, and Windows has two separators. The
real boundary is the SECOND check: join the candidate onto the root, let
the OS normalize "." and "..", and demand that what comes out still
starts with the root.

The prefix comparison is case-insensitive (case-insensitive file systems
would otherwise let "/SRV/WEBROOT/.." slip past) and happens on a path
segment boundary, so a root of /srv/web does not accept /srv/webevil.

=============================================================================
INTERVIEW QUESTIONS ABOUT PATH TRAVERSAL
=============================================================================

Q: "Why not just reject any target containing '..'?"
A: "Because '..' can be legitimate ('/docs/../index.html' stays inside
   the root) and because string checks miss encodings and links. Resolve
   the path and check where it actually lands."

Q: "Why is an unknown extension a 403 and not a 404?"
A: "The extension list is an allow-list. Saying 404 would tell an
   attacker whether /config.bak exists. 403 is the same answer whether
   the file is there or not."

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path, PurePath

from ..http.errors import (
    RequestError,
    MalformedRequest,
    MethodNotAllowed,
    PathTraversal,
    TypeNotAllowed,
    ResourceMissing,
)
from ..http.mime_types import MimeRegistry
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder


logger = logging.getLogger(__name__)


ALLOWED_METHOD = "GET"
_LEADING_SEPARATORS = "/\\"


@dataclass(frozen=True)
class ResolvedTarget:
    """
    A target that passed every gate.

    Attributes:
        absolute_path: Verified path of an existing file inside the root.
        extension:     Lowercase extension with leading dot, e.g. ".css".
    """

    absolute_path: Path
    extension: str


class PathResolver:
    """
    Maps request targets to files inside a web root.

    Usage:
        resolver = PathResolver("/srv/webroot", MimeRegistry())
        target = resolver.resolve(request)     # or raises RequestError

    Raises (from resolve):
        MethodNotAllowed:  method is not GET
        PathTraversal:     target resolves outside the root
        TypeNotAllowed:    extension missing or not registered
        ResourceMissing:   no regular file at the resolved path
    """

    def __init__(
        self,
        root_dir: str | Path,
        mime_types: MimeRegistry,
        index_file: str = "index.html",
    ):
        """
        Args:
            root_dir:   Directory to serve. Resolved to an absolute path
                        once, here; it must already exist.
            mime_types: Registry doubling as the extension allow-list.
            index_file: File served for "/".
        """
        self.root_dir = Path(root_dir).resolve()
        self.mime_types = mime_types
        self.index_file = index_file.lstrip(_LEADING_SEPARATORS)

        if not self.root_dir.is_dir():
            raise ValueError(f"Web root directory does not exist: {root_dir}")

    def resolve(self, request: HTTPRequest) -> ResolvedTarget:
        """
        Run a well-formed request through the resolution gates.

        Args:
            request: Parsed request. The caller answers malformed ones
                     with 400 before getting here.

        Returns:
            ResolvedTarget for an existing, allowed file inside the root.
        """
        # ─────────────────────────────────────────────────────────────────
        # GATE 1: METHOD
        # ─────────────────────────────────────────────────────────────────
        if request.method != ALLOWED_METHOD:
            raise MethodNotAllowed(f"Method not allowed: {request.method!r}")

        # ─────────────────────────────────────────────────────────────────
        # GATE 2: NORMALIZE TARGET
        # ─────────────────────────────────────────────────────────────────
        # "/", "//" and friends all mean the index file
        candidate = request.target.lstrip(_LEADING_SEPARATORS) or self.index_file

        # ─────────────────────────────────────────────────────────────────
        # GATE 3: TRAVERSAL
        # ─────────────────────────────────────────────────────────────────
        resolved = None
        if self._needs_traversal_check(candidate):
            resolved = (self.root_dir / candidate).resolve()
            if not self._is_within_root(resolved):
                logger.warning(f"Path traversal attempt: {request.target!r}")
                raise PathTraversal(f"Target escapes web root: {request.target!r}")

        # ─────────────────────────────────────────────────────────────────
        # GATE 4: EXTENSION ALLOW-LIST
        # ─────────────────────────────────────────────────────────────────
        extension = PurePath(candidate).suffix.lower()
        if not extension or self.mime_types.lookup(extension) is None:
            logger.info(f"Refusing unsupported type: {request.target!r}")
            raise TypeNotAllowed(f"Extension not allowed: {extension or '(none)'}")

        # ─────────────────────────────────────────────────────────────────
        # GATE 5: EXISTENCE
        # ─────────────────────────────────────────────────────────────────
        full_path = resolved if resolved is not None else self.root_dir / candidate
        if not full_path.is_file():
            raise ResourceMissing(f"File not found: {request.target!r}")

        return ResolvedTarget(absolute_path=full_path, extension=extension)

    @staticmethod
    def _needs_traversal_check(candidate: str) -> bool:
        """
        Cheap syntactic pre-filter.

        True for anything that could move the path out of the root
        directory: parent segments, absolute paths (including drive
        letters on Windows), and any directory separator.
        """
        if ".." in candidate:
            return True
        if PurePath(candidate).is_absolute():
            return True
        if os.sep in candidate:
            return True
        return bool(os.altsep) and os.altsep in candidate

    def _is_within_root(self, path: Path) -> bool:
        """Case-insensitive prefix test on a path segment boundary."""
        root = str(self.root_dir).lower()
        candidate = str(path).lower()
        if candidate == root:
            return True
        return candidate.startswith(root.rstrip(os.sep) + os.sep)


class StaticFileHandler:
    """
    Turns a parsed request into a response.

        HTTPRequest ──► well formed? ──► PathResolver ──► ResponseBuilder
                             │                │
                             └── 400          └── 403 / 404 / 405

    handle() never raises RequestError: every taxonomy member comes back
    as an error page. Anything else propagates to the connection handler,
    which answers 500.
    """

    def __init__(self, resolver: PathResolver, builder: ResponseBuilder):
        self.resolver = resolver
        self.builder = builder

    @property
    def root_dir(self) -> Path:
        return self.resolver.root_dir

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        try:
            if not request.well_formed:
                raise MalformedRequest("Malformed request line")
            target = self.resolver.resolve(request)
        except RequestError as e:
            logger.debug(f"{type(e).__name__}: {e}")
            return self.builder.from_error(e)

        content_type = self.resolver.mime_types.lookup(target.extension)
        return self.builder.build_success(target.absolute_path, content_type)


def serve_static(root_dir: str | Path, mime_types: MimeRegistry | None = None, **kwargs) -> StaticFileHandler:
    """
    Create a static file handler with default collaborators.

    Example:
        handler = serve_static("./webroot")
        response = handler.handle(request)
    """
    resolver = PathResolver(root_dir, mime_types or MimeRegistry(), **kwargs)
    return StaticFileHandler(resolver, ResponseBuilder())
