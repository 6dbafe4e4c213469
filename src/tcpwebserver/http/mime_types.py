"""
=============================================================================
MIME TYPE REGISTRY
=============================================================================

Maps file extensions to the Content-Type sent with the file.

=============================================================================
THE REGISTRY IS ALSO THE ALLOW-LIST
=============================================================================

A general-purpose server falls back to application/octet-stream for
unknown extensions and serves the file anyway. This server does not:

    ┌────────────────────────────────────────────────────────────────────┐
    │                    EXTENSION POLICY                                │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   .html  → text/html                 served                        │
    │   .css   → text/css                  served                        │
    │   .js    → application/javascript    served                        │
    │                                                                     │
    │   .bin, .txt, .py, no extension ...  403 Forbidden                 │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

lookup() returning None is not an error. The path resolver reads it as
"refuse this file", the same answer it gives a traversal attempt.

The registry is built once when the server is constructed and is shared
read-only by every connection thread, so the mapping is wrapped in a
MappingProxyType and never mutated.

=============================================================================
"""

from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


# Extensions are lowercase and include the leading dot.
DEFAULT_MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
}


class MimeRegistry:
    """
    Read-only extension → content-type mapping.

    Usage:
        registry = MimeRegistry()
        registry.lookup(".CSS")       # 'text/css'
        registry.lookup(".bin")       # None
        ".js" in registry             # True

    Extra types can be passed at construction; they cannot be added later.
    """

    def __init__(self, types: Optional[Mapping[str, str]] = None):
        entries = dict(DEFAULT_MIME_TYPES if types is None else types)
        self._types = MappingProxyType(
            {self._normalize(ext): content_type for ext, content_type in entries.items()}
        )

    @staticmethod
    def _normalize(extension: str) -> str:
        extension = extension.strip().lower()
        if extension and not extension.startswith("."):
            extension = "." + extension
        return extension

    def lookup(self, extension: str) -> Optional[str]:
        """
        Get the content type for an extension.

        Args:
            extension: Extension with or without the leading dot, any case.

        Returns:
            The content-type string, or None when the extension is not
            registered (including the empty extension).
        """
        if not extension:
            return None
        return self._types.get(self._normalize(extension))

    def content_type_for(self, path: str | Path) -> Optional[str]:
        """Look up a file's content type from its suffix."""
        return self.lookup(Path(path).suffix)

    @property
    def extensions(self) -> frozenset[str]:
        return frozenset(self._types)

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and self.lookup(extension) is not None

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"MimeRegistry({dict(self._types)!r})"
