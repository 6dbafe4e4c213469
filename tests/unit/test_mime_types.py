"""
Unit tests for the MIME registry.
"""

import pytest

from tcpwebserver.http.mime_types import DEFAULT_MIME_TYPES, MimeRegistry


class TestMimeRegistry:
    """Tests for MimeRegistry class."""

    @pytest.mark.parametrize("extension, expected", [
        (".html", "text/html"),
        (".css", "text/css"),
        (".js", "application/javascript"),
    ])
    def test_default_types(self, extension: str, expected: str):
        assert MimeRegistry().lookup(extension) == expected

    def test_lookup_is_case_insensitive(self):
        registry = MimeRegistry()

        assert registry.lookup(".HTML") == "text/html"
        assert registry.lookup(".Css") == "text/css"

    def test_leading_dot_is_optional(self):
        assert MimeRegistry().lookup("js") == "application/javascript"

    @pytest.mark.parametrize("extension", ["", ".bin", ".txt", ".htm", ".php"])
    def test_unknown_extensions(self, extension: str):
        assert MimeRegistry().lookup(extension) is None

    def test_content_type_for_path(self):
        registry = MimeRegistry()

        assert registry.content_type_for("docs/page.HTML") == "text/html"
        assert registry.content_type_for("README") is None

    def test_contains(self):
        registry = MimeRegistry()

        assert ".css" in registry
        assert ".bin" not in registry
        assert 42 not in registry

    def test_custom_types_are_normalized(self):
        registry = MimeRegistry({"SVG": "image/svg+xml"})

        assert registry.lookup(".svg") == "image/svg+xml"
        assert registry.extensions == frozenset({".svg"})
        assert registry.lookup(".html") is None

    def test_defaults_are_not_shared(self):
        registry = MimeRegistry()

        assert len(registry) == len(DEFAULT_MIME_TYPES)
        assert registry.extensions == frozenset(DEFAULT_MIME_TYPES)

    def test_read_only(self):
        registry = MimeRegistry()
        with pytest.raises(TypeError):
            registry._types[".bin"] = "application/octet-stream"
