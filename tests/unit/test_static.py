"""
Unit tests for path resolution and static file serving.
"""

from pathlib import Path

import pytest

from tcpwebserver.handlers.static import PathResolver, StaticFileHandler, serve_static
from tcpwebserver.http.errors import (
    MethodNotAllowed,
    PathTraversal,
    ResourceMissing,
    TypeNotAllowed,
)
from tcpwebserver.http.mime_types import MimeRegistry
from tcpwebserver.http.request import HTTPRequest


def get(target: str) -> HTTPRequest:
    return HTTPRequest(method="GET", target=target)


class TestPathResolver:
    """Tests for PathResolver gates, in the order they run."""

    def test_root_maps_to_index(self, resolver: PathResolver, webroot: Path):
        target = resolver.resolve(get("/"))

        assert target.absolute_path == webroot.resolve() / "index.html"
        assert target.extension == ".html"

    def test_custom_index_file(self, webroot: Path, mime_types: MimeRegistry):
        resolver = PathResolver(webroot, mime_types, index_file="styles.css")
        assert resolver.resolve(get("/")).extension == ".css"

    def test_plain_file(self, resolver: PathResolver, webroot: Path):
        target = resolver.resolve(get("/styles.css"))
        assert target.absolute_path == webroot.resolve() / "styles.css"

    def test_nested_file(self, resolver: PathResolver, webroot: Path):
        target = resolver.resolve(get("/docs/page.html"))
        assert target.absolute_path == webroot.resolve() / "docs" / "page.html"

    @pytest.mark.parametrize("target, expected", [
        ("//index.html", ("index.html",)),
        ("//docs/page.html", ("docs", "page.html")),
        ("//", ("index.html",)),
    ])
    def test_double_slash_stays_inside_root(self, resolver: PathResolver, webroot: Path, target, expected):
        """Extra leading slashes are stripped, not read as a host or an absolute path."""
        resolved = resolver.resolve(get(target))
        assert resolved.absolute_path == webroot.resolve().joinpath(*expected)

    def test_dot_dot_staying_inside_root(self, resolver: PathResolver, webroot: Path):
        target = resolver.resolve(get("/docs/../index.html"))
        assert target.absolute_path == webroot.resolve() / "index.html"

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "HEAD", "OPTIONS"])
    def test_only_get_is_allowed(self, resolver: PathResolver, method: str):
        with pytest.raises(MethodNotAllowed) as exc_info:
            resolver.resolve(HTTPRequest(method=method, target="/index.html"))

        assert exc_info.value.status_code == 405

    def test_method_checked_before_anything_else(self, resolver: PathResolver):
        """A POST to a traversal target is still a 405."""
        with pytest.raises(MethodNotAllowed):
            resolver.resolve(HTTPRequest(method="POST", target="/../secret.txt"))

    @pytest.mark.parametrize("target", [
        "/../secret.txt",
        "/../../../../etc/passwd.html",
        "/docs/../../secret.txt",
        "/../site-evil/index.html",
    ])
    def test_traversal_is_forbidden(self, resolver: PathResolver, target: str):
        with pytest.raises(PathTraversal) as exc_info:
            resolver.resolve(get(target))

        assert exc_info.value.status_code == 403

    def test_sibling_directory_with_common_prefix(self, webroot: Path, mime_types: MimeRegistry):
        """site-evil/ starts with 'site' but is not inside site/."""
        evil = webroot.parent / "site-evil"
        evil.mkdir()
        (evil / "index.html").write_text("<p>evil</p>")

        resolver = PathResolver(webroot, mime_types)
        with pytest.raises(PathTraversal):
            resolver.resolve(get("/../site-evil/index.html"))

    def test_traversal_logs_warning(self, resolver: PathResolver, caplog):
        with caplog.at_level("WARNING", logger="tcpwebserver.handlers.static"):
            with pytest.raises(PathTraversal):
                resolver.resolve(get("/../secret.txt"))

        assert "traversal" in caplog.text.lower()

    @pytest.mark.parametrize("target", ["/data.bin", "/secret.txt", "/README", "/docs"])
    def test_unlisted_extension_is_forbidden(self, resolver: PathResolver, target: str):
        with pytest.raises(TypeNotAllowed) as exc_info:
            resolver.resolve(get(target))

        assert exc_info.value.status_code == 403

    def test_extension_checked_before_existence(self, resolver: PathResolver):
        """A missing .bin file is 403, not 404."""
        with pytest.raises(TypeNotAllowed):
            resolver.resolve(get("/missing.bin"))

    def test_upper_case_extension_is_allowed(self, webroot: Path, mime_types: MimeRegistry):
        (webroot / "LOUD.HTML").write_text("<p>hi</p>")

        resolver = PathResolver(webroot, mime_types)
        assert resolver.resolve(get("/LOUD.HTML")).extension == ".html"

    def test_missing_file(self, resolver: PathResolver):
        with pytest.raises(ResourceMissing) as exc_info:
            resolver.resolve(get("/missing.html"))

        assert exc_info.value.status_code == 404

    def test_directory_with_allowed_extension_is_missing(self, webroot: Path, resolver: PathResolver):
        (webroot / "folder.html").mkdir()

        with pytest.raises(ResourceMissing):
            resolver.resolve(get("/folder.html"))

    def test_missing_root(self, tmp_path: Path, mime_types: MimeRegistry):
        with pytest.raises(ValueError):
            PathResolver(tmp_path / "nope", mime_types)


class TestStaticFileHandler:
    """Tests for StaticFileHandler.handle."""

    def test_serves_file(self, static_handler: StaticFileHandler):
        response = static_handler.handle(get("/styles.css"))

        assert response.status_code == 200
        assert response.content_type == "text/css"
        assert response.body == "body {\n    color: #333;\n}\n"

    def test_javascript_content_type(self, static_handler: StaticFileHandler):
        assert static_handler.handle(get("/script.js")).content_type == "application/javascript"

    def test_malformed_request_is_bad_request(self, static_handler: StaticFileHandler):
        assert static_handler.handle(HTTPRequest.malformed(b"junk")).status_code == 400

    @pytest.mark.parametrize("request_, status", [
        (HTTPRequest(method="POST", target="/"), 405),
        (get("/../secret.txt"), 403),
        (get("/data.bin"), 403),
        (get("/missing.html"), 404),
    ])
    def test_errors_become_responses(self, static_handler: StaticFileHandler, request_, status):
        response = static_handler.handle(request_)

        assert response.status_code == status
        assert response.content_type == "text/html; charset=utf-8"

    def test_double_slash_nested_file(self, static_handler: StaticFileHandler):
        response = static_handler.handle(get("//docs/page.html"))

        assert response.status_code == 200
        assert response.body == "<p>nested</p>\n"

    def test_traversal_never_leaks_file(self, static_handler: StaticFileHandler):
        assert "top secret" not in static_handler.handle(get("/../secret.txt")).body

    def test_repeated_requests_are_identical(self, static_handler: StaticFileHandler):
        first = static_handler.handle(get("/"))
        second = static_handler.handle(get("/"))

        assert first == second

    def test_serve_static_factory(self, webroot: Path):
        handler = serve_static(webroot)

        assert handler.root_dir == webroot.resolve()
        assert handler.handle(get("/")).status_code == 200
