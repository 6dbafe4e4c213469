"""
Unit tests for HTTP request line parsing.
"""

import pytest

from tcpwebserver.http.errors import InternalError
from tcpwebserver.http.request import (
    HTTPRequest,
    RequestParser,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self):
        """Method and target come from the request line."""
        request = RequestParser().parse(b"GET /index.html HTTP/1.1\r\nHost: test\r\n\r\n")

        assert request.well_formed is True
        assert request.method == "GET"
        assert request.target == "/index.html"

    def test_empty_data_is_no_request(self):
        """Zero bytes means the client never sent anything."""
        assert RequestParser().parse(b"") is None

    def test_method_is_upper_cased(self):
        request = parse_request(b"get /styles.css HTTP/1.1\r\n\r\n")
        assert request.method == "GET"

    def test_other_methods_are_parsed_not_rejected(self):
        """Rejecting non-GET methods is the resolver's job."""
        request = parse_request(b"POST /index.html HTTP/1.1\r\n\r\n")

        assert request.well_formed is True
        assert request.method == "POST"

    def test_headers_are_ignored(self):
        raw = b"GET /a.html HTTP/1.1\r\nHost: x\r\nX-Weird: GET /b.html HTTP/1.1\r\n\r\n"
        assert parse_request(raw).target == "/a.html"

    @pytest.mark.parametrize("raw", [
        b"GET /index.html HTTP/1.1\n\n",
        b"GET /index.html HTTP/1.1\r\r",
        b"GET /index.html HTTP/1.1",
    ])
    def test_line_endings(self, raw: bytes):
        """CRLF, bare LF, bare CR, or no terminator at all."""
        request = parse_request(raw)

        assert request.well_formed is True
        assert request.target == "/index.html"

    def test_percent_decoding(self):
        request = parse_request(b"GET /my%20page.html HTTP/1.1\r\n\r\n")
        assert request.target == "/my page.html"

    def test_query_and_fragment_are_dropped(self):
        request = parse_request(b"GET /index.html?v=2#top HTTP/1.1\r\n\r\n")
        assert request.target == "/index.html"

    def test_encoded_traversal_is_decoded(self):
        """Decoding happens before resolution, so %2e%2e becomes '..'."""
        request = parse_request(b"GET /%2e%2e/secret.txt HTTP/1.1\r\n\r\n")
        assert request.target == "/../secret.txt"

    def test_raw_bytes_are_kept(self):
        raw = b"GET / HTTP/1.1\r\n\r\n"
        assert parse_request(raw).raw == raw

    @pytest.mark.parametrize("target", [b"//index.html", b"//docs/page.html", b"//"])
    def test_double_slash_is_a_path_not_a_host(self, target: bytes):
        """Leading separators are kept for the resolver to strip."""
        request = parse_request(b"GET " + target + b"?v=1 HTTP/1.1\r\n\r\n")

        assert request.well_formed is True
        assert request.target == target.decode("ascii")

    def test_non_utf8_header_is_ignored(self):
        """Latin-1 obs-text in a header value is legal and never decoded."""
        request = parse_request(b"GET /index.html HTTP/1.1\r\nUser-Agent: caf\xe9\r\n\r\n")

        assert request.well_formed is True
        assert request.target == "/index.html"


class TestMalformedRequests:
    """Tests for request lines that cannot be interpreted."""

    @pytest.mark.parametrize("raw", [
        b"GET\r\n\r\n",
        b"GET /index.html\r\n\r\n",
        b"\r\n\r\n",
        b"GARBAGE\r\n",
    ])
    def test_too_few_fields(self, raw: bytes):
        request = parse_request(raw)

        assert request.well_formed is False
        assert request.method == ""
        assert request.target == ""

    def test_empty_target(self):
        """Two spaces in a row leave an empty target field."""
        assert parse_request(b"GET  HTTP/1.1\r\n\r\n").well_formed is False

    def test_nul_byte_in_target(self):
        assert parse_request(b"GET /index.html%00.css HTTP/1.1\r\n\r\n").well_formed is False

    def test_truncated_request_line(self):
        """A full buffer without a line break means the line was cut off."""
        parser = RequestParser(buffer_size=256)
        raw = b"GET /" + b"a" * 300 + b".html HTTP/1.1"

        assert parser.parse(raw[:256]).well_formed is False

    def test_truncation_splitting_a_character(self):
        """A full buffer cut mid-character is truncated, not undecodable."""
        parser = RequestParser(buffer_size=4096)
        raw = b"GET /" + b"a" * 4090 + b"\xc3"

        assert len(raw) == 4096
        assert parser.parse(raw).well_formed is False

    def test_empty_path_before_query(self):
        assert parse_request(b"GET ?page=1 HTTP/1.1\r\n\r\n").well_formed is False

    def test_short_line_without_terminator_is_fine(self):
        parser = RequestParser(buffer_size=256)
        assert parser.parse(b"GET /index.html HTTP/1.1").well_formed is True

    def test_invalid_utf8_bytes(self):
        """Undecodable bytes are an internal failure, not a bad request."""
        with pytest.raises(InternalError) as exc_info:
            parse_request(b"GET /\xff\xfe.html HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == 500

    def test_invalid_utf8_escapes(self):
        with pytest.raises(InternalError):
            parse_request(b"GET /%ff%fe.html HTTP/1.1\r\n\r\n")


class TestHTTPRequest:
    """Tests for the HTTPRequest value object."""

    def test_malformed_factory(self):
        request = HTTPRequest.malformed(raw=b"junk\r\n")

        assert request.well_formed is False
        assert request.method == ""
        assert request.target == ""

    def test_malformed_request_cannot_carry_target(self):
        with pytest.raises(ValueError):
            HTTPRequest(method="GET", target="/x.html", well_formed=False)

    def test_request_line(self):
        request = parse_request(b"GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n")
        assert request.request_line == "GET /index.html HTTP/1.1"

    def test_request_line_of_undecodable_request(self):
        request = HTTPRequest.malformed(raw=b"G\xffT / HTTP/1.1\r\nX: \xe9\r\n\r\n")
        assert request.request_line == "G\ufffdT / HTTP/1.1"

    def test_is_immutable(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")
        with pytest.raises(AttributeError):
            request.target = "/other.html"

    def test_repr_hides_raw_bytes(self):
        request = parse_request(b"GET / HTTP/1.1\r\nCookie: secret\r\n\r\n")
        assert "secret" not in repr(request)
