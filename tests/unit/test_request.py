"""
Unit tests for HTTP request parsing.
"""

import pytest

from minirouter.http.request import (
    HTTPMethod,
    HTTPParseError,
    Request,
    RequestParser,
    RequestTooLargeError,
    parse_query,
    parse_request,
)
from minirouter.http.status_codes import HTTPStatus


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method is HTTPMethod.GET
        assert request.path == "/api/hello"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_query_params(self, sample_get_request: bytes):
        """Query string is split off the path and parsed."""
        request = parse_request(sample_get_request)

        assert request.path == "/api/hello"
        assert request.query == {"name": "Alice"}
        assert request.get_query("name") == "Alice"
        assert request.get_query("missing") is None
        assert request.get_query("missing", "Guest") == "Guest"

    def test_parse_headers_keep_case(self, sample_get_request: bytes):
        """Header names are stored as received."""
        request = parse_request(sample_get_request)

        assert request.headers["Host"] == "localhost:8080"
        assert request.headers["User-Agent"] == "pytest"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing a POST request with a form body."""
        request = parse_request(sample_post_request)

        assert request.method is HTTPMethod.POST
        assert request.path == "/api/users"
        assert request.content_type == "application/x-www-form-urlencoded"
        assert request.form == {"name": "John", "email": "john@example.com"}

    def test_body_cut_to_content_length(self):
        """Bytes after Content-Length are not part of the body."""
        raw = b"POST /x HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcdef"
        request = parse_request(raw)
        assert request.body == b"abc"

    def test_body_without_content_length(self):
        """Without Content-Length the body is everything after the blank line."""
        raw = b"POST /x HTTP/1.1\r\n\r\nhello"
        assert parse_request(raw).body == b"hello"

    def test_unknown_method_is_unsupported(self):
        """Unknown methods are not rejected, they become UNSUPPORTED."""
        request = parse_request(b"PATCH /api/users HTTP/1.1\r\n\r\n")
        assert request.method is HTTPMethod.UNSUPPORTED
        assert request.path == "/api/users"

    def test_invalid_request_line(self):
        """Malformed request line raises a 400 parse error."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"INVALID\r\n\r\n")
        assert exc_info.value.status_code == 400

    def test_target_must_be_absolute_path(self):
        """Request targets not starting with / are rejected."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET api/users HTTP/1.1\r\n\r\n")

    def test_missing_header_terminator(self):
        """A request without the blank line is incomplete."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n")
        assert exc_info.value.status_code == HTTPStatus.BAD_REQUEST

    def test_invalid_content_length(self):
        """Non-numeric Content-Length is a 400."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: abc\r\n\r\n")
        assert exc_info.value.status_code == 400
        assert not isinstance(exc_info.value, RequestTooLargeError)

    def test_short_body(self):
        """Fewer body bytes than Content-Length declares is a 400."""
        with pytest.raises(HTTPParseError):
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")

    def test_body_too_large(self):
        """Oversized bodies raise RequestTooLargeError (413), never truncate."""
        body = b"x" * 101
        raw = b"POST / HTTP/1.1\r\nContent-Length: 101\r\n\r\n" + body

        with pytest.raises(RequestTooLargeError) as exc_info:
            parse_request(raw, max_body_size=100)
        assert exc_info.value.status_code == 413

    def test_body_at_limit(self):
        """A body exactly at the limit is accepted."""
        raw = b"POST / HTTP/1.1\r\nContent-Length: 100\r\n\r\n" + b"x" * 100
        assert len(parse_request(raw, max_body_size=100).body) == 100

    def test_headers_too_large(self):
        """Header sections above the limit raise RequestTooLargeError."""
        parser = RequestParser(max_header_size=64)
        raw = b"GET / HTTP/1.1\r\nX-Big: " + b"a" * 100 + b"\r\n\r\n"

        with pytest.raises(RequestTooLargeError):
            parser.parse(raw)


class TestHTTPMethod:
    """Tests for HTTPMethod.parse."""

    @pytest.mark.parametrize("text, expected", [
        ("GET", HTTPMethod.GET),
        ("POST", HTTPMethod.POST),
        ("PUT", HTTPMethod.PUT),
        ("DELETE", HTTPMethod.DELETE),
        ("get", HTTPMethod.UNSUPPORTED),
        ("PATCH", HTTPMethod.UNSUPPORTED),
        ("", HTTPMethod.UNSUPPORTED),
    ])
    def test_parse(self, text, expected):
        """Known methods map to members, anything else to UNSUPPORTED."""
        assert HTTPMethod.parse(text) is expected


class TestRequest:
    """Tests for the Request value."""

    def test_from_target_splits_query(self):
        """Path never contains the query component."""
        request = Request.from_target("GET", "/api/hello?name=Alice")

        assert request.path == "/api/hello"
        assert request.query == {"name": "Alice"}
        assert request.query_string == "name=Alice"

    def test_query_string_kept_verbatim(self):
        """The raw query keeps repeats and escapes that the parsed dict folds away."""
        request = Request.from_target("GET", "/search?q=a%20b&tag=1&tag=2")

        assert request.query == {"q": "a b", "tag": "2"}
        assert request.query_string == "q=a%20b&tag=1&tag=2"
        assert Request.from_target("GET", "/search").query_string == ""

    def test_path_with_question_mark_rejected(self):
        """Constructing a Request with '?' in the path fails."""
        with pytest.raises(ValueError):
            Request(method=HTTPMethod.GET, path="/a?b=1")

    def test_frozen(self):
        """Requests cannot be mutated."""
        request = Request.from_target("GET", "/")
        with pytest.raises(AttributeError):
            request.path = "/other"

    def test_get_header_case_insensitive(self):
        """Header lookup ignores case."""
        request = Request.from_target("GET", "/admin", headers={"authorization": "Bearer x"})

        assert request.get_header("Authorization") == "Bearer x"
        assert request.get_header("AUTHORIZATION") == "Bearer x"
        assert request.has_header("Authorization")
        assert request.get_header("X-Missing", "none") == "none"

    def test_form_requires_content_type(self):
        """Form fields are read only from form-encoded bodies."""
        request = Request.from_target(
            "POST", "/api/users",
            headers={"Content-Type": "application/json"},
            body=b'{"name": "John"}',
        )
        assert request.form == {}


class TestParseQuery:
    """Tests for parse_query."""

    def test_last_value_wins(self):
        """Repeated keys keep the last value."""
        assert parse_query("a=1&a=2&b=3") == {"a": "2", "b": "3"}

    def test_values_not_coerced(self):
        """Values stay strings."""
        assert parse_query("page=1") == {"page": "1"}

    def test_blank_values_kept(self):
        """Keys without a value map to an empty string."""
        assert parse_query("flag=") == {"flag": ""}

    def test_empty(self):
        """Empty query string yields an empty dict."""
        assert parse_query("") == {}
