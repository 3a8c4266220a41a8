"""
Unit tests for HTTP response model and serialization.
"""

import json

from minirouter.http.response import Response, error_response, json_response
from minirouter.http.status_codes import HTTPStatus, status_text


class TestResponse:
    """Tests for Response class."""

    def test_defaults(self):
        """A new response is 200 text/plain with an empty body."""
        response = Response()

        assert response.status_code == 200
        assert response.content_type == "text/plain"
        assert response.body == ""
        assert response.headers == {}

    def test_status_line(self):
        """Test status line generation."""
        response = Response(status_code=404)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_format(self):
        """Serialized head has the fixed headers in order."""
        response = Response().set_text(200, "hello")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 5\r\n"
            b"Connection: close\r\n"
            b"\r\n"
            b"hello"
        )

    def test_content_length_counts_bytes(self):
        """Content-Length is the UTF-8 byte length, not character count."""
        response = Response().set_text(200, "héllo")
        assert b"Content-Length: 6\r\n" in response.to_bytes()

    def test_empty_body(self):
        """Empty body serializes with Content-Length 0."""
        data = Response().to_bytes()
        assert b"Content-Length: 0\r\n" in data
        assert data.endswith(b"\r\n\r\n")

    def test_extra_headers_after_fixed(self):
        """Extra headers follow Connection: close."""
        response = Response().set_header("Access-Control-Allow-Origin", "*")
        head = response.to_bytes().split(b"\r\n\r\n")[0].split(b"\r\n")

        assert head[3] == b"Connection: close"
        assert head[4] == b"Access-Control-Allow-Origin: *"

    def test_reserved_headers_not_duplicated(self):
        """Content-Length set by hand does not reach the wire."""
        response = Response().set_text(200, "abc").set_header("Content-Length", "999")
        data = response.to_bytes()

        assert data.count(b"Content-Length") == 1
        assert b"Content-Length: 3\r\n" in data

    def test_setters_chain(self):
        """Setters return the response itself."""
        response = Response()
        assert response.set_json(201, "{}").set_header("X-A", "1") is response
        assert response.status_code == 201
        assert response.content_type == "application/json"

    def test_set_html(self):
        """set_html sets text/html."""
        response = Response().set_html(200, "<h1>Hi</h1>")
        assert response.content_type == "text/html"

    def test_unknown_status(self):
        """Unmapped status codes serialize with 'Unknown'."""
        response = Response(status_code=418)
        assert response.to_bytes().startswith(b"HTTP/1.1 418 Unknown\r\n")


class TestConvenienceFunctions:
    """Tests for json_response and error_response."""

    def test_json_response(self):
        """json_response serializes the data."""
        response = json_response(Response(), 200, {"count": 3})

        assert response.content_type == "application/json"
        assert json.loads(response.body) == {"count": 3}

    def test_error_response(self):
        """error_response writes {"error": message}."""
        response = error_response(Response(), 401, "Unauthorized")

        assert response.status_code == 401
        assert json.loads(response.body) == {"error": "Unauthorized"}


class TestHTTPStatus:
    """Tests for status phrases."""

    def test_status_phrases(self):
        """Known codes map to their reason phrases."""
        assert status_text(200) == "OK"
        assert status_text(201) == "Created"
        assert status_text(204) == "No Content"
        assert status_text(400) == "Bad Request"
        assert status_text(401) == "Unauthorized"
        assert status_text(404) == "Not Found"
        assert status_text(405) == "Method Not Allowed"
        assert status_text(413) == "Payload Too Large"
        assert status_text(500) == "Internal Server Error"

    def test_unknown_phrase(self):
        """Any other code is 'Unknown'."""
        assert status_text(302) == "Unknown"
        assert status_text(999) == "Unknown"

    def test_status_categories(self):
        """is_error covers 4xx and 5xx."""
        assert not HTTPStatus.OK.is_error
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
