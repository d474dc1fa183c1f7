"""
Unit tests for response building.
"""

import logging

import pytest

from statichttpd.http.response import (
    Response,
    ResponseBuilder,
    TextBody,
    BinaryBody,
    build_response,
    load_error_template,
    render_error_page,
    FALLBACK_ERROR_TEMPLATE,
)


class TestWireFormat:
    """Byte-exact serialization."""

    def test_ok_response_is_byte_exact(self):
        body = "<html><body>Hello!</body></html>"
        response = Response(code=200, mime="text/html", body=TextBody(body))

        result = build_response(response)

        assert result == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html;\r\n"
            b"Content-Length: " + str(len(body)).encode() + b";\r\n"
            b"\r\n" + body.encode()
        )

    def test_content_length_counts_bytes_not_characters(self):
        response = Response(code=200, mime="text/plain", body=TextBody("héllo ✓"))

        result = build_response(response)

        assert b"Content-Length: 10;\r\n" in result
        assert result.endswith("héllo ✓".encode("utf-8"))

    def test_binary_body_passes_through(self):
        data = b"\x89PNG\x00\xff"
        response = Response(code=200, mime="image/png", body=BinaryBody(data))

        result = build_response(response)

        assert b"Content-Type: image/png;\r\n" in result
        assert b"Content-Length: 6;\r\n" in result
        assert result.endswith(b"\r\n\r\n" + data)

    def test_only_two_headers(self):
        result = build_response(Response(code=200, mime="text/css", body=TextBody("a{}")))
        head = result.split(b"\r\n\r\n", 1)[0]

        assert head.split(b"\r\n")[1:] == [b"Content-Type: text/css;", b"Content-Length: 3;"]

    def test_unknown_status_code(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = build_response(Response(code=299, mime="text/plain", body=TextBody("x")))

        assert result.startswith(b"HTTP/1.1 299 Unknown\r\n")
        assert "299" in caplog.text


class TestErrorPages:
    """Error page substitution for non-2xx codes."""

    def test_error_page_from_file(self, error_page):
        response = Response(code=404, mime="image/png", body=TextBody("No such file"))

        result = ResponseBuilder(error_page=error_page).build(response)
        head, body = result.split(b"\r\n\r\n", 1)

        assert head.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert b"Content-Type: text/html;" in head
        assert body == (
            b"<html><head><title>404 Not Found</title></head>"
            b"<body><h1>404 Not Found</h1><p>No such file</p></body></html>"
        )
        assert f"Content-Length: {len(body)};".encode() in head

    def test_binary_body_becomes_empty_detail(self, error_page):
        response = Response(code=500, mime="image/png", body=BinaryBody(b"\xff\xd8"))

        body = ResponseBuilder(error_page=error_page).build(response).split(b"\r\n\r\n", 1)[1]

        assert b"<p></p>" in body
        assert b"\xff\xd8" not in body

    def test_redirects_also_get_error_page(self, error_page):
        """Anything outside [200, 300) is replaced, 3xx included."""
        response = Response(code=301, body=TextBody("moved"))

        body = ResponseBuilder(error_page=error_page).build(response).split(b"\r\n\r\n", 1)[1]

        assert b"<h1>301 Moved Permanently</h1>" in body

    def test_building_twice_is_identical(self, error_page):
        response = Response(code=404, body=TextBody("gone"))
        builder = ResponseBuilder(error_page=error_page)

        assert builder.build(response) == builder.build(response)

    def test_template_is_read_fresh(self, error_page):
        builder = ResponseBuilder(error_page=error_page)
        response = Response(code=404, body=TextBody("gone"))

        first = builder.build(response)
        error_page.write_text("<b>{}</b>{}<i>{}</i>", encoding="utf-8")
        second = builder.build(response)

        assert first != second
        assert second.endswith(b"<b>404 Not Found</b>404 Not Found<i>gone</i>")

    def test_missing_template_falls_back(self, tmp_path, caplog):
        missing = tmp_path / "nope.html"
        response = Response(code=413)

        with caplog.at_level(logging.WARNING):
            result = ResponseBuilder(error_page=missing).build(response)

        body = result.split(b"\r\n\r\n", 1)[1].decode()
        assert body == render_error_page(FALLBACK_ERROR_TEMPLATE, "413 Payload Too Large", "")
        assert "<title>413 Payload Too Large</title>" in body
        assert "<h1>413 Payload Too Large</h1>" in body
        assert "nope.html" in caplog.text

    def test_fallback_keeps_detail_position(self, tmp_path):
        body = build_response(
            Response(code=400, body=TextBody("Malformed request line")),
            error_page=tmp_path / "missing.html",
        ).split(b"\r\n\r\n", 1)[1]

        assert b"<p>Malformed request line</p>" in body


class TestTemplateHelpers:
    """Tests for template loading and rendering."""

    def test_render_fills_in_order(self):
        assert render_error_page("{}|{}|{}", "S", "D") == "S|S|D"

    def test_render_leaves_extra_placeholders(self):
        assert render_error_page("{}{}{}{}", "S", "D") == "SSD{}"

    def test_detail_braces_not_reinterpreted(self):
        assert render_error_page("{}-{}-{}", "S", "a {} b") == "S-S-a {} b"

    def test_load_reads_file(self, error_page):
        assert load_error_template(error_page) == error_page.read_text(encoding="utf-8")

    def test_load_directory_falls_back(self, tmp_path):
        assert load_error_template(tmp_path) == FALLBACK_ERROR_TEMPLATE


class TestResponseModel:
    """Tests for Response and body variants."""

    def test_defaults(self):
        response = Response(code=413)
        assert response.body == TextBody("")
        assert response.is_error

    def test_mime_defaults_to_text_plain(self):
        assert Response(code=200).mime == "text/plain"

    @pytest.mark.parametrize("code,is_error", [(199, True), (200, False), (299, False), (300, True)])
    def test_is_error_boundaries(self, code, is_error):
        assert Response(code=code).is_error is is_error

    def test_body_details(self):
        assert TextBody("hi").detail == "hi"
        assert BinaryBody(b"hi").detail == ""
