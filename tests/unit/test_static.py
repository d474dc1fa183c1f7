"""
Unit tests for static file resolution and loading.
"""

import logging
import os

from statichttpd.handlers.static import StaticFileHandler, resolve_path, load_body
from statichttpd.http.request import Request
from statichttpd.http.response import TextBody, BinaryBody


def get(resource: str) -> Request:
    return Request(method="GET", resource=resource, http_version="HTTP/1.1")


class TestResolvePath:
    """Tests for resource → filesystem path mapping."""

    def test_strips_one_leading_slash(self):
        assert resolve_path("/hello.htm", "webroot") == os.path.join("webroot", "hello.htm")

    def test_nested_path(self):
        assert resolve_path("/css/site.css", "webroot") == os.path.join("webroot", "css/site.css")

    def test_only_first_slash_removed(self):
        assert resolve_path("//etc/passwd", "webroot") == "/etc/passwd"

    def test_parent_segments_not_collapsed(self):
        """Traversal segments are passed through untouched."""
        assert resolve_path("/../web.toml", "webroot") == os.path.join("webroot", "../web.toml")

    def test_root(self):
        assert resolve_path("/", "webroot") == os.path.join("webroot", "")


class TestLoadBody:
    """Tests for text/binary tagging."""

    def test_utf8_file_is_text(self, webroot):
        assert load_body(str(webroot / "hello.htm")) == TextBody("<html><body>Hello!</body></html>")

    def test_non_utf8_file_is_binary(self, webroot):
        assert load_body(str(webroot / "logo.png")) == BinaryBody((webroot / "logo.png").read_bytes())


class TestStaticFileHandler:
    """Tests for StaticFileHandler.handle."""

    def test_serves_html(self, webroot):
        response = StaticFileHandler(str(webroot)).handle(get("/hello.htm"))

        assert response.code == 200
        assert response.mime == "text/html"
        assert isinstance(response.body, TextBody)

    def test_serves_binary(self, webroot):
        response = StaticFileHandler(str(webroot)).handle(get("/logo.png"))

        assert response.code == 200
        assert response.mime == "image/png"
        assert response.body == BinaryBody((webroot / "logo.png").read_bytes())

    def test_serves_nested(self, webroot):
        response = StaticFileHandler(str(webroot)).handle(get("/css/site.css"))

        assert response.code == 200
        assert response.mime == "text/css"

    def test_unknown_extension_served_as_text_plain(self, webroot, caplog):
        with caplog.at_level(logging.WARNING):
            response = StaticFileHandler(str(webroot)).handle(get("/notes.zzz"))

        assert response.code == 200
        assert response.mime == "text/plain"
        assert "zzz" in caplog.text

    def test_missing_file_is_404_with_io_error(self, webroot):
        response = StaticFileHandler(str(webroot)).handle(get("/missing.htm"))

        assert response.code == 404
        assert "No such file or directory" in response.body.text

    def test_directory_is_404(self, webroot):
        response = StaticFileHandler(str(webroot)).handle(get("/css"))
        assert response.code == 404

    def test_traversal_is_not_blocked(self, webroot):
        """Known exposure: files outside the webroot are reachable."""
        (webroot.parent / "secret.txt").write_text("top secret", encoding="utf-8")

        response = StaticFileHandler(str(webroot)).handle(get("/../secret.txt"))

        assert response.code == 200
        assert response.body == TextBody("top secret")

    def test_nul_byte_in_resource_is_404(self, webroot):
        """open() rejects the path outright; still answered as not found."""
        response = StaticFileHandler(str(webroot)).handle(get("/a\x00b.htm"))

        assert response.code == 404
        assert "null byte" in response.body.text
