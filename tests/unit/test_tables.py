"""
Unit tests for the status code and MIME type tables.
"""

import logging

import pytest

from statichttpd.http.status_codes import (
    HTTPStatus,
    STATUS_PHRASES,
    reason_phrase,
    status_text,
    is_success,
)
from statichttpd.http.mime_types import (
    MIME_TYPES,
    DEFAULT_MIME_TYPE,
    extension,
    mime_type,
    get_mime_type,
)


class TestStatusCodes:
    """Tests for the status table."""

    @pytest.mark.parametrize("code", [200, 400, 404, 413, 501, 505])
    def test_codes_used_by_server_have_phrases(self, code):
        assert reason_phrase(code) != "Unknown"

    def test_status_text(self):
        assert status_text(404) == "404 Not Found"
        assert status_text(HTTPStatus.HTTP_VERSION_NOT_SUPPORTED) == "505 HTTP Version Not Supported"

    def test_unknown_code_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert status_text(299) == "299 Unknown"
        assert "299" in caplog.text

    def test_every_enum_member_has_phrase(self):
        for status in HTTPStatus:
            assert int(status) in STATUS_PHRASES
            assert status.phrase == STATUS_PHRASES[int(status)]

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            STATUS_PHRASES[299] = "Custom"

    def test_is_success_range(self):
        assert not is_success(199)
        assert is_success(200)
        assert is_success(299)
        assert not is_success(300)
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.NOT_FOUND.is_success


class TestExtension:
    """Tests for extension extraction."""

    @pytest.mark.parametrize("resource,expected", [
        ("/hello.htm", "htm"),
        ("/css/site.css", "css"),
        ("/archive.tar.gz", "gz"),
        ("/v1.2/README", ""),
        ("/", ""),
        ("", ""),
        ("/logo.PNG", "PNG"),
        ("/trailing.", ""),
    ])
    def test_extension(self, resource, expected):
        assert extension(resource) == expected

    def test_non_text_degrades_to_empty(self):
        assert extension(b"/file.png") == ""
        assert extension(None) == ""


class TestMimeTypes:
    """Tests for MIME lookup."""

    def test_known_types(self):
        assert mime_type("html") == "text/html"
        assert mime_type("htm") == "text/html"
        assert mime_type("png") == "image/png"
        assert get_mime_type("/css/site.css") == "text/css"

    def test_unknown_extension_defaults_to_text_plain(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert mime_type("zzz") == DEFAULT_MIME_TYPE == "text/plain"
        assert "zzz" in caplog.text

    def test_lookup_is_case_sensitive(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert mime_type("PNG") == "text/plain"
        assert "PNG" in caplog.text

    def test_keys_are_lowercase_without_dot(self):
        for key in MIME_TYPES:
            assert key == key.lower()
            assert not key.startswith(".")
