"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

A Response is what the connection handler decided to send. This module
turns it into the exact bytes that go on the wire.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\\r\\n                      ← status line
    Content-Type: text/html;\\r\\n             ← note the trailing ";"
    Content-Length: 27;\\r\\n                  ← note the trailing ";"
    \\r\\n                                     ← end of headers
    <html><body>hi</body></html>             ← body

Only those two headers are ever sent. No Date, no Server, no Connection.
The trailing semicolons are part of the wire format and are reproduced
byte for byte.

=============================================================================
RESPONSE BODIES
=============================================================================

A body is one of exactly two things:

    TextBody(text)      HTML, CSS, plain text... and every error detail
    BinaryBody(data)    Images, fonts, archives, anything not valid UTF-8

Static files are tagged by whether their content decodes as UTF-8, not by
their extension.

=============================================================================
ERROR PAGES
=============================================================================

Any code outside [200, 300) gets its body REPLACED by an HTML error page:

    error.html (read fresh for every error response)

        <title>{}</title>     ← 1st "{}"  status text  ("404 Not Found")
        <h1>{}</h1>           ← 2nd "{}"  status text  ("404 Not Found")
        <p>{}</p>             ← 3rd "{}"  detail       (the TextBody text)

If error.html cannot be read, a built-in template with the same three
placeholders is used and a warning is logged. A binary body contributes
an empty detail. Error pages are always sent as text/html.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .mime_types import DEFAULT_MIME_TYPE
from .status_codes import is_success, status_text


logger = logging.getLogger(__name__)


PLACEHOLDER = "{}"

DEFAULT_ERROR_PAGE = "error.html"

ERROR_PAGE_MIME = "text/html"

# Same placeholder layout as the shipped error.html
FALLBACK_ERROR_TEMPLATE = (
    "<!DOCTYPE html><html lang='en'><head><meta charset='utf-8'>"
    "<title>{}</title></head><body><h1>{}</h1><p>{}</p></body></html>"
)


# =============================================================================
# BODY VARIANTS
# =============================================================================

@dataclass(frozen=True)
class TextBody:
    """Textual content, sent UTF-8 encoded."""

    text: str = ""

    def encode(self) -> bytes:
        return self.text.encode("utf-8")

    @property
    def detail(self) -> str:
        return self.text


@dataclass(frozen=True)
class BinaryBody:
    """Raw bytes, sent as-is."""

    data: bytes = b""

    def encode(self) -> bytes:
        return self.data

    @property
    def detail(self) -> str:
        # Binary payloads never leak into error pages
        return ""


Body = Union[TextBody, BinaryBody]


@dataclass(frozen=True)
class Response:
    """
    A response waiting to be serialized.

    Attributes:
        code: Numeric status code.
        mime: Content-Type value, text/plain unless given. Ignored for
            error codes (forced to text/html).
        body: TextBody or BinaryBody.
    """

    code: int
    mime: str = DEFAULT_MIME_TYPE
    body: Body = field(default_factory=TextBody)

    @property
    def is_error(self) -> bool:
        return not is_success(self.code)


# =============================================================================
# ERROR PAGE TEMPLATE
# =============================================================================

def load_error_template(path: Union[str, Path] = DEFAULT_ERROR_PAGE) -> str:
    """
    Read the error page template.

    Read on every call: editing error.html takes effect on the next error
    without a restart. Falls back to FALLBACK_ERROR_TEMPLATE (with a
    warning) when the file is missing or unreadable.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Error page template {path} unavailable ({e}), using built-in template")
        return FALLBACK_ERROR_TEMPLATE


def render_error_page(template: str, status: str, detail: str) -> str:
    """
    Fill the template: first two placeholders get the status text, the
    next one gets the detail.
    """
    page = template.replace(PLACEHOLDER, status, 2)
    return page.replace(PLACEHOLDER, detail, 1)


# =============================================================================
# SERIALIZATION
# =============================================================================

class ResponseBuilder:
    """
    Serializes Response objects to wire bytes.

    Usage:
        builder = ResponseBuilder(error_page="error.html")
        wire = builder.build(Response(200, "text/plain", TextBody("hi")))
    """

    def __init__(self, error_page: Union[str, Path] = DEFAULT_ERROR_PAGE):
        self.error_page = error_page

    def build(self, response: Response) -> bytes:
        status = status_text(response.code)

        if response.is_error:
            template = load_error_template(self.error_page)
            page = render_error_page(template, status, response.body.detail)
            mime = ERROR_PAGE_MIME
            body = page.encode("utf-8")
        else:
            mime = response.mime
            body = response.body.encode()

        # ─────────────────────────────────────────────────────────────────
        # HEAD
        # ─────────────────────────────────────────────────────────────────
        # Content-Length is measured on the FINAL body, after any error
        # page substitution, in bytes (not characters).
        head = (
            f"HTTP/1.1 {status}\r\n"
            f"Content-Type: {mime};\r\n"
            f"Content-Length: {len(body)};\r\n"
            f"\r\n"
        )

        logger.debug(f"Built response: {status}, {len(body)} body bytes")
        return head.encode("utf-8") + body


def build_response(response: Response, error_page: Union[str, Path] = DEFAULT_ERROR_PAGE) -> bytes:
    """Serialize one response. Shortcut for ResponseBuilder(error_page).build(response)."""
    return ResponseBuilder(error_page).build(response)
