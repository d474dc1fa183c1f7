"""
HTTP protocol components.

    status_codes.py   Status codes and reason phrases
    mime_types.py     Extension → MIME type table
    request.py        Request line parser
    response.py       Response model, error pages, wire serialization
"""

from .status_codes import HTTPStatus, STATUS_PHRASES, reason_phrase, status_text, is_success
from .mime_types import MIME_TYPES, DEFAULT_MIME_TYPE, extension, mime_type, get_mime_type
from .response import (
    Response, Body, TextBody, BinaryBody,
    ResponseBuilder, build_response,
    load_error_template, render_error_page, FALLBACK_ERROR_TEMPLATE,
)
from .request import (
    Request, RequestParser, parse_request,
    HTTPParseError, MalformedRequestLine, MalformedToken,
)

__all__ = [
    "HTTPStatus", "STATUS_PHRASES", "reason_phrase", "status_text", "is_success",
    "MIME_TYPES", "DEFAULT_MIME_TYPE", "extension", "mime_type", "get_mime_type",
    "Response", "Body", "TextBody", "BinaryBody",
    "ResponseBuilder", "build_response",
    "load_error_template", "render_error_page", "FALLBACK_ERROR_TEMPLATE",
    "Request", "RequestParser", "parse_request",
    "HTTPParseError", "MalformedRequestLine", "MalformedToken",
]
