"""
=============================================================================
HTTP REQUEST LINE PARSING
=============================================================================

We only care about the FIRST line of a request:

    GET /hello.htm HTTP/1.1\\r\\n      ← request line (parsed here)
    Host: localhost:7878\\r\\n          ← headers (ignored)
    User-Agent: curl/8.4.0\\r\\n
    \\r\\n

The request line has three tokens separated by single spaces:

    GET /hello.htm HTTP/1.1
    ─── ────────── ────────
     │       │         │
     │       │         └── Version
     │       └──────────── Resource (path as sent, NOT decoded)
     └──────────────────── Method

=============================================================================
THE SCAN
=============================================================================

The parser works directly on bytes, in a single left-to-right pass:

    index:  0 1 2 3 4 5 6 ...
    bytes:  G E T ␠ / h e l l o . h t m ␠ H T T P / 1 . 1 \\r
                  ▲                     ▲                   ▲
            end_method            end_resource           end_line
            (1st space)           (2nd space)         (1st CR or LF)

The scan stops at the first CR or LF. If it ends before both spaces were
seen, or never finds a line terminator, the request line is malformed.

Only once the three byte ranges are known do we decode them to text.
Decoding per field lets the error message name the field that was bad.

=============================================================================
WHAT THE PARSER DOES NOT DO
=============================================================================

- No header parsing. Everything after the line terminator is ignored.
- No normalization: no percent-decoding, no case folding of the method.
- No method/version policy. Rejecting POST or HTTP/1.0 is the connection
  handler's job; the parser only reports what the client sent.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union

from .response import Response, TextBody
from .status_codes import HTTPStatus


REQUEST_ENCODING = "utf-8"

_SPACE = ord(" ")
_LINE_TERMINATORS = (ord("\r"), ord("\n"))


class HTTPParseError(Exception):
    """
    Exception raised when a request cannot be parsed.

    Carries the HTTP status code the client should get back, so the caller
    can turn it straight into a Response.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_response(self) -> "Response":
        return Response(code=self.status_code, body=TextBody(self.message))


class MalformedRequestLine(HTTPParseError):
    """No line terminator, or fewer than two spaces before it."""

    def __init__(self, message: str = "Malformed request line"):
        super().__init__(message, HTTPStatus.BAD_REQUEST)


class MalformedToken(HTTPParseError):
    """A request-line token is not valid text."""

    def __init__(self, field_name: str, error: UnicodeDecodeError):
        super().__init__(f"Malformed {field_name} name: {error}", HTTPStatus.BAD_REQUEST)
        self.field_name = field_name


@dataclass(frozen=True)
class Request:
    """
    A parsed request line.

    Attributes:
        method: Method token, exactly as sent (e.g. "GET").
        resource: Resource token, exactly as sent (e.g. "/hello.htm").
        http_version: Version token, exactly as sent (e.g. "HTTP/1.1").
    """

    method: str
    resource: str
    http_version: str


class RequestParser:
    """
    Byte-level request line parser.

    Usage:
        parser = RequestParser()
        request = parser.parse(b"GET / HTTP/1.1\\r\\n\\r\\n")
    """

    def __init__(self, encoding: str = REQUEST_ENCODING):
        self.encoding = encoding

    def parse(self, buffer: bytes) -> Request:
        """
        Parse the request line at the start of ``buffer``.

        Raises:
            MalformedRequestLine: No terminator, or too few tokens.
            MalformedToken: A token is not valid text.
        """
        end_method, end_resource, end_line = self._scan(buffer)

        if end_line is None or end_method is None or end_resource is None:
            raise MalformedRequestLine()

        method = self._decode(buffer[:end_method], "method")
        resource = self._decode(buffer[end_method + 1:end_resource], "resource")
        http_version = self._decode(buffer[end_resource + 1:end_line], "version")

        return Request(method=method, resource=resource, http_version=http_version)

    @staticmethod
    def _scan(buffer: bytes) -> tuple[Optional[int], Optional[int], Optional[int]]:
        """Find end of method, end of resource and end of line, in one pass."""
        end_method = None
        end_resource = None

        for index, byte in enumerate(buffer):
            if byte in _LINE_TERMINATORS:
                return end_method, end_resource, index
            if byte == _SPACE:
                if end_method is None:
                    end_method = index
                elif end_resource is None:
                    end_resource = index

        return end_method, end_resource, None

    def _decode(self, raw: bytes, field_name: str) -> str:
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise MalformedToken(field_name, e) from e


def parse_request(buffer: bytes) -> Union[Request, Response]:
    """
    Parse a request line, returning either a Request or an error Response.

    This is the form the connection handler uses: parse failures are
    already shaped as the 400 response the client will receive.

        >>> parse_request(b"GET /hello.htm HTTP/1.1\\r\\n\\r\\n")
        Request(method='GET', resource='/hello.htm', http_version='HTTP/1.1')
    """
    try:
        return RequestParser().parse(buffer)
    except HTTPParseError as e:
        return e.to_response()
