"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Every HTTP response starts with a status line:

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (human readable, from this module)
              └───────── Status code (machine readable)

The code tells the client WHAT happened, the reason phrase is only there
for humans reading raw responses.

=============================================================================
STATUS CODE CLASSES
=============================================================================

    1xx  Informational   Request received, continuing
    2xx  Success         Request understood and fulfilled
    3xx  Redirection     Client must take another action
    4xx  Client error    The request was bad
    5xx  Server error    The server failed on a valid request

This server only ever produces a handful of them:

    200  OK                          File found and sent
    400  Bad Request                 Broken request line or unreadable socket
    404  Not Found                   File missing or unreadable
    413  Payload Too Large           Request bigger than request_max_bytes
    501  Not Implemented             Method other than GET
    505  HTTP Version Not Supported  Version other than HTTP/1.1

The full registry is kept anyway so that any code the server is taught to
send later renders with a proper reason phrase.

=============================================================================
"""

import logging
from enum import IntEnum
from types import MappingProxyType


logger = logging.getLogger(__name__)


class HTTPStatus(IntEnum):
    """
    HTTP status codes.

    IntEnum members compare equal to plain integers, so they can be used
    anywhere a numeric code is expected:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 1xx INFORMATIONAL
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206
    MULTI_STATUS = 207
    ALREADY_REPORTED = 208
    IM_USED = 226

    # 3xx REDIRECTION
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    REQUEST_URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    REQUESTED_RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    IM_A_TEAPOT = 418
    MISDIRECTED_REQUEST = 421
    UNPROCESSABLE_ENTITY = 422
    LOCKED = 423
    FAILED_DEPENDENCY = 424
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    CONNECTION_CLOSED_WITHOUT_RESPONSE = 444    # nginx
    UNAVAILABLE_FOR_LEGAL_REASONS = 451
    CLIENT_CLOSED_REQUEST = 499                 # nginx

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505
    VARIANT_ALSO_NEGOTIATES = 506
    INSUFFICIENT_STORAGE = 507
    LOOP_DETECTED = 508
    NOT_EXTENDED = 510
    NETWORK_AUTHENTICATION_REQUIRED = 511
    NETWORK_CONNECT_TIMEOUT_ERROR = 599         # Used by some proxies

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return STATUS_PHRASES[int(self)]

    @property
    def is_success(self) -> bool:
        """True for 2xx codes, the only ones that skip the error page."""
        return is_success(self)


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# Keyed by plain int so callers can look up codes that have no enum member.
# Wrapped in MappingProxyType: the table is shared by every worker thread
# and must never change after import.
#
# =============================================================================

STATUS_PHRASES = MappingProxyType({
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "Request-URI Too Long",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    444: "Connection Closed Without Response",
    451: "Unavailable For Legal Reasons",
    499: "Client Closed Request",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
    599: "Network Connect Timeout Error",
})

UNKNOWN_PHRASE = "Unknown"


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for a status code.

    Codes missing from the table degrade to "Unknown" and log a warning
    instead of failing the response.
    """
    phrase = STATUS_PHRASES.get(code)
    if phrase is None:
        logger.warning(f"No reason phrase for status code {code}")
        return UNKNOWN_PHRASE
    return phrase


def status_text(code: int) -> str:
    """Code and reason phrase as they appear on the status line, e.g. "404 Not Found"."""
    return f"{int(code)} {reason_phrase(code)}"


def is_success(code: int) -> bool:
    """Success is the half-open range [200, 300)."""
    return 200 <= code < 300
