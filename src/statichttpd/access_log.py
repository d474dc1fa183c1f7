"""
=============================================================================
ACCESS LOG
=============================================================================

One line per connection, on its own logger so it can be routed separately
from the server's operational logs:

    logging.getLogger("statichttpd.access").addHandler(file_handler)

Text format:

    127.0.0.1:51234 "GET /hello.htm" 200 0.84ms

JSON format (for log aggregators):

    {"peer": "127.0.0.1:51234", "status_code": 200, "method": "GET",
     "resource": "/hello.htm", "duration_ms": 0.84, "timestamp": "..."}

method and resource are "-" when the request line never parsed.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional


ACCESS_LOGGER_NAME = "statichttpd.access"

logger = logging.getLogger(ACCESS_LOGGER_NAME)


@dataclass
class AccessLog:
    """Structured access log entry for one connection."""

    peer: str
    status_code: int
    method: str
    resource: str
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "peer": self.peer,
            "status_code": self.status_code,
            "method": self.method,
            "resource": self.resource,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.peer} "{self.method} {self.resource}" '
            f'{self.status_code} {self.duration_ms:.2f}ms'
        )


def log_access(
    peer: str,
    status_code: int,
    method: Optional[str] = None,
    resource: Optional[str] = None,
    duration_ms: float = 0.0,
    log_format: str = "text",
) -> AccessLog:
    """Emit one access log line at INFO and return the entry."""
    entry = AccessLog(
        peer=peer,
        status_code=int(status_code),
        method=method or "-",
        resource=resource or "-",
        duration_ms=duration_ms,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )

    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())

    return entry
