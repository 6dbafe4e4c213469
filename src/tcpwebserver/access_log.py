"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per answered connection, on the "tcpwebserver.access"
logger so it can be routed separately from diagnostics:

    logging.getLogger("tcpwebserver.access").addHandler(file_handler)

=============================================================================
LOG FORMATS
=============================================================================

    text (Apache-like, for humans):

        127.0.0.1 - - [16/Oct/2026:12:00:00 +0000] "GET /styles.css" 200 312 0.41ms

    json (for log aggregators):

        {"connection_id": "3f2a9c1e", "client_ip": "127.0.0.1",
         "method": "GET", "target": "/styles.css", "status_code": 200,
         "content_length": 312, "duration_ms": 0.41, "timestamp": "..."}

Malformed requests log their raw request line in place of method and
target, so a 400 in the log still shows what the client sent.

=============================================================================
"""

import time
import json
import logging
from dataclasses import dataclass


logger = logging.getLogger("tcpwebserver.access")


@dataclass
class RequestLog:
    """Structured log entry for one request/response exchange."""

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "target": self.target,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        request = f"{self.method} {self.target}".strip() or "-"
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{request}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits RequestLog entries in the configured format.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(entry)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level:  Level the entries are logged at.
        """
        self.log_format = log_format
        self.log_level = log_level

    def log(self, entry: RequestLog) -> None:
        if not logger.isEnabledFor(self.log_level):
            return
        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

    @staticmethod
    def timestamp() -> str:
        return time.strftime("%d/%b/%Y:%H:%M:%S %z")
