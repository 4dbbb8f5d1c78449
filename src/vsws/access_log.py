"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per answered connection, on the "vsws.access" logger:

    127.0.0.1 - - [19/Oct/2026:14:02:11 +0000] "GET /index.html" 200 1432 0.84ms [a1b2c3d4]

or, with log_format="json":

    {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1", "method": "GET",
     "target": "/index.html", "status_code": 200, "content_length": 1432,
     "duration_ms": 0.84, "timestamp": "19/Oct/2026:14:02:11 +0000"}

Connections dropped at the transport level (timeout, reset) are not access
logged; there is no status to record.

The logger is namespaced so it can be routed separately:

    logging.getLogger("vsws.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

logger = logging.getLogger("vsws.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["status_code"] = int(self.status_code)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-combined-like single line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code:d} '
            f'{self.content_length} {self.duration_ms:.2f}ms [{self.connection_id}]'
        )


class AccessLogger:
    """
    Emits RequestLog entries.

    Args:
        log_format: "text" or "json".
        log_level: Level the entries are logged at.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(
        self,
        connection_id: str,
        client_ip: str,
        method: str,
        target: str,
        status_code: int,
        content_length: int,
        started_at: float,
    ) -> RequestLog:
        """Build an entry from the finished exchange and emit it."""
        entry = RequestLog(
            connection_id=connection_id,
            client_ip=client_ip,
            method=method or "-",
            target=target or "-",
            status_code=status_code,
            content_length=content_length,
            duration_ms=(time.time() - started_at) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
