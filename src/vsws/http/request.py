"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses the raw bytes of a single read into a structured HTTPRequest.

=============================================================================
WHAT WE ACCEPT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /img/logo.png HTTP/1.1\r\n      ← request line (mandatory)    │
    │   ─┬─ ──────┬────── ────┬───                                         │
    │    │        │           │                                            │
    │  method   target     version     exactly three tokens, split on     │
    │                                  single spaces                       │
    │                                                                      │
    │   Host: localhost:9999\r\n         ← headers (best effort)          │
    │   User-Agent: curl/8.5.0\r\n         split on the first ": "        │
    │   garbage-without-delimiter\r\n      silently skipped               │
    │   \r\n                             ← end of headers                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the request line can make parsing fail. Header lines that don't look
like "Name: Value" are dropped rather than rejected, and a duplicated header
keeps the last value seen. Header names are stored exactly as received.

The parser does not decide whether the method is allowed or whether the
target is safe; those are later stages of the connection handler.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .status_codes import HTTPStatus


class ParseFailure(Enum):
    """Why the request line could not be parsed."""

    EMPTY_REQUEST = "empty request"
    MALFORMED_REQUEST_LINE = "malformed request line"


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be parsed.

    Carries the ParseFailure reason and the HTTP status to answer with
    (always 400 Bad Request for this parser).
    """

    def __init__(
        self,
        message: str,
        reason: ParseFailure = ParseFailure.MALFORMED_REQUEST_LINE,
        status_code: int = HTTPStatus.BAD_REQUEST,
    ):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request. Immutable; lives as long as its connection.

    Attributes:
        method:  Request method exactly as sent ("GET", "POST", ...).
        path:    Request-target exactly as sent, not yet resolved.
        version: Protocol version token ("HTTP/1.1").
        headers: Read-only header mapping, names as received.
    """

    method: str
    path: str
    version: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Case-insensitive header lookup.

        Header names keep their original spelling, so this scans the
        mapping rather than indexing it.
        """
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    Stateless; one instance can be shared across all connection threads.
    """

    LINE_SEPARATOR = "\r\n"
    HEADER_DELIMITER = ": "

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: The bytes received from the connection.

        Returns:
            HTTPRequest with non-empty method, path and version.

        Raises:
            HTTPParseError: EMPTY_REQUEST if there is nothing to parse,
                            MALFORMED_REQUEST_LINE if the first line is not
                            exactly three non-empty space-separated tokens.
        """
        text = data.decode("utf-8", errors="replace")
        if not text:
            raise HTTPParseError("Empty request", reason=ParseFailure.EMPTY_REQUEST)

        lines = text.split(self.LINE_SEPARATOR)

        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE: METHOD SP REQUEST-TARGET SP VERSION
        # ─────────────────────────────────────────────────────────────────
        parts = lines[0].split(" ")
        if len(parts) != 3 or not all(parts):
            raise HTTPParseError(f"Invalid request line: {lines[0]!r}")

        method, target, version = parts

        # ─────────────────────────────────────────────────────────────────
        # HEADERS: up to the first empty line (or end of input)
        # ─────────────────────────────────────────────────────────────────
        headers: dict[str, str] = {}
        for line in lines[1:]:
            if not line:
                break
            name, sep, value = line.partition(self.HEADER_DELIMITER)
            if not sep:
                continue
            headers[name] = value

        return HTTPRequest(
            method=method,
            path=target,
            version=version,
            headers=MappingProxyType(headers),
        )


def parse_request(data: bytes) -> HTTPRequest:
    """Parse with a default RequestParser."""
    return RequestParser().parse(data)
