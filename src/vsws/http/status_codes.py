"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, and their reason phrases.

=============================================================================
WHICH CODES, AND WHEN
=============================================================================

    ┌────────┬──────────────────────────┬──────────────────────────────────┐
    │  Code  │  Reason phrase           │  Produced when                   │
    ├────────┼──────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                      │  File found and read             │
    │  400   │  Bad Request             │  Malformed request line, or a    │
    │        │                          │  path that escapes the root      │
    │  404   │  Not Found               │  No such file, or a directory    │
    │  405   │  Method Not Allowed      │  Anything other than GET         │
    │  500   │  Internal Server Error   │  File exists but can't be read   │
    └────────┴──────────────────────────┴──────────────────────────────────┘

Transport failures (timeouts, resets) never get a status code: there is no
channel left to deliver one, so the connection is simply closed.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare and format as plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> f"{HTTPStatus.NOT_FOUND:d}"
        '404'
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200

    BAD_REQUEST = 400           # Malformed request line / unsafe path
    NOT_FOUND = 404             # Missing file or directory target
    METHOD_NOT_ALLOWED = 405    # Only GET is served

    INTERNAL_SERVER_ERROR = 500  # Content read failure

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
