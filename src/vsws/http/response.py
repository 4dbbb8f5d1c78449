"""
=============================================================================
HTTP RESPONSE FRAMING
=============================================================================

Builds the header block that precedes every response body. The functions
here only format bytes; writing them to the socket is the connection
handler's job.

=============================================================================
SUCCESS RESPONSE
=============================================================================

    HTTP/1.1 200 OK\r\n                        ← status line
    Server: Very Simple Web Server\r\n
    Content-Length: 1432\r\n                   ← exact body size
    Content-Type: text/html\r\n
    Connection: close\r\n                      ← one request per connection
    \r\n                                       ← end of headers
    <body bytes>

=============================================================================
ERROR RESPONSE
=============================================================================

Error pages are always HTML and carry no Server header:

    HTTP/1.1 404 Not Found\r\n
    Content-Length: 52\r\n
    Content-Type: text/html\r\n
    Connection: close\r\n
    \r\n
    <html><body><h1>404 Not Found</h1></body></html>

Header order is fixed. Compliant clients don't care, but byte-for-byte
output makes the server easy to test against.

=============================================================================
"""

from dataclasses import dataclass

PROTOCOL_VERSION = "HTTP/1.1"
DEFAULT_SERVER_NAME = "Very Simple Web Server"
ERROR_CONTENT_TYPE = "text/html"

CRLF = "\r\n"


@dataclass(frozen=True)
class ResponseStatus:
    """A status code paired with its reason phrase."""

    code: int
    reason: str

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{PROTOCOL_VERSION} {self.code:d} {self.reason}"


def frame_response(
    code: int,
    reason: str,
    content_type: str,
    body_length: int,
    server_name: str = DEFAULT_SERVER_NAME,
) -> bytes:
    """
    Build the header block for a successful response.

    Args:
        code: Status code (normally 200).
        reason: Reason phrase for the status line.
        content_type: MIME type of the body.
        body_length: Exact number of body bytes that will follow.
        server_name: Value of the Server header.

    Returns:
        Header bytes, terminated by the blank line.
    """
    lines = [
        ResponseStatus(code, reason).status_line,
        f"Server: {server_name}",
        f"Content-Length: {body_length:d}",
        f"Content-Type: {content_type}",
        "Connection: close",
    ]
    return _encode(lines)


def frame_error_response(code: int, reason: str, body_length: int) -> bytes:
    """
    Build the header block for an error page.

    Same as frame_response() minus the Server header, with the content
    type fixed to text/html.
    """
    lines = [
        ResponseStatus(code, reason).status_line,
        f"Content-Length: {body_length:d}",
        f"Content-Type: {ERROR_CONTENT_TYPE}",
        "Connection: close",
    ]
    return _encode(lines)


def _encode(lines: list[str]) -> bytes:
    # Each header line ends in CRLF, then one more CRLF ends the block
    return (CRLF.join(lines) + CRLF + CRLF).encode("utf-8")
