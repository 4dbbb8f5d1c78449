"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Pure functions over strings and bytes. Nothing in this package touches a
socket or the filesystem:

    raw bytes ──► RequestParser ──► HTTPRequest
                                        │
              target_to_relative_path ◄─┘
                        │
                  sanitize_path ──► safe relative path ──► get_mime_type
                                                               │
                         frame_response / frame_error_response ◄┘
                                        │
                                        ▼
                                  header bytes

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, ParseFailure, parse_request
from .paths import sanitize_path, target_to_relative_path, REJECTED
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE
from .response import (
    ResponseStatus,
    frame_response,        # 200 header block (with Server header)
    frame_error_response,  # error header block (text/html, no Server header)
    PROTOCOL_VERSION,
)
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "ParseFailure",
    "parse_request",

    # Path handling
    "sanitize_path",
    "target_to_relative_path",
    "REJECTED",

    # MIME types
    "get_mime_type",
    "DEFAULT_MIME_TYPE",

    # Response framing
    "ResponseStatus",
    "frame_response",
    "frame_error_response",
    "PROTOCOL_VERSION",

    # Status codes
    "HTTPStatus",
]
