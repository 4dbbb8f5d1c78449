"""
=============================================================================
REQUEST HANDLERS
=============================================================================

The parts of the server that touch the outside world on behalf of a
request:

    ConnectionHandler   per-connection state machine (read → respond → close)
    ContentStore        read-only access to the content root
    ErrorPageRenderer   HTML error bodies with an inline fallback

=============================================================================
"""

from .connection_handler import ConnectionHandler, HandlerOutcome, HandlerState
from .content import ContentReadError, ContentStore, FileStatus
from .error_pages import (
    ErrorPageRenderer,
    RenderFailure,
    RenderFailureKind,
    Rendered,
    choose_error_body,
    fallback_body,
)

__all__ = [
    "ConnectionHandler",
    "HandlerOutcome",
    "HandlerState",
    "ContentStore",
    "ContentReadError",
    "FileStatus",
    "ErrorPageRenderer",
    "Rendered",
    "RenderFailure",
    "RenderFailureKind",
    "choose_error_body",
    "fallback_body",
]
