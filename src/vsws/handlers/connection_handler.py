"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs the whole lifecycle of one accepted connection: read, parse, validate,
respond, close. One handler instance serves every connection; each call to
handle() works only on its own Connection, request and buffers.

=============================================================================
STATE MACHINE
=============================================================================

    AWAITING_REQUEST ──read──► PARSED ──GET?──► METHOD_CHECKED
          │                      │                    │
          │ timeout/reset        │ not GET            │ sanitize target
          ▼                      ▼                    ▼
       ABORTED              ERROR_DISPATCH ◄──── PATH_RESOLVED ──► CONTENT_LOADED
    (no response)            (error page)    unsafe / missing /        │
          ▲                        ▲         directory / unreadable    │ frame + write
          │                        │                                   ▼
          └──── write failed ──────┼─────────────────────────── RESPONSE_SENT
                                   │
          bad request line ────────┘

    ┌────────────────────────────┬─────────────────────────────────────┐
    │  Failure                   │  Outcome                            │
    ├────────────────────────────┼─────────────────────────────────────┤
    │  read timeout / error      │  close silently                     │
    │  malformed request line    │  400 Bad Request                    │
    │  method other than GET     │  405 Method Not Allowed             │
    │  path escapes the root     │  400 Bad Request (no file access)   │
    │  missing file / directory  │  404 Not Found                      │
    │  file unreadable           │  500 Internal Server Error          │
    │  write of 200 fails        │  close, no retry                    │
    │  write of error page fails │  close, nothing further             │
    └────────────────────────────┴─────────────────────────────────────┘

Whatever happens, the connection is closed exactly once, by the 'with'
block in handle().

=============================================================================
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..access_log import AccessLogger
from ..config import ServerConfig
from ..core.connection import Connection, ConnectionReadError, ConnectionState
from ..http.mime_types import get_mime_type
from ..http.paths import REJECTED, sanitize_path, target_to_relative_path
from ..http.request import HTTPParseError, HTTPRequest, RequestParser
from ..http.response import frame_error_response, frame_response
from ..http.status_codes import HTTPStatus
from .content import ContentReadError, ContentStore
from .error_pages import ErrorPageRenderer

logger = logging.getLogger(__name__)


class HandlerState(Enum):
    AWAITING_REQUEST = "awaiting_request"
    PARSED = "parsed"
    METHOD_CHECKED = "method_checked"
    PATH_RESOLVED = "path_resolved"
    CONTENT_LOADED = "content_loaded"
    RESPONSE_SENT = "response_sent"
    ERROR_DISPATCH = "error_dispatch"
    ABORTED = "aborted"


@dataclass(frozen=True)
class HandlerOutcome:
    """
    How a connection ended.

    Attributes:
        state: Terminal state (RESPONSE_SENT, ERROR_DISPATCH or ABORTED).
        reached: Last stage completed before the terminal state.
        status: Status code sent, None if nothing was sent.
        content_length: Body bytes in the response.
        method: Request method, if the request line parsed.
        target: Request-target, if the request line parsed.
    """

    state: HandlerState
    reached: HandlerState = HandlerState.AWAITING_REQUEST
    status: Optional[int] = None
    content_length: int = 0
    method: str = ""
    target: str = ""


class ConnectionHandler:
    """Serves one GET per connection from a ContentStore."""

    ALLOWED_METHOD = "GET"

    def __init__(
        self,
        config: ServerConfig,
        content: Optional[ContentStore] = None,
        error_pages: Optional[ErrorPageRenderer] = None,
        access_log: Optional[AccessLogger] = None,
        parser: Optional[RequestParser] = None,
    ):
        """
        Args:
            config: Server configuration (index file, server name, ...).
            content: Filesystem collaborator. Defaults to config.root.
            error_pages: Error page renderer. Defaults to
                         config.error_template_path.
            access_log: Access logger. Defaults to config.log_format.
            parser: Request parser.
        """
        self.config = config
        self.content = content or ContentStore(config.root)
        self.error_pages = error_pages or ErrorPageRenderer(config.error_template_path)
        self.access_log = access_log or AccessLogger(log_format=config.log_format)
        self.parser = parser or RequestParser()

    def handle(self, conn: Connection) -> HandlerOutcome:
        """
        Handle one connection from accept to close.

        Never raises; unexpected errors are logged and answered with 500
        if nothing has been written yet.
        """
        started_at = time.time()

        with conn:
            try:
                outcome = self._process(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                if conn.state in (ConnectionState.READING, ConnectionState.PROCESSING):
                    outcome = self._send_error(
                        conn, HTTPStatus.INTERNAL_SERVER_ERROR, HandlerState.AWAITING_REQUEST
                    )
                else:
                    outcome = HandlerOutcome(HandlerState.ABORTED)

        if outcome.status is not None:
            self.access_log.log(
                connection_id=conn.id,
                client_ip=conn.client_ip,
                method=outcome.method,
                target=outcome.target,
                status_code=outcome.status,
                content_length=outcome.content_length,
                started_at=started_at,
            )

        return outcome

    def _process(self, conn: Connection) -> HandlerOutcome:
        # ─────────────────────────────────────────────────────────────────
        # READ (single recv with deadline)
        # ─────────────────────────────────────────────────────────────────
        try:
            raw = conn.read_request()
        except ConnectionReadError as e:
            logger.debug(f"[{conn.id}] Dropping connection: {e}")
            return HandlerOutcome(HandlerState.ABORTED)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"[{conn.id}] Received HTTP request:\n{raw.decode('utf-8', errors='replace')}"
            )

        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        try:
            request = self.parser.parse(raw)
        except HTTPParseError as e:
            logger.debug(f"[{conn.id}] Parse error ({e.reason.value}): {e}")
            return self._send_error(
                conn, HTTPStatus(e.status_code), HandlerState.AWAITING_REQUEST
            )

        # ─────────────────────────────────────────────────────────────────
        # METHOD CHECK
        # ─────────────────────────────────────────────────────────────────
        if request.method != self.ALLOWED_METHOD:
            return self._send_error(
                conn, HTTPStatus.METHOD_NOT_ALLOWED, HandlerState.PARSED, request
            )

        # ─────────────────────────────────────────────────────────────────
        # PATH NORMALIZATION (lexical only, before any filesystem access)
        # ─────────────────────────────────────────────────────────────────
        relative_path = sanitize_path(
            target_to_relative_path(request.path, self.config.index_file)
        )
        if relative_path == REJECTED:
            logger.warning(f"[{conn.id}] Path traversal attempt: {request.path}")
            return self._send_error(
                conn, HTTPStatus.BAD_REQUEST, HandlerState.METHOD_CHECKED, request
            )

        # ─────────────────────────────────────────────────────────────────
        # EXISTENCE / TYPE CHECK
        # ─────────────────────────────────────────────────────────────────
        status = self.content.lookup(relative_path)
        if not status.is_servable:
            logger.debug(f"[{conn.id}] File not found: {relative_path}")
            return self._send_error(
                conn, HTTPStatus.NOT_FOUND, HandlerState.PATH_RESOLVED, request
            )

        # ─────────────────────────────────────────────────────────────────
        # CONTENT READ
        # ─────────────────────────────────────────────────────────────────
        try:
            body = self.content.read(relative_path)
        except ContentReadError as e:
            logger.error(f"[{conn.id}] {e}")
            return self._send_error(
                conn, HTTPStatus.INTERNAL_SERVER_ERROR, HandlerState.PATH_RESOLVED, request
            )

        # ─────────────────────────────────────────────────────────────────
        # RESPOND: header, then body
        # ─────────────────────────────────────────────────────────────────
        content_type = get_mime_type(relative_path)
        header = frame_response(
            HTTPStatus.OK,
            HTTPStatus.OK.phrase,
            content_type,
            len(body),
            server_name=self.config.server_name,
        )

        try:
            conn.send(header)
            conn.send(body)
        except OSError as e:
            logger.debug(f"[{conn.id}] Error writing response: {e}")
            return HandlerOutcome(
                HandlerState.ABORTED,
                reached=HandlerState.CONTENT_LOADED,
                method=request.method,
                target=request.path,
            )

        logger.debug(f"[{conn.id}] Successfully served: {relative_path} ({content_type})")

        return HandlerOutcome(
            HandlerState.RESPONSE_SENT,
            reached=HandlerState.CONTENT_LOADED,
            status=int(HTTPStatus.OK),
            content_length=len(body),
            method=request.method,
            target=request.path,
        )

    def _send_error(
        self,
        conn: Connection,
        status: HTTPStatus,
        reached: HandlerState,
        request: Optional[HTTPRequest] = None,
    ) -> HandlerOutcome:
        """
        Render and write an error page. Write failures are logged and
        otherwise ignored; the connection is closed by handle() regardless.
        """
        body = self.error_pages.render(status, status.phrase)
        header = frame_error_response(status, status.phrase, len(body))

        try:
            conn.send(header)
            conn.send(body)
        except OSError as e:
            logger.debug(f"[{conn.id}] Error writing error page: {e}")
        else:
            logger.debug(f"[{conn.id}] Sent error page: {status:d} {status.phrase}")

        return HandlerOutcome(
            HandlerState.ERROR_DISPATCH,
            reached=reached,
            status=int(status),
            content_length=len(body),
            method=request.method if request else "",
            target=request.path if request else "",
        )
