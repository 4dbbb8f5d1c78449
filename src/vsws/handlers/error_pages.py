"""
=============================================================================
ERROR PAGES
=============================================================================

Produces the HTML body for every error response. The body always comes
back usable; nothing in this module raises to its caller.

=============================================================================
TWO-LEVEL FALLBACK
=============================================================================

    render(404, "Not Found")
         │
         ├──► load error template ──── missing / unreadable ───────┐
         │           │                  (TEMPLATE_UNAVAILABLE)     │
         │           ▼                                             │
         │    substitute fields ─────── bad placeholder ───────────┤
         │           │                  (RENDER_FAILED)            │
         │           ▼                                             ▼
         │    Rendered(body)                            RenderFailure(kind)
         │           │                                             │
         └──────► choose_error_body() ◄────────────────────────────┘
                     │
                     ├── Rendered        → template output
                     └── RenderFailure   → inline page:
                          <html><body><h1>404 Not Found</h1></body></html>

Rendering is modelled as a value (Rendered | RenderFailure) instead of an
exception, so picking the body is a pure function that is easy to test.

=============================================================================
TEMPLATE SYNTAX
=============================================================================

Templates use string.Template placeholders:

    <h1>Error ${ErrorCode}</h1>
    <p>${ErrorMessage}</p>

Field values are HTML-escaped before substitution.

=============================================================================
"""

import html
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from string import Template
from typing import Union

logger = logging.getLogger(__name__)


FALLBACK_TEMPLATE = "<html><body><h1>{code} {reason}</h1></body></html>"


class RenderFailureKind(Enum):
    """Why the error template could not be used."""

    TEMPLATE_UNAVAILABLE = "template unavailable"
    RENDER_FAILED = "render failed"


@dataclass(frozen=True)
class Rendered:
    body: bytes


@dataclass(frozen=True)
class RenderFailure:
    kind: RenderFailureKind
    detail: str = ""


RenderResult = Union[Rendered, RenderFailure]


def fallback_body(code: int, reason: str) -> bytes:
    """The fixed inline error page."""
    return FALLBACK_TEMPLATE.format(code=int(code), reason=reason).encode("utf-8")


def choose_error_body(result: RenderResult, code: int, reason: str) -> bytes:
    """Pick the rendered template output, or the inline page on any failure."""
    if isinstance(result, Rendered):
        return result.body
    return fallback_body(code, reason)


class ErrorPageRenderer:
    """
    Renders error pages from a template file on disk.

    The template is re-read on every render, so it can be edited while the
    server runs.
    """

    def __init__(self, template_path: Union[str, Path]):
        """
        Args:
            template_path: Path of the error template. It does not have to
                           exist; a missing template means every page uses
                           the inline fallback.
        """
        self.template_path = Path(template_path)

    def render_template(self, code: int, reason: str) -> RenderResult:
        """
        Render the template with ErrorCode and ErrorMessage fields.

        Returns:
            Rendered on success, RenderFailure otherwise. Never raises.
        """
        try:
            source = self.template_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return RenderFailure(RenderFailureKind.TEMPLATE_UNAVAILABLE, str(e))

        fields = {
            "ErrorCode": str(int(code)),
            "ErrorMessage": html.escape(reason),
        }

        try:
            text = Template(source).substitute(fields)
        except (KeyError, ValueError) as e:
            return RenderFailure(RenderFailureKind.RENDER_FAILED, f"{type(e).__name__}: {e}")

        if not text.strip():
            return RenderFailure(RenderFailureKind.RENDER_FAILED, "template rendered empty")

        return Rendered(text.encode("utf-8"))

    def render(self, code: int, reason: str) -> bytes:
        """
        Produce the error page body.

        Returns:
            Non-empty HTML bytes, whether or not the template could be used.
        """
        result = self.render_template(code, reason)

        if isinstance(result, RenderFailure):
            logger.debug(
                f"Error template {self.template_path} not used ({result.kind.value}): "
                f"{result.detail}"
            )

        return choose_error_body(result, code, reason)
