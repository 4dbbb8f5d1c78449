"""
Unit tests for error page rendering.
"""

from pathlib import Path

import pytest

from vsws.handlers.error_pages import (
    ErrorPageRenderer,
    RenderFailure,
    RenderFailureKind,
    Rendered,
    choose_error_body,
    fallback_body,
)
from vsws.http.status_codes import HTTPStatus


class TestFallback:
    """Tests for the inline fallback page."""

    def test_fallback_body_exact(self):
        """Test the inline page byte for byte."""
        assert fallback_body(404, "Not Found") == (
            b"<html><body><h1>404 Not Found</h1></body></html>"
        )

    def test_fallback_body_from_enum(self):
        """Test IntEnum codes render as numbers."""
        status = HTTPStatus.INTERNAL_SERVER_ERROR
        assert fallback_body(status, status.phrase) == (
            b"<html><body><h1>500 Internal Server Error</h1></body></html>"
        )


class TestChooseErrorBody:
    """choose_error_body() is a pure selection between two sources."""

    def test_rendered_wins(self):
        """Test a successful render is used as-is."""
        result = Rendered(b"<p>custom</p>")

        assert choose_error_body(result, 404, "Not Found") == b"<p>custom</p>"

    @pytest.mark.parametrize("kind", list(RenderFailureKind))
    def test_failure_uses_fallback(self, kind: RenderFailureKind):
        """Test every failure kind falls back to the inline page."""
        result = RenderFailure(kind, "boom")

        assert choose_error_body(result, 405, "Method Not Allowed") == (
            b"<html><body><h1>405 Method Not Allowed</h1></body></html>"
        )


class TestErrorPageRenderer:
    """Tests for template-based rendering."""

    def test_render_template(self, tmp_path: Path):
        """Test ErrorCode and ErrorMessage are substituted."""
        template = tmp_path / "error.html"
        template.write_text("<h1>${ErrorCode}</h1><p>${ErrorMessage}</p>", encoding="utf-8")

        renderer = ErrorPageRenderer(template)
        result = renderer.render_template(404, "Not Found")

        assert result == Rendered(b"<h1>404</h1><p>Not Found</p>")
        assert renderer.render(404, "Not Found") == b"<h1>404</h1><p>Not Found</p>"

    def test_fields_html_escaped(self, tmp_path: Path):
        """Test field values cannot inject markup."""
        template = tmp_path / "error.html"
        template.write_text("<p>${ErrorMessage}</p>", encoding="utf-8")

        body = ErrorPageRenderer(template).render(400, "<script>x</script>")

        assert b"<script>" not in body
        assert b"&lt;script&gt;" in body

    def test_missing_template(self, tmp_path: Path):
        """Test a missing template is TEMPLATE_UNAVAILABLE and uses the fallback."""
        renderer = ErrorPageRenderer(tmp_path / "nope.html")

        result = renderer.render_template(404, "Not Found")

        assert isinstance(result, RenderFailure)
        assert result.kind == RenderFailureKind.TEMPLATE_UNAVAILABLE
        assert renderer.render(404, "Not Found") == fallback_body(404, "Not Found")

    def test_template_is_directory(self, tmp_path: Path):
        """Test a directory in place of the template is TEMPLATE_UNAVAILABLE."""
        (tmp_path / "error.html").mkdir()

        result = ErrorPageRenderer(tmp_path / "error.html").render_template(500, "x")

        assert result.kind == RenderFailureKind.TEMPLATE_UNAVAILABLE

    def test_unknown_placeholder(self, tmp_path: Path):
        """Test a placeholder with no value is RENDER_FAILED."""
        template = tmp_path / "error.html"
        template.write_text("<p>${ErrorCode} ${Missing}</p>", encoding="utf-8")

        renderer = ErrorPageRenderer(template)
        result = renderer.render_template(404, "Not Found")

        assert result.kind == RenderFailureKind.RENDER_FAILED
        assert renderer.render(404, "Not Found") == fallback_body(404, "Not Found")

    def test_invalid_placeholder_syntax(self, tmp_path: Path):
        """Test a broken '$' sequence is RENDER_FAILED."""
        template = tmp_path / "error.html"
        template.write_text("<p>${ErrorCode</p>", encoding="utf-8")

        result = ErrorPageRenderer(template).render_template(404, "Not Found")

        assert result.kind == RenderFailureKind.RENDER_FAILED

    def test_empty_template(self, tmp_path: Path):
        """Test an empty render falls back so the body is never empty."""
        template = tmp_path / "error.html"
        template.write_text("", encoding="utf-8")

        renderer = ErrorPageRenderer(template)

        assert renderer.render_template(404, "Not Found").kind == RenderFailureKind.RENDER_FAILED
        assert renderer.render(404, "Not Found") == fallback_body(404, "Not Found")

    def test_template_reloaded_each_render(self, tmp_path: Path):
        """Test edits to the template show up without a restart."""
        template = tmp_path / "error.html"
        template.write_text("v1 ${ErrorCode}", encoding="utf-8")
        renderer = ErrorPageRenderer(template)

        assert renderer.render(404, "Not Found") == b"v1 404"

        template.write_text("v2 ${ErrorCode}", encoding="utf-8")

        assert renderer.render(404, "Not Found") == b"v2 404"
