"""
Unit tests for access logging.
"""

import json
import logging
import time

import pytest

from vsws.access_log import AccessLogger, RequestLog


def make_entry(**overrides) -> RequestLog:
    fields = dict(
        connection_id="a1b2c3d4",
        client_ip="127.0.0.1",
        method="GET",
        target="/index.html",
        status_code=200,
        content_length=1432,
        duration_ms=0.8431,
        timestamp="19/Oct/2026:14:02:11 +0000",
    )
    fields.update(overrides)
    return RequestLog(**fields)


class TestRequestLog:
    """Tests for the log record."""

    def test_to_text(self):
        """Test the text line layout."""
        assert make_entry().to_text() == (
            '127.0.0.1 - - [19/Oct/2026:14:02:11 +0000] "GET /index.html" '
            "200 1432 0.84ms [a1b2c3d4]"
        )

    def test_to_text_without_client(self):
        """Test a missing client address shows as '-'."""
        assert make_entry(client_ip="").to_text().startswith("- - - [")

    def test_to_dict(self):
        """Test the dict form rounds the duration."""
        entry = make_entry().to_dict()

        assert entry["status_code"] == 200
        assert entry["duration_ms"] == 0.84
        assert entry["target"] == "/index.html"


class TestAccessLogger:
    """Tests for AccessLogger output."""

    def test_text_format(self, caplog: pytest.LogCaptureFixture):
        """Test text entries go to the vsws.access logger."""
        caplog.set_level(logging.INFO, logger="vsws.access")

        entry = AccessLogger().log(
            connection_id="abc",
            client_ip="10.0.0.1",
            method="GET",
            target="/",
            status_code=200,
            content_length=10,
            started_at=time.time(),
        )

        assert caplog.records[-1].name == "vsws.access"
        assert caplog.records[-1].getMessage() == entry.to_text()
        assert '"GET /" 200 10' in caplog.text

    def test_json_format(self, caplog: pytest.LogCaptureFixture):
        """Test json entries are one JSON object per line."""
        caplog.set_level(logging.INFO, logger="vsws.access")

        AccessLogger(log_format="json").log(
            connection_id="abc",
            client_ip="10.0.0.1",
            method="POST",
            target="/upload",
            status_code=405,
            content_length=52,
            started_at=time.time(),
        )

        record = json.loads(caplog.records[-1].getMessage())
        assert record["method"] == "POST"
        assert record["status_code"] == 405
        assert record["connection_id"] == "abc"

    def test_unparsed_request_placeholders(self, caplog: pytest.LogCaptureFixture):
        """Test a request with no request line logs '-' for method and target."""
        caplog.set_level(logging.INFO, logger="vsws.access")

        entry = AccessLogger().log(
            connection_id="abc",
            client_ip="10.0.0.1",
            method="",
            target="",
            status_code=400,
            content_length=50,
            started_at=time.time(),
        )

        assert entry.method == "-"
        assert entry.target == "-"

    def test_duration_measured(self):
        """Test duration is measured from started_at."""
        entry = AccessLogger().log(
            connection_id="abc",
            client_ip="10.0.0.1",
            method="GET",
            target="/",
            status_code=200,
            content_length=0,
            started_at=time.time() - 0.5,
        )

        assert entry.duration_ms >= 500
