"""Tests for the request loggers and log helpers."""

import logging

import pytest
from rich.layout import Layout

from core.config import Config
from ui import log_utils
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "gateway.log"
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", path)
    return path


class TestLogUtils:
    def test_write_cli_log(self, log_file):
        log_utils.write_cli_log("CONFIG", "Backend URL changed", backend_url="http://x:1")
        line = log_file.read_text()
        assert "CONFIG: Backend URL changed backend_url=http://x:1" in line

    def test_clear_logs(self, log_file):
        log_utils.write_cli_log("INFO", "hello")
        log_utils.clear_logs()
        assert log_file.read_text() == ""

    def test_redact_headers(self):
        redacted = log_utils.redact_headers(
            [("Authorization", "Bearer abcdefghijklmnop"), ("Cookie", "s=1"), ("Accept", "*/*")]
        )
        assert redacted == {"Authorization": "Bearer...mnop", "Cookie": "***", "Accept": "*/*"}


class TestDashboard:
    def test_tracks_requests_and_errors(self, log_file):
        dashboard = Dashboard(Config(), backend_url=lambda: "http://10.0.0.5:9000")
        dashboard.log_proxy("GET", "/api/accounts", "http://10.0.0.5:9000")
        dashboard.log_response("GET", "/api/accounts", 200)
        dashboard.log_proxy("GET", "/api/emails", "http://10.0.0.5:9000")
        dashboard.log_error("http://10.0.0.5:9000", 502, "Upstream connection error")

        assert dashboard._counts == {"forwarded": 2, "failed": 1, "config": 0}
        assert [r.status for r in dashboard._requests] == [502, 200]
        assert "ERROR: Upstream connection error" in log_file.read_text()
        assert isinstance(dashboard._build_layout(), Layout)

    def test_response_matched_by_path(self, log_file):
        dashboard = Dashboard(Config())
        dashboard.log_proxy("GET", "/api/emails", "http://b:1")
        dashboard.log_proxy("GET", "/api/accounts", "http://b:1")
        dashboard.log_response("GET", "/api/emails", 200)
        dashboard.log_response("GET", "/api/accounts", 404)

        statuses = {r.path: r.status for r in dashboard._requests}
        assert statuses == {"/api/emails": 200, "/api/accounts": 404}

    def test_unpersisted_config_change_shown(self, log_file):
        dashboard = Dashboard(Config())
        dashboard.log_config_change("http://session:1", persisted=False)
        assert dashboard._errors == ["backend http://session:1 not persisted (session only)"]


class TestConsoleLogger:
    def test_logs_proxy_lines(self, caplog, log_file):
        logger = ConsoleLogger()
        with caplog.at_level(logging.INFO, logger="gateway.requests"):
            logger.log_proxy("GET", "/api/accounts", "http://b:1/")
            logger.log_config_change("http://b:1", True)
        assert "[Proxy] GET /api/accounts -> http://b:1/api/accounts" in caplog.text
        assert "CONFIG: Backend URL changed" in log_file.read_text()
