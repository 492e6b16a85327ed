import pytest
from rich.console import Console

from core.config import Config
from core.request_types import ProxyRequest
from ui import log_utils
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "proxy.log"
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", path)
    return path


def test_write_cli_log(log_file):
    log_utils.write_cli_log("ERROR", "boom", status=504, url=None)

    line = log_file.read_text()
    assert "ERROR: boom status=504" in line
    assert "url=" not in line


def test_clear_logs(tmp_path):
    root = tmp_path / "logs"
    (root / "old").mkdir(parents=True)
    log_utils.clear_logs(root)
    assert not root.exists()


def test_shorten():
    assert log_utils.shorten("abcdef", 3) == "abc..."
    assert log_utils.shorten("abc", 3) == "abc"


class TestDashboard:
    """Dashboard as a request observer, without starting the live display."""

    def test_counts_and_rows(self, log_file):
        board = Dashboard(Config())
        request = ProxyRequest(url="https://api.example.com/[x]")

        board.on_request(request)
        board.on_response(request, 200, 12)
        board.on_error("POST", "ftp:/bad", 400, "INVALID_URL", "Invalid URL format")

        assert board._counts == {"total": 1, "ok": 1, "failed": 1}
        assert board._requests[0].status == 200
        assert board._requests[0].duration_ms == 12
        assert board._errors == ["POST 400 INVALID_URL: Invalid URL format"]
        board._build_layout()
        assert "OK: GET https://api.example.com/[x] status=200 duration=12ms" in log_file.read_text()


class TestConsoleLogger:
    """ConsoleLogger prints one line per event."""

    def test_lines(self, log_file):
        out = Console(record=True, width=200)
        logger = ConsoleLogger(out)
        request = ProxyRequest(url="https://api.example.com/items", method="POST")

        logger.on_request(request)
        logger.on_response(request, 201, 30)
        logger.on_error("GET", None, 404, "ENOTFOUND", "Host not found: x")

        text = out.export_text()
        assert "POST https://api.example.com/items - 201 (30ms)" in text
        assert "GET - - 404 ENOTFOUND: Host not found: x" in text
