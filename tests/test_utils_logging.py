import json
import logging

import structlog

from scpomatic.utils import logging as log_utils
from scpomatic.utils.logging import setup_logging


def _json_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_json_handler_disabled_without_env(monkeypatch):
    monkeypatch.delenv("SCPOMATIC_LOG_DIR", raising=False)
    assert log_utils._json_file_handler(logging.INFO) is None


def test_json_log_keeps_structured_fields(tmp_path, monkeypatch):
    monkeypatch.setenv("SCPOMATIC_LOG_DIR", str(tmp_path / "logs"))
    setup_logging()

    structlog.get_logger().info("storescp.started", pid=1, port="3000")

    payload = _json_lines(tmp_path / "logs" / "scpomatic.log")[-1]
    assert payload["event"] == "storescp.started"
    assert payload["pid"] == 1
    assert payload["port"] == "3000"
    assert payload["level"] == "info"
    assert "timestamp" in payload


def test_json_log_renders_plain_logging_records(tmp_path, monkeypatch):
    monkeypatch.setenv("SCPOMATIC_LOG_DIR", str(tmp_path / "logs"))
    setup_logging()

    logging.getLogger("asyncio").warning("loop is slow")

    payload = _json_lines(tmp_path / "logs" / "scpomatic.log")[-1]
    assert payload["event"] == "loop is slow"
    assert payload["level"] == "warning"


def test_debug_events_filtered_unless_debug(tmp_path, monkeypatch):
    monkeypatch.setenv("SCPOMATIC_LOG_DIR", str(tmp_path / "logs"))
    setup_logging()
    log = structlog.get_logger()

    log.debug("signal.installed")
    log.info("supervisor.closed")

    events = [p["event"] for p in _json_lines(tmp_path / "logs" / "scpomatic.log")]
    assert events == ["supervisor.closed"]


def test_plain_text_mirror(tmp_path):
    logfile = tmp_path / "sub" / "out.log"
    setup_logging(extra_text_log=logfile)

    structlog.get_logger().warning("storescp.kill", pid=42)

    text = logfile.read_text()
    assert "storescp.kill" in text
    assert "pid=42" in text
    assert "warning" in text


def test_plain_text_handler_optional():
    assert log_utils._plain_text_file_handler(None, logging.INFO) is None


def test_console_omits_level_and_timestamp():
    event = {"event": "storescp.exec", "level": "info", "timestamp": "2024-01-01T00:00:00"}
    assert log_utils._drop_rich_columns(None, "info", event) == {"event": "storescp.exec"}
