"""JSON logging setup tests."""

import json
import logging

from loralux.logging_config import setup_logging


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


def test_records_are_json_with_service(capsys, restore_loggers):
    setup_logging("INFO", service="loraluxd")

    logging.getLogger("loralux.scheduler").info("successfully scraped server", extra={"points": 3})

    record = _last_json_line(capsys.readouterr().out)
    assert record["message"] == "successfully scraped server"
    assert record["level"] == "INFO"
    assert record["logger"] == "loralux.scheduler"
    assert record["service"] == "loraluxd"
    assert record["points"] == 3
    assert "timestamp" in record


def test_level_filters_records(capsys, restore_loggers):
    setup_logging("warning", service="loraluxd")

    log = logging.getLogger("loralux.scheduler")
    log.info("hidden")
    log.warning("error encountered while scraping server", extra={"error_type": "DecodeError"})

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["error_type"] == "DecodeError"


def test_unknown_level_falls_back_to_info(restore_loggers):
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_uvicorn_loggers_share_the_json_handler(restore_loggers):
    setup_logging("INFO", service="testserverd")

    root_handler = logging.getLogger().handlers[0]
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        assert uv_logger.handlers == [root_handler]
        assert uv_logger.propagate is False


def test_httpx_request_logs_are_quieted(restore_loggers):
    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
