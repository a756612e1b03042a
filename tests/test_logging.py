import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import json
import logging

import structlog

from shopcore.logging_setup import configure_logging


def test_configure_logging_filters_and_renders_json(capsys):
    configure_logging(logging.WARNING)
    try:
        log = structlog.get_logger("shopcore.test")
        log.info("hidden")
        log.warning("order_save_failed", order_id="o1")
    finally:
        structlog.reset_defaults()

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1

    record = json.loads(lines[0])
    assert record["event"] == "order_save_failed"
    assert record["level"] == "warning"
    assert record["order_id"] == "o1"
    assert "timestamp" in record
