# tests/test_logging_config.py
"""
Tests for the JSON log format and the LOGGING dict.
"""

import json
import logging
import sys

from ops.logging_config import APP_LOGGERS, JsonFormatter, get_logging_config


def _record(**extra):
    record = logging.LogRecord(
        name="accounting.ledger",
        level=logging.INFO,
        pathname=__file__,
        lineno=12,
        msg="Posted journal entry %s",
        args=("JE-4",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_json_record_carries_posting_context():
    line = JsonFormatter().format(_record(
        business_unit_id=3,
        document_number="JE-4",
        source_type="AR_INVOICE",
        total="640.00",
    ))

    payload = json.loads(line)
    assert payload["message"] == "Posted journal entry JE-4"
    assert payload["logger"] == "accounting.ledger"
    assert payload["level"] == "INFO"
    assert payload["business_unit_id"] == 3
    assert payload["document_number"] == "JE-4"
    assert payload["source_type"] == "AR_INVOICE"
    assert payload["total"] == "640.00"


def test_json_record_omits_absent_context():
    payload = json.loads(JsonFormatter().format(_record()))

    assert "business_unit_id" not in payload
    assert "document_number" not in payload


def test_json_record_includes_exception():
    try:
        raise RuntimeError("posting failed")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: posting failed" in payload["exception"]


def test_production_config_uses_json(monkeypatch):
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    monkeypatch.delenv("LOG_SQL", raising=False)

    config = get_logging_config(debug=False)

    assert config["formatters"]["default"] == {"()": "ops.logging_config.JsonFormatter"}
    for name in APP_LOGGERS:
        assert config["loggers"][name]["propagate"] is False
    assert config["loggers"]["django.db.backends"]["handlers"] == ["null"]


def test_debug_config_is_readable_and_echoes_sql(monkeypatch):
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    monkeypatch.delenv("LOG_SQL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    config = get_logging_config(debug=True)

    assert "format" in config["formatters"]["default"]
    assert config["loggers"]["accounting"]["level"] == "DEBUG"
    assert config["loggers"]["django.db.backends"]["handlers"] == ["console"]
