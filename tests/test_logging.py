"""Tests for the JSON log formatter."""

import json
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DB_URL", "sqlite://")

from intake_api.core.logging import JsonLogFormatter
from intake_api.middlewares import request_id_ctx_var


def _record(**extra):
    record = logging.LogRecord("intake_api.crud.metrics", logging.INFO, __file__, 1, "metrics.created", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_tags_service_request_and_extra_data():
    formatter = JsonLogFormatter(service="Intake Metrics", environment="test")
    token = request_id_ctx_var.set("req-42")
    try:
        line = formatter.format(_record(extra_data={"intake_id": "ENT-1"}))
    finally:
        request_id_ctx_var.reset(token)

    payload = json.loads(line)
    assert payload["event"] == "metrics.created"
    assert payload["level"] == "INFO"
    assert payload["service"] == "Intake Metrics"
    assert payload["env"] == "test"
    assert payload["request_id"] == "req-42"
    assert payload["intake_id"] == "ENT-1"
    assert payload["ts"].endswith("+00:00")


def test_formatter_omits_request_id_outside_requests():
    payload = json.loads(JsonLogFormatter(service="svc", environment="dev").format(_record()))
    assert "request_id" not in payload
    assert "exception" not in payload
