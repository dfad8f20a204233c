import json
import logging

from aquanet_core.infrastructure.logging import logger as logger_module
from aquanet_core.infrastructure.logging.logger import JsonFormatter, log_event


def _record(msg):
    record = logging.LogRecord("aquanet_core", logging.WARNING, __file__, 1, msg, None, None)
    record.extra = {"provider": "deepseek", "stream": True}
    return record


def test_json_formatter_includes_extra_fields():
    line = json.loads(JsonFormatter().format(_record("Failed to parse stream chunk")))
    assert line["level"] == "WARNING"
    assert line["msg"] == "Failed to parse stream chunk"
    assert line["provider"] == "deepseek"
    assert line["stream"] is True


def test_json_formatter_redacts_long_messages(monkeypatch):
    monkeypatch.setattr(logger_module.settings, "log_redact_content", True)
    line = json.loads(JsonFormatter().format(_record("x" * 200)))
    assert line["msg"] == "x" * 64


def test_log_event_merges_context(caplog):
    with caplog.at_level(logging.INFO, logger="aquanet_core"):
        log_event(logging.INFO, "Provider cached", {"provider": "deepseek"}, model="deepseek-chat")
    record = caplog.records[-1]
    assert record.extra == {"provider": "deepseek", "model": "deepseek-chat"}
