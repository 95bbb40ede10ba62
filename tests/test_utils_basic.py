import datetime as dt
import json
import logging
from logging.handlers import TimedRotatingFileHandler

from warrantylink.utils import JsonFormatter, _log_handlers, parse_date_safe


def test_parse_date_safe_formats():
    assert parse_date_safe("2024-01-20") == dt.date(2024, 1, 20)
    assert parse_date_safe("2024-01-20T23:30:00Z") == dt.date(2024, 1, 20)
    assert parse_date_safe("2024-01-20T23:30:00-05:00") == dt.date(2024, 1, 21)
    assert parse_date_safe("Sat, 20 Jan 2024 10:00:00 +0000") == dt.date(2024, 1, 20)
    assert parse_date_safe(dt.date(2024, 1, 20)) == dt.date(2024, 1, 20)
    assert parse_date_safe(dt.datetime(2024, 1, 20, 8, 0)) == dt.date(2024, 1, 20)


def test_parse_date_safe_rejects_garbage():
    assert parse_date_safe(None) is None
    assert parse_date_safe("") is None
    assert parse_date_safe("soon") is None
    assert parse_date_safe(12.5) is None


def test_log_handlers_console_only_without_dir():
    handlers = _log_handlers("", json_mode=False)
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)


def test_log_handlers_rotating_file(tmp_path):
    handlers = _log_handlers(str(tmp_path / "logs"), json_mode=True, file_name="run.log")
    try:
        assert len(handlers) == 2
        fh = handlers[1]
        assert isinstance(fh, TimedRotatingFileHandler)
        assert fh.baseFilename == str(tmp_path / "logs" / "run.log")
        assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)
    finally:
        for h in handlers:
            h.close()


def test_json_formatter_tags_stage_loggers():
    fmt = JsonFormatter()
    rec = logging.LogRecord("warrantylink.stages.bundling", logging.INFO, __file__, 1, "bundling.components: bundles=%d", (2,), None)
    payload = json.loads(fmt.format(rec))
    assert payload["stage"] == "bundling"
    assert payload["msg"] == "bundling.components: bundles=2"
    other = logging.LogRecord("warrantylink.orchestrator", logging.INFO, __file__, 1, "run", (), None)
    assert "stage" not in json.loads(fmt.format(other))
