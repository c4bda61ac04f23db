import pytest

from observability import span
from observability.logger import _format_human


def test_span_records_timing():
    events = []
    with span(events, "webhook.forward") as entry:
        entry["bytes"] = 10
    assert events == [{"span": "webhook.forward", "bytes": 10, "ms": events[0]["ms"]}]
    assert events[0]["ms"] >= 0


def test_span_records_on_error():
    events = []
    with pytest.raises(RuntimeError):
        with span(events, "webhook.forward"):
            raise RuntimeError("boom")
    assert len(events) == 1


def test_human_line_lists_known_fields_only():
    line = _format_human(
        {"kind": "webhook.failed", "request_id": "abc", "http_status": 504, "ms": 120, "trace": "t"}
    )
    assert line == "request=abc kind=webhook.failed http_status=504 ms=120"


def test_human_log_file_name():
    from observability.logger import _human_log_path

    assert _human_log_path("logs/english-check.log") == "logs/english-check-human.log"
    assert _human_log_path("logs/english-check") == "logs/english-check-human.log"
