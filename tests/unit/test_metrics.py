import json
import logging

import pytest

from utils.metrics import RequestMetrics, utc_timestamp


def metrics_records(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "llm_relay.metrics"]


def test_request_metrics_emits_one_record_on_exit(caplog):
    """Given a completed block, exactly one structured record should be logged."""
    caplog.set_level(logging.INFO, logger="llm_relay.metrics")

    with RequestMetrics("1.2.3.4") as metrics:
        metrics.set_messages([{"role": "user", "content": "hi"}] * 3)
        metrics.mark_success()

    records = metrics_records(caplog)
    assert len(records) == 1
    record = records[0]
    assert record["ip"] == "1.2.3.4"
    assert record["success"] is True
    assert record["messagesCount"] == 3
    assert record["responseTime"].endswith("ms")
    assert record["timestamp"].endswith("Z")


def test_request_metrics_emits_on_exception(caplog):
    """Given a block that raises, the record should still be logged and the error propagated."""
    caplog.set_level(logging.INFO, logger="llm_relay.metrics")

    with pytest.raises(RuntimeError):
        with RequestMetrics("1.2.3.4"):
            raise RuntimeError("boom")

    records = metrics_records(caplog)
    assert len(records) == 1
    assert records[0]["success"] is False


def test_request_metrics_emit_is_idempotent(caplog):
    """Given several emit calls, only the first should log."""
    caplog.set_level(logging.INFO, logger="llm_relay.metrics")

    metrics = RequestMetrics("1.2.3.4")
    metrics.emit()
    metrics.emit()
    with metrics:
        pass

    assert len(metrics_records(caplog)) == 1


@pytest.mark.parametrize("messages, expected", [
    (None, 0),
    ("not a list", 0),
    ({"role": "user"}, 0),
    ([], 0),
    ([1, 2], 2),
])
def test_set_messages_counts_only_lists(messages, expected):
    """Given an absent or unparseable conversation, the count should be 0."""
    metrics = RequestMetrics("1.2.3.4")
    metrics.set_messages(messages)
    assert metrics.messages_count == expected


def test_utc_timestamp_is_iso8601():
    """utc_timestamp should look like 2024-01-01T00:00:00.000Z."""
    stamp = utc_timestamp()
    assert stamp[10] == "T"
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-01T00:00:00.000Z")
