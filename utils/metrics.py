"""
Per-request metrics logging.
Emits one structured JSON line for every chat request, whatever exit path it takes.
"""
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

metrics_logger = logging.getLogger("llm_relay.metrics")


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RequestMetrics:
    """
    Scoped completion handler for a single request.

    Use as a context manager around the request handling; the record is
    emitted on exit, exactly once, whether the block returned or raised.
    """

    def __init__(self, client_ip: Optional[str]):
        self.client_ip = client_ip
        self.success = False
        self.messages_count = 0
        self._start = time.perf_counter()
        self._emitted = False

    def set_messages(self, messages: Any) -> None:
        """Record conversation size; anything that is not a list counts as 0."""
        self.messages_count = len(messages) if isinstance(messages, list) else 0

    def mark_success(self) -> None:
        self.success = True

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)

    def to_record(self) -> dict:
        return {
            "timestamp": utc_timestamp(),
            "ip": self.client_ip,
            "success": self.success,
            "responseTime": f"{self.elapsed_ms}ms",
            "messagesCount": self.messages_count,
        }

    def emit(self) -> None:
        """Log the record. Later calls are no-ops."""
        if self._emitted:
            return
        self._emitted = True
        try:
            metrics_logger.info(json.dumps(self.to_record()))
        except (TypeError, ValueError):
            metrics_logger.info(f"metrics record for {self.client_ip!r} could not be serialized")

    def __enter__(self) -> "RequestMetrics":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.emit()
        return False
