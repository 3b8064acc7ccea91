"""
Structured JSON events for dashboard operations.

The core components report what happened (roles read, form provisioned,
profile resolved, notification sent) through a StructuredLogger instead of
mixing log calls into their return values. By default events are written as
JSON lines to stdout; tests and hosts can plug in their own sink.

Usage:
    events = StructuredLogger(source="listings")
    events.emit(EventType.ROLES_READ, metadata={"count": 12})

    captured = []
    events = StructuredLogger(source="listings", sink=captured.append)
"""

import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Standard dashboard event types."""
    ROLES_READ = "roles_read"
    ROLES_READ_FAILED = "roles_read_failed"
    FORM_PROVISIONED = "form_provisioned"
    FORM_PROVISION_FAILED = "form_provision_failed"
    RESPONSE_STORE_READY = "response_store_ready"
    PROFILE_RESOLVED = "profile_resolved"
    PROFILE_SOURCE_FAILED = "profile_source_failed"
    PREFILL_GENERATED = "prefill_generated"
    PREFILL_FALLBACK = "prefill_fallback"
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"
    RESPONSES_SYNCED = "responses_synced"


class EventStatus(str, Enum):
    """Outcome attached to an event."""
    SUCCESS = "success"
    DEGRADED = "degraded"


@dataclass
class LogEvent:
    """One dashboard event; unset fields are left out of the JSON line."""
    timestamp: str
    event: str
    source: str
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps({key: value for key, value in asdict(self).items() if value is not None})


def _stdout_sink(event: LogEvent) -> None:
    print(event.to_json(), file=sys.stdout, flush=True)


class StructuredLogger:
    """
    Emits structured events for one component.

    Emitting never raises into the caller: a failing sink is logged and skipped so that
    observability can not break a dashboard request.
    """

    def __init__(
        self,
        source: str,
        enabled: bool = True,
        sink: Optional[Callable[[LogEvent], None]] = None,
    ):
        """
        Args:
            source: Component name attached to every event
            enabled: False turns emit() into a no-op
            sink: Callable receiving each LogEvent (defaults to JSON lines on stdout)
        """
        self.source = source
        self.enabled = enabled
        self._sink = sink or _stdout_sink

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    def emit(
        self,
        event: EventType,
        status: Optional[EventStatus] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Emit a single event."""
        if not self.enabled:
            return

        record = LogEvent(
            timestamp=self._timestamp(),
            event=event.value if isinstance(event, EventType) else str(event),
            source=self.source,
            status=status.value if isinstance(status, EventStatus) else status,
            metadata=metadata,
            error=error,
        )
        try:
            self._sink(record)
        except Exception as e:
            logger.warning(f"Event sink failed for {record.event}: {e}")

    def success(self, event: EventType, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Emit a successful event."""
        self.emit(event, status=EventStatus.SUCCESS, metadata=metadata)

    def degraded(
        self,
        event: EventType,
        error: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Emit an event for an operation that fell back to a default."""
        self.emit(event, status=EventStatus.DEGRADED, error=error, metadata=metadata)


def get_structured_logger(
    source: str,
    enabled: bool = True,
    sink: Optional[Callable[[LogEvent], None]] = None,
) -> StructuredLogger:
    """Event emitter for one dashboard component."""
    return StructuredLogger(source, enabled, sink)
