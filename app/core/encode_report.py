"""Report Encoder — turns a FailureEvent into the telemetry JSON payload.

Invariants:
    - Output decodes (standard JSON) back to the exact message and trace text
    - Missing tenant/file/line encode as null; non-positive lines count as missing
    - Timestamp is RFC 3339 UTC with second precision ("2026-01-02T15:04:05Z")
"""

from datetime import datetime, timezone

from app.core.failure_event import FailureEvent
from app.schemas.failure_report import FailureReport


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 UTC, second precision, Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_report(event: FailureEvent) -> FailureReport:
    """Map event fields onto the wire schema."""
    line = event.source_line if event.source_line and event.source_line > 0 else None
    return FailureReport(
        tenant_id=event.tenant_id or None,
        timestamp=format_timestamp(event.timestamp),
        file=event.source_file or None,
        line=line,
        stack_trace=event.trace_text,
        message=event.raw_message,
        exception_type=event.kind.value,
        request_path=event.request_path,
        request_method=event.request_method,
        user_agent=event.user_agent,
    )


def encode_report(event: FailureEvent) -> str:
    """Serialize the event as the JSON payload body."""
    return build_report(event).model_dump_json(by_alias=True)
