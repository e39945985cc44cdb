"""Failure Event — immutable description of one unexpected failure.

Invariants:
    - Built once per recovered failure, fully populated before dispatch
    - Frozen: dispatch never mutates it
    - Never persisted; lives and dies within the failure path
    - Startup failures carry fixed sentinel request metadata

Design Decisions:
    - Frozen dataclass over pydantic model: internal value, no boundary validation
      (ADR: schemas/ is reserved for wire contracts)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

STARTUP_REQUEST_PATH = "STARTUP"
STARTUP_REQUEST_METHOD = "STARTUP"
STARTUP_USER_AGENT = "STARTUP_ERROR"


class FailureKind(str, Enum):
    """Recovered request failure vs. reported startup failure."""
    PANIC = "panic"
    ERROR = "error"


@dataclass(frozen=True)
class FailureEvent:
    """One captured failure, ready for encoding."""
    raw_message: str
    trace_text: str
    request_path: str
    request_method: str
    user_agent: str
    kind: FailureKind
    tenant_id: str | None = None
    source_file: str | None = None
    source_line: int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_startup(
        cls,
        raw_message: str,
        trace_text: str,
        tenant_id: str | None = None,
        source_file: str | None = None,
        source_line: int | None = None,
    ) -> "FailureEvent":
        """Event for a failure before the server accepted any request."""
        return cls(
            raw_message=raw_message,
            trace_text=trace_text,
            request_path=STARTUP_REQUEST_PATH,
            request_method=STARTUP_REQUEST_METHOD,
            user_agent=STARTUP_USER_AGENT,
            kind=FailureKind.ERROR,
            tenant_id=tenant_id,
            source_file=source_file,
            source_line=source_line,
        )


def describe_exception(exc: BaseException) -> str:
    """str(exc), or the exception type name when str() itself fails."""
    try:
        return str(exc)
    except Exception:
        return type(exc).__name__
