"""Failure Report Schema — wire contract of the telemetry endpoint payload.

Invariants:
    - Flat object, camelCase keys, every key always present
    - Optional values serialize as JSON null, never "" and never omitted
    - exceptionType is "panic" (recovered request failure) or "error" (startup)

Design Decisions:
    - Pydantic model for the outbound boundary: JSON escaping of free text
      (backslash, quote, \\n, \\r, \\t, other control chars) delegated to the
      serializer instead of hand-rolled string replacement
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FailureReport(BaseModel):
    """Payload POSTed to RUNTIME_ERROR_ENDPOINT_URL."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tenant_id: str | None = Field(alias="tenantId")
    timestamp: str
    file: str | None
    line: int | None = Field(ge=1)
    stack_trace: str = Field(alias="stackTrace")
    message: str
    exception_type: Literal["panic", "error"] = Field(alias="exceptionType")
    request_path: str = Field(alias="requestPath")
    request_method: str = Field(alias="requestMethod")
    user_agent: str = Field(alias="userAgent")
