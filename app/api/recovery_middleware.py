"""Panic Recovery Middleware — turns unexpected request failures into 500s and reports them.

Invariants:
    - Non-failing responses pass through untouched
    - Deliberate errors (HTTPException, BoardApiError, validation) are already
      responses by the time they reach this layer: never reported
    - Any other exception is absorbed here: the caller always gets a 500 JSON
      body with a generic error and the exception message, never trace/file/line
    - The FailureEvent is complete before dispatch starts
    - A failure while building or dispatching the report is logged; the
      caller still gets the JSON 500
    - The response never waits for the report (detached task)

Design Decisions:
    - Outermost user middleware (added last): wraps CORS and routing, so a
      failure anywhere below still gets a JSON 500
    - Dispatcher injected, config frozen at construction (ADR: no env re-reads
      in the failure path)
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.config import ReportingConfig
from app.core.encode_report import encode_report
from app.core.failure_event import FailureEvent, FailureKind, describe_exception
from app.core.locate_frame import locate_exception, locate_source
from app.core.resolve_tenant import resolve_tenant_id
from app.infrastructure.report_dispatcher import ReportDispatcher
from app.infrastructure.stack_capture import capture_trace

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred while processing your request"


class PanicRecoveryMiddleware(BaseHTTPMiddleware):
    """Recovers from unhandled exceptions and ships a crash report."""

    def __init__(
        self,
        app: ASGIApp,
        config: ReportingConfig,
        dispatcher: ReportDispatcher | None = None,
    ):
        super().__init__(app)
        self.config = config
        self.dispatcher = dispatcher or ReportDispatcher.from_config(config)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self._recover(request, exc)

    def _recover(self, request: Request, exc: Exception) -> JSONResponse:
        message = describe_exception(exc)
        logger.error(
            f"Recovered from unhandled exception: {message}",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
            },
        )
        try:
            self._report(request, exc, message)
        except Exception as report_exc:
            logger.error(
                f"Failed to build error report: {report_exc!r}",
                extra={"path": request.url.path},
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": GENERIC_ERROR, "message": message},
        )

    def _report(self, request: Request, exc: Exception, message: str) -> None:
        if self.dispatcher is None:
            logger.warning(
                "RUNTIME_ERROR_ENDPOINT_URL is not set - skipping error reporting",
            )
            return
        event = self._build_event(request, exc, message)
        self.dispatcher.dispatch_in_background(encode_report(event))

    def _build_event(
        self, request: Request, exc: Exception, message: str,
    ) -> FailureEvent:
        trace_text = capture_trace(
            exc, all_units=True, max_chars=self.config.max_trace_chars,
        )
        tenant_id = resolve_tenant_id(
            request.query_params,
            request.headers,
            request.headers.get("host", ""),
            static_tenant_id=self.config.tenant_id,
            endpoint_url=self.config.endpoint_url,
        )
        location = locate_exception(exc) or locate_source(trace_text)
        logger.info(
            f"Failure attributed to {location.file}:{location.line}"
            if location else "Failure origin not located",
            extra={"tenant_id": tenant_id or "NULL"},
        )
        return FailureEvent(
            raw_message=message,
            trace_text=trace_text,
            request_path=request.url.path,
            request_method=request.method,
            user_agent=request.headers.get("user-agent", ""),
            kind=FailureKind.PANIC,
            tenant_id=tenant_id,
            source_file=location.file if location else None,
            source_line=location.line if location else None,
        )
