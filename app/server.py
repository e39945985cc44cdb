"""Server Entry Point — startup checks, socket bind, uvicorn, and startup-failure reporting.

Invariants:
    - Any failure before serving (settings, database ping, port bind) is
      logged, reported best-effort with kind=error and STARTUP sentinels,
      then the process exits with status 1
    - The startup report is sent before exiting, bounded by the same
      whole-attempt timeout as request-time reports
    - Only the failing exception's own trace is captured (no other units)

Design Decisions:
    - Socket bound here, not by uvicorn: uvicorn turns bind errors into
      sys.exit(1) after logging, which would hide the OSError from us
    - log_config=None: uvicorn logs through our handlers
"""

import asyncio
import logging
import socket
import sys

import uvicorn

from app.config import ReportingConfig, get_settings
from app.core.encode_report import encode_report
from app.core.failure_event import FailureEvent, describe_exception
from app.core.locate_frame import locate_exception
from app.core.resolve_tenant import resolve_tenant_id
from app.infrastructure.database import verify_database
from app.infrastructure.observability import setup_logging
from app.infrastructure.report_dispatcher import ReportDispatcher
from app.infrastructure.stack_capture import capture_trace

logger = logging.getLogger(__name__)


def report_startup_failure(exc: BaseException, config: ReportingConfig) -> bool:
    """Build and synchronously send the startup FailureEvent. Never raises."""
    dispatcher = ReportDispatcher.from_config(config)
    if dispatcher is None:
        logger.warning(
            "RUNTIME_ERROR_ENDPOINT_URL is not set - skipping startup error reporting",
        )
        return False

    location = locate_exception(exc)
    event = FailureEvent.for_startup(
        raw_message=describe_exception(exc),
        trace_text=capture_trace(
            exc, all_units=False, max_chars=config.max_trace_chars,
        ),
        tenant_id=resolve_tenant_id(
            {}, {}, None,
            static_tenant_id=config.tenant_id,
            endpoint_url=config.endpoint_url,
        ),
        source_file=location.file if location else None,
        source_line=location.line if location else None,
    )
    return dispatcher.dispatch_blocking(encode_report(event))


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket. Raises OSError when the port is unavailable."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family, backlog=2048)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    reporting = settings.reporting_config()

    try:
        asyncio.run(verify_database(
            settings.database_url, search_path=settings.database_search_path,
        ))
        sock = bind_socket(settings.host, settings.port)
    except Exception as exc:
        logger.critical(
            f"Application failed to start: {describe_exception(exc)}",
            exc_info=True,
            extra={"exception_type": type(exc).__name__},
        )
        report_startup_failure(exc, reporting)
        sys.exit(1)

    logger.info(f"Server starting on {settings.host}:{settings.port}")
    config = uvicorn.Config(
        "app.main:app",
        log_config=None,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
    )
    uvicorn.Server(config).run(sockets=[sock])


if __name__ == "__main__":
    main()
