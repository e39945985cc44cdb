"""Report Dispatcher — best-effort delivery of failure reports to the telemetry endpoint.

Invariants:
    - Exactly one POST attempt per report: no retry, no backoff
    - The whole attempt is bounded by timeout_seconds (default 5s)
    - Success means HTTP 200 exactly; anything else is logged as a failure
    - Never raises to its caller: invalid URL, network error, timeout and
      non-200 responses are logged and reported as False
    - Background dispatch is detached from the request that spawned it

Design Decisions:
    - Fresh httpx client per attempt: no shared connection state between
      concurrent reports, nothing to lock
    - asyncio.wait_for around the POST: httpx timeouts are per phase
      (connect/read/write), the bound here is on the whole attempt
    - In-flight tasks kept in a set until done: the event loop only holds weak
      references to tasks; drain() lets shutdown wait for them
    - No cap on in-flight reports (open question, see DESIGN.md)
"""

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
_HEADERS = {"Content-Type": "application/json"}
_MAX_LOGGED_BODY = 500


class ReportDispatcher:
    """Fire-and-forget HTTP POST of encoded failure reports."""

    def __init__(
        self,
        endpoint_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Any = None,
    ):
        self.endpoint_url = endpoint_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._in_flight: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config, transport: Any = None) -> "ReportDispatcher | None":
        """Dispatcher for a ReportingConfig, or None when reporting is disabled."""
        if not config.endpoint_url:
            return None
        return cls(
            config.endpoint_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def dispatch(self, payload: str) -> bool:
        """POST payload once. Returns True on HTTP 200, False otherwise."""
        try:
            response = await asyncio.wait_for(
                self._post(payload), timeout=self.timeout_seconds,
            )
        except httpx.InvalidURL as e:
            logger.error(
                f"Failed to create error report request: {e}",
                extra={"endpoint_url": self.endpoint_url},
            )
            return False
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                f"Error report timed out after {self.timeout_seconds}s",
                extra={"endpoint_url": self.endpoint_url},
            )
            return False
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send error report: {e}",
                extra={"endpoint_url": self.endpoint_url},
            )
            return False
        return self._check_response(response)

    async def _post(self, payload: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport,
        ) as client:
            return await client.post(
                self.endpoint_url, content=payload, headers=_HEADERS,
            )

    def dispatch_in_background(self, payload: str) -> asyncio.Task:
        """Schedule dispatch() as a detached task and return immediately."""
        task = asyncio.create_task(self.dispatch(payload), name="failure-report")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def dispatch_blocking(self, payload: str) -> bool:
        """Run dispatch() to completion on a private event loop.

        For callers without a running loop (startup). Same single attempt and
        whole-attempt timeout as dispatch().
        """
        return asyncio.run(self.dispatch(payload))

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight reports, at most timeout seconds."""
        if not self._in_flight:
            return
        _, pending = await asyncio.wait(set(self._in_flight), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} error report(s) still in flight at shutdown")

    def _check_response(self, response: httpx.Response) -> bool:
        if response.status_code != 200:
            logger.warning(
                f"Error endpoint response: {response.status_code} - "
                f"{response.text[:_MAX_LOGGED_BODY]}",
                extra={
                    "status_code": response.status_code,
                    "endpoint_url": self.endpoint_url,
                },
            )
            return False
        logger.info(
            f"Error endpoint response: {response.status_code}",
            extra={"status_code": response.status_code},
        )
        return True
