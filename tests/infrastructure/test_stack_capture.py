"""Stack Capture — verifies trace ordering, other-unit dumps, and truncation."""

import asyncio
import threading

from app.core.locate_frame import locate_source
from app.infrastructure.stack_capture import TRUNCATION_MARKER, capture_trace


def _fail_deep():
    return {}["missing"]


def _raise() -> Exception:
    try:
        _fail_deep()
    except KeyError as exc:
        return exc
    raise AssertionError("expected KeyError")


def test_exception_traceback_comes_first():
    trace = capture_trace(_raise(), all_units=False)
    assert trace.startswith("Traceback (most recent call last):")
    assert "KeyError: 'missing'" in trace
    assert "Thread " not in trace


def test_other_threads_are_included_under_headers():
    release = threading.Event()
    worker = threading.Thread(target=release.wait, name="report-test-worker")
    worker.start()
    try:
        trace = capture_trace(_raise(), all_units=True)
    finally:
        release.set()
        worker.join()

    assert "Thread report-test-worker" in trace
    assert trace.index("Traceback") < trace.index("Thread report-test-worker")


async def test_other_asyncio_tasks_are_included():
    idle = asyncio.create_task(asyncio.sleep(10), name="idle-task")
    await asyncio.sleep(0)
    try:
        trace = capture_trace(_raise(), all_units=True)
    finally:
        idle.cancel()
        await asyncio.gather(idle, return_exceptions=True)

    assert "Task idle-task:" in trace


def test_trace_is_capped():
    trace = capture_trace(_raise(), all_units=False, max_chars=40)
    assert trace.endswith(TRUNCATION_MARKER)
    assert len(trace) == 40 + len(TRUNCATION_MARKER)


def test_locator_finds_origin_in_captured_trace():
    location = locate_source(capture_trace(_raise(), all_units=True))
    assert location.file == "test_stack_capture.py"
