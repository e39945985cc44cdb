"""Stack Capture — renders the trace text attached to a failure report.

Invariants:
    - The failing exception's traceback always comes first (scan order matters
      to the frame locator)
    - all_units=True appends every other thread and every other asyncio task,
      each under its own header line; the capturing thread/task is skipped
    - Output is capped at max_chars (tail dropped, marker appended)

Design Decisions:
    - sys._current_frames + asyncio.all_tasks: every unit of execution is
      dumped, so the origin stays visible when recovery runs elsewhere
"""

import asyncio
import sys
import threading
import traceback
from collections.abc import Iterator

TRUNCATION_MARKER = "\n... [trace truncated]\n"


def _format_exception(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _format_other_threads() -> Iterator[str]:
    current = threading.get_ident()
    names = {t.ident: t.name for t in threading.enumerate()}
    for ident, frame in sys._current_frames().items():
        if ident == current:
            continue
        header = f"Thread {names.get(ident, 'unknown')} ({ident:#x}):\n"
        yield header + "".join(traceback.format_stack(frame))


def _format_other_tasks() -> Iterator[str]:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return
    current = asyncio.current_task()
    for task in asyncio.all_tasks():
        if task is current or task.done():
            continue
        frames = task.get_stack()
        if not frames:
            continue
        summary = traceback.StackSummary.extract(
            (frame, frame.f_lineno) for frame in frames
        )
        yield f"Task {task.get_name()}:\n" + "".join(summary.format())


def capture_trace(
    exc: BaseException, all_units: bool = True, max_chars: int | None = None,
) -> str:
    """Render exc's traceback, optionally followed by every other unit of execution."""
    parts = [_format_exception(exc)]
    if all_units:
        parts.extend(_format_other_threads())
        parts.extend(_format_other_tasks())
    trace_text = "\n".join(parts)
    if max_chars and len(trace_text) > max_chars:
        return trace_text[:max_chars] + TRUNCATION_MARKER
    return trace_text
