"""Trace Locator — finds the application frame a failure was raised from.

Invariants:
    - Frames of the recovery pipeline itself are never reported
    - Frames under interpreter stdlib / installed-package paths are never reported
    - Frames are scanned innermost-first and the FIRST qualifying one wins
      (the application frame nearest the raise point)
    - Result is a best-effort diagnostic hint, not ground truth

Design Decisions:
    - Structured FrameSummary input preferred (locate_in_frames); the text form
      (locate_source) parses traceback text into the same structure and applies
      the same exclusion rules (ADR: one rule set, two entry points)
    - Pipeline exclusion by module stem, not substring: test modules named
      after the pipeline (test_recovery_middleware.py) stay application code
"""

import re
import sysconfig
import traceback
from collections.abc import Iterable
from pathlib import PurePath
from traceback import FrameSummary
from typing import NamedTuple

# Modules and entry points that make up the recovery pipeline
PIPELINE_MODULES = frozenset({
    "recovery_middleware", "report_dispatcher", "stack_capture",
})
PIPELINE_FUNCTIONS = frozenset({
    "capture_trace", "_recover", "report_startup_failure",
    "dispatch_in_background", "dispatch_blocking",
})

_RUNTIME_SEGMENTS = ("/site-packages/", "/dist-packages/")
_FROZEN_PREFIX = "<frozen "

#   File "/srv/app/handlers.py", line 42, in divide
#   | File "...", line 7, in inner   (exception group members)
_FRAME_LINE = re.compile(
    r'^[\s|]*File "(?P<path>[^"]+)", line (?P<line>\d+)(?:, in (?P<name>.+))?\s*$',
)


class SourceLocation(NamedTuple):
    """File name (last path segment) and 1-based line of a frame."""
    file: str
    line: int


def _runtime_prefixes() -> tuple[str, ...]:
    paths = sysconfig.get_paths()
    prefixes = {
        paths[key].replace("\\", "/").rstrip("/") + "/"
        for key in ("stdlib", "platstdlib", "purelib", "platlib")
        if paths.get(key)
    }
    return tuple(sorted(prefixes))


RUNTIME_PATH_PREFIXES = _runtime_prefixes()


def is_pipeline_frame(filename: str, name: str | None) -> bool:
    """True if the frame belongs to the failure-capture-and-report machinery."""
    if name in PIPELINE_FUNCTIONS:
        return True
    return PurePath(filename.replace("\\", "/")).stem in PIPELINE_MODULES


def is_runtime_path(filename: str) -> bool:
    """True if the file lives in the interpreter or an installed package."""
    path = filename.replace("\\", "/")
    if path.startswith(_FROZEN_PREFIX):
        return True
    if any(segment in path for segment in _RUNTIME_SEGMENTS):
        return True
    return path.startswith(RUNTIME_PATH_PREFIXES)


def locate_in_frames(frames: Iterable[FrameSummary]) -> SourceLocation | None:
    """Return the first frame, in the given order, that is genuine application code."""
    for frame in frames:
        if is_pipeline_frame(frame.filename, frame.name):
            continue
        if is_runtime_path(frame.filename):
            continue
        if not frame.lineno or frame.lineno <= 0:
            continue
        file_name = PurePath(frame.filename.replace("\\", "/")).name
        return SourceLocation(file=file_name or frame.filename, line=frame.lineno)
    return None


def locate_exception(exc: BaseException) -> SourceLocation | None:
    """Locate where exc was raised: its own traceback, innermost frame first."""
    return locate_in_frames(reversed(traceback.extract_tb(exc.__traceback__)))


def parse_trace_frames(trace_text: str) -> list[FrameSummary]:
    """Parse traceback / stack-dump text into frames, skipping non-frame lines."""
    return [frame for block in _frame_blocks(trace_text) for frame in block]


def _frame_blocks(trace_text: str) -> list[list[FrameSummary]]:
    # A block is the run of frames between two unindented lines (headers,
    # exception lines, chained-exception separators)
    blocks: list[list[FrameSummary]] = [[]]
    for line in trace_text.splitlines():
        match = _FRAME_LINE.match(line)
        if match is None:
            if line and not line[0].isspace() and blocks[-1]:
                blocks.append([])
            continue
        blocks[-1].append(FrameSummary(
            match.group("path"),
            int(match.group("line")),
            (match.group("name") or "").strip(),
            lookup_line=False,
        ))
    return [block for block in blocks if block]


def locate_source(trace_text: str) -> SourceLocation | None:
    """Locate the originating application frame in raw trace text.

    Python prints each stack outermost call first, so every block is scanned
    innermost-first; blocks keep their order in the text.
    """
    return locate_in_frames(
        frame for block in _frame_blocks(trace_text) for frame in reversed(block)
    )
