"""Recover the source text of the expression passed to an assertion call."""

from __future__ import annotations

import ast
import functools
import inspect
import linecache
from types import FrameType

ASSERTION_FUNCTIONS = frozenset({"assert_that", "check_that"})


def call_name(node: ast.Call) -> str | None:
    """Return the called function's name for ``f(...)`` and ``mod.f(...)``."""
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


@functools.lru_cache(maxsize=128)
def _assertion_calls(source: str) -> tuple[ast.Call, ...]:
    try:
        tree = ast.parse(source)
    except SyntaxError:
        return ()
    return tuple(
        node
        for node in ast.walk(tree)
        if isinstance(node, ast.Call)
        and call_name(node) in ASSERTION_FUNCTIONS
        and node.args
    )


def _locate(frame: FrameType, calls: tuple[ast.Call, ...]) -> ast.Call | None:
    positions = getattr(inspect.getframeinfo(frame, context=0), "positions", None)
    if positions is not None and positions.lineno is not None:
        for call in calls:
            if (
                call.lineno == positions.lineno
                and call.col_offset == positions.col_offset
                and call.end_lineno == positions.end_lineno
                and call.end_col_offset == positions.end_col_offset
            ):
                return call

    lineno = frame.f_lineno
    candidates = [c for c in calls if c.lineno <= lineno <= (c.end_lineno or c.lineno)]
    if len(candidates) == 1:
        return candidates[0]
    return None


def frame_expression(frame: FrameType) -> str | None:
    """Source text of the first argument of the assertion call running in *frame*."""
    filename = frame.f_code.co_filename
    lines = linecache.getlines(filename, frame.f_globals)
    if not lines:
        return None
    source = "".join(lines)

    call = _locate(frame, _assertion_calls(source))
    if call is None:
        return None

    segment = ast.get_source_segment(source, call.args[0])
    if segment is None:
        return None
    return " ".join(segment.split())


def caller_expression(depth: int = 1) -> str | None:
    """Return the source text of the checked expression at the calling site.

    Args:
        depth: Number of frames between the caller of this function and
            the frame containing the ``assert_that(...)`` call.

    Returns:
        The expression text, or None when the source is not available
        (interactive sessions, ``exec``) or the call cannot be located.
    """
    frame = inspect.currentframe()
    try:
        target = frame.f_back if frame is not None else None
        for _ in range(depth):
            if target is None:
                break
            target = target.f_back
        if target is None:
            return None
        return frame_expression(target)
    finally:
        del frame
