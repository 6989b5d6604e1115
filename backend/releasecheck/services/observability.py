"""JSON-lines request and release event logging.

Each request runs inside a trace scope; log lines emitted while it is
active carry its trace id unless one is passed explicitly.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
import json
import logging
import re
import uuid

TRACE_HEADER = "X-Trace-Id"

_TRACE_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,64}")
_current_trace: ContextVar[str | None] = ContextVar("releasecheck_trace_id", default=None)


def accept_trace_id(header_value: str | None) -> str:
    """Return the caller's trace id if it is a safe token, else a fresh one."""
    candidate = (header_value or "").strip()
    if _TRACE_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def current_trace_id() -> str | None:
    return _current_trace.get()


@contextmanager
def trace_scope(trace_id: str) -> Iterator[str]:
    token = _current_trace.set(trace_id)
    try:
        yield trace_id
    finally:
        _current_trace.reset(token)


def emit_structured_log(
    *,
    component: str,
    event: str,
    level: int = logging.INFO,
    trace_id: str | None = None,
    release_id: int | str | None = None,
    **fields,
) -> None:
    record: dict[str, object] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "component": component,
        "event": event,
        "trace_id": trace_id or current_trace_id(),
    }
    if release_id is not None:
        record["release_id"] = release_id
    record.update(fields)
    logging.getLogger(component).log(level, json.dumps(record, sort_keys=True, default=str))
