"""Per-request trace ids carried through a ContextVar.

A caller may pass its own id in ``X-Trace-Id`` or ``X-Request-Id``, or a W3C
``traceparent`` header whose trace-id segment is reused. Anything that does
not look like a hex id is replaced by a fresh one so log lines stay greppable.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping, Optional
from uuid import uuid4

NO_TRACE = "-"

_current: ContextVar[str] = ContextVar("quicktrip_trace_id", default=NO_TRACE)
_PLAIN_ID = re.compile(r"^[0-9a-f]{16,64}$")
_TRACEPARENT = re.compile(r"^[0-9a-f]{2}-([0-9a-f]{32})-[0-9a-f]{16}-[0-9a-f]{2}$")


def new_trace_id() -> str:
    return uuid4().hex


def trace_id_from_headers(headers: Mapping[str, str]) -> str:
    """Trace id supplied by the caller, or a new one when none is usable."""

    for name in ("x-trace-id", "x-request-id"):
        value = (headers.get(name) or "").strip().lower().replace("-", "")
        if _PLAIN_ID.match(value):
            return value

    parent = _TRACEPARENT.match((headers.get("traceparent") or "").strip().lower())
    if parent and parent.group(1) != "0" * 32:
        return parent.group(1)

    return new_trace_id()


@contextmanager
def trace_context(trace_id: str) -> Iterator[str]:
    token = _current.set(trace_id)
    try:
        yield trace_id
    finally:
        _current.reset(token)


def current_trace_id() -> Optional[str]:
    value = _current.get()
    return None if value == NO_TRACE else value
