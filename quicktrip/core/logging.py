from __future__ import annotations

import logging
import sys

from quicktrip.core.tracing import NO_TRACE, current_trace_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | trace_id=%(trace_id)s | %(message)s"

# One search fans out to 20 routing calls; httpx would log each at INFO.
QUIET_LOGGERS = ("httpx", "httpcore")


class TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or NO_TRACE
        return True


def configure_logging(service_name: str, level: int | str = logging.INFO) -> logging.Logger:
    """Route every logger to stdout with the request trace id in each line."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(TraceIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(service_name)
