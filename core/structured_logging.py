"""Scan-correlated logging.

Every record emitted while a scan runs carries the run ID, the current phase
(``config``, ``scan``, ``write``), the scanned source directory and the Go
file being walked. The values live in one context variable so a nested scope
only overrides what it names.
"""

from __future__ import annotations

import contextvars
import dataclasses
import logging
import uuid
from contextlib import contextmanager
from typing import IO, Iterator, Optional

UNSET = "-"

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "source=%(source)s | file=%(go_file)s | %(name)s | %(message)s"
)


@dataclasses.dataclass(frozen=True)
class ScanLogContext:
    run_id: str = UNSET
    phase: str = UNSET
    source: str = UNSET
    go_file: str = UNSET


_CONTEXT: contextvars.ContextVar[ScanLogContext] = contextvars.ContextVar(
    "entityscan_log_context", default=ScanLogContext()
)


def current_context() -> ScanLogContext:
    return _CONTEXT.get()


class ScanContextFilter(logging.Filter):
    """Copy the active ``ScanLogContext`` onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in dataclasses.asdict(_CONTEXT.get()).items():
            setattr(record, name, value)
        return True


def configure_structured_logging(
    level: int = logging.INFO, stream: Optional[IO[str]] = None
) -> None:
    """Route root logging through the scan format.

    Existing root handlers are reformatted in place; otherwise a stream
    handler on ``stream`` (stderr by default) is installed.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream)
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in root.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, ScanContextFilter) for f in handler.filters):
            handler.addFilter(ScanContextFilter())


def set_run_id(run_id: str | None = None) -> str:
    """Start a run; a short random ID is generated when none is given."""
    value = run_id or uuid.uuid4().hex[:12]
    _CONTEXT.set(dataclasses.replace(_CONTEXT.get(), run_id=value))
    return value


def get_run_id() -> str:
    return _CONTEXT.get().run_id


@contextmanager
def _scoped(**changes: str) -> Iterator[ScanLogContext]:
    token = _CONTEXT.set(dataclasses.replace(_CONTEXT.get(), **changes))
    try:
        yield _CONTEXT.get()
    finally:
        _CONTEXT.reset(token)


@contextmanager
def phase_scope(phase: str, source: str | None = None) -> Iterator[ScanLogContext]:
    """Tag logs with a run phase and, optionally, the scanned directory."""
    changes = {"phase": phase}
    if source is not None:
        changes["source"] = source
    with _scoped(**changes) as context:
        yield context


@contextmanager
def file_scope(go_file: str) -> Iterator[ScanLogContext]:
    """Tag logs with the Go file currently being walked."""
    with _scoped(go_file=go_file) as context:
        yield context
