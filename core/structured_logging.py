"""Structured logging helpers with run, phase and source-file context.

Every record handled by the root logger carries ``run_id``, ``phase`` and
``source`` fields. Values live in context variables, so worker threads see
them only when their work is submitted through ``copy_log_context().run``.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator

_UNSET = "-"

_CONTEXT_FIELDS: Dict[str, contextvars.ContextVar[str]] = {
    name: contextvars.ContextVar(name, default=_UNSET)
    for name in ("run_id", "phase", "source")
}

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "source=%(source)s | %(name)s | %(message)s"
)


class _LogContextFilter(logging.Filter):
    """Copy the current context fields onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, var in _CONTEXT_FIELDS.items():
            setattr(record, name, var.get())
        return True


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Install LOG_FORMAT and the context filter on every root handler."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, _LogContextFilter) for f in handler.filters):
            handler.addFilter(_LogContextFilter())


def set_run_id(run_id: str | None = None) -> str:
    """Set the run correlation ID, generating a short one when not given."""
    value = run_id or uuid.uuid4().hex[:12]
    _CONTEXT_FIELDS["run_id"].set(value)
    return value


def get_run_id() -> str:
    return _CONTEXT_FIELDS["run_id"].get()


@contextmanager
def _field_scope(name: str, value: str) -> Iterator[None]:
    var = _CONTEXT_FIELDS[name]
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def phase_scope(phase: str):
    """Tag records with a run phase (``preflight``, ``emit``, ``report``)."""
    return _field_scope("phase", phase)


def source_scope(relative_path: str):
    """Tag records emitted while one source file is processed."""
    return _field_scope("source", relative_path)


def copy_log_context() -> contextvars.Context:
    """Snapshot the current context for a ``concurrent.futures`` worker.

    Pool threads do not inherit context variables from the submitting thread.
    """
    return contextvars.copy_context()
