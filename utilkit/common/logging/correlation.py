"""Correlation context for log records and errors."""

import uuid
import logging
import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional


# Context variable for correlation ID (thread-safe, async-safe)
correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Context variable for job ID
job_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)


def generate_correlation_id() -> str:
    """Generate unique correlation ID."""
    return str(uuid.uuid4())[:8]


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: str):
    """Set correlation ID in context."""
    correlation_id_var.set(cid)


def get_job_id() -> str | None:
    """Get current job ID from context."""
    return job_id_var.get()


def set_job_id(jid: str):
    """Set job ID in context."""
    job_id_var.set(jid)


@contextmanager
def correlation_scope(
    cid: Optional[str] = None,
    job_id: Optional[str] = None,
) -> Iterator[str]:
    """
    Bind a correlation ID (and optional job ID) for the duration of a block.

    Usage:
        with correlation_scope() as cid:
            cache.scavenge()   # log records carry cid

    Yields:
        The correlation ID in effect inside the block
    """
    cid = cid or generate_correlation_id()
    cid_token = correlation_id_var.set(cid)
    job_token = job_id_var.set(job_id) if job_id is not None else None
    try:
        yield cid
    finally:
        correlation_id_var.reset(cid_token)
        if job_token is not None:
            job_id_var.reset(job_token)


class CorrelationLogFilter(logging.Filter):
    """
    Logging filter that adds correlation_id and job_id to log records.

    Use with standard logging to auto-inject context vars.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        record.job_id = get_job_id()
        return True
