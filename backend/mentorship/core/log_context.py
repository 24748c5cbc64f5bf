from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
import logging
from typing import Iterator, Optional

from .config import settings
from .ulid_helper import generate_ulid

_correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(correlation_id: Optional[str]) -> Token[str]:
    return _correlation_id_var.set(correlation_id or "")


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id_var.reset(token)


def get_correlation_id(default: Optional[str] = None) -> Optional[str]:
    value = _correlation_id_var.get()
    return value if value else default


def get_correlation_id_value(default: str = "no-correlation") -> str:
    value = _correlation_id_var.get()
    return value if value else default


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Tag every log record emitted inside the block with one id."""
    value = correlation_id or generate_ulid()
    token = set_correlation_id(value)
    try:
        yield value
    finally:
        reset_correlation_id(token)


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id_value()
        return True


def attach_correlation_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging with correlation ids on every record."""
    logging.basicConfig(level=level or settings.log_level, format=fmt or settings.log_format)
    attach_correlation_id_filter()
