"""Logging filters that keep credentials out of log output."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+|Bearer\s+eyJ[\w\.-]+|access_token\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)
REDACTED = "**REDACTED**"


def redact(message: str) -> str:
    """Replace bearer tokens in ``message`` with a marker."""
    return _SENSITIVE_PATTERN.sub(REDACTED, message)


class SensitiveFilter(logging.Filter):
    """Scrub bearer tokens from log records before they are emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


def install_sensitive_filter(*logger_names: str) -> None:
    """Attach one ``SensitiveFilter`` to each named logger."""
    for name in logger_names:
        target = logging.getLogger(name)
        if not any(isinstance(flt, SensitiveFilter) for flt in target.filters):
            target.addFilter(SensitiveFilter())


__all__ = ["REDACTED", "SensitiveFilter", "install_sensitive_filter", "redact"]
