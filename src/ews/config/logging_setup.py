"""Logging helpers for the early-warning engine."""
from __future__ import annotations

import logging
import re

# MRN-like identifiers: "MRN123456", "mrn: 1234567", bare 6-10 digit runs.
_RE_MRN = re.compile(r"(\bMRN[:\s-]*\d+\b|\b\d{6,10}\b)", re.IGNORECASE)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class MRNRedactor(logging.Filter):
    """Filter that masks patient identifiers in log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if isinstance(record.msg, str):
            record.msg = _RE_MRN.sub("[REDACTED]", record.msg)
        return True


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging and redact identifiers on every root handler."""

    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, MRNRedactor) for f in handler.filters):
            handler.addFilter(MRNRedactor())
