"""Logging setup shared by the Lambda entry point and the CLI.

Every line carries the id of the request being served. Inside Lambda the
runtime prefixes CloudWatch lines with its own timestamp, so the default
format there drops ``asctime``; elsewhere a timestamped format is used.
"""

import os
import sys
import logging
from typing import Optional

LAMBDA_FORMAT = "%(levelname)s\t%(request_id)s\t%(name)s\t%(message)s"
STRUCTURED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(request_id)s | %(name)s | "
    "%(filename)s:%(lineno)d | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

FORMATS = {
    "lambda": LAMBDA_FORMAT,
    "structured": STRUCTURED_FORMAT,
    "simple": SIMPLE_FORMAT,
}

NO_REQUEST_ID = "-"

# One event per Lambda container at a time, and variant threads must see it,
# so this is a plain module global rather than a context variable.
_request_id = NO_REQUEST_ID
_debug_enabled = False


def set_request_id(request_id: Optional[str]) -> None:
    """Tag subsequent log lines with ``request_id`` (``None`` clears it)."""
    global _request_id
    _request_id = request_id or NO_REQUEST_ID


def get_request_id() -> str:
    return _request_id


class RequestIdFilter(logging.Filter):
    """Adds ``record.request_id`` so formats can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id
        return True


def running_in_lambda() -> bool:
    return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))


def resolve_level(level: Optional[str] = None) -> int:
    """An explicit level wins over debug mode, which wins over ``LOG_LEVEL``."""
    if level is None and _debug_enabled:
        return logging.DEBUG
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def resolve_format(format_type: Optional[str] = None) -> str:
    """
    Pick the log line layout.

    ``LOG_FORMAT`` overrides the argument so deployments can switch layouts
    without a code change. With neither set, Lambda gets ``lambda`` and
    everything else gets ``structured``.
    """
    name = (os.getenv("LOG_FORMAT") or format_type or "").lower()
    if name not in FORMATS:
        name = "lambda" if running_in_lambda() else "structured"
    return FORMATS[name]


def setup_logger(
    name: str = "hero-pipeline",
    level: Optional[str] = None,
    format_type: Optional[str] = None,
) -> logging.Logger:
    """
    Configure and return the named logger.

    Args:
        name: Logger name (defaults to "hero-pipeline")
        level: Level override (defaults to ``LOG_LEVEL`` or INFO)
        format_type: "lambda", "structured" or "simple"; see resolve_format

    The logger writes to stdout, which Lambda ships to CloudWatch, and does
    not propagate, since the Lambda runtime installs its own root handler.
    Calling this again for the same name only updates the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(
            logging.Formatter(resolve_format(format_type), datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = "hero-pipeline") -> logging.Logger:
    return setup_logger(name)


def set_debug_logging(name: str = "hero-pipeline") -> None:
    """Switch to DEBUG, including loggers configured after this call."""
    global _debug_enabled
    _debug_enabled = True
    get_logger(name).setLevel(logging.DEBUG)
    logging.getLogger().setLevel(logging.DEBUG)
