"""Logging setup.

LOG_FORMAT selects the output:
- "json": one JSON object per line (python-json-logger), for log shippers
- "text": human-readable lines for local development

Both formats carry the request ID of the request being served.
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from architect.middleware.request_id import get_request_id

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestIDFilter(logging.Filter):
    def filter(self, record):
        record.request_id = get_request_id() or "-"
        return True


class PlaywrightPipeFilter(logging.Filter):
    """Drop Playwright's 'pipe closed by peer' spam emitted when a context dies."""

    def filter(self, record):
        return "pipe closed by peer" not in record.getMessage()


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s %(request_id)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(log_format: str = "text", log_level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_format: "json" or "text"
        log_level: Python log level name; unknown names fall back to INFO
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    handler.addFilter(PlaywrightPipeFilter())
    handler.setFormatter(_build_formatter(log_format))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logging.getLogger("playwright").setLevel(logging.ERROR)
    # LiteLLM logs every request at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
