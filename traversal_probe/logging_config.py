"""Logging configuration for the traversal probe."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, TextIO

import structlog
from structlog.contextvars import get_contextvars, merge_contextvars
from structlog.stdlib import ProcessorFormatter

_TIMESTAMER = structlog.processors.TimeStamper(fmt="iso", key="timestamp")

# httpx logs each request at INFO; it shares the probe's handler and level.
_LOGGER_NAMES = ("traversal_probe", "httpx")


def _add_token(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure ``token`` is present in every log entry."""

    if event_dict.get("token") is None:
        event_dict["token"] = get_contextvars().get("token")
    return event_dict


def _build_formatter() -> logging.Formatter:
    return ProcessorFormatter(
        foreign_pre_chain=[
            merge_contextvars,
            structlog.processors.add_log_level,
            _TIMESTAMER,
            _add_token,
        ],
        processors=[
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


_configured = False


def configure_logging(level: int = logging.WARNING, stream: TextIO | None = None) -> None:
    """Route probe logs to stderr as structured JSON events.

    Stdout is reserved for the two result lines, so the handler never
    writes there. Later calls only adjust the level.
    """

    global _configured
    if _configured:
        for name in _LOGGER_NAMES:
            logging.getLogger(name).setLevel(level)
        return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_build_formatter())

    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(level)

    _configured = True
