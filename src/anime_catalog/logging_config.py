from __future__ import annotations
import logging
import sys

import structlog

def _resolve_log_level(raw_level: str) -> int:
    resolved = getattr(logging, raw_level.strip().upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO

def configure_logging(level: str = "INFO") -> None:
    """Route structlog events through stdlib logging to stderr."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())))
    logger = logging.getLogger("anime_catalog")
    for h in list(logger.handlers): logger.removeHandler(h)
    logger.addHandler(handler)
    logger.setLevel(_resolve_log_level(level))
    logger.propagate = False
