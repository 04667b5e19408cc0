"""
Structured logging for the store.

Every redisstore module obtains its logger from get_logger(), so events carry
the emitting module as ``logger_name``. redis-py logs connection and cluster
topology events through the standard library ``redis`` logger;
setup_logging() renders those records with the same structlog pipeline.
"""
import logging
import os
import sys
from typing import Any, List, Optional

import structlog

REDIS_LOGGER = "redis"


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(development: bool) -> Any:
    if development:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the redis client's stdlib logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the LOG_LEVEL environment variable, then INFO.

    Output is JSON unless ENVIRONMENT=development, which switches to the
    colored console renderer. The level applies to both redisstore events
    and the ``redis`` logger.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer = _renderer(os.getenv("ENVIRONMENT", "production") == "development")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    redis_logger = logging.getLogger(REDIS_LOGGER)
    redis_logger.handlers = [handler]
    redis_logger.setLevel(log_level)
    redis_logger.propagate = False

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # module-level loggers are created at import, before setup_logging() runs
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger bound to the emitting module's name.

    The logger resolves the structlog configuration lazily, so module-level
    loggers pick up a later setup_logging() call.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_flushed")
    """
    return structlog.get_logger(name, logger_name=name)
