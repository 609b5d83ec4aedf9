import logging
from typing import Callable, Dict

import structlog

from .config import Settings

RENDERERS: Dict[str, Callable[[], structlog.types.Processor]] = {
    "console": structlog.dev.ConsoleRenderer,
    "json": structlog.processors.JSONRenderer,
}


def setup_logging(settings: Settings) -> None:
    """Point structlog at stdout, filtered at ``settings.log_level``.

    Loggers are not cached: each app built by ``create_app`` may bring its own
    settings, and module-level loggers must follow the latest configuration.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=settings.use_utc_day),
            structlog.processors.format_exc_info,
            RENDERERS[settings.log_format](),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
