"""structlog configuration.

Learn: Everything logs through structlog.get_logger() with dotted event
names ("auth.login_failed") and keyword fields. Request-scoped values
(request_id, user_id) are bound with structlog.contextvars by the
middleware and the identity gate, and merged into every entry.

Console output in development, one JSON object per line otherwise.
Passwords, hashes and tokens are never passed to a logger.
"""

import logging

import structlog

from itemvault.config import Settings


def configure_logging(app_settings: Settings) -> None:
    """Configure structlog once, at app creation."""
    level = logging.getLevelName(app_settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if app_settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
