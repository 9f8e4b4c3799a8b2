# /intake_bot/utils/logging.py

import logging
import sys
import structlog
from intake_bot.config.settings import settings

# Log setup for the bot. Stdlib loggers (services, uvicorn) and structlog
# loggers (routes) share one stdout handler and one renderer, so every line
# leaves the process in the same shape.

# Loggers that would otherwise print every Bot API call or HTTP access line
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

TOKEN_MASK = "<bot-token>"


def redact_bot_token(logger, method_name, event_dict):
    """Replaces the bot token in string values; it is part of every Bot API URL."""
    token = settings.telegram_bot_token
    for key, value in event_dict.items():
        if isinstance(value, str) and token in value:
            event_dict[key] = value.replace(token, TOKEN_MASK)
    return event_dict


def setup_logging():
    """
    Routes stdlib and structlog records through one ProcessorFormatter.
    Development gets colored console lines; every other environment gets
    one JSON object per line with Cyrillic kept as is.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        redact_bot_token,
    ]

    if settings.environment == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    ))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
