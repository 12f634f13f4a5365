# app/utils/logging.py
import logging
import sys

import structlog

from app.utils.settings import LOG_FORMAT, LOG_LEVEL

_CONFIGURED = False


def configure_logging() -> None:
    """
    structlog + stdlib bridge, tylko pierwsze wywolanie ma efekt.
    LOG_FORMAT=json dla produkcji, console lokalnie.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    renderer = (
        structlog.processors.JSONRenderer()
        if LOG_FORMAT.lower() == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL.upper())

    # sqlalchemy i uvicorn sa zbyt gadatliwe na INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
