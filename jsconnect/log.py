"""
Logging Setup
=============
Structured logging for services embedding the jsConnect handshake.

Usage:
    from jsconnect.log import setup_logging

    setup_logging(service_name="forum-sso")
"""

import logging
import sys
from typing import Optional

import structlog


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
    stream: Optional[object] = None,
) -> structlog.stdlib.BoundLogger:
    """
    Configure stdlib logging and structlog for a service.

    Args:
        service_name: Name bound to every log event
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines (production) or console output
        stream: Output stream, stdout by default

    Returns:
        Package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    logger = structlog.get_logger("jsconnect")
    logger.info("logging_configured", level=level.upper())
    return logger
