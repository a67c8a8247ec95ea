"""
structlog configuration for the analytics package.

Library code only calls ``structlog.get_logger(__name__)``; hosts call
``configure_logging()`` once at startup to pick level and renderer.
"""

import logging
from typing import Optional

import structlog

from portfolio_analytics.config import settings


def configure_logging(level: Optional[str] = None, renderer: Optional[str] = None) -> None:
    """
    Configure structlog processors.

    Args:
        level: Minimum level name (defaults to settings.log_level)
        renderer: "console" or "json" (defaults to settings.log_renderer)
    """
    level_name = (level or settings.log_level).upper()
    renderer_name = renderer or settings.log_renderer

    final_processor = (
        structlog.processors.JSONRenderer()
        if renderer_name == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            final_processor,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        cache_logger_on_first_use=False,
    )
