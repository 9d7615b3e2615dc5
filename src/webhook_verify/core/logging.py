"""Logging setup for webhook_verify.

Modules log through ``structlog.get_logger()``. Applications that already
configure structlog need nothing from here.
"""

from __future__ import annotations

import logging

import structlog

from webhook_verify.core.config import get_config


def configure_logging(log_level: str | None = None) -> None:
    """Configure structlog with a level filter.

    Args:
        log_level: Level name (debug, info, warning, error). Defaults to
            the WEBHOOK_VERIFY_LOG_LEVEL setting.
    """
    effective_log_level = (log_level or get_config().log_level).upper()

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, effective_log_level, logging.WARNING)
        ),
    )
