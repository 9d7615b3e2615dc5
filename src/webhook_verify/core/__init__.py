"""Core."""

from .config import VerifierSettings, clear_config, get_config
from .logging import configure_logging

__all__ = [
    "VerifierSettings",
    "clear_config",
    "configure_logging",
    "get_config",
]
