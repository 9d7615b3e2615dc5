"""Configuration types with environment variable support.

All settings can be configured via environment variables with the WEBHOOK_VERIFY_ prefix.
Example: WEBHOOK_VERIFY_DEFAULT_TOLERANCE=600 widens the replay window to 10 minutes.

Secrets are never read from here; they belong to the caller.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VerifierSettings(BaseSettings):
    """Engine-wide defaults.

    All settings can be overridden via environment variables:
    - WEBHOOK_VERIFY_DEFAULT_TOLERANCE: Replay window in seconds
    - WEBHOOK_VERIFY_DEFAULT_METHOD: HTTP method for URL-signing schemes
    - WEBHOOK_VERIFY_LOG_LEVEL: Log level used by configure_logging()
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_VERIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tolerance: int = Field(
        default=300,
        ge=0,
        description="Maximum timestamp age in seconds. Default 5 minutes.",
    )
    default_method: str = Field(
        default="POST",
        description="HTTP method assumed by HubSpot and Crystallize when none is given.",
    )
    log_level: str = Field(
        default="warning",
        description="Log level (debug, info, warning, error).",
    )

    def to_env_dict(self) -> dict[str, str]:
        """Export current configuration as environment variable dictionary."""
        return {
            "WEBHOOK_VERIFY_DEFAULT_TOLERANCE": str(self.default_tolerance),
            "WEBHOOK_VERIFY_DEFAULT_METHOD": self.default_method,
            "WEBHOOK_VERIFY_LOG_LEVEL": self.log_level,
        }


_config: VerifierSettings | None = None


def get_config() -> VerifierSettings:
    """Get the global configuration instance.

    Returns a cached instance of VerifierSettings that reads from environment variables.
    The instance is created once and cached for the lifetime of the process.

    To reload config (e.g., in tests), call clear_config() first.

    Example:
        config = get_config()
        tolerance = config.default_tolerance
    """
    global _config
    if _config is None:
        _config = VerifierSettings()
    return _config


def clear_config() -> None:
    """Clear the cached configuration.

    Call this to force reloading of environment variables on next get_config() call.
    Useful for testing.
    """
    global _config
    _config = None
