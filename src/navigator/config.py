"""Configuration settings for the navigator WebDriver client."""

import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Client configuration from environment variables."""

    # Driver service
    webdriver_timeout_seconds: float = 10.0  # time allowed for the driver to boot
    boot_poll_interval_seconds: float = 0.5
    status_timeout_seconds: float = 1.0  # per /status probe

    # Session HTTP client
    http_timeout_seconds: float = 30.0

    # Debugging
    debug: bool = False  # log outbound requests and driver stdout

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "NAVIGATOR_"}

    @property
    def log_level_number(self) -> int:
        """Resolve log_level to a logging module constant."""
        level = getattr(logging, self.log_level.upper(), None)
        if not isinstance(level, int):
            logger.warning(f"Unknown log level {self.log_level!r}, falling back to INFO")
            return logging.INFO
        return level


# Global settings instance
settings = Settings()
