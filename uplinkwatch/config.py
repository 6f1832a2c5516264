"""Configuration settings for the connectivity watchdog."""

import os
from typing import List, Optional

from dotenv import load_dotenv

from .core.errors import ConfigError

DEFAULT_STATE_FILE = "/tmp/uplinkwatch_state.json"
DEFAULT_LOG_FILE = os.path.join("logs", "uplinkwatch.log")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _parse_int(name: str, raw: str, minimum: int = 1) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a valid integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """Configuration class for the connectivity watchdog."""

    # Class-level storage for dynamic updates
    _dynamic_settings = {}

    def __init__(self, load_env: bool = True, dotenv_path: Optional[str] = None):
        """
        Initialize configuration from environment variables and defaults.

        Args:
            load_env: Whether to load a .env file into the environment first
            dotenv_path: Explicit .env file, searched for when not given

        Raises:
            ConfigError: If a value is invalid or a required value is missing
        """
        if load_env:
            load_dotenv(dotenv_path)

        self.app_name = os.getenv('APP_NAME') or 'uplinkwatch'

        # SMTP settings
        self.smtp_host = os.getenv('SMTP_HOST') or 'smtp.gmail.com'
        self.smtp_port = _parse_int('SMTP_PORT', os.getenv('SMTP_PORT') or '587')
        self.smtp_user = os.getenv('SMTP_USER', '')
        self.smtp_password = os.getenv('SMTP_PASSWORD', '')
        self.email_to = os.getenv('EMAIL_TO', '')

        if self.email_to and not (self.smtp_user and self.smtp_password):
            raise ConfigError("SMTP_USER and SMTP_PASSWORD are required when EMAIL_TO is set")

        # Health check endpoint, empty disables it
        self.healthcheck_url = os.getenv('HEALTHCHECK_URL', '')

        # Monitoring settings
        self.monitor_interval = _parse_int('MONITOR_INTERVAL', os.getenv('MONITOR_INTERVAL') or '60')
        self.probe_timeout = _parse_int('PROBE_TIMEOUT', os.getenv('PROBE_TIMEOUT') or '10')
        self.ip_services = _parse_list(os.getenv('IP_SERVICES', ''))

        # State storage
        self.state_file_path = os.getenv('STATE_FILE_PATH') or DEFAULT_STATE_FILE

        # Logging configuration
        self.log_level = (os.getenv('LOG_LEVEL') or 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', DEFAULT_LOG_FILE)

        for key, value in self._dynamic_settings.items():
            setattr(self, key, value)

        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_to)

    def get(self, key, default=None):
        """Get a configuration value with fallback to default."""
        # First check dynamic settings
        if key in self._dynamic_settings:
            return self._dynamic_settings[key]

        # Then check instance attributes
        if hasattr(self, key):
            return getattr(self, key)

        return default

    @classmethod
    def update(cls, settings_dict):
        """
        Update configuration with dynamic settings.

        Raises:
            ConfigError: If an interval override is not a positive integer
        """
        if 'monitor_interval' in settings_dict:
            settings_dict = dict(settings_dict)
            settings_dict['monitor_interval'] = _parse_int(
                '--interval', settings_dict['monitor_interval']
            )
        cls._dynamic_settings.update(settings_dict)
        return cls._dynamic_settings

    @classmethod
    def reset(cls):
        """Drop all dynamic settings."""
        cls._dynamic_settings.clear()
