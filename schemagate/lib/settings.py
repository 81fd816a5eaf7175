"""Configuration for schemagate runs.

Settings come from environment variables with the ``SCHEMAGATE_`` prefix (or
a ``.env`` file), and CLI flags override them.

Example:
    >>> # SCHEMAGATE_DEFINITION=./schemas/pinpoint.yaml
    >>> # SCHEMAGATE_WEBHOOK_URLS='["https://hooks.example.com/schema"]'
    >>> # SCHEMAGATE_FAIL_ON_MISMATCH=false
    >>> settings = load_settings()
    >>> settings.fail_on_mismatch
    False
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemagate.lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "GateSettings",
    "LoggingConfig",
    "load_settings",
]

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_FORMATS = ["json", "console", "text"]


class LoggingConfig(BaseModel):
    """Pydantic model for logging configuration.

    Example YAML:
        logging:
          level: INFO
          format: json          # 'json' for log aggregation, 'console' for humans
          file: ./logs/schemagate.log
    """

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="console", description="Output format: 'json' or 'console'")
    file: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"level must be one of: {VALID_LOG_LEVELS}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate format is a known value."""
        if v.lower() not in VALID_LOG_FORMATS:
            raise ValueError(f"format must be one of: {VALID_LOG_FORMATS}")
        return v.lower()

    @property
    def verbose(self) -> bool:
        return self.level == "DEBUG"

    @property
    def json_format(self) -> bool:
        return self.format == "json"


class GateSettings(BaseSettings):
    """Environment-based preflight settings using pydantic-settings."""

    definition: str = Field(
        default="pinpoint",
        min_length=1,
        description="Packaged definition name or path to a definition file",
    )
    namespace: Optional[str] = Field(
        default=None,
        description="Namespace applied to unqualified table names in the definition",
    )
    webhook_urls: List[str] = Field(default_factory=list, description="Webhook endpoints to notify")
    webhook_id: str = Field(default="schemagate", min_length=1, description="Correlation id sent with notifications")
    webhook_timeout: float = Field(default=5.0, ge=0.1, le=60.0, description="Webhook request timeout in seconds")
    webhook_max_attempts: int = Field(default=3, ge=1, le=10, description="Max webhook delivery attempts")
    fail_on_mismatch: bool = Field(default=True, description="Abort (raise) when the schema does not match")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: 'json' or 'console'")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("webhook_urls")
    @classmethod
    def validate_webhook_urls(cls, v: List[str]) -> List[str]:
        """Webhook URLs must be http(s)."""
        for url in v:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"webhook URL must start with http:// or https://: {url}")
        return v

    @property
    def logging_config(self) -> LoggingConfig:
        return LoggingConfig(level=self.log_level, format=self.log_format, file=self.log_file)


def load_settings(**overrides: Any) -> GateSettings:
    """Load settings from the environment, applying explicit overrides.

    ``None`` overrides are ignored so CLI flags that were not given fall
    back to the environment.

    Raises:
        ConfigurationError: If any value fails validation
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        settings = GateSettings(**values)
        # Validates log level/format eagerly
        settings.logging_config
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid schemagate settings: {first.get('msg', str(e))}",
            field=field,
            value=first.get("input"),
        ) from e

    logger.debug("Loaded settings: definition=%s, webhooks=%d", settings.definition, len(settings.webhook_urls))
    return settings
