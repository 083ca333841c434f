"""
Validator Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Invalid config is rejected when settings are loaded.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from receipt_validator.exceptions import ConfigurationError
from receipt_validator.models.environment import Environment


class Settings(BaseSettings):
    """Settings loaded from RECEIPT_* environment variables."""

    # App Store
    shared_secret: str = ""  # App-specific shared secret, only needed for subscriptions
    exclude_old_transactions: bool = False
    verify_url: str | None = None  # Custom endpoint, e.g. a proxy in front of Apple

    # Transport
    http_timeout: float = 10.0  # Seconds

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True
    service_name: str = "receipt-validator"

    model_config = SettingsConfigDict(
        env_prefix="RECEIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_config(self) -> "Settings":
        """Reject settings the validator cannot run with."""
        errors: list[str] = []

        if self.http_timeout <= 0:
            errors.append(f"RECEIPT_HTTP_TIMEOUT must be positive, got {self.http_timeout}")
        if self.log_format not in ("json", "console"):
            errors.append(f"RECEIPT_LOG_FORMAT must be 'json' or 'console', got {self.log_format}")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"RECEIPT_LOG_LEVEL is not a logging level: {self.log_level}")
        if self.verify_url is not None and not self.verify_url.startswith(("http://", "https://")):
            errors.append(f"RECEIPT_VERIFY_URL must be an http(s) URL, got {self.verify_url}")

        if errors:
            raise ConfigurationError("Invalid configuration: " + "; ".join(errors))

        return self

    def default_environment(self) -> Environment:
        """Environment used when the caller does not pick one."""
        if self.verify_url:
            return Environment.custom(self.verify_url)
        return Environment.production()


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance (loaded once)."""
    return Settings()
