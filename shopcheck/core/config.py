"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://demowebshop.tricentis.com"
DEFAULT_TEST_DATA_PATH = Path(__file__).resolve().parents[2] / "data" / "test_data.json"

# Markers left in unconfigured credential values
PLACEHOLDER_MARKERS = ("your_email", "${")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Storefront
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Storefront root URL")

    # Browser Configuration
    headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_timeout: int = Field(default=15000, description="Default action timeout in milliseconds")
    navigation_timeout: int = Field(default=30000, description="Navigation timeout in milliseconds")

    # Wait budgets (milliseconds)
    step_wait_timeout: int = Field(default=10000, description="Wait budget for a checkout step's continue control")
    confirm_wait_timeout: int = Field(default=10000, description="Wait budget for the order success marker")
    settle_delay: int = Field(default=500, description="Fixed delay after DOM-mutating actions")
    poll_interval: int = Field(default=250, description="Polling interval for bounded waits")

    # Account credentials (override the test data file)
    demo_shop_email: Optional[str] = Field(default=None, description="Storefront account email")
    demo_shop_password: Optional[str] = Field(default=None, description="Storefront account password")

    # Test data
    test_data_path: Path = Field(default=DEFAULT_TEST_DATA_PATH, description="Static scenario data file")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Use JSON logging format")

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_base_url(cls, v):
        """Normalize base URL (no trailing slash)."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("step_wait_timeout", "confirm_wait_timeout", "settle_delay", "poll_interval")
    @classmethod
    def validate_non_negative(cls, v):
        """Wait budgets cannot be negative."""
        if v < 0:
            raise ValueError("wait budgets must be >= 0")
        return v

    def __repr__(self):
        """Redact sensitive fields in repr."""
        safe_dict = {}
        for key, value in self.model_dump().items():
            if any(sensitive in key.lower() for sensitive in ["password", "email", "secret", "token"]):
                safe_dict[key] = "***REDACTED***"
            else:
                safe_dict[key] = value
        return f"Settings({safe_dict})"


def credentials_configured(email: Optional[str]) -> bool:
    """An email is usable when set and free of placeholder markers."""
    if not email:
        return False
    return not any(marker in email for marker in PLACEHOLDER_MARKERS)


def load_settings(**overrides) -> Settings:
    """
    Build the settings object for this process.

    Call once and pass the result to whatever needs it; nothing here is
    cached at module level.
    """
    return Settings(**overrides)
