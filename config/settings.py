"""
Application settings for Worksite Reports.

Loads settings from environment variables or uses defaults.
Provides centralized configuration management.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

from .constants import (
    APP_VERSION,
    DATA_DIR,
    DEFAULT_BROWSER_CHANNEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PDF_PAGE_SIZE,
    OUTPUT_DIR,
    TREND_MONTHS,
)


@dataclass
class Settings:
    """
    Application settings.

    Can be loaded from environment variables or initialized with defaults.
    """

    # Application info
    app_version: str = APP_VERSION

    # Directory paths
    data_dir: Path = field(default_factory=lambda: Path.cwd() / DATA_DIR)
    output_dir: Path = field(default_factory=lambda: Path.cwd() / OUTPUT_DIR)

    # Report settings
    trend_months: int = TREND_MONTHS

    # PDF settings
    pdf_page_size: str = DEFAULT_PDF_PAGE_SIZE
    browser_channel: Optional[str] = DEFAULT_BROWSER_CHANNEL

    # Debug settings
    debug_mode: bool = False
    log_level: str = DEFAULT_LOG_LEVEL  # DEBUG, INFO, WARNING, ERROR

    def ensure_output_dir(self) -> Path:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        Environment variables:
        - WORKSITE_DATA_DIR: Directory holding record files
        - WORKSITE_OUTPUT_DIR: Directory for exported reports
        - WORKSITE_TREND_MONTHS: Month buckets kept in trend series
        - WORKSITE_PDF_PAGE_SIZE: PDF page format (A4, Letter, ...)
        - WORKSITE_BROWSER_CHANNEL: Playwright browser channel ("" = bundled Chromium)
        - WORKSITE_DEBUG: Enable debug mode (true/false)
        - WORKSITE_LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)

        Returns:
            Settings instance with values from environment or defaults
        """
        try:
            trend_months = int(os.getenv("WORKSITE_TREND_MONTHS", TREND_MONTHS))
        except ValueError:
            trend_months = TREND_MONTHS

        return cls(
            data_dir=Path(os.getenv("WORKSITE_DATA_DIR", DATA_DIR)),
            output_dir=Path(os.getenv("WORKSITE_OUTPUT_DIR", OUTPUT_DIR)),
            trend_months=trend_months,
            pdf_page_size=os.getenv("WORKSITE_PDF_PAGE_SIZE", DEFAULT_PDF_PAGE_SIZE),
            browser_channel=os.getenv("WORKSITE_BROWSER_CHANNEL", DEFAULT_BROWSER_CHANNEL) or None,
            debug_mode=os.getenv("WORKSITE_DEBUG", "false").lower() == "true",
            log_level=os.getenv("WORKSITE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

    def to_dict(self) -> dict:
        """Convert settings to dictionary for serialization."""
        return {
            "app_version": self.app_version,
            "data_dir": str(self.data_dir),
            "output_dir": str(self.output_dir),
            "trend_months": self.trend_months,
            "pdf_page_size": self.pdf_page_size,
            "browser_channel": self.browser_channel,
            "debug_mode": self.debug_mode,
            "log_level": self.log_level,
        }


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance.

    Lazy-loaded on first call. Loads from environment variables.

    Returns:
        Settings instance

    Example:
        >>> from config.settings import get_settings
        >>> settings = get_settings()
        >>> print(settings.data_dir)
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """
    Reset global settings instance.

    Useful for testing - forces reload from environment on next get_settings() call.
    """
    global _settings
    _settings = None
