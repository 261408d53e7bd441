"""
Application Context for Worksite Reports.

Centralized application state and dependency injection.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional
from pathlib import Path

from data.interface import RecordSourceInterface
from .settings import Settings, get_settings


@dataclass
class AppContext:
    """
    Centralized application context.

    Contains all application-wide state and dependencies.
    Passed to operations and services by the command line entry point.

    Key principles:
    - Immutable where possible (use with_* methods for changes)
    - All dependencies explicit (record source, settings, etc.)
    - No global state - everything through context

    Example:
        >>> from config.app_context import AppContext
        >>> from data import create_record_source
        >>> from config.settings import get_settings
        >>>
        >>> source = create_record_source("file", "./data")
        >>> ctx = AppContext(record_source=source, settings=get_settings())
        >>>
        >>> # Pin the reference time for overdue/depreciation rules
        >>> ctx = ctx.with_as_of(datetime(2024, 3, 5, tzinfo=timezone.utc))
        >>>
        >>> from operations import aggregate
        >>> result = aggregate(ctx.record_source.fetch("rentals"), "rentals", as_of=ctx.as_of)
    """

    # Core dependencies (required)
    record_source: RecordSourceInterface
    settings: Settings = field(default_factory=get_settings)

    # Reference time (None = now)
    as_of_override: Optional[datetime] = None

    # Application version
    app_version: str = field(default_factory=lambda: get_settings().app_version)

    @property
    def data_dir(self) -> Path:
        """Get data directory from settings."""
        return self.settings.data_dir

    @property
    def output_dir(self) -> Path:
        """Get output directory from settings."""
        return self.settings.output_dir

    @property
    def as_of(self) -> datetime:
        """Get reference time (pinned value or current UTC time)."""
        if self.as_of_override is not None:
            return self.as_of_override
        return datetime.now(timezone.utc)

    def with_as_of(self, as_of: Optional[datetime]) -> "AppContext":
        """
        Create new context with the reference time pinned.

        Immutable pattern - returns new instance instead of modifying self.
        """
        if as_of is not None and as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=timezone.utc)
        return replace(self, as_of_override=as_of)

    def with_output_dir(self, output_dir: Path) -> "AppContext":
        """Create new context writing reports to another directory."""
        return replace(self, settings=replace(self.settings, output_dir=Path(output_dir)))


def create_app_context(
    record_source: RecordSourceInterface,
    settings: Optional[Settings] = None,
    as_of: Optional[datetime] = None,
) -> AppContext:
    """
    Factory function to create AppContext.

    Args:
        record_source: Record source instance (required)
        settings: Settings instance (defaults to global settings)
        as_of: Optional pinned reference time

    Returns:
        AppContext instance

    Example:
        >>> from data import create_record_source
        >>> source = create_record_source("file", "./data")
        >>> ctx = create_app_context(record_source=source)
    """
    if settings is None:
        settings = get_settings()

    ctx = AppContext(
        record_source=record_source,
        settings=settings,
        app_version=settings.app_version,
    )
    return ctx.with_as_of(as_of)
