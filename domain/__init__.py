"""
Domain layer for Worksite Reports.

This module contains the record schemas, derived models, business
rules, and validators. No dependencies on I/O, UI, or the remote service.
"""

from .models import (
    Record,
    FieldType,
    ColumnKind,
    SortDirection,
    DomainSchema,
    RangeFilter,
    ViewSpec,
    SeriesPoint,
    AggregateResult,
    Column,
    Cell,
    Notification,
)

from .exceptions import (
    WorksiteBaseException,
    ValidationError,
    RemoteServiceError,
    ConflictError,
    RecordSourceError,
    ExportError,
    NotFoundError,
)

from .schemas import SCHEMAS, get_schema

from .validators import (
    RULESETS,
    validate,
    ensure_valid,
    sanitize_filename,
)

from .rules import (
    to_number,
    number_or_zero,
    to_date,
    month_key,
    age_bracket,
    is_low_stock,
    best_supplier_offer,
    price_gap,
    gap_tone,
    timeline_totals,
    effective_rental_status,
    tool_depreciation,
    AGE_BRACKETS,
)

__all__ = [
    # Models
    "Record",
    "FieldType",
    "ColumnKind",
    "SortDirection",
    "DomainSchema",
    "RangeFilter",
    "ViewSpec",
    "SeriesPoint",
    "AggregateResult",
    "Column",
    "Cell",
    "Notification",
    # Exceptions
    "WorksiteBaseException",
    "ValidationError",
    "RemoteServiceError",
    "ConflictError",
    "RecordSourceError",
    "ExportError",
    "NotFoundError",
    # Schemas
    "SCHEMAS",
    "get_schema",
    # Validators
    "RULESETS",
    "validate",
    "ensure_valid",
    "sanitize_filename",
    # Rules
    "to_number",
    "number_or_zero",
    "to_date",
    "month_key",
    "age_bracket",
    "is_low_stock",
    "best_supplier_offer",
    "price_gap",
    "gap_tone",
    "timeline_totals",
    "effective_rental_status",
    "tool_depreciation",
    "AGE_BRACKETS",
]
