"""
Domain models for Worksite Reports.

These dataclasses describe the shapes the reporting pipeline works with.
Records themselves stay plain dicts; the models here are the derived,
immutable structures built from them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


Record = Mapping[str, Any]


class FieldType(str, Enum):
    """Type of a record field, used for coercion and comparison."""

    TEXT = "text"
    NUMBER = "number"
    MONEY = "money"
    DATE = "date"
    BOOL = "bool"
    LIST = "list"


class ColumnKind(str, Enum):
    """Formatting semantic of an export column."""

    TEXT = "text"
    NUMBER = "number"
    MONEY = "money"
    GAP = "gap"
    DATE = "date"
    BOOL = "bool"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class DomainSchema:
    """
    Explicit field table for one record shape.

    Fields not listed here are passed through untouched. Defaults apply
    when a field is missing or empty (e.g. user status "Active"), derived
    fields are computed from the whole record (e.g. user age group).
    """

    name: str
    fields: Mapping[str, FieldType]
    search_fields: Tuple[str, ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)
    derived: Mapping[str, Callable[[Record], Any]] = field(default_factory=dict)
    id_field: str = "_id"

    def field_type(self, name: str) -> FieldType:
        """Get declared type of a field (TEXT for unknown fields)."""
        return self.fields.get(name, FieldType.TEXT)

    def value(self, record: Record, name: str) -> Any:
        """
        Resolve a field value: derived fields first, then the raw value,
        then the schema default when the raw value is missing or empty.
        """
        if name in self.derived:
            return self.derived[name](record)

        raw = record.get(name)
        if (raw is None or raw == "") and name in self.defaults:
            return self.defaults[name]
        return raw


@dataclass(frozen=True)
class RangeFilter:
    """Inclusive range on a numeric or date field. None bound = open."""

    field: str
    minimum: Any = None
    maximum: Any = None

    @property
    def is_active(self) -> bool:
        return self.minimum is not None or self.maximum is not None


@dataclass(frozen=True)
class ViewSpec:
    """
    Filter/sort configuration currently selected on a screen.

    filters maps a categorical field to the selected value; the "All"
    sentinel (any case), None, or "" leaves that filter inactive.
    """

    query: str = ""
    filters: Mapping[str, Any] = field(default_factory=dict)
    ranges: Tuple[RangeFilter, ...] = ()
    sort_field: Optional[str] = None
    sort_direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class SeriesPoint:
    """One bucket of a grouped series, ready for a chart."""

    label: str
    value: float
    mean: float = 0.0
    color: Optional[str] = None
    extra: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregateResult:
    """
    Derived statistics for one Record Store snapshot.

    Recomputed from scratch on every change, never mutated in place.
    """

    kind: str
    totals: Mapping[str, float] = field(default_factory=dict)
    series: Mapping[str, Tuple[SeriesPoint, ...]] = field(default_factory=dict)

    def total(self, name: str) -> float:
        """Get a scalar total (0 if not computed for this kind)."""
        return self.totals.get(name, 0)

    def series_labels(self, name: str) -> Tuple[str, ...]:
        """Get labels of a named series in output order."""
        return tuple(point.label for point in self.series.get(name, ()))


@dataclass(frozen=True)
class Column:
    """
    Export column descriptor.

    key is read from the record unless value is given, in which case
    value(record) supplies the cell value (for derived cells such as
    stock status or the supplier offers summary). placeholder replaces
    an empty cell in the print document only.
    """

    key: str
    label: str
    kind: ColumnKind = ColumnKind.TEXT
    value: Optional[Callable[[Record], Any]] = None
    align: str = "left"
    placeholder: str = ""

    def extract(self, record: Record) -> Any:
        if self.value is not None:
            return self.value(record)
        return record.get(self.key)


@dataclass(frozen=True)
class Cell:
    """Rendered cell: display text plus presentation attributes."""

    text: str
    tone: Optional[str] = None
    align: str = "left"


@dataclass(frozen=True)
class Notification:
    """Transient user notification (auto-dismissed after ttl_seconds)."""

    tone: str
    title: str
    description: str = ""
    ttl_seconds: float = 4.2

    def __str__(self) -> str:
        if self.description:
            return f"{self.title}: {self.description}"
        return self.title
