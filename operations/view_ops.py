"""
View Operations for Worksite Reports.

Filter/Sort Engine: apply a ViewSpec (free-text query, categorical
selections, inclusive ranges, one sort key) to a Record Store snapshot.

The input sequence and its records are never mutated; every call returns
a new list holding references to the original records.
"""

import logging
import unicodedata
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from domain.models import DomainSchema, FieldType, RangeFilter, SortDirection, ViewSpec
from domain.rules import date_or_epoch, is_all_sentinel, number_or_zero, to_date, to_number

logger = logging.getLogger(__name__)

NUMERIC_TYPES = (FieldType.NUMBER, FieldType.MONEY)


# ==================== Predicates ====================


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def is_query_active(query: Optional[str]) -> bool:
    """A blank or whitespace-only query matches everything."""
    return bool(query and query.strip())


def matches_query(record: Mapping[str, Any], query: str, schema: DomainSchema) -> bool:
    """
    Check free-text query against the schema's searchable fields.

    Case-insensitive substring match; any field matching is enough.
    """
    needle = query.strip().casefold()
    return any(
        needle in _text(schema.value(record, name)).casefold()
        for name in schema.search_fields
    )


def matches_filter(record: Mapping[str, Any], field: str, selected: Any, schema: DomainSchema) -> bool:
    """
    Check a categorical equality filter.

    Schema defaults and derived fields apply, so a user without a status
    matches "Active". Strings compare exactly; numbers compare numerically.
    """
    value = schema.value(record, field)
    if value == selected:
        return True
    if isinstance(selected, bool) or isinstance(value, bool):
        return False

    left, right = to_number(value), to_number(selected)
    if left is not None and right is not None:
        return left == right
    return _text(value) == _text(selected)


def _bound(value: Any, field_type: FieldType):
    if field_type == FieldType.DATE:
        return to_date(value)
    return to_number(value)


def matches_range(record: Mapping[str, Any], range_filter: RangeFilter, schema: DomainSchema) -> bool:
    """
    Check an inclusive range filter.

    A record whose value cannot be parsed (number or date, per the
    schema type) never satisfies an active range.
    """
    field_type = schema.field_type(range_filter.field)
    if field_type != FieldType.DATE:
        field_type = FieldType.NUMBER

    value = _bound(schema.value(record, range_filter.field), field_type)
    if value is None:
        return False

    minimum = _bound(range_filter.minimum, field_type)
    maximum = _bound(range_filter.maximum, field_type)
    if minimum is not None and value < minimum:
        return False
    if maximum is not None and value > maximum:
        return False
    return True


def active_filters(spec: ViewSpec) -> List[Tuple[str, Any]]:
    """Get categorical selections that are not the "All" sentinel."""
    return [(field, value) for field, value in spec.filters.items() if not is_all_sentinel(value)]


def is_identity(spec: ViewSpec) -> bool:
    """Check if a ViewSpec filters nothing and does not sort."""
    return (
        not is_query_active(spec.query)
        and not active_filters(spec)
        and not any(r.is_active for r in spec.ranges)
        and not spec.sort_field
    )


def filter_records(
    records: Sequence[Mapping[str, Any]],
    spec: ViewSpec,
    schema: DomainSchema,
) -> List[Mapping[str, Any]]:
    """
    Apply the conjunctive predicates of a ViewSpec.

    Order: query, then each categorical filter, then each range.

    Returns:
        New list of matching records, in input order
    """
    result = list(records)

    if is_query_active(spec.query):
        result = [r for r in result if matches_query(r, spec.query, schema)]

    for field, selected in active_filters(spec):
        result = [r for r in result if matches_filter(r, field, selected, schema)]

    for range_filter in spec.ranges:
        if range_filter.is_active:
            result = [r for r in result if matches_range(r, range_filter, schema)]

    return result


# ==================== Sorting ====================


def locale_key(value: Any) -> Tuple[str, str]:
    """
    Locale-aware string sort key.

    Primary key ignores accents and case ("Émile" sorts with "emile"),
    the raw string breaks ties so the order is total and deterministic.
    """
    text = _text(value)
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return (folded, text)


def sort_key_for(field: str, schema: DomainSchema) -> Callable[[Mapping[str, Any]], Any]:
    """
    Build the sort key for a field according to its schema type.

    - NUMBER/MONEY: numeric, missing or unparseable -> 0
    - DATE: chronological, missing or unparseable -> epoch
    - BOOL: False before True
    - everything else: locale-aware string order
    """
    field_type = schema.field_type(field)

    if field_type in NUMERIC_TYPES:
        return lambda record: number_or_zero(schema.value(record, field))
    if field_type == FieldType.DATE:
        return lambda record: date_or_epoch(schema.value(record, field))
    if field_type == FieldType.BOOL:
        return lambda record: bool(schema.value(record, field))
    return lambda record: locale_key(schema.value(record, field))


def sort_records(
    records: Sequence[Mapping[str, Any]],
    field: Optional[str],
    direction: SortDirection,
    schema: DomainSchema,
) -> List[Mapping[str, Any]]:
    """
    Stable sort by one field.

    Descending is the exact reversal of the ascending comparison; records
    that compare equal keep their input order in both directions.
    """
    if not field:
        return list(records)

    key = sort_key_for(field, schema)
    # sorted(reverse=True) keeps equal elements in input order
    return sorted(records, key=key, reverse=SortDirection(direction) == SortDirection.DESC)


# ==================== View ====================


def view(
    records: Sequence[Mapping[str, Any]],
    spec: Optional[ViewSpec],
    schema: DomainSchema,
) -> List[Mapping[str, Any]]:
    """
    Produce the filtered and sorted view of a snapshot.

    Args:
        records: Record Store snapshot
        spec: Current ViewSpec (None = identity)
        schema: Domain schema of the records

    Returns:
        New list of record references

    Example:
        >>> spec = ViewSpec(query="cem", filters={"category": "All"}, sort_field="name")
        >>> [m["name"] for m in view(materials, spec, MATERIAL_SCHEMA)]
        ['Cement', 'White cement']
    """
    if spec is None or is_identity(spec):
        return list(records)

    filtered = filter_records(records, spec, schema)
    result = sort_records(filtered, spec.sort_field, spec.sort_direction, schema)

    logger.debug(f"View of {schema.name}: {len(records)} -> {len(result)} records")
    return result


def toggle_sort(spec: ViewSpec, field: str) -> ViewSpec:
    """
    Toggle sorting on a column header click.

    Same field flips direction; a new field starts ascending.
    """
    if spec.sort_field == field:
        direction = (
            SortDirection.DESC
            if SortDirection(spec.sort_direction) == SortDirection.ASC
            else SortDirection.ASC
        )
        return replace(spec, sort_direction=direction)
    return replace(spec, sort_field=field, sort_direction=SortDirection.ASC)


def parse_filters(pairs: Sequence[str]) -> dict:
    """
    Parse FIELD=VALUE pairs (command line) into a filters mapping.

    Raises:
        ValueError: If a pair has no "="
    """
    filters = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Filter must be FIELD=VALUE, got: {pair}")
        field, value = pair.split("=", 1)
        filters[field.strip()] = value.strip()
    return filters
