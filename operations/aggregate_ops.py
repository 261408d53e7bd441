"""
Aggregate Operations for Worksite Reports.

Reduce a Record Store snapshot into scalar statistics and chart-ready
grouped series. Pure functions - no I/O, no side effects.

Malformed values never abort a computation: unparseable numbers count
as 0 in sums (and are left out of means), unparseable dates land in the
"unknown" month bucket.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from config.constants import TREND_MONTHS
from domain.exceptions import NotFoundError
from domain.models import AggregateResult, DomainSchema, SeriesPoint
from domain.rates import PROFIT_MARGIN_RATE, PROJECT_MANAGER_LIST, price_timeline, project_adjustment
from domain.rules import (
    AGE_BRACKETS,
    COMPLAINT_STATUSES,
    COMPLAINT_TYPES,
    INSPECTION_STATUSES,
    RENTAL_STATUSES,
    STOCK_STATUSES,
    TOOL_STATUSES,
    UNKNOWN_BUCKET,
    best_supplier_offer,
    complaint_type,
    compliance_score,
    effective_inspection_status,
    effective_rental_status,
    headcount,
    inspection_outcome,
    inspection_score,
    is_low_stock,
    material_offers,
    month_key,
    number_or_zero,
    offer_price,
    offer_supplier_name,
    price_gap,
    stock_status,
    timeline_totals,
    to_bool,
    to_date,
    to_number,
    tool_depreciation,
    user_status_color,
)
from domain.schemas import (
    COMPLAINT_SCHEMA,
    MATERIAL_SCHEMA,
    PROJECT_SCHEMA,
    TOOL_SCHEMA,
    USER_SCHEMA,
)

logger = logging.getLogger(__name__)

KeyFn = Callable[[Mapping[str, Any]], Any]
ValueFn = Callable[[Mapping[str, Any]], Optional[float]]


# ==================== Scalar Rollups ====================


def _field_value(record: Mapping[str, Any], field: str, schema: Optional[DomainSchema]) -> Any:
    if schema is not None:
        return schema.value(record, field)
    return record.get(field)


def count_where(records: Iterable[Mapping[str, Any]], predicate: Callable[[Mapping[str, Any]], bool]) -> int:
    """Count records matching a predicate."""
    return sum(1 for record in records if predicate(record))


def sum_field(
    records: Iterable[Mapping[str, Any]],
    field: str,
    schema: Optional[DomainSchema] = None,
) -> float:
    """
    Sum a numeric field.

    Missing or non-numeric values count as 0. Uses math.fsum so the
    result does not depend on record order.
    """
    return math.fsum(number_or_zero(_field_value(r, field, schema)) for r in records)


def mean_field(
    records: Iterable[Mapping[str, Any]],
    field: str,
    schema: Optional[DomainSchema] = None,
) -> float:
    """
    Arithmetic mean of a numeric field.

    Missing or non-numeric values are excluded from the denominator.
    Returns 0 when no record has a numeric value.
    """
    values = [to_number(_field_value(r, field, schema)) for r in records]
    return _mean([v for v in values if v is not None])


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


# ==================== Grouped Series ====================


class _Bucket:
    """Accumulator for one group."""

    __slots__ = ("count", "mean_values", "extras")

    def __init__(self):
        self.count = 0
        self.mean_values: List[float] = []
        self.extras: Dict[str, List[float]] = {}


def _accumulate(
    records: Iterable[Mapping[str, Any]],
    key_fn: KeyFn,
    mean_of: Optional[ValueFn] = None,
    extras: Optional[Mapping[str, ValueFn]] = None,
    buckets: Optional[Dict[str, _Bucket]] = None,
) -> Dict[str, _Bucket]:
    buckets = {} if buckets is None else buckets
    for record in records:
        key = str(key_fn(record))
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _Bucket()

        bucket.count += 1
        if mean_of is not None:
            value = mean_of(record)
            if value is not None:
                bucket.mean_values.append(value)
        for name, value_fn in (extras or {}).items():
            value = value_fn(record)
            bucket.extras.setdefault(name, []).append(0.0 if value is None else value)
    return buckets


def _to_points(
    buckets: Mapping[str, _Bucket],
    keys: Iterable[str],
    color_fn: Optional[Callable[[str], Optional[str]]] = None,
    extra_names: Iterable[str] = (),
) -> Tuple[SeriesPoint, ...]:
    points = []
    for key in keys:
        bucket = buckets.get(key) or _Bucket()
        points.append(
            SeriesPoint(
                label=key,
                value=bucket.count,
                mean=_mean(bucket.mean_values),
                color=color_fn(key) if color_fn else None,
                extra={name: math.fsum(bucket.extras.get(name, [])) for name in extra_names},
            )
        )
    return tuple(points)


def group_by(
    records: Iterable[Mapping[str, Any]],
    key_fn: KeyFn,
    mean_of: Optional[ValueFn] = None,
    color_fn: Optional[Callable[[str], Optional[str]]] = None,
) -> Tuple[SeriesPoint, ...]:
    """
    Partition records by a categorical key.

    Only keys present in at least one record appear (no synthetic
    zero buckets), in first-seen order.

    Args:
        records: Records to group
        key_fn: Record -> bucket key
        mean_of: Optional record -> number, averaged within each bucket
        color_fn: Optional bucket key -> colour

    Returns:
        Tuple of SeriesPoint (label, count, mean, color)
    """
    buckets = _accumulate(records, key_fn, mean_of)
    return _to_points(buckets, list(buckets), color_fn)


def group_by_fixed(
    records: Iterable[Mapping[str, Any]],
    key_fn: KeyFn,
    labels: Sequence[str],
    mean_of: Optional[ValueFn] = None,
    color_fn: Optional[Callable[[str], Optional[str]]] = None,
) -> Tuple[SeriesPoint, ...]:
    """
    Partition records into a fixed enumeration of buckets.

    Every label appears, with count 0 and mean 0 when empty. Records
    whose key falls outside the enumeration go to an "Unknown" bucket,
    which is appended only when it is non-empty.
    """
    buckets = {label: _Bucket() for label in labels}
    known = set(labels)

    def bucket_key(record):
        key = key_fn(record)
        return key if key in known else "Unknown"

    buckets = _accumulate(
        records,
        bucket_key,
        mean_of,
        buckets=buckets,
    )
    keys = list(labels)
    if "Unknown" not in keys and buckets.get("Unknown") and buckets["Unknown"].count:
        keys.append("Unknown")
    return _to_points(buckets, keys, color_fn)


def bucket_by_month(
    records: Iterable[Mapping[str, Any]],
    date_field: str,
    mean_of: Optional[ValueFn] = None,
    extras: Optional[Mapping[str, ValueFn]] = None,
) -> Tuple[SeriesPoint, ...]:
    """
    Group records by calendar month of a date field.

    Buckets ("YYYY-MM", UTC) exist only for months with at least one
    record and are sorted chronologically. Records with a missing or
    unparseable date go to an "unknown" bucket appended last.
    """
    buckets = _accumulate(records, lambda r: month_key(r.get(date_field)), mean_of, extras)
    dated = sorted(key for key in buckets if key != UNKNOWN_BUCKET)
    keys = dated + ([UNKNOWN_BUCKET] if UNKNOWN_BUCKET in buckets else [])
    return _to_points(buckets, keys, extra_names=list(extras or {}))


def monthly_trend(
    records: Iterable[Mapping[str, Any]],
    date_field: str,
    months: int = TREND_MONTHS,
    mean_of: Optional[ValueFn] = None,
    extras: Optional[Mapping[str, ValueFn]] = None,
) -> Tuple[SeriesPoint, ...]:
    """
    Month buckets for trend display: dated buckets only, most recent N.

    Example:
        >>> trend = monthly_trend(users, "createdAt")
        >>> [p.label for p in trend]
        ['2024-02', '2024-03', '2024-04', '2024-05', '2024-06', '2024-07']
    """
    dated = [p for p in bucket_by_month(records, date_field, mean_of, extras) if p.label != UNKNOWN_BUCKET]
    if months <= 0:
        return ()
    return tuple(dated[-months:])


# ==================== Cost Analysis ====================


def build_cost_rows(
    materials: Iterable[Mapping[str, Any]],
    suppliers: Optional[Iterable[Mapping[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Build cost-per-unit rows: average vs last vs best supplier price.

    For each material the best offer is the cheapest supplierPrices entry
    (first one wins on ties). gap = bestSupplierPrice - avgUnitCost,
    negative when the best offer is cheaper than the average cost.

    Args:
        materials: Material records (with supplierPrices)
        suppliers: Optional supplier records, to resolve supplier names by id

    Returns:
        List of new row dicts, one per material, in input order

    Example:
        >>> rows = build_cost_rows([{"name": "Cement", "quantity": 5, "minStock": 10,
        ...     "avgUnitCost": 8.0, "offers": [{"price": 7.5}, {"price": 9.0}]}])
        >>> rows[0]["gap"], rows[0]["lowStock"]
        (-0.5, True)
    """
    suppliers_by_id = {
        str(s.get("_id", s.get("id"))): s
        for s in (suppliers or [])
        if s.get("_id", s.get("id")) is not None
    }

    rows = []
    for material in materials:
        best = best_supplier_offer(material_offers(material))
        best_price = offer_price(best) if best is not None else None
        avg_cost = to_number(material.get("avgUnitCost"))

        rows.append({
            "_id": material.get("_id", material.get("id")),
            "name": material.get("name"),
            "unit": MATERIAL_SCHEMA.value(material, "unit"),
            "quantity": number_or_zero(material.get("quantity")),
            "minStock": number_or_zero(material.get("minStock")),
            "avgUnitCost": avg_cost,
            "lastUnitCost": to_number(material.get("lastUnitCost")),
            "bestSupplierPrice": best_price,
            "bestSupplierName": offer_supplier_name(best, suppliers_by_id) if best is not None else None,
            "gap": price_gap(best_price, avg_cost),
            "lowStock": is_low_stock(material),
        })

    logger.debug(f"Built {len(rows)} cost rows")
    return rows


# ==================== Project Financials ====================


def _in_date_range(entry: Mapping[str, Any], date_from: Optional[datetime], date_to: Optional[datetime]) -> bool:
    if date_from is None and date_to is None:
        return True
    day = to_date(entry.get("date"))
    if day is None:
        return False
    if date_from is not None and day < date_from:
        return False
    if date_to is not None and day > date_to:
        return False
    return True


def _line_count(entries: Sequence[Mapping[str, Any]], name: str) -> int:
    return sum(len(e[name]) for e in entries if isinstance(e.get(name), (list, tuple)))


def build_financial_rows(
    projects: Iterable[Mapping[str, Any]],
    timelines: Iterable[Mapping[str, Any]],
    project_codes: Optional[Iterable[str]] = None,
    date_from: Any = None,
    date_to: Any = None,
) -> List[Dict[str, Any]]:
    """
    Price every project from its timeline entries.

    Labor hours are priced by role, materials and tools from the rate
    tables, expenses taken as recorded. The project type/priority
    multiplier applies to all timeline costs and the fixed base cost is
    added once per project.

    Args:
        projects: Project records (pcode, pname, ptype, ppriority)
        timelines: Timeline entries, matched to projects by pcode
        project_codes: Optional project codes to keep (default: all)
        date_from: Optional inclusive lower bound on timeline dates
        date_to: Optional inclusive upper bound on timeline dates

    Returns:
        List of new row dicts, one per project, in input order

    Example:
        >>> rows = build_financial_rows(
        ...     [{"pcode": "P1", "pname": "Depot"}],
        ...     [{"pcode": "P1", "tworker": [{"role": "Carpenter", "hoursWorked": 8}]}])
        >>> rows[0]["laborCost"]
        200.0
    """
    selected = set(project_codes) if project_codes else None
    lower = to_date(date_from) if date_from is not None else None
    upper = to_date(date_to) if date_to is not None else None

    entries_by_project: Dict[str, List[Mapping[str, Any]]] = {}
    for entry in timelines:
        if isinstance(entry, Mapping) and _in_date_range(entry, lower, upper):
            entries_by_project.setdefault(str(entry.get("pcode")), []).append(entry)

    rows = []
    for project in projects:
        code = project.get("pcode")
        if selected is not None and code not in selected:
            continue

        base_cost, multiplier = project_adjustment(project)
        entries = entries_by_project.get(str(code), [])
        priced = [price_timeline(entry, multiplier) for entry in entries]

        row = {
            "projectCode": code,
            "projectName": project.get("pname"),
            "projectType": project.get("ptype"),
            "projectPriority": project.get("ppriority"),
            "timelineEntries": len(entries),
            "laborHours": math.fsum(p["hours"] for p in priced),
            "baseCost": base_cost,
            "laborCost": math.fsum(p["labor"] for p in priced),
            "materialCost": math.fsum(p["materials"] for p in priced),
            "toolCost": math.fsum(p["tools"] for p in priced),
            "expenses": math.fsum(p["expenses"] for p in priced),
            "workerCount": _line_count(entries, "tworker"),
            "engineerCount": _line_count(entries, "tengineer"),
            "architectCount": _line_count(entries, "tarchitect"),
            "pmCount": _line_count(entries, PROJECT_MANAGER_LIST),
            "timeline": [
                {"date": entry.get("date"), "dailyCost": p["daily_cost"]}
                for entry, p in zip(entries, priced)
            ],
        }
        row["totalCost"] = base_cost + math.fsum(p["daily_cost"] for p in priced)
        rows.append(row)

    logger.debug(f"Built {len(rows)} financial rows")
    return rows


# ==================== Inspection Compliance ====================


def compliance_daily(inspections: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Daily compliance per area.

    Only inspections with a recorded result count. They are grouped by
    area and UTC day of dueAt; score = passed / completed x 100. Rows are
    sorted by day, then area, with undated inspections last.

    Returns:
        List of dicts with area, date ("YYYY-MM-DD" or "unknown"),
        completed, passed and score
    """
    groups: Dict[Tuple[str, str], List[int]] = {}
    for inspection in inspections:
        outcome = inspection_outcome(inspection)
        if outcome is None:
            continue
        due = to_date(inspection.get("dueAt"))
        day = due.strftime("%Y-%m-%d") if due is not None else UNKNOWN_BUCKET
        counts = groups.setdefault((str(inspection.get("area") or "Unknown"), day), [0, 0])
        counts[0] += 1
        if outcome == "PASS":
            counts[1] += 1

    ordered = sorted(groups, key=lambda key: (key[1] == UNKNOWN_BUCKET, key[1], key[0]))
    return [
        {
            "area": area,
            "date": day,
            "completed": groups[(area, day)][0],
            "passed": groups[(area, day)][1],
            "score": compliance_score(groups[(area, day)][1], groups[(area, day)][0]),
        }
        for area, day in ordered
    ]


# ==================== Domain Summaries ====================


def _number_of(field: str, schema: Optional[DomainSchema] = None) -> ValueFn:
    return lambda record: to_number(_field_value(record, field, schema))


def summarize_users(users: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Totals, status/age/department breakdowns and monthly registrations."""
    status = lambda u: USER_SCHEMA.value(u, "status")
    age_values = [to_number(u.get("age")) for u in users]

    return AggregateResult(
        kind="users",
        totals={
            "total": len(users),
            "active": count_where(users, lambda u: status(u) == "Active"),
            "inactive": count_where(users, lambda u: status(u) == "Inactive"),
            "average_age": _mean([a for a in age_values if a is not None]),
            "over_50": sum(1 for a in age_values if a is not None and a > 50),
        },
        series={
            "status": group_by(users, status, color_fn=user_status_color),
            "ageGroup": group_by_fixed(
                users,
                lambda u: USER_SCHEMA.value(u, "ageGroup"),
                AGE_BRACKETS,
                mean_of=_number_of("age"),
            ),
            "department": group_by(users, lambda u: USER_SCHEMA.value(u, "department")),
            "registrations": monthly_trend(
                users,
                "createdAt",
                trend_months,
                extras={"active": lambda u: 1.0 if status(u) == "Active" else 0.0},
            ),
        },
    )


def summarize_materials(materials: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Stock totals, inventory value, category and stock-status breakdowns."""
    inventory_value = math.fsum(
        number_or_zero(m.get("quantity")) * number_or_zero(m.get("avgUnitCost"))
        for m in materials
    )
    cost_rows = build_cost_rows(materials)

    return AggregateResult(
        kind="materials",
        totals={
            "total": len(materials),
            "low_stock": count_where(materials, is_low_stock),
            "total_quantity": sum_field(materials, "quantity"),
            "inventory_value": inventory_value,
            "average_unit_cost": mean_field(materials, "avgUnitCost"),
            "cheaper_offers": count_where(cost_rows, lambda r: r["gap"] is not None and r["gap"] < 0),
        },
        series={
            "category": group_by(
                materials,
                lambda m: MATERIAL_SCHEMA.value(m, "category"),
                mean_of=_number_of("avgUnitCost"),
            ),
            "stockStatus": group_by_fixed(materials, stock_status, STOCK_STATUSES),
        },
    )


def summarize_suppliers(suppliers: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Supplier count, mean rating and distinct suppliers per offered material."""
    offers = [
        offer
        for supplier in suppliers
        for offer in (supplier.get("materialsOffered") or [])
        if isinstance(offer, Mapping)
    ]

    # First offer of each material per supplier
    distinct_offers = []
    for supplier in suppliers:
        seen = set()
        for offer in supplier.get("materialsOffered") or []:
            if not isinstance(offer, Mapping):
                continue
            material = offer.get("materialName") or "Unknown"
            if material not in seen:
                seen.add(material)
                distinct_offers.append(offer)

    return AggregateResult(
        kind="suppliers",
        totals={
            "total": len(suppliers),
            "average_rating": mean_field(suppliers, "rating"),
            "total_offers": len(offers),
        },
        series={
            "materials": group_by(
                distinct_offers,
                lambda o: o.get("materialName") or "Unknown",
                mean_of=offer_price,
            ),
        },
    )


def summarize_tools(tools: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Fleet value, usage, depreciation and status breakdown."""
    return AggregateResult(
        kind="tools",
        totals={
            "total": len(tools),
            "total_value": sum_field(tools, "price"),
            "average_usage_hours": mean_field(tools, "usageHours"),
            "total_depreciation": math.fsum(tool_depreciation(t, as_of) for t in tools),
            "available": count_where(tools, lambda t: TOOL_SCHEMA.value(t, "status") == "available"),
        },
        series={
            "status": group_by_fixed(tools, lambda t: TOOL_SCHEMA.value(t, "status"), TOOL_STATUSES),
            "purchases": monthly_trend(tools, "purchaseDate", trend_months, mean_of=_number_of("price")),
        },
    )


def summarize_rentals(rentals: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Revenue, overdue count and status breakdown (late rentals count as overdue)."""
    status = lambda r: effective_rental_status(r, as_of)

    return AggregateResult(
        kind="rentals",
        totals={
            "total": len(rentals),
            "revenue": sum_field(rentals, "totalPrice"),
            "average_price": mean_field(rentals, "totalPrice"),
            "active": count_where(rentals, lambda r: status(r) == "rented"),
            "overdue": count_where(rentals, lambda r: status(r) == "overdue"),
        },
        series={
            "status": group_by_fixed(rentals, status, RENTAL_STATUSES, mean_of=_number_of("totalPrice")),
            "starts": monthly_trend(rentals, "rentalStartDate", trend_months, mean_of=_number_of("totalPrice")),
        },
    )


def summarize_timelines(entries: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Hours and cost rolled up from the nested labor/expense/material lists."""
    rollups = [timeline_totals(entry) for entry in entries]

    return AggregateResult(
        kind="timelines",
        totals={
            "entries": len(entries),
            "total_hours": math.fsum(r["hours"] for r in rollups),
            "total_expenses": math.fsum(r["expenses"] for r in rollups),
            "total_material_cost": math.fsum(r["material_cost"] for r in rollups),
            "total_cost": math.fsum(r["cost"] for r in rollups),
            "headcount": sum(headcount(entry) for entry in entries),
        },
        series={
            "monthly": bucket_by_month(
                entries,
                "date",
                extras={
                    "hours": lambda e: timeline_totals(e)["hours"],
                    "cost": lambda e: timeline_totals(e)["cost"],
                },
            ),
        },
    )


def summarize_projects(projects: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Budget totals and status breakdown."""
    return AggregateResult(
        kind="projects",
        totals={
            "total": len(projects),
            "total_budget": sum_field(projects, "pbudget"),
            "average_budget": mean_field(projects, "pbudget"),
            "in_progress": count_where(projects, lambda p: p.get("pstatus") == "In Progress"),
        },
        series={
            "status": group_by(
                projects,
                lambda p: PROJECT_SCHEMA.value(p, "pstatus") or "Unknown",
                mean_of=_number_of("pbudget"),
            ),
        },
    )


def summarize_project_requests(requests: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Request count and monthly intake."""
    return AggregateResult(
        kind="project_requests",
        totals={"total": len(requests)},
        series={"requests": monthly_trend(requests, "preqdate", trend_months)},
    )


def summarize_financials(rows: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """
    Financial dashboard over priced project rows (see build_financial_rows).

    Profit margin is a flat 15% of the grand total; ROI is the margin as a
    percentage of the grand total (0 when nothing was spent).
    """
    grand_total = sum_field(rows, "totalCost")
    labor_cost = sum_field(rows, "laborCost")
    labor_hours = sum_field(rows, "laborHours")
    profit_margin = grand_total * PROFIT_MARGIN_RATE

    return AggregateResult(
        kind="financials",
        totals={
            "projects": len(rows),
            "timeline_entries": sum_field(rows, "timelineEntries"),
            "base_cost": sum_field(rows, "baseCost"),
            "labor_cost": labor_cost,
            "material_cost": sum_field(rows, "materialCost"),
            "tool_cost": sum_field(rows, "toolCost"),
            "expenses": sum_field(rows, "expenses"),
            "grand_total": grand_total,
            "average_project_cost": grand_total / len(rows) if rows else 0.0,
            "profit_margin": profit_margin,
            "roi": profit_margin / grand_total * 100 if grand_total > 0 else 0.0,
            "labor_hours": labor_hours,
            "average_hourly_rate": labor_cost / labor_hours if labor_hours > 0 else 0.0,
        },
        series={
            "projects": group_by(
                rows,
                lambda r: r.get("projectCode") or "Unknown",
                mean_of=_number_of("totalCost"),
            ),
            "costBreakdown": tuple(
                SeriesPoint(label=label, value=sum_field(rows, field))
                for label, field in (
                    ("Base", "baseCost"),
                    ("Labor", "laborCost"),
                    ("Materials", "materialCost"),
                    ("Tools", "toolCost"),
                    ("Expenses", "expenses"),
                )
            ),
        },
    )


def summarize_inspections(inspections: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Schedule alerts, pass/fail counts, recurring failures and compliance by area and day."""
    status = lambda i: effective_inspection_status(i, as_of)
    completed = [i for i in inspections if inspection_outcome(i) is not None]
    failed = [i for i in completed if inspection_outcome(i) == "FAIL"]
    passed = len(completed) - len(failed)
    soon = as_of + timedelta(hours=24)

    def due_soon(inspection):
        due = to_date(inspection.get("dueAt"))
        return status(inspection) == "UPCOMING" and due is not None and as_of < due <= soon

    area = lambda i: i.get("area") or "Unknown"

    return AggregateResult(
        kind="inspections",
        totals={
            "total": len(inspections),
            "upcoming": count_where(inspections, lambda i: status(i) == "UPCOMING"),
            "due_soon": count_where(inspections, due_soon),
            "overdue": count_where(inspections, lambda i: status(i) == "OVERDUE"),
            "completed": len(completed),
            "passed": passed,
            "failed": len(failed),
            "compliance_score": compliance_score(passed, len(completed)) if completed else 0.0,
            "average_score": _mean([s for s in (inspection_score(i) for i in completed) if s is not None]),
        },
        series={
            "status": group_by_fixed(inspections, status, INSPECTION_STATUSES),
            "failsByArea": group_by(failed, area),
            "complianceByArea": group_by(
                completed,
                area,
                mean_of=lambda i: 100.0 if inspection_outcome(i) == "PASS" else 0.0,
            ),
            "complianceDaily": tuple(
                SeriesPoint(
                    label=f"{row['date']} {row['area']}",
                    value=row["completed"],
                    mean=row["score"],
                    extra={"passed": row["passed"]},
                )
                for row in compliance_daily(completed)
            ),
        },
    )


def summarize_complaints(complaints: Sequence[Mapping[str, Any]], as_of: datetime, trend_months: int) -> AggregateResult:
    """Complaint counts by type, status and area, plus monthly intake."""
    status = lambda c: COMPLAINT_SCHEMA.value(c, "status")

    return AggregateResult(
        kind="complaints",
        totals={
            "total": len(complaints),
            "open": count_where(complaints, lambda c: status(c) == "OPEN"),
            "in_progress": count_where(complaints, lambda c: status(c) == "IN_PROGRESS"),
            "resolved": count_where(complaints, lambda c: status(c) == "RESOLVED"),
            "escalated": count_where(complaints, lambda c: to_bool(c.get("escalated"))),
        },
        series={
            "type": group_by_fixed(complaints, complaint_type, COMPLAINT_TYPES),
            "status": group_by_fixed(complaints, status, COMPLAINT_STATUSES),
            "area": group_by(complaints, lambda c: c.get("area") or "Unknown"),
            "intake": monthly_trend(complaints, "createdAt", trend_months),
        },
    )


AGGREGATORS: Dict[str, Callable[[Sequence[Mapping[str, Any]], datetime, int], AggregateResult]] = {
    "users": summarize_users,
    "materials": summarize_materials,
    "suppliers": summarize_suppliers,
    "tools": summarize_tools,
    "rentals": summarize_rentals,
    "timelines": summarize_timelines,
    "projects": summarize_projects,
    "project_requests": summarize_project_requests,
    "financials": summarize_financials,
    "inspections": summarize_inspections,
    "complaints": summarize_complaints,
}


def aggregate(
    records: Iterable[Mapping[str, Any]],
    kind: str,
    as_of: Optional[datetime] = None,
    trend_months: int = TREND_MONTHS,
) -> AggregateResult:
    """
    Compute summary statistics for a Record Store snapshot.

    Args:
        records: Records of one collection
        kind: Collection name (e.g. "users", "materials")
        as_of: Reference time for overdue/depreciation rules (default: now, UTC)
        trend_months: Number of month buckets kept in trend series

    Returns:
        AggregateResult with totals and series

    Raises:
        NotFoundError: If kind has no aggregator

    Example:
        >>> result = aggregate(users, "users")
        >>> result.total("active")
        12
    """
    if kind not in AGGREGATORS:
        raise NotFoundError(
            f"No aggregator for kind: {kind}",
            details={"allowed": sorted(AGGREGATORS)},
        )

    if as_of is None:
        as_of = datetime.now(timezone.utc)
    elif as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)

    snapshot = [r for r in records if isinstance(r, Mapping)]
    result = AGGREGATORS[kind](snapshot, as_of, trend_months)
    logger.info(f"Aggregated {len(snapshot)} {kind} records into {len(result.series)} series")
    return result
