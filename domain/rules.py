"""
Business rules for Worksite Reports.

These functions encode the read-side business logic shared by every
screen: value coercion, stock and price rules, status derivation.
They are pure functions with no side effects and never raise for
malformed record values.
"""

import logging
import math
from datetime import date, datetime, timezone
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)


ALL_SENTINEL = "all"
UNKNOWN_BUCKET = "unknown"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

AGE_BRACKETS = ("18-25", "26-35", "36-50", "50+")

USER_STATUS_COLORS = {
    "Active": "#6B46C1",
    "Inactive": "#ef4444",
    "Pending": "#f59e0b",
    "Suspended": "#6b7280",
    "Unknown": "#8b5cf6",
}

TOOL_STATUSES = ("available", "in use", "under maintenance", "retired")
RENTAL_STATUSES = ("rented", "returned", "overdue")
STOCK_STATUSES = ("Low", "OK")

# Timeline labor sub-lists (all roles summed together)
LABOR_LISTS = ("tworker", "tengineer", "tarchitect")
EXPENSE_LIST = "texpenses"
MATERIAL_USAGE_LIST = "tmaterials"

# Site inspections and complaints
INSPECTION_STATUSES = ("UPCOMING", "COMPLETED", "OVERDUE", "CANCELLED")
INSPECTION_OUTCOMES = ("PASS", "FAIL")
COMPLAINT_TYPES = ("SAFETY", "QUALITY", "DELAY", "OTHER")
COMPLAINT_STATUSES = ("OPEN", "IN_PROGRESS", "RESOLVED")


# ==================== Coercion ====================


def is_all_sentinel(value: Any) -> bool:
    """Check if a categorical selection means "no filter"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == "" or value.strip().lower() == ALL_SENTINEL
    return False


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a record value to a finite float.

    Returns None for missing, boolean, non-numeric, NaN or infinite values
    so callers can choose between "count as 0" and "exclude".
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def number_or_zero(value: Any) -> float:
    """Coerce to float, treating anything unparseable as 0."""
    number = to_number(value)
    return 0.0 if number is None else number


def to_bool(value: Any) -> bool:
    """Coerce a record flag; "true"/"yes"/"1" strings from CSV count as True."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    if isinstance(value, bool):
        return value
    return to_number(value) == 1


def to_date(value: Any) -> Optional[datetime]:
    """
    Coerce a record value to a timezone-aware UTC datetime.

    Accepts datetime, date and ISO-like strings. Naive values are taken
    as UTC. Returns None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = pd.to_datetime(value.strip(), errors="coerce", utc=True)
    except (TypeError, ValueError, OverflowError):
        return None

    if parsed is None or pd.isna(parsed):
        logger.debug(f"Unparseable date: {value!r}")
        return None
    return parsed.to_pydatetime()


def date_or_epoch(value: Any) -> datetime:
    """Coerce to datetime, treating missing/unparseable as the epoch."""
    parsed = to_date(value)
    return EPOCH if parsed is None else parsed


def month_key(value: Any) -> str:
    """
    Get calendar month bucket key ("YYYY-MM") for a date value.

    Returns UNKNOWN_BUCKET when the date cannot be parsed.
    """
    parsed = to_date(value)
    if parsed is None:
        return UNKNOWN_BUCKET
    return f"{parsed.year:04d}-{parsed.month:02d}"


def month_label(key: str) -> str:
    """
    Human-readable month label for a bucket key.

    Examples:
        "2024-03" -> "Mar 2024"
        "unknown" -> "unknown"
    """
    if key == UNKNOWN_BUCKET:
        return key
    year, month = key.split("-")
    return datetime(int(year), int(month), 1).strftime("%b %Y")


# ==================== Users ====================


def age_bracket(age: Any) -> str:
    """
    Get age bracket for a user age.

    Brackets: 18-25, 26-35, 36-50, 50+. Anything else (missing, under
    18, non-numeric) is "Unknown".
    """
    value = to_number(age)
    if value is None:
        return "Unknown"
    if 18 <= value <= 25:
        return "18-25"
    if 26 <= value <= 35:
        return "26-35"
    if 36 <= value <= 50:
        return "36-50"
    if value > 50:
        return "50+"
    return "Unknown"


def user_status_color(status: str) -> str:
    """Get chart colour for a user status."""
    return USER_STATUS_COLORS.get(status, USER_STATUS_COLORS["Unknown"])


# ==================== Materials & Suppliers ====================


def is_low_stock(material: Mapping[str, Any]) -> bool:
    """
    Check if a material is below its minimum stock.

    Rule: quantity < minStock (strict). Equal is not low.
    """
    return number_or_zero(material.get("quantity")) < number_or_zero(material.get("minStock"))


def stock_status(material: Mapping[str, Any]) -> str:
    """Get display status ("Low" or "OK") for a material."""
    return "Low" if is_low_stock(material) else "OK"


def offer_price(offer: Mapping[str, Any]) -> Optional[float]:
    """Get unit price of a supplier offer (pricePerUnit, falling back to price)."""
    if not isinstance(offer, Mapping):
        return None
    price = to_number(offer.get("pricePerUnit"))
    if price is None:
        price = to_number(offer.get("price"))
    return price


def material_offers(material: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Get supplier offers attached to a material (empty list if none)."""
    offers = material.get("supplierPrices")
    if offers is None:
        offers = material.get("offers")
    if not isinstance(offers, (list, tuple)):
        return []
    return [offer for offer in offers if isinstance(offer, Mapping)]


def best_supplier_offer(offers: Iterable[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """
    Find the cheapest supplier offer.

    Ties are broken by the first-encountered offer in input order.
    Offers without a numeric price are skipped.

    Args:
        offers: Supplier offers (dicts with pricePerUnit)

    Returns:
        Cheapest offer, or None if no offer has a price
    """
    best = None
    best_price = None
    for offer in offers:
        price = offer_price(offer)
        if price is None:
            continue
        if best_price is None or price < best_price:
            best = offer
            best_price = price
    return best


def offer_supplier_name(
    offer: Mapping[str, Any],
    suppliers_by_id: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Optional[str]:
    """
    Resolve the supplier name of an offer.

    The offer's supplier may be a populated supplier mapping or an id
    that is looked up in suppliers_by_id.
    """
    supplier = offer.get("supplier")
    if isinstance(supplier, Mapping):
        return supplier.get("name") or None
    if supplier is not None and suppliers_by_id:
        match = suppliers_by_id.get(str(supplier))
        if match:
            return match.get("name") or None
    return offer.get("supplierName") or None


def price_gap(best_price: Optional[float], avg_cost: Optional[float]) -> Optional[float]:
    """
    Signed gap between best supplier price and average unit cost.

    Negative means the best offer is cheaper than the average cost.
    None when either side is missing.
    """
    if best_price is None or avg_cost is None:
        return None
    return best_price - avg_cost


def gap_tone(gap: Any) -> Optional[str]:
    """
    Presentation tone for a price gap.

    Returns:
        "saving" - negative gap (cheaper than average)
        "premium" - positive gap (more expensive)
        None - zero or absent
    """
    value = to_number(gap)
    if value is None or value == 0:
        return None
    return "saving" if value < 0 else "premium"


# ==================== Timelines ====================


def _sub_list(entry: Mapping[str, Any], name: str) -> List[Mapping[str, Any]]:
    items = entry.get(name)
    if not isinstance(items, (list, tuple)):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def labor_hours(entry: Mapping[str, Any]) -> float:
    """Total hoursWorked across workers, engineers and architects."""
    return sum(
        number_or_zero(item.get("hoursWorked"))
        for name in LABOR_LISTS
        for item in _sub_list(entry, name)
    )


def expense_total(entry: Mapping[str, Any]) -> float:
    """Total expense amount of a timeline entry."""
    return sum(number_or_zero(item.get("amount")) for item in _sub_list(entry, EXPENSE_LIST))


def material_usage_cost(entry: Mapping[str, Any]) -> float:
    """Total material-usage cost of a timeline entry."""
    return sum(number_or_zero(item.get("cost")) for item in _sub_list(entry, MATERIAL_USAGE_LIST))


def headcount(entry: Mapping[str, Any]) -> int:
    """Number of labor lines (workers + engineers + architects)."""
    return sum(len(_sub_list(entry, name)) for name in LABOR_LISTS)


def timeline_totals(entry: Mapping[str, Any]) -> Dict[str, float]:
    """
    Roll up the nested lists of one timeline entry.

    Returns:
        Dict with hours, expenses, material_cost, cost (expenses + materials)
    """
    expenses = expense_total(entry)
    materials = material_usage_cost(entry)
    return {
        "hours": labor_hours(entry),
        "expenses": expenses,
        "material_cost": materials,
        "cost": expenses + materials,
    }


# ==================== Tools & Rentals ====================


def effective_rental_status(rental: Mapping[str, Any], as_of: datetime) -> str:
    """
    Get rental status, promoting late active rentals to "overdue".

    Rule: status "rented" with rentalEndDate before as_of is overdue.
    """
    status = rental.get("status") or "rented"
    if status == "rented":
        end = to_date(rental.get("rentalEndDate"))
        if end is not None and end < as_of:
            return "overdue"
    return status


def tool_depreciation(tool: Mapping[str, Any], as_of: datetime) -> float:
    """
    Calculate tool depreciation.

    Formula: whole years in use x depreciationRate + usageHours / 1000.
    Missing purchase date counts as 0 years.
    """
    rate = to_number(tool.get("depreciationRate"))
    if rate is None:
        rate = 0.1
    purchased = to_date(tool.get("purchaseDate"))

    years = 0
    if purchased is not None:
        years = as_of.year - purchased.year
        if (as_of.month, as_of.day) < (purchased.month, purchased.day):
            years -= 1
        years = max(years, 0)

    return years * rate + number_or_zero(tool.get("usageHours")) / 1000


# ==================== Inspections & Complaints ====================


def inspection_result(inspection: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """
    Get the recorded result of an inspection.

    The result may be nested under "result" (schedule joined with its
    result) or stored flat on the record. None when no outcome exists.
    """
    nested = inspection.get("result")
    if isinstance(nested, Mapping) and nested.get("outcome"):
        return nested
    if inspection.get("outcome"):
        return inspection
    return None


def inspection_outcome(inspection: Mapping[str, Any]) -> Optional[str]:
    """Get PASS/FAIL outcome of an inspection (None when not completed)."""
    result = inspection_result(inspection)
    if result is None:
        return None
    return str(result.get("outcome")).strip().upper()


def inspection_score(inspection: Mapping[str, Any]) -> Optional[float]:
    """Get the 0-100 score of a completed inspection."""
    result = inspection_result(inspection)
    if result is None:
        return None
    return to_number(result.get("score"))


def effective_inspection_status(inspection: Mapping[str, Any], as_of: datetime) -> str:
    """
    Get inspection status, promoting late upcoming inspections to OVERDUE.

    Rule: status UPCOMING with dueAt before as_of is OVERDUE.
    """
    status = inspection.get("status") or "UPCOMING"
    if status == "UPCOMING":
        due = to_date(inspection.get("dueAt"))
        if due is not None and due < as_of:
            return "OVERDUE"
    return status


def compliance_score(passed: int, completed: int) -> float:
    """Percentage of passed inspections (0 when none completed)."""
    return passed / max(completed, 1) * 100


def complaint_type(complaint: Mapping[str, Any]) -> str:
    """
    Get complaint type, guessing it from the description when missing.

    Keywords: quality -> QUALITY, delay -> DELAY, injury/unsafe/fire/hazard
    -> SAFETY, anything else OTHER.
    """
    declared = complaint.get("type")
    if declared:
        return str(declared)

    text = str(complaint.get("description") or "").lower()
    if "quality" in text:
        return "QUALITY"
    if "delay" in text:
        return "DELAY"
    if any(word in text for word in ("injury", "unsafe", "fire", "hazard")):
        return "SAFETY"
    return "OTHER"
