"""
Input validators for Worksite Reports.

Declarative field-level and cross-field rules applied to a draft record
before it is submitted for a create/update/receive/consume mutation.

Every applicable rule is evaluated and all messages are returned
together, so a form can show the complete error list in one pass.
Validation is pure: it never calls the remote service.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .exceptions import NotFoundError, ValidationError
from .rules import (
    COMPLAINT_STATUSES,
    COMPLAINT_TYPES,
    INSPECTION_OUTCOMES,
    INSPECTION_STATUSES,
    RENTAL_STATUSES,
    TOOL_STATUSES,
    to_date,
    to_number,
)


EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$"
PHONE_PATTERN = r"^[0-9+()\-\s]{7,20}$"
PERSON_NAME_PATTERN = r"^[A-Za-z\s]+$"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    # Strings are not numbers here: drafts come from typed form inputs
    return not isinstance(value, (bool, str)) and to_number(value) is not None


# ==================== Rules ====================


class Rule:
    """Base class for a validation rule."""

    def check(self, record: Mapping[str, Any], current: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """Return an error message, or None if the record passes."""
        raise NotImplementedError


@dataclass(frozen=True)
class Required(Rule):
    field: str
    message: str

    def check(self, record, current=None):
        if _is_blank(record.get(self.field)):
            return self.message
        return None


@dataclass(frozen=True)
class NonNegative(Rule):
    """Number >= 0. Optional fields may be missing."""

    field: str
    message: str
    required: bool = True

    def check(self, record, current=None):
        value = record.get(self.field)
        if value is None and not self.required:
            return None
        if not _is_number(value) or value < 0:
            return self.message
        return None


@dataclass(frozen=True)
class Positive(Rule):
    """Number > 0. Optional fields may be missing."""

    field: str
    message: str
    required: bool = True

    def check(self, record, current=None):
        value = record.get(self.field)
        if value is None and not self.required:
            return None
        if not _is_number(value) or value <= 0:
            return self.message
        return None


@dataclass(frozen=True)
class NumberRange(Rule):
    """Inclusive numeric bounds. Numeric strings are accepted."""

    field: str
    message: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    required: bool = False

    def check(self, record, current=None):
        value = record.get(self.field)
        if _is_blank(value):
            return self.message if self.required else None
        number = to_number(value)
        if number is None:
            return self.message
        if self.minimum is not None and number < self.minimum:
            return self.message
        if self.maximum is not None and number > self.maximum:
            return self.message
        return None


@dataclass(frozen=True)
class LengthRange(Rule):
    """String length bounds (after trimming). Missing values are skipped."""

    field: str
    message: str
    minimum: int = 0
    maximum: Optional[int] = None

    def check(self, record, current=None):
        value = record.get(self.field)
        if value is None:
            return None
        length = len(str(value).strip())
        if length < self.minimum:
            return self.message
        if self.maximum is not None and length > self.maximum:
            return self.message
        return None


@dataclass(frozen=True)
class Pattern(Rule):
    """Regular-expression match. Blank values are skipped."""

    field: str
    pattern: str
    message: str

    def check(self, record, current=None):
        value = record.get(self.field)
        if _is_blank(value):
            return None
        if not re.match(self.pattern, str(value).strip(), re.IGNORECASE):
            return self.message
        return None


@dataclass(frozen=True)
class OneOf(Rule):
    field: str
    choices: Tuple[str, ...]
    message: str

    def check(self, record, current=None):
        value = record.get(self.field)
        if _is_blank(value):
            return None
        if value not in self.choices:
            return self.message
        return None


@dataclass(frozen=True)
class DateValue(Rule):
    """Field must hold a parseable date."""

    field: str
    message: str
    required: bool = True

    def check(self, record, current=None):
        value = record.get(self.field)
        if _is_blank(value):
            return self.message if self.required else None
        if to_date(value) is None:
            return self.message
        return None


@dataclass(frozen=True)
class DateOrder(Rule):
    """Cross-field rule: start date must not be after end date."""

    start_field: str
    end_field: str
    message: str

    def check(self, record, current=None):
        start = to_date(record.get(self.start_field))
        end = to_date(record.get(self.end_field))
        if start is None or end is None:
            return None
        if start > end:
            return self.message
        return None


@dataclass(frozen=True)
class NotExceedingCurrent(Rule):
    """
    Cross-record rule: draft value must not exceed the stored value.

    Needs the current stored record; skipped when it is not supplied.
    The message may reference {available}.
    """

    field: str
    current_field: str
    message: str

    def check(self, record, current=None):
        if current is None:
            return None
        value = record.get(self.field)
        if not _is_number(value):
            return None
        available = to_number(current.get(self.current_field))
        available = 0.0 if available is None else available
        if value > available:
            return self.message.format(available=_plain(current.get(self.current_field, 0)))
        return None


@dataclass(frozen=True)
class EachNonNegative(Rule):
    """
    Every item of a nested list must have a number >= 0 in item_field.

    A present value that is not a list fails the rule.
    """

    list_field: str
    item_field: str
    message: str

    def check(self, record, current=None):
        items = record.get(self.list_field)
        if items is None:
            return None
        if not isinstance(items, (list, tuple)):
            return self.message
        for item in items:
            if not isinstance(item, Mapping):
                continue
            value = item.get(self.item_field)
            if value is None:
                continue
            number = to_number(value)
            if number is None or number < 0:
                return self.message
        return None


def _plain(value: Any) -> str:
    number = to_number(value)
    if number is not None and number.is_integer():
        return str(int(number))
    return str(value)


# ==================== Rule sets ====================


RULESETS: Dict[str, Sequence[Rule]] = {
    "material": (
        Required("name", "Name is required."),
        Required("category", "Category is required."),
        Required("unit", "Unit is required."),
        NonNegative("quantity", "Quantity must be a number ≥ 0."),
        NonNegative("minStock", "Min stock must be a number ≥ 0."),
        NonNegative("avgUnitCost", "Avg cost must be a number ≥ 0.", required=False),
        NonNegative("lastUnitCost", "Last cost must be a number ≥ 0.", required=False),
    ),
    "receive": (
        Positive("quantity", "Receive quantity must be > 0."),
        NonNegative("unitCost", "Unit cost must be ≥ 0.", required=False),
    ),
    "consume": (
        Positive("quantity", "Consume quantity must be > 0."),
        NotExceedingCurrent("quantity", "quantity", "Cannot consume more than available ({available})."),
    ),
    "supplier": (
        Required("name", "Name is required."),
        Pattern("email", EMAIL_PATTERN, "Email format is invalid."),
        Pattern("phone", PHONE_PATTERN, "Phone format is invalid."),
        NumberRange("rating", "Rating must be between 0 and 5.", minimum=0, maximum=5),
    ),
    "tool": (
        Required("model", "Model is required."),
        Required("serial", "Serial number is required."),
        DateValue("purchaseDate", "Purchase date must be a valid date."),
        OneOf("status", TOOL_STATUSES, "Status must be one of: " + ", ".join(TOOL_STATUSES) + "."),
        NonNegative("price", "Price must be a number ≥ 0."),
        NonNegative("depreciationRate", "Depreciation rate must be a number ≥ 0.", required=False),
        NonNegative("usageHours", "Usage hours must be a number ≥ 0.", required=False),
    ),
    "rental": (
        Required("toolId", "Tool is required."),
        Required("userId", "User is required."),
        DateValue("rentalEndDate", "Rental end date must be a valid date."),
        DateValue("rentalStartDate", "Rental start date must be a valid date.", required=False),
        DateOrder("rentalStartDate", "rentalEndDate", "Rental end date must be after the start date."),
        OneOf("status", RENTAL_STATUSES, "Status must be one of: " + ", ".join(RENTAL_STATUSES) + "."),
        NonNegative("totalPrice", "Total price must be a number ≥ 0.", required=False),
    ),
    "user": (
        Required("name", "Name is required."),
        LengthRange("name", "Name must be at least 3 characters.", minimum=3),
        Pattern("name", PERSON_NAME_PATTERN, "Name can only contain letters and spaces."),
        Required("email", "Email is required."),
        Pattern("email", EMAIL_PATTERN, "Email format is invalid."),
        LengthRange("password", "Password must be at least 6 characters.", minimum=6),
        NumberRange("age", "Age must be between 0 and 120.", minimum=0, maximum=120),
    ),
    "project_request": (
        Required("preqname", "Name is required."),
        Required("preqmail", "Email is required."),
        Pattern("preqmail", EMAIL_PATTERN, "Email format is invalid."),
        Required("preqnumber", "Phone number is required."),
        Pattern("preqnumber", PHONE_PATTERN, "Phone format is invalid."),
        Required("preqdescription", "Description is required."),
    ),
    "project": (
        Required("pname", "Project name is required."),
        Required("pcode", "Project code is required."),
        Required("pownerid", "Owner id is required."),
        Required("pownername", "Owner name is required."),
        Required("pdescription", "Description is required."),
        NonNegative("pbudget", "Budget must be a number ≥ 0."),
        Required("pstatus", "Status is required."),
        DateValue("penddate", "End date must be a valid date."),
    ),
    "timeline": (
        DateValue("date", "Date must be a valid date."),
        EachNonNegative("tworker", "hoursWorked", "Worker hours must be ≥ 0."),
        EachNonNegative("tengineer", "hoursWorked", "Engineer hours must be ≥ 0."),
        EachNonNegative("tarchitect", "hoursWorked", "Architect hours must be ≥ 0."),
        EachNonNegative("texpenses", "amount", "Expense amounts must be ≥ 0."),
        EachNonNegative("tmaterials", "cost", "Material costs must be ≥ 0."),
    ),
    "complaint": (
        Required("area", "Area is required."),
        Required("description", "Description is required."),
        OneOf("type", COMPLAINT_TYPES, "Type must be one of: " + ", ".join(COMPLAINT_TYPES) + "."),
        OneOf("status", COMPLAINT_STATUSES, "Status must be one of: " + ", ".join(COMPLAINT_STATUSES) + "."),
    ),
    "inspection": (
        Required("area", "Area is required."),
        Required("inspector", "Inspector is required."),
        DateValue("dueAt", "Due date must be a valid date."),
        OneOf("status", INSPECTION_STATUSES, "Status must be one of: " + ", ".join(INSPECTION_STATUSES) + "."),
    ),
    "inspection_result": (
        Required("outcome", "Outcome is required."),
        OneOf("outcome", INSPECTION_OUTCOMES, "Outcome must be PASS or FAIL."),
        NumberRange("score", "Score must be between 0 and 100.", minimum=0, maximum=100),
    ),
}


def validate(
    record: Optional[Mapping[str, Any]],
    kind: str,
    current: Optional[Mapping[str, Any]] = None,
) -> List[str]:
    """
    Validate a draft record.

    Args:
        record: Draft record (form payload)
        kind: Rule set name (e.g. "material", "consume")
        current: Currently stored record, for cross-record rules

    Returns:
        All error messages (empty list = valid)

    Raises:
        NotFoundError: If kind has no rule set

    Example:
        >>> validate({"quantity": 12}, "consume", current={"quantity": 10})
        ['Cannot consume more than available (10).']
    """
    if kind not in RULESETS:
        raise NotFoundError(
            f"No validation rules for kind: {kind}",
            details={"allowed": sorted(RULESETS)},
        )

    if not isinstance(record, Mapping):
        return ["Invalid payload."]

    errors = []
    for rule in RULESETS[kind]:
        message = rule.check(record, current)
        if message:
            errors.append(message)
    return errors


def ensure_valid(
    record: Optional[Mapping[str, Any]],
    kind: str,
    current: Optional[Mapping[str, Any]] = None,
) -> Mapping[str, Any]:
    """
    Validate a draft record and raise if it has any errors.

    Returns:
        The record unchanged

    Raises:
        ValidationError: With all messages in details["errors"]
    """
    errors = validate(record, kind, current)
    if errors:
        raise ValidationError(
            "Fix form errors: " + " ".join(errors),
            details={"kind": kind, "errors": errors},
        )
    return record


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for safe storage.

    Removes/replaces characters that could cause filesystem issues.
    """
    cleaned = filename.replace("/", "_").replace("\\", "_")
    cleaned = re.sub(r'[<>:"|?*\s]', "_", cleaned)
    cleaned = cleaned.strip(". ")

    if len(cleaned) > 255:
        name, ext = cleaned.rsplit(".", 1) if "." in cleaned else (cleaned, "")
        cleaned = name[: 255 - len(ext) - 1] + "." + ext if ext else name[:255]

    return cleaned
