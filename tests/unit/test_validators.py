"""
Unit tests for domain validators.

Tests cover rule sets, cross-field and cross-record rules, and error
collection.
"""

import pytest

from domain.validators import (
    RULESETS,
    ensure_valid,
    sanitize_filename,
    validate,
)
from domain.exceptions import NotFoundError, ValidationError


def test_validate_material_valid():
    """Test a complete material draft."""
    draft = {"name": "Cement", "category": "Binders", "unit": "bag", "quantity": 0, "minStock": 10}
    assert validate(draft, "material") == []


def test_validate_material_collects_all_errors():
    """Test every violated rule is reported, in rule order."""
    errors = validate({}, "material")

    assert errors == [
        "Name is required.",
        "Category is required.",
        "Unit is required.",
        "Quantity must be a number ≥ 0.",
        "Min stock must be a number ≥ 0.",
    ]


def test_validate_material_numbers():
    """Test numeric rules on a material draft."""
    draft = {"name": "Sand", "category": "Aggregates", "unit": "kg", "quantity": -1, "minStock": "5"}
    errors = validate(draft, "material")

    assert "Quantity must be a number ≥ 0." in errors
    assert "Min stock must be a number ≥ 0." in errors  # strings are not numbers
    assert "Avg cost must be a number ≥ 0." not in errors  # optional


def test_validate_receive():
    """Test receive quantity must be positive."""
    assert validate({"quantity": 3, "unitCost": 2.5}, "receive") == []
    assert validate({"quantity": 0}, "receive") == ["Receive quantity must be > 0."]
    assert validate({"quantity": 2, "unitCost": -1}, "receive") == ["Unit cost must be ≥ 0."]


def test_validate_consume_against_current_stock():
    """Test consumption cannot exceed the stored quantity."""
    assert validate({"quantity": 12}, "consume", current={"quantity": 10}) == [
        "Cannot consume more than available (10).",
    ]
    assert validate({"quantity": 10}, "consume", current={"quantity": 10}) == []
    assert validate({"quantity": 12}, "consume") == []  # no stored record to compare


def test_validate_supplier():
    """Test supplier email, phone and rating rules."""
    assert validate({"name": "Forge", "email": "info@forge.com", "phone": "+46 70-123 45 67", "rating": "4"}, "supplier") == []

    errors = validate({"name": "", "email": "not-an-email", "phone": "abc", "rating": 6}, "supplier")
    assert errors == [
        "Name is required.",
        "Email format is invalid.",
        "Phone format is invalid.",
        "Rating must be between 0 and 5.",
    ]


def test_validate_tool_status():
    """Test tool status enumeration."""
    draft = {"model": "Drill", "serial": "D-1", "purchaseDate": "2023-05-01", "price": 200, "status": "lost"}
    assert validate(draft, "tool") == ["Status must be one of: available, in use, under maintenance, retired."]


def test_validate_rental_date_order():
    """Test rental end must not be before start."""
    draft = {
        "toolId": "t1",
        "userId": "u1",
        "rentalStartDate": "2024-03-10",
        "rentalEndDate": "2024-03-01",
    }
    assert validate(draft, "rental") == ["Rental end date must be after the start date."]

    draft["rentalEndDate"] = "2024-03-10"  # same day is fine
    assert validate(draft, "rental") == []


def test_validate_rental_bad_date():
    """Test unparseable rental end date."""
    errors = validate({"toolId": "t1", "userId": "u1", "rentalEndDate": "soon"}, "rental")
    assert errors == ["Rental end date must be a valid date."]


def test_validate_user():
    """Test user name, email, password and age rules."""
    assert validate({"name": "Ana Lind", "email": "ana@site.com", "password": "secret1", "age": 30}, "user") == []

    errors = validate({"name": "Al9", "email": "al@site", "password": "123", "age": 130}, "user")
    assert errors == [
        "Name can only contain letters and spaces.",
        "Email format is invalid.",
        "Password must be at least 6 characters.",
        "Age must be between 0 and 120.",
    ]


def test_validate_project_request():
    """Test project request contact fields."""
    draft = {"preqname": "Ana", "preqmail": "ana@site.com", "preqnumber": "0701234567", "preqdescription": "Garage"}
    assert validate(draft, "project_request") == []
    assert "Description is required." in validate(dict(draft, preqdescription="   "), "project_request")


def test_validate_timeline_nested_lists():
    """Test nested hours and amounts must be non-negative."""
    draft = {
        "date": "2024-03-01",
        "tworker": [{"hoursWorked": 8}, {"hoursWorked": -2}],
        "texpenses": [{"amount": "abc"}],
    }
    assert validate(draft, "timeline") == [
        "Worker hours must be ≥ 0.",
        "Expense amounts must be ≥ 0.",
    ]


def test_validate_timeline_nested_field_not_a_list():
    """Test a nested field holding a number or a mapping is rejected, not crashed on."""
    assert validate({"date": "2024-01-05", "tworker": 5}, "timeline") == ["Worker hours must be ≥ 0."]
    assert validate({"date": "2024-01-05", "tworker": {"hoursWorked": -3}}, "timeline") == [
        "Worker hours must be ≥ 0."
    ]


def test_validate_timeline_missing_lists():
    """Test absent nested lists pass."""
    assert validate({"date": "2024-01-05", "tworker": None}, "timeline") == []


def test_validate_complaint():
    """Test complaint area, description and enumerations."""
    draft = {"area": "Block A", "description": "Loose scaffolding", "type": "SAFETY"}
    assert validate(draft, "complaint") == []
    assert validate({"type": "NOISE", "status": "CLOSED"}, "complaint") == [
        "Area is required.",
        "Description is required.",
        "Type must be one of: SAFETY, QUALITY, DELAY, OTHER.",
        "Status must be one of: OPEN, IN_PROGRESS, RESOLVED.",
    ]


def test_validate_inspection_and_result():
    """Test inspection schedule and result drafts."""
    assert validate({"area": "Roof", "inspector": "Kim", "dueAt": "2024-03-11T09:00"}, "inspection") == []
    assert validate({"area": "Roof", "inspector": "Kim", "dueAt": "soon"}, "inspection") == [
        "Due date must be a valid date."
    ]

    assert validate({"outcome": "PASS", "score": 100}, "inspection_result") == []
    assert validate({"outcome": "MAYBE", "score": 140}, "inspection_result") == [
        "Outcome must be PASS or FAIL.",
        "Score must be between 0 and 100.",
    ]


def test_validate_invalid_payload():
    """Test a non-mapping draft."""
    assert validate(None, "material") == ["Invalid payload."]
    assert validate(["name"], "material") == ["Invalid payload."]


def test_validate_unknown_kind():
    """Test unknown rule set."""
    with pytest.raises(NotFoundError):
        validate({}, "spaceship")


def test_every_ruleset_accepts_kind_names():
    """Test rule set names used by the screens exist."""
    for kind in (
        "material", "receive", "consume", "supplier", "tool", "rental", "user",
        "project_request", "project", "timeline", "complaint", "inspection", "inspection_result",
    ):
        assert kind in RULESETS


def test_ensure_valid():
    """Test ensure_valid raises with all messages."""
    draft = {"quantity": 5}
    assert ensure_valid(draft, "receive") is draft

    with pytest.raises(ValidationError) as exc_info:
        ensure_valid({}, "material")

    assert len(exc_info.value.errors) == 5
    assert exc_info.value.details["kind"] == "material"


def test_sanitize_filename():
    """Test filename sanitization."""
    assert sanitize_filename("test.csv") == "test.csv"
    assert sanitize_filename("test/file.csv") == "test_file.csv"
    assert sanitize_filename("test\\file.csv") == "test_file.csv"
    assert sanitize_filename('test:file"?.csv') == "test_file__.csv"
    assert sanitize_filename(".hidden.csv") == "hidden.csv"  # Leading dot removed

    # Long filename
    long_name = "a" * 300 + ".pdf"
    sanitized = sanitize_filename(long_name)
    assert len(sanitized) <= 255
    assert sanitized.endswith(".pdf")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
