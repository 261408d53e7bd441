"""
Unit tests for Export Service.

Tests cover file naming, encoding, scopes and PDF delegation.
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

from domain.exceptions import ExportError
from operations.aggregate_ops import build_cost_rows
from services.export_service import ExportService, create_export_service


AS_OF = datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)


# ==================== Fixtures ====================


@pytest.fixture
def materials():
    """Create sample materials for testing."""
    return [
        {"name": "Cement, grey", "category": "Binders", "quantity": 5, "minStock": 10, "avgUnitCost": 8},
        {"name": "Sand", "category": "Aggregates", "quantity": 50, "minStock": 10, "avgUnitCost": 2},
        {"name": "Éclat", "category": "Stone", "quantity": 1, "minStock": 2},
    ]


@pytest.fixture
def export_service(tmp_path):
    """Create export service writing to a temp directory."""
    return create_export_service(tmp_path / "reports")


# ==================== CSV Export Tests ====================


def test_export_csv_low_stock(export_service, materials):
    """Test low-stock CSV export naming and row count."""
    result = export_service.export(materials, "materials", "csv", scope="low", as_of=AS_OF)

    assert result.path.name == "materials_low_report_2024-03-10.csv"
    assert result.row_count == 2
    assert result.export_format == "csv"
    assert result.summary["total_count"] == 3
    assert result.summary["hidden_count"] == 1


def test_export_csv_bytes(export_service, materials):
    """Test UTF-8 without BOM and CRLF kept as written."""
    result = export_service.export(materials, "materials", "csv", as_of=AS_OF)
    data = result.path.read_bytes()

    assert data.startswith(b"Name,Category")  # no BOM
    assert b"\r\n" in data
    assert b"\r\r\n" not in data
    assert not data.endswith(b"\r\n")
    assert '"Cement, grey"'.encode("utf-8") in data
    assert "Éclat".encode("utf-8") in data


def test_export_scoped_domain_names_all_scope(export_service, materials):
    """Test scoped domains keep the scope segment for "all"."""
    result = export_service.export(materials, "materials", "csv", scope="all", as_of=AS_OF)
    assert result.path.name == "materials_all_report_2024-03-10.csv"


def test_export_unscoped_domain(export_service):
    """Test domains without scopes have no scope segment."""
    result = export_service.export([{"name": "Forge"}], "suppliers", "csv", as_of=AS_OF)
    assert result.path.name == "suppliers_report_2024-03-10.csv"


def test_export_empty_view_writes_header(export_service):
    """Test an empty view still produces a file."""
    result = export_service.export([], "users", "csv", as_of=AS_OF)

    assert result.row_count == 0
    assert result.path.read_text(encoding="utf-8").startswith("Name,Email")


def test_export_invalid_scope(export_service, materials):
    """Test scopes a domain does not offer."""
    with pytest.raises(ValueError):
        export_service.export(materials, "materials", "csv", scope="overdue", as_of=AS_OF)


def test_export_unknown_format(export_service, materials):
    """Test unsupported export formats."""
    with pytest.raises(ExportError):
        export_service.export(materials, "materials", "docx", as_of=AS_OF)


def test_write_text_failure(export_service):
    """Test write errors are wrapped."""
    with patch("builtins.open", side_effect=OSError("disk full")):
        with pytest.raises(ExportError) as exc_info:
            export_service.write_text("x", "report.csv")

    assert "disk full" in str(exc_info.value)


# ==================== Print Export Tests ====================


def test_export_print_document(export_service):
    """Test print export writes an HTML document with the print trigger."""
    rows = build_cost_rows([{"name": "Cement", "quantity": 5, "minStock": 10, "avgUnitCost": 8.0,
                             "offers": [{"price": 7.5}]}])

    result = export_service.export(rows, "cost_per_unit", "print", scope="low", as_of=AS_OF)
    html = result.path.read_text(encoding="utf-8")

    assert result.path.name == "cost_per_unit_low_report_2024-03-10.html"
    assert "Cost-per-Unit Analysis (low stock)" in html
    assert "Generated: 2024-03-10 08:00" in html
    assert "tone-saving" in html
    assert "window.print()" in html


def test_export_rentals_overdue(export_service):
    """Test overdue scope uses the reference date."""
    rentals = [
        {"toolId": "t1", "status": "rented", "rentalEndDate": "2024-03-01"},
        {"toolId": "t2", "status": "rented", "rentalEndDate": "2024-04-01"},
    ]
    result = export_service.export(rentals, "rentals", "csv", scope="overdue", as_of=AS_OF)

    assert result.row_count == 1
    assert result.path.name == "rentals_overdue_report_2024-03-10.csv"


# ==================== PDF Export Tests ====================


def test_export_pdf_uses_pdf_service(tmp_path, materials):
    """Test PDF export renders without auto print and delegates."""
    pdf_service = Mock()
    pdf_service.html_to_pdf.side_effect = lambda html, path: path
    service = ExportService(tmp_path, pdf_service=pdf_service)

    result = service.export(materials, "materials", "pdf", as_of=AS_OF)

    html, path = pdf_service.html_to_pdf.call_args[0]
    assert "window.print()" not in html
    assert "Materials Report" in html
    assert Path(path).name == "materials_all_report_2024-03-10.pdf"
    assert result.path == path


def test_export_pdf_without_service(export_service, materials):
    """Test PDF export needs a PDF service."""
    with pytest.raises(ExportError):
        export_service.export(materials, "materials", "pdf", as_of=AS_OF)
