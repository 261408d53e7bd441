"""
Integration tests for complete workflow.

Tests the end-to-end flow from record files to summaries and exported
reports.
"""

import csv
import io
import json
import pytest
from datetime import datetime, timezone

from config.app_context import create_app_context
from config.settings import Settings, reset_settings
from data import create_record_source
from domain.models import SortDirection, ViewSpec
from domain.schemas import get_schema
from main import main
from operations import aggregate, build_cost_rows, view
from operations.screen_ops import ScreenState
from services.export_service import create_export_service


AS_OF = datetime(2024, 3, 10, tzinfo=timezone.utc)


# ==================== Fixtures ====================


@pytest.fixture
def data_dir(tmp_path):
    """Create record files for testing."""
    data = tmp_path / "data"
    data.mkdir()

    (data / "materials.json").write_text(json.dumps({"success": True, "data": [
        {"_id": "m1", "name": "Cement", "category": "Binders", "unit": "bag", "quantity": 5,
         "minStock": 10, "avgUnitCost": 8.0, "lastUnitCost": 8.2,
         "supplierPrices": [{"supplier": "s1", "pricePerUnit": 7.5}, {"supplier": "s2", "pricePerUnit": 9.0}]},
        {"_id": "m2", "name": "Sand", "category": "Aggregates", "quantity": 120, "minStock": 20,
         "avgUnitCost": 1.2, "supplierPrices": [{"supplier": "s2", "pricePerUnit": 1.5}]},
        {"_id": "m3", "name": "Lime", "quantity": 3, "minStock": 4},
    ]}), encoding="utf-8")

    (data / "suppliers.csv").write_text(
        "_id,name,email,rating,materialsOffered\n"
        's1,BuildMart,sales@buildmart.com,4.5,"[{""materialName"": ""Cement"", ""pricePerUnit"": 7.5}]"\n'
        "s2,Quarry Co,info@quarry.com,3,\n",
        encoding="utf-8",
    )

    (data / "rentals.json").write_text(json.dumps([
        {"toolId": "t1", "userId": "u1", "status": "rented", "rentalEndDate": "2024-03-01", "totalPrice": 40},
        {"toolId": "t2", "userId": "u2", "status": "rented", "rentalEndDate": "2024-04-01", "totalPrice": 25},
        {"toolId": "t3", "userId": "u1", "status": "returned", "rentalEndDate": "2024-02-01", "totalPrice": 10},
    ]), encoding="utf-8")

    (data / "projects.json").write_text(json.dumps([
        {"pcode": "P1", "pname": "Depot", "ptype": "Residential Construction", "ppriority": "Medium"},
        {"pcode": "P2", "pname": "Annex"},
    ]), encoding="utf-8")

    (data / "timelines.json").write_text(json.dumps([
        {"pcode": "P1", "date": "2024-03-01", "tworker": [{"role": "Carpenter", "hoursWorked": 8}],
         "texpenses": [{"amount": 50}]},
        {"pcode": "P1", "date": "2024-02-01", "tworker": [{"role": "Painter", "hoursWorked": 10}]},
        {"pcode": "P2", "date": "2024-03-02", "texpenses": [{"amount": 25}]},
    ]), encoding="utf-8")

    (data / "inspections.json").write_text(json.dumps([
        {"_id": "i1", "project": "Tower", "area": "Roof", "inspector": "Kim", "dueAt": "2024-03-08T09:00:00Z",
         "status": "COMPLETED", "result": {"outcome": "FAIL", "score": 40, "notes": "Loose tiles"}},
        {"_id": "i2", "area": "Lobby", "dueAt": "2024-03-09", "status": "UPCOMING"},
    ]), encoding="utf-8")

    (data / "complaints.json").write_text(json.dumps([
        {"_id": "c1", "ticket": "CMP-1", "area": "Gate", "description": "Unsafe scaffold", "escalated": True},
        {"_id": "c2", "ticket": "CMP-2", "area": "Gate", "type": "DELAY", "status": "RESOLVED"},
    ]), encoding="utf-8")

    return data


@pytest.fixture
def app_context(data_dir, tmp_path):
    """Create application context for testing."""
    settings = Settings(data_dir=data_dir, output_dir=tmp_path / "reports")
    return create_app_context(
        record_source=create_record_source("file", data_dir),
        settings=settings,
        as_of=AS_OF,
    )


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep the environment out of the command line tests."""
    monkeypatch.delenv("WORKSITE_DATA_DIR", raising=False)
    monkeypatch.delenv("WORKSITE_OUTPUT_DIR", raising=False)
    reset_settings()
    yield
    reset_settings()


# ==================== Workflow Tests ====================


def test_complete_materials_workflow(app_context):
    """Test fetch -> view -> aggregate -> export for materials."""
    schema = get_schema("materials")

    # Step 1: Load screen
    state, request_id = ScreenState(kind="materials").begin_fetch()
    state = state.receive_records(request_id, app_context.record_source.fetch("materials"))
    assert len(state.records) == 3

    # Step 2: Summary over the full store
    result = aggregate(state.records, "materials", as_of=app_context.as_of)
    assert result.total("low_stock") == 2
    assert result.total("cheaper_offers") == 1

    # Step 3: Narrow the view
    state = state.with_query("m").toggle_sort("quantity").toggle_sort("quantity")
    rows = state.visible_records(schema)
    assert [r["name"] for r in rows] == ["Cement", "Lime"]

    # Step 4: Export the view
    service = create_export_service(app_context.settings.ensure_output_dir())
    state = state.request_export("csv")
    export = service.export(rows, "materials", "csv", scope="low", as_of=app_context.as_of)
    state = state.export_completed(export.row_count)

    parsed = list(csv.reader(io.StringIO(export.path.read_text(encoding="utf-8"), newline="")))
    assert parsed[0] == ["Name", "Category", "Unit", "Qty", "Min", "Status", "Avg Cost", "Last Cost"]
    assert parsed[1] == ["Cement", "Binders", "bag", "5", "10", "Low", "8.00", "8.20"]
    assert parsed[2] == ["Lime", "", "", "3", "4", "Low", "", ""]
    assert str(state.notifications[-1]) == "CSV exported: Downloaded 2 rows."


def test_cost_per_unit_workflow(app_context):
    """Test cost analysis with supplier names resolved from the supplier file."""
    source = app_context.record_source
    rows = build_cost_rows(source.fetch("materials"), source.fetch("suppliers"))

    cement = rows[0]
    assert cement["bestSupplierName"] == "BuildMart"
    assert cement["bestSupplierPrice"] == 7.5
    assert cement["gap"] == -0.5

    service = create_export_service(app_context.settings.ensure_output_dir())
    export = service.export(rows, "cost_per_unit", "print", as_of=app_context.as_of)
    html = export.path.read_text(encoding="utf-8")

    assert export.path.name == "cost_per_unit_all_report_2024-03-10.html"
    assert "BuildMart" in html
    assert '<td class="align-right tone-saving">-0.50</td>' in html
    assert '<td class="align-right tone-premium">0.30</td>' in html


def test_rentals_overdue_workflow(app_context):
    """Test overdue rentals counted and exported with the pinned date."""
    rentals = app_context.record_source.fetch("rentals")

    assert aggregate(rentals, "rentals", as_of=app_context.as_of).total("overdue") == 1

    service = create_export_service(app_context.settings.ensure_output_dir())
    export = service.export(rentals, "rentals", "csv", scope="overdue", as_of=app_context.as_of)

    assert export.row_count == 1
    assert "t1" in export.path.read_text(encoding="utf-8")


def test_filter_by_supplier_rating(app_context):
    """Test CSV-sourced numeric strings filter and sort as numbers."""
    schema = get_schema("suppliers")
    suppliers = app_context.record_source.fetch("suppliers")

    spec = ViewSpec(sort_field="rating", sort_direction=SortDirection.DESC)
    assert [s["name"] for s in view(suppliers, spec, schema)] == ["BuildMart", "Quarry Co"]

    summary = aggregate(suppliers, "suppliers", as_of=app_context.as_of)
    assert summary.total("average_rating") == pytest.approx(3.75)


# ==================== Command Line Tests ====================


def test_cli_export(data_dir, tmp_path):
    """Test the export command writes the report."""
    out = tmp_path / "out"

    code = main([
        "--source", str(data_dir),
        "--as-of", "2024-03-10",
        "export", "materials",
        "--scope", "low",
        "--output", str(out),
    ])

    assert code == 0
    assert (out / "materials_low_report_2024-03-10.csv").is_file()


def test_cli_export_cost_per_unit(data_dir, tmp_path):
    """Test cost-per-unit rows are derived from materials and suppliers."""
    out = tmp_path / "out"

    code = main([
        "--source", str(data_dir), "--as-of", "2024-03-10",
        "export", "cost_per_unit", "--filter", "stockStatus=Low", "--output", str(out),
    ])

    assert code == 0
    data = (out / "cost_per_unit_all_report_2024-03-10.csv").read_bytes()
    assert data.count(b"\r\n") == 2  # header + Cement + Lime
    assert b"BuildMart" in data


def test_cli_summary(data_dir, capsys):
    """Test the summary command prints totals."""
    code = main(["--source", str(data_dir), "--as-of", "2024-03-10", "summary", "rentals"])

    assert code == 0
    output = capsys.readouterr().out
    assert "overdue" in output
    assert "revenue" in output


def test_cli_missing_collection(tmp_path):
    """Test a missing record file fails cleanly."""
    code = main(["--source", str(tmp_path), "summary", "users"])
    assert code == 1


def test_cli_invalid_filter(data_dir, tmp_path):
    """Test malformed filters are usage errors."""
    code = main([
        "--source", str(data_dir),
        "export", "materials", "--filter", "status", "--output", str(tmp_path / "out"),
    ])
    assert code == 2


def test_cli_pdf_export_without_playwright(data_dir, tmp_path, monkeypatch, capsys):
    """Test a missing PDF renderer is a clean failure with a notification."""
    monkeypatch.setattr("services.pdf_service.PLAYWRIGHT_AVAILABLE", False)
    out = tmp_path / "out"

    code = main([
        "--source", str(data_dir), "--as-of", "2024-03-10",
        "export", "materials", "--format", "pdf", "--output", str(out),
    ])

    assert code == 1
    output = capsys.readouterr().out
    assert "Export failed: Playwright is not installed" in output
    assert "(format=pdf)" in output
    assert not list(out.glob("*.pdf"))


def test_cli_summary_financials(data_dir, capsys):
    """Test the financial summary honors project and date selection."""
    code = main([
        "--source", str(data_dir), "--as-of", "2024-03-10",
        "summary", "financials", "--project", "P1", "--from", "2024-03-01",
    ])

    assert code == 0
    lines = [line.split() for line in capsys.readouterr().out.splitlines()]
    assert ["projects", "1"] in lines
    assert ["grand_total", "5750"] in lines
    assert ["labor_hours", "8"] in lines


def test_cli_export_financials(data_dir, tmp_path):
    """Test financial rows export one line per project."""
    out = tmp_path / "out"

    code = main([
        "--source", str(data_dir), "--as-of", "2024-03-10",
        "export", "financials", "--project", "P2", "--output", str(out),
    ])

    assert code == 0
    lines = (out / "financials_report_2024-03-10.csv").read_bytes().decode("utf-8").split("\r\n")
    assert lines[1] == "P2,Annex,,,1,0,0.00,0.00,0.00,25.00,0.00,25.00"


def test_cli_invalid_date_range(data_dir):
    """Test unparseable --from dates are usage errors."""
    with pytest.raises(SystemExit) as exc:
        main(["--source", str(data_dir), "summary", "financials", "--from", "someday"])
    assert exc.value.code == 2


def test_cli_export_failed_inspections(data_dir, tmp_path):
    """Test the failed scope keeps inspections with a FAIL outcome."""
    out = tmp_path / "out"

    code = main([
        "--source", str(data_dir), "--as-of", "2024-03-10",
        "export", "inspections", "--scope", "failed", "--output", str(out),
    ])

    assert code == 0
    lines = (out / "inspections_failed_report_2024-03-10.csv").read_bytes().decode("utf-8").split("\r\n")
    assert lines == [
        "Project,Area,Inspector,Due At,Status,Outcome,Score,Notes",
        "Tower,Roof,Kim,2024-03-08 09:00,COMPLETED,FAIL,40,Loose tiles",
    ]


def test_cli_summary_complaints(data_dir, capsys):
    """Test complaint totals with guessed types."""
    code = main(["--source", str(data_dir), "--as-of", "2024-03-10", "summary", "complaints"])

    assert code == 0
    lines = [line.split() for line in capsys.readouterr().out.splitlines()]
    assert ["open", "1"] in lines
    assert ["escalated", "1"] in lines
    assert ["SAFETY", "1"] in lines
