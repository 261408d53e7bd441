"""
Report Operations for Worksite Reports.

Render a view (filtered/sorted records) into export artifacts:
- CSV text (CRLF line endings, quoting only where needed)
- Printable standalone HTML document

Both are driven by per-domain column descriptor lists and are pure:
the same records, columns and timestamp always give the same output.
"""

import html
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from config.constants import (
    CSV_LINE_TERMINATOR,
    DEFAULT_OFFER_UNIT,
    EMPTY_REPORT_TEXT,
    MAX_OFFERS_IN_CELL,
    SUCCESS_MESSAGES,
)
from config.styles import PRINT_CSS
from domain.exceptions import NotFoundError
from domain.models import Cell, Column, ColumnKind
from domain.rules import (
    complaint_type,
    effective_inspection_status,
    effective_rental_status,
    gap_tone,
    inspection_outcome,
    inspection_result,
    inspection_score,
    is_low_stock,
    stock_status,
    timeline_totals,
    to_date,
    to_number,
)
from domain.schemas import COMPLAINT_SCHEMA, USER_SCHEMA

logger = logging.getLogger(__name__)

K = ColumnKind


# ==================== Value Formatting ====================


def format_number(value: Any) -> str:
    """
    Format a number as a plain decimal (never scientific notation).

    Integral values print without a fraction.

    Examples:
        5.0 -> "5"
        0.1 -> "0.1"
        1e-7 -> "0.0000001"
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)

    number = to_number(value)
    if number is None:
        return "" if value is None else str(value)
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


def format_money(value: Any) -> str:
    """Format a money value with exactly 2 decimals ("" when missing)."""
    number = to_number(value)
    if number is None:
        return "" if value is None else str(value)
    return f"{number:.2f}"


def format_date(value: Any) -> str:
    """Format a date value as ISO YYYY-MM-DD (UTC)."""
    parsed = to_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%Y-%m-%d")


def format_datetime(value: Any) -> str:
    """Format a date value as YYYY-MM-DD HH:MM (UTC)."""
    parsed = to_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%Y-%m-%d %H:%M")


def format_value(value: Any, kind: ColumnKind) -> str:
    """
    Format a cell value according to its column kind.

    Args:
        value: Raw or derived cell value
        kind: Column kind

    Returns:
        Display text ("" for None)
    """
    if value is None:
        return ""

    if kind in (K.MONEY, K.GAP):
        return format_money(value)
    if kind == K.NUMBER:
        return format_number(value)
    if kind == K.DATE:
        return format_date(value)

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (datetime, date)):
        return format_date(value)
    if isinstance(value, (list, tuple)):
        return "; ".join(format_value(item, K.TEXT) for item in value)
    return str(value)


# ==================== CSV ====================


def csv_escape(text: str) -> str:
    """
    Quote a CSV field if it contains a comma, double quote, CR or LF.

    Inner double quotes are doubled.
    """
    if any(ch in text for ch in (",", '"', "\r", "\n")):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(records: Sequence[Mapping[str, Any]], columns: Sequence[Column]) -> str:
    """
    Render records as CSV text.

    Header line of column labels, one line per record, lines joined
    with CRLF (no trailing line break). Empty input gives the header only.

    Args:
        records: View to export
        columns: Column descriptors

    Returns:
        CSV string

    Example:
        >>> to_csv([{"name": "Cement, grey"}], [Column("name", "Name")])
        'Name\\r\\n"Cement, grey"'
    """
    lines = [",".join(csv_escape(column.label) for column in columns)]
    for record in records:
        lines.append(",".join(
            csv_escape(format_value(column.extract(record), column.kind))
            for column in columns
        ))

    logger.debug(f"CSV rendered: {len(records)} rows, {len(columns)} columns")
    return CSV_LINE_TERMINATOR.join(lines)


# ==================== Print Document ====================


def cell_tone(column: Column, value: Any) -> Optional[str]:
    """
    Presentation tone for a cell.

    GAP columns: "saving" (negative), "premium" (positive), None (zero/absent).
    STATUS columns: "low" / "ok" for stock status labels.
    """
    if column.kind == K.GAP:
        return gap_tone(value)
    if column.kind == K.STATUS and isinstance(value, str) and value.lower() in ("low", "ok"):
        return value.lower()
    return None


def render_cells(record: Mapping[str, Any], columns: Sequence[Column]) -> List[Cell]:
    """Render one record into display cells (text, tone, align)."""
    cells = []
    for column in columns:
        value = column.extract(record)
        cells.append(Cell(
            text=format_value(value, column.kind) or column.placeholder,
            tone=cell_tone(column, value),
            align=column.align,
        ))
    return cells


def _cell_class(tone: Optional[str], align: str) -> str:
    classes = []
    if align == "right":
        classes.append("align-right")
    if tone:
        classes.append(f"tone-{tone}")
    return f' class="{" ".join(classes)}"' if classes else ""


def _build_header(title: str, generated_at: datetime) -> str:
    return "\n".join([
        '<header class="page-header">',
        f'<h1 class="page-header__title">{html.escape(title)}</h1>',
        f'<div class="page-header__meta">Generated: {generated_at.strftime("%Y-%m-%d %H:%M")}</div>',
        "</header>",
    ])


def _build_table(records: Sequence[Mapping[str, Any]], columns: Sequence[Column]) -> str:
    rows = []
    rows.append("<table class='base-table data-table'>")
    rows.append("<thead>")
    rows.append("<tr>")
    for column in columns:
        rows.append(f"<th{_cell_class(None, column.align)}>{html.escape(column.label)}</th>")
    rows.append("</tr>")
    rows.append("</thead>")
    rows.append("<tbody>")

    if not records:
        rows.append(f'<tr><td class="empty-row" colspan="{max(len(columns), 1)}">{EMPTY_REPORT_TEXT}</td></tr>')

    for record in records:
        rows.append("<tr>")
        for cell in render_cells(record, columns):
            rows.append(f"<td{_cell_class(cell.tone, cell.align)}>{html.escape(cell.text)}</td>")
        rows.append("</tr>")

    rows.append("</tbody>")
    rows.append("</table>")

    return "\n".join(rows)


def to_print_document(
    records: Sequence[Mapping[str, Any]],
    columns: Sequence[Column],
    title: str,
    generated_at: Optional[datetime] = None,
    auto_print: bool = True,
) -> str:
    """
    Render records as a standalone printable HTML document.

    Args:
        records: View to export
        columns: Column descriptors
        title: Report title
        generated_at: Timestamp shown in the header (default: now)
        auto_print: Trigger the print dialog when the page loads

    Returns:
        HTML string

    Example:
        >>> doc = to_print_document(rows, COST_COLUMNS, "Cost-per-Unit Analysis")
    """
    if generated_at is None:
        generated_at = datetime.now()

    html_parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        "<meta charset='UTF-8'>",
        f"<title>{html.escape(title)}</title>",
        PRINT_CSS,
        "</head>",
        "<body>",
        _build_header(title, generated_at),
        _build_table(records, columns),
    ]
    if auto_print:
        html_parts.append("<script>window.onload = () => window.print();</script>")
    html_parts.extend(["</body>", "</html>"])

    logger.debug(f"Print document rendered: {title} ({len(records)} rows)")
    return "\n".join(html_parts)


# ==================== Column Sets ====================


def supplier_offers_text(supplier: Mapping[str, Any]) -> str:
    """
    Summarize up to 3 supplier offers as "name | price / unit; ...".

    Unit defaults to kg.
    """
    offers = supplier.get("materialsOffered") or []
    if not isinstance(offers, (list, tuple)):
        return ""

    parts = []
    for offer in [o for o in offers if isinstance(o, Mapping)][:MAX_OFFERS_IN_CELL]:
        name = format_value(offer.get("materialName"), K.TEXT)
        price = format_number(offer.get("pricePerUnit"))
        unit = offer.get("unit") or DEFAULT_OFFER_UNIT
        parts.append(f"{name} | {price} / {unit}")
    return "; ".join(parts)


def _labor_count(name: str) -> Callable[[Mapping[str, Any]], int]:
    def count(entry):
        items = entry.get(name)
        return len(items) if isinstance(items, (list, tuple)) else 0
    return count


MATERIAL_COLUMNS = (
    Column("name", "Name"),
    Column("category", "Category"),
    Column("unit", "Unit"),
    Column("quantity", "Qty", K.NUMBER, align="right"),
    Column("minStock", "Min", K.NUMBER, align="right"),
    Column("stockStatus", "Status", K.STATUS, value=stock_status),
    Column("avgUnitCost", "Avg Cost", K.MONEY, align="right"),
    Column("lastUnitCost", "Last Cost", K.MONEY, align="right"),
)

COST_COLUMNS = (
    Column("name", "Material"),
    Column("unit", "Unit"),
    Column("quantity", "Qty", K.NUMBER, align="right"),
    Column("minStock", "Min", K.NUMBER, align="right"),
    Column("stockStatus", "Status", K.STATUS, value=lambda r: "Low" if r.get("lowStock") else "OK"),
    Column("avgUnitCost", "Avg Cost", K.MONEY, align="right"),
    Column("lastUnitCost", "Last Cost", K.MONEY, align="right"),
    Column("bestSupplierName", "Best Supplier", value=lambda r: r.get("bestSupplierName") or "-"),
    Column("bestSupplierPrice", "Best Price", K.MONEY, align="right", placeholder="-"),
    Column("gap", "Gap (Best vs Avg)", K.GAP, align="right"),
)

SUPPLIER_COLUMNS = (
    Column("name", "Name"),
    Column("email", "Email"),
    Column("phone", "Phone"),
    Column("address", "Address"),
    Column("rating", "Rating", K.NUMBER, align="right"),
    Column("materialsOffered", "Offers (name|price/unit; up to 3)", value=supplier_offers_text),
)

TOOL_COLUMNS = (
    Column("model", "Model"),
    Column("serial", "Serial"),
    Column("purchaseDate", "Purchase Date", K.DATE),
    Column("status", "Status", value=lambda t: t.get("status") or "available"),
    Column("price", "Price", K.MONEY, align="right"),
    Column("usageHours", "Usage Hours", K.NUMBER, align="right"),
    Column("depreciationRate", "Depreciation Rate", K.NUMBER, align="right"),
)

USER_COLUMNS = (
    Column("name", "Name"),
    Column("email", "Email"),
    Column("employeeId", "Employee ID"),
    Column("department", "Department", value=lambda u: USER_SCHEMA.value(u, "department")),
    Column("status", "Status", value=lambda u: USER_SCHEMA.value(u, "status")),
    Column("age", "Age", K.NUMBER, align="right"),
    Column("ageGroup", "Age Group", value=lambda u: USER_SCHEMA.value(u, "ageGroup")),
    Column("createdAt", "Joined", K.DATE),
)

PROJECT_REQUEST_COLUMNS = (
    Column("preqname", "Name"),
    Column("preqmail", "Email"),
    Column("preqnumber", "Phone"),
    Column("preqdescription", "Description"),
    Column("preqdate", "Date", K.DATE),
)

PROJECT_COLUMNS = (
    Column("pcode", "Project Code"),
    Column("pname", "Project Name"),
    Column("pownername", "Owner"),
    Column("plocation", "Location"),
    Column("pbudget", "Budget", K.MONEY, align="right"),
    Column("pstatus", "Status"),
    Column("penddate", "End Date", K.DATE),
)

TIMELINE_COLUMNS = (
    Column("date", "Date", K.DATE),
    Column("pcode", "Project Code"),
    Column("tworker", "Workers", K.NUMBER, value=_labor_count("tworker"), align="right"),
    Column("tengineer", "Engineers", K.NUMBER, value=_labor_count("tengineer"), align="right"),
    Column("tarchitect", "Architects", K.NUMBER, value=_labor_count("tarchitect"), align="right"),
    Column("totalHours", "Total Hours", K.NUMBER, value=lambda e: timeline_totals(e)["hours"], align="right"),
    Column("totalCost", "Total Cost", K.MONEY, value=lambda e: timeline_totals(e)["cost"], align="right"),
    Column("tnotes", "Notes"),
)

FINANCIAL_COLUMNS = (
    Column("projectCode", "Project Code"),
    Column("projectName", "Project Name"),
    Column("projectType", "Type"),
    Column("projectPriority", "Priority"),
    Column("timelineEntries", "Entries", K.NUMBER, align="right"),
    Column("laborHours", "Labor Hours", K.NUMBER, align="right"),
    Column("laborCost", "Labor", K.MONEY, align="right"),
    Column("materialCost", "Materials", K.MONEY, align="right"),
    Column("toolCost", "Tools", K.MONEY, align="right"),
    Column("expenses", "Expenses", K.MONEY, align="right"),
    Column("baseCost", "Base Cost", K.MONEY, align="right"),
    Column("totalCost", "Total Cost", K.MONEY, align="right"),
)

COMPLAINT_COLUMNS = (
    Column("ticket", "Ticket"),
    Column("area", "Area"),
    Column("type", "Type", value=complaint_type),
    Column("status", "Status", value=lambda c: COMPLAINT_SCHEMA.value(c, "status")),
    Column("assignee", "Assignee", value=lambda c: COMPLAINT_SCHEMA.value(c, "assignee")),
    Column("description", "Description"),
)


def inspection_columns(as_of: datetime) -> tuple:
    """Inspection columns; Status shows OVERDUE for late upcoming inspections."""
    return (
        Column("project", "Project"),
        Column("area", "Area"),
        Column("inspector", "Inspector"),
        Column("dueAt", "Due At", value=lambda i: format_datetime(i.get("dueAt"))),
        Column("status", "Status", value=lambda i: effective_inspection_status(i, as_of)),
        Column("outcome", "Outcome", value=lambda i: inspection_outcome(i) or ""),
        Column("score", "Score", K.NUMBER, value=inspection_score, align="right"),
        Column("notes", "Notes", value=lambda i: (inspection_result(i) or {}).get("notes")),
    )


def rental_columns(as_of: datetime) -> tuple:
    """Rental columns; Status shows overdue for late active rentals."""
    return (
        Column("toolId", "Tool"),
        Column("userId", "User"),
        Column("rentalStartDate", "Start", K.DATE),
        Column("rentalEndDate", "End", K.DATE),
        Column("actualReturnDate", "Returned", K.DATE),
        Column("status", "Status", value=lambda r: effective_rental_status(r, as_of)),
        Column("totalPrice", "Total Price", K.MONEY, align="right"),
    )


COLUMN_SETS: Dict[str, Sequence[Column]] = {
    "materials": MATERIAL_COLUMNS,
    "cost_per_unit": COST_COLUMNS,
    "suppliers": SUPPLIER_COLUMNS,
    "tools": TOOL_COLUMNS,
    "users": USER_COLUMNS,
    "project_requests": PROJECT_REQUEST_COLUMNS,
    "projects": PROJECT_COLUMNS,
    "timelines": TIMELINE_COLUMNS,
    "financials": FINANCIAL_COLUMNS,
    "complaints": COMPLAINT_COLUMNS,
}

# Column sets whose status cells depend on the reference date
DATED_COLUMN_SETS: Dict[str, Callable[[datetime], Sequence[Column]]] = {
    "rentals": rental_columns,
    "inspections": inspection_columns,
}

REPORT_TITLES = {
    "materials": "Materials Report",
    "cost_per_unit": "Cost-per-Unit Analysis",
    "suppliers": "Suppliers Report",
    "tools": "Tools Report",
    "rentals": "Rentals Report",
    "users": "Users Report",
    "project_requests": "Project Requests Report",
    "projects": "Projects Report",
    "timelines": "Project Timelines Report",
    "financials": "Financial Dashboard Report",
    "inspections": "Inspection Report",
    "complaints": "Complaints Report",
}


def get_columns(domain: str, as_of: Optional[datetime] = None) -> Sequence[Column]:
    """
    Get export columns for a domain.

    Raises:
        NotFoundError: If domain has no column set
    """
    if domain in DATED_COLUMN_SETS:
        return DATED_COLUMN_SETS[domain](as_of or datetime.now().astimezone())
    if domain not in COLUMN_SETS:
        raise NotFoundError(
            f"No report columns for: {domain}",
            details={"allowed": sorted(list(COLUMN_SETS) + list(DATED_COLUMN_SETS))},
        )
    return COLUMN_SETS[domain]


def get_report_title(domain: str, scope: str = "") -> str:
    """Get report title, e.g. "Materials Report (low stock)"."""
    title = REPORT_TITLES.get(domain, domain.replace("_", " ").title() + " Report")
    if scope == "low":
        return f"{title} (low stock)"
    if scope == "overdue":
        return f"{title} (overdue)"
    if scope == "failed":
        return f"{title} (failed)"
    return title


# ==================== Scopes & Filenames ====================


SCOPES = {
    "materials": ("all", "low"),
    "cost_per_unit": ("all", "low"),
    "rentals": ("all", "overdue"),
    "inspections": ("all", "overdue", "failed"),
}


def apply_scope(
    records: Sequence[Mapping[str, Any]],
    domain: str,
    scope: str,
    as_of: Optional[datetime] = None,
) -> List[Mapping[str, Any]]:
    """
    Narrow an export to a named scope.

    - "all" (or empty): every record
    - "low": materials below minimum stock
    - "overdue": rentals past their end date, inspections past their due date
    - "failed": inspections with a FAIL outcome

    Raises:
        ValueError: If the scope is not available for the domain
    """
    if not scope or scope == "all":
        return list(records)

    if scope not in SCOPES.get(domain, ()):
        raise ValueError(f"Scope '{scope}' is not available for {domain}")

    if scope == "low":
        if domain == "cost_per_unit":
            return [r for r in records if r.get("lowStock")]
        return [r for r in records if is_low_stock(r)]

    if scope == "failed":
        return [r for r in records if inspection_outcome(r) == "FAIL"]

    as_of = as_of or datetime.now().astimezone()
    if domain == "inspections":
        return [r for r in records if effective_inspection_status(r, as_of) == "OVERDUE"]
    return [r for r in records if effective_rental_status(r, as_of) == "overdue"]


def build_export_filename(domain: str, scope: str, as_of: Any, extension: str) -> str:
    """
    Build export filename: <domain>_<scope>_report_<YYYY-MM-DD>.<ext>.

    The scope segment is omitted when empty.

    Examples:
        ("materials", "low", date(2024, 3, 5), "csv") -> "materials_low_report_2024-03-05.csv"
        ("suppliers", "", date(2024, 3, 5), "csv") -> "suppliers_report_2024-03-05.csv"
    """
    day = format_date(as_of) or "undated"
    parts = [domain]
    if scope:
        parts.append(scope)
    parts.extend(["report", day])
    return "_".join(parts) + "." + extension.lstrip(".")


# ==================== Summary Functions ====================


def get_report_summary(
    records: Sequence[Mapping[str, Any]],
    view: Sequence[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Get export summary statistics.

    Args:
        records: Full Record Store snapshot
        view: Exported rows

    Returns:
        Dict with summary statistics

    Example:
        >>> summary = get_report_summary(materials, low_stock)
        >>> print(summary["message"])
        Downloaded 3 rows.
    """
    return {
        "total_count": len(records),
        "row_count": len(view),
        "hidden_count": max(len(records) - len(view), 0),
        "message": SUCCESS_MESSAGES["csv_exported_detail"].format(count=len(view)),
    }
