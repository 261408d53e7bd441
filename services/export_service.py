"""
Export Service for Worksite Reports.

Writes report artifacts (CSV, print HTML, PDF) for a view to the
reports directory. Rendering itself is done by operations.report_ops;
this service only names and writes files.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from config.constants import ERROR_MESSAGES, EXPORT_EXTENSIONS, EXPORT_FORMATS
from config.paths import get_report_path
from domain.exceptions import ExportError
from operations.report_ops import (
    SCOPES,
    apply_scope,
    build_export_filename,
    get_columns,
    get_report_summary,
    get_report_title,
    to_csv,
    to_print_document,
)
from services.pdf_service import PDFService

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of one export."""

    path: Path
    export_format: str
    row_count: int
    summary: Dict[str, Any] = field(default_factory=dict)


class ExportService:
    """
    Service for writing report artifacts.

    Handles:
    - Scope narrowing (all / low stock / overdue)
    - Filename building (<domain>_<scope>_report_<date>.<ext>)
    - UTF-8 writing without BOM, CRLF preserved
    - Optional PDF rendering through PDFService
    """

    def __init__(self, output_dir: Path, pdf_service: Optional[PDFService] = None):
        """
        Initialize export service.

        Args:
            output_dir: Directory for exported reports
            pdf_service: PDF service (required only for pdf exports)
        """
        self.output_dir = Path(output_dir)
        self.pdf_service = pdf_service

    def write_text(self, content: str, filename: str) -> Path:
        """
        Write a text artifact.

        Args:
            content: CSV or HTML text
            filename: Target filename (sanitized)

        Returns:
            Path to written file

        Raises:
            ExportError: If the file cannot be written
        """
        try:
            path = get_report_path(self.output_dir, filename)
            # newline="" keeps the CRLF record delimiters untouched
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            logger.exception(f"Failed to write {filename}")
            raise ExportError(
                ERROR_MESSAGES["export_failed"].format(error=e),
                details={"filename": filename, "output_dir": str(self.output_dir), "error": str(e)},
            )

        logger.info(f"Wrote {path} ({len(content)} chars)")
        return path

    def export(
        self,
        records: Sequence[Mapping[str, Any]],
        domain: str,
        export_format: str = "csv",
        scope: str = "all",
        as_of: Optional[datetime] = None,
        generated_at: Optional[datetime] = None,
    ) -> ExportResult:
        """
        Export a view.

        Args:
            records: Filtered/sorted view to export
            domain: Report domain (e.g., "materials", "cost_per_unit")
            export_format: "csv", "print" or "pdf"
            scope: Export scope ("all", "low", "overdue", "failed")
            as_of: Reference date for filename and overdue rule (default: now)
            generated_at: Timestamp shown in print header (default: as_of)

        Returns:
            ExportResult with path and row count

        Raises:
            ExportError: If the format is unknown or writing fails
            ValueError: If the scope is not available for the domain

        Example:
            >>> service = ExportService(Path("./reports"))
            >>> result = service.export(materials, "materials", "csv", scope="low")
            >>> result.path.name
            'materials_low_report_2024-03-05.csv'
        """
        if export_format not in EXPORT_FORMATS:
            raise ExportError(
                f"Unknown export format: {export_format}",
                details={"allowed": EXPORT_FORMATS},
            )

        if as_of is None:
            as_of = datetime.now(timezone.utc)
        if generated_at is None:
            generated_at = as_of

        rows = apply_scope(records, domain, scope, as_of)
        columns = get_columns(domain, as_of)
        # Domains with selectable scopes always name the scope
        scope_segment = (scope or "all") if domain in SCOPES else ""
        filename = build_export_filename(domain, scope_segment, as_of, EXPORT_EXTENSIONS[export_format])

        if export_format == "csv":
            path = self.write_text(to_csv(rows, columns), filename)
        elif export_format == "print":
            document = to_print_document(rows, columns, get_report_title(domain, scope), generated_at)
            path = self.write_text(document, filename)
        else:
            path = self._export_pdf(rows, columns, domain, scope, generated_at, filename)

        summary = get_report_summary(records, rows)
        logger.info(f"Exported {len(rows)} {domain} rows as {export_format}: {path.name}")
        return ExportResult(path=path, export_format=export_format, row_count=len(rows), summary=summary)

    def _export_pdf(self, rows, columns, domain, scope, generated_at, filename) -> Path:
        if self.pdf_service is None:
            raise ExportError(
                "PDF export requires a PDF service",
                details={"domain": domain},
            )

        document = to_print_document(
            rows, columns, get_report_title(domain, scope), generated_at, auto_print=False
        )
        path = get_report_path(self.output_dir, filename)
        return self.pdf_service.html_to_pdf(document, path)


def create_export_service(
    output_dir: Path,
    pdf_service: Optional[PDFService] = None,
) -> ExportService:
    """
    Factory function to create ExportService.

    Example:
        >>> service = create_export_service(Path("./reports"))
    """
    return ExportService(output_dir=output_dir, pdf_service=pdf_service)
