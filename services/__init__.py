"""
Services layer for Worksite Reports.

Infrastructure services that write what the operations layer renders.
"""

from .pdf_service import PDFService, create_pdf_service
from .export_service import ExportService, ExportResult, create_export_service

__all__ = [
    # PDF Service
    "PDFService",
    "create_pdf_service",
    # Export Service
    "ExportService",
    "ExportResult",
    "create_export_service",
]
