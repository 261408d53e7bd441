"""
PDF Service for Worksite Reports.

Renders the printable report document to PDF using Playwright
(headless Chrome/Chromium).

IMPORTANT: Requires a Playwright browser. Either system Chrome
(channel "chrome") or the bundled Chromium installed with
`playwright install chromium` (channel None).
"""

import logging
from pathlib import Path
from typing import Optional

try:
    from playwright.sync_api import sync_playwright
    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False
    sync_playwright = None

from domain.exceptions import ExportError
from config.constants import (
    DEFAULT_BROWSER_CHANNEL,
    DEFAULT_PDF_PAGE_SIZE,
    ERROR_MESSAGES,
)

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


class PDFService:
    """
    Service for PDF generation using Playwright.

    The print document's auto-print script is harmless here: headless
    Chromium ignores window.print().
    """

    def __init__(
        self,
        page_size: str = DEFAULT_PDF_PAGE_SIZE,
        browser_channel: Optional[str] = DEFAULT_BROWSER_CHANNEL,
    ):
        """
        Initialize PDF service.

        Args:
            page_size: PDF page size (default: A4)
            browser_channel: Playwright channel ("chrome", "msedge") or None for bundled Chromium

        Raises:
            EnvironmentError: If Playwright is not installed
        """
        if not PLAYWRIGHT_AVAILABLE:
            raise EnvironmentError(
                "Playwright is not installed. Install with: pip install playwright"
            )

        self.page_size = page_size
        self.browser_channel = browser_channel

    def html_to_pdf(
        self,
        html_content: str,
        output_path: Path,
        page_size: Optional[str] = None,
        print_background: bool = True,
        margin: Optional[dict] = None,
    ) -> Path:
        """
        Convert HTML to PDF using Playwright.

        Args:
            html_content: HTML content as string
            output_path: Output PDF file path
            page_size: PDF page size (default: service page size)
            print_background: Include background graphics (tone colours)
            margin: Page margins dict (e.g., {"top": "1cm", "bottom": "1cm"})

        Returns:
            Path to generated PDF file

        Raises:
            ExportError: If the browser cannot start or PDF generation fails

        Example:
            >>> service = PDFService()
            >>> html = "<html><body><h1>Test</h1></body></html>"
            >>> pdf_path = service.html_to_pdf(html, Path('./output.pdf'))
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if page_size is None:
            page_size = self.page_size

        if margin is None:
            margin = {
                "top": "12mm",
                "right": "12mm",
                "bottom": "12mm",
                "left": "12mm",
            }

        try:
            with sync_playwright() as p:
                if self.browser_channel:
                    browser = p.chromium.launch(channel=self.browser_channel)
                else:
                    browser = p.chromium.launch()
                page = browser.new_page()

                # Set content
                page.set_content(html_content, wait_until='load')

                # Generate PDF
                page.pdf(
                    path=str(output_path),
                    format=page_size,
                    print_background=print_background,
                    margin=margin,
                )

                browser.close()

            logger.info(f"Generated PDF: {output_path}")
            return output_path

        except Exception as e:
            logger.exception(f"Failed to generate PDF: {e}")
            raise ExportError(
                f"PDF generation failed: {e}",
                details={
                    "output_path": str(output_path),
                    "browser_channel": self.browser_channel,
                    "hint": ERROR_MESSAGES["browser_not_found"],
                    "error": str(e),
                },
            )

    def validate_pdf(self, pdf_path: Path) -> bool:
        """
        Check that a file starts with the PDF header.

        Args:
            pdf_path: Path to PDF file

        Returns:
            True if the file exists and looks like a PDF
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.is_file():
            return False
        try:
            with open(pdf_path, "rb") as f:
                return f.read(len(PDF_MAGIC)) == PDF_MAGIC
        except OSError as e:
            logger.warning(f"Could not read {pdf_path}: {e}")
            return False


def create_pdf_service(
    page_size: str = DEFAULT_PDF_PAGE_SIZE,
    browser_channel: Optional[str] = DEFAULT_BROWSER_CHANNEL,
) -> PDFService:
    """
    Factory function to create PDFService.

    Args:
        page_size: PDF page size
        browser_channel: Playwright browser channel

    Returns:
        PDFService instance

    Example:
        >>> service = create_pdf_service(page_size='A4', browser_channel=None)
    """
    return PDFService(page_size=page_size, browser_channel=browser_channel)
