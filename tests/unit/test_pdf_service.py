"""
Unit tests for PDF Service.

Playwright is mocked; no browser is started.
"""

import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch

from domain.exceptions import ExportError
from services.pdf_service import PDFService, create_pdf_service


# ==================== Fixtures ====================


@pytest.fixture
def playwright_mocks():
    """Patch sync_playwright and return (sync_playwright, browser, page) mocks."""
    browser = MagicMock()
    page = MagicMock()
    browser.new_page.return_value = page

    with patch("services.pdf_service.PLAYWRIGHT_AVAILABLE", True), \
            patch("services.pdf_service.sync_playwright") as mock_sync:
        p = mock_sync.return_value.__enter__.return_value
        p.chromium.launch.return_value = browser
        yield mock_sync, browser, page


# ==================== Tests ====================


def test_html_to_pdf(playwright_mocks, tmp_path):
    """Test PDF generation with the configured channel and page size."""
    mock_sync, browser, page = playwright_mocks
    service = create_pdf_service(page_size="A4", browser_channel="chrome")
    output = tmp_path / "out" / "report.pdf"

    result = service.html_to_pdf("<html><body>Hi</body></html>", output)

    assert result == output
    assert output.parent.is_dir()
    p = mock_sync.return_value.__enter__.return_value
    p.chromium.launch.assert_called_once_with(channel="chrome")
    page.set_content.assert_called_once_with("<html><body>Hi</body></html>", wait_until="load")

    kwargs = page.pdf.call_args.kwargs
    assert kwargs["path"] == str(output)
    assert kwargs["format"] == "A4"
    assert kwargs["print_background"] is True
    browser.close.assert_called_once()


def test_html_to_pdf_bundled_chromium(playwright_mocks, tmp_path):
    """Test launching without a channel uses the bundled browser."""
    mock_sync, _, page = playwright_mocks
    service = PDFService(page_size="Letter", browser_channel=None)

    service.html_to_pdf("<html></html>", tmp_path / "r.pdf", margin={"top": "1cm"})

    p = mock_sync.return_value.__enter__.return_value
    p.chromium.launch.assert_called_once_with()
    assert page.pdf.call_args.kwargs["format"] == "Letter"
    assert page.pdf.call_args.kwargs["margin"] == {"top": "1cm"}


def test_html_to_pdf_failure(playwright_mocks, tmp_path):
    """Test browser errors are wrapped."""
    _, _, page = playwright_mocks
    page.pdf.side_effect = RuntimeError("Executable doesn't exist")
    service = PDFService()

    with pytest.raises(ExportError) as exc_info:
        service.html_to_pdf("<html></html>", tmp_path / "r.pdf")

    assert "Executable doesn't exist" in str(exc_info.value)


def test_playwright_missing():
    """Test service creation without Playwright."""
    with patch("services.pdf_service.PLAYWRIGHT_AVAILABLE", False):
        with pytest.raises(EnvironmentError):
            PDFService()


def test_validate_pdf(playwright_mocks, tmp_path):
    """Test PDF header check."""
    service = PDFService()
    good = tmp_path / "good.pdf"
    good.write_bytes(b"%PDF-1.7\n...")
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"<html>")

    assert service.validate_pdf(good) is True
    assert service.validate_pdf(bad) is False
    assert service.validate_pdf(tmp_path / "missing.pdf") is False
