"""
Path Configuration for Worksite Reports.

Centralized path management for record files and exported reports.
"""

from pathlib import Path
import logging
from typing import List, Optional

from domain.validators import sanitize_filename
from .constants import RECORD_FILE_EXTENSIONS

logger = logging.getLogger(__name__)


def get_record_file_candidates(data_dir: Path, collection: str) -> List[Path]:
    """
    Get candidate record files for a collection, in lookup order.

    Args:
        data_dir: Directory holding record files
        collection: Collection name (e.g., "materials")

    Returns:
        Paths like data/materials.json, data/materials.csv, data/materials.xlsx

    Example:
        >>> get_record_file_candidates(Path("data"), "users")[0]
        PosixPath('data/users.json')
    """
    return [Path(data_dir) / f"{collection}{ext}" for ext in RECORD_FILE_EXTENSIONS]


def find_record_file(data_dir: Path, collection: str) -> Optional[Path]:
    """
    Find the first existing record file for a collection.

    Returns:
        Path to record file, or None if no candidate exists
    """
    for candidate in get_record_file_candidates(data_dir, collection):
        if candidate.is_file():
            logger.debug(f"Record file for {collection}: {candidate}")
            return candidate
    return None


def get_reports_path(output_dir: Path) -> Path:
    """
    Get reports directory path.

    Returns:
        Path to reports directory (creates if doesn't exist)
    """
    reports_path = Path(output_dir)
    reports_path.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Reports path: {reports_path}")
    return reports_path


def get_report_path(output_dir: Path, filename: str) -> Path:
    """
    Get full path for an exported report file.

    Args:
        output_dir: Reports directory
        filename: Report filename (e.g., 'materials_low_report_2024-03-05.csv')

    Returns:
        Full path to report file, with the filename sanitized
    """
    return get_reports_path(output_dir) / sanitize_filename(filename)
