"""
File-backed record source.

Reads collection snapshots from a data directory:
- <collection>.json - array of objects (or {"data": [...]} envelope)
- <collection>.csv  - one record per row (pandas)
- <collection>.xlsx - first sheet, one record per row (pandas + openpyxl)

Tabular cells holding a JSON array or object (e.g. supplierPrices) are
decoded so nested lists survive a CSV/Excel round trip.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from config.constants import ERROR_MESSAGES, RECORD_FILE_EXTENSIONS
from config.paths import find_record_file
from domain.exceptions import NotFoundError, RecordSourceError
from .interface import RecordSourceInterface

logger = logging.getLogger(__name__)


class FileRecordSource(RecordSourceInterface):
    """
    Record source reading snapshot files from a directory.

    Example:
        >>> source = FileRecordSource("./data")
        >>> materials = source.fetch("materials")
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        logger.info(f"File record source: {self.data_dir}")

    def list_collections(self) -> List[str]:
        if not self.data_dir.is_dir():
            return []
        return sorted({
            path.stem
            for path in self.data_dir.iterdir()
            if path.is_file() and path.suffix.lower() in RECORD_FILE_EXTENSIONS
        })

    def fetch(self, collection: str) -> List[Dict[str, Any]]:
        path = find_record_file(self.data_dir, collection)
        if path is None:
            raise NotFoundError(
                ERROR_MESSAGES["file_not_found"].format(path=self.data_dir / collection),
                details={"collection": collection, "data_dir": str(self.data_dir)},
            )

        records = read_records(path)
        logger.info(f"Fetched {len(records)} {collection} records from {path.name}")
        return records


# ==================== File Readers ====================


def read_records(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read records from a snapshot file.

    Args:
        path: Path to .json, .csv, .xlsx or .xls file

    Returns:
        List of record dicts

    Raises:
        RecordSourceError: If the file is unsupported, unreadable or malformed
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _read_json(path)
    if suffix == ".csv":
        return _read_tabular(path, lambda: pd.read_csv(path, dtype=object, keep_default_na=True))
    if suffix in (".xlsx", ".xls"):
        return _read_tabular(path, lambda: pd.read_excel(path, sheet_name=0))

    raise RecordSourceError(
        ERROR_MESSAGES["unsupported_format"].format(path=path),
        details={"path": str(path), "allowed": RECORD_FILE_EXTENSIONS},
    )


def _read_json(path: Path) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        logger.exception(f"Failed to read {path}")
        raise RecordSourceError(
            f"Could not read record file: {e}",
            details={"path": str(path), "error": str(e)},
        )

    # Remote read endpoints wrap the list as {"data": [...]}
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]

    if not isinstance(payload, list):
        raise RecordSourceError(
            ERROR_MESSAGES["invalid_records"].format(path=path),
            details={"path": str(path), "type": type(payload).__name__},
        )

    skipped = sum(1 for item in payload if not isinstance(item, dict))
    if skipped:
        logger.warning(f"Skipped {skipped} non-object entries in {path.name}")
    return [item for item in payload if isinstance(item, dict)]


def _read_tabular(path: Path, reader) -> List[Dict[str, Any]]:
    try:
        df = reader()
    except Exception as e:
        logger.exception(f"Failed to read {path}")
        raise RecordSourceError(
            f"Could not read record file: {e}",
            details={"path": str(path), "error": str(e)},
        )

    df = _clean_dataframe(df)
    records = [
        {str(key): _decode_cell(value) for key, value in row.items()}
        for row in df.to_dict(orient="records")
    ]
    logger.debug(f"Read {len(records)} rows from {path.name}")
    return records


def _clean_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean DataFrame by removing empty rows and standardizing values.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame (object dtype, NaN replaced with None)
    """
    # Remove completely empty rows
    df = df.dropna(how="all")

    # Strip whitespace from column names
    df.columns = [str(col).strip() for col in df.columns]

    # Replace NaN with None for better handling
    df = df.astype(object).where(pd.notnull(df), None)

    return df


def _decode_cell(value: Any) -> Any:
    """Strip strings and decode JSON arrays/objects embedded in a cell."""
    if not isinstance(value, str):
        return value

    text = value.strip()
    if text[:1] in ("[", "{"):
        try:
            return json.loads(text)
        except ValueError:
            logger.debug(f"Cell looks like JSON but is not: {text[:40]!r}")
    return text
