"""
Data layer for Worksite Reports.

This module provides record access through the RecordSourceInterface abstraction.
Use create_record_source() factory function to get a record source instance.
"""

from pathlib import Path
from typing import Any, Iterable, Literal, Mapping, Optional, Union

from .interface import RecordSourceInterface
from .file_source import FileRecordSource, read_records
from .memory_source import InMemoryRecordSource


def create_record_source(
    backend: Literal["file", "memory"] = "file",
    path: Union[str, Path] = "./data",
    collections: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None,
) -> RecordSourceInterface:
    """
    Factory function to create record source instance.

    Args:
        backend: Record source backend to use ("file" or "memory")
        path: Data directory (for file backend)
        collections: Initial collections (for memory backend)

    Returns:
        RecordSourceInterface implementation

    Example:
        >>> source = create_record_source("file", "./data")
        >>> materials = source.fetch("materials")
    """
    if backend == "file":
        return FileRecordSource(path)
    elif backend == "memory":
        return InMemoryRecordSource(collections)
    else:
        raise ValueError(f"Unknown record source backend: {backend}")


__all__ = [
    "RecordSourceInterface",
    "FileRecordSource",
    "InMemoryRecordSource",
    "create_record_source",
    "read_records",
]
