"""
Record Source Interface - Abstract Base Class for reading record snapshots.

This module defines the contract for all record sources in worksite-reports.
Any backend (file snapshots, in-memory fixtures, a remote service client)
must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class RecordSourceInterface(ABC):
    """
    Abstract base class for record sources.

    A record source returns a fresh snapshot of one collection per call.
    Snapshots are plain lists of dicts; callers own them and may hold them
    in a Record Store until the next reload.
    """

    # ==================== Read Operations ====================

    @abstractmethod
    def fetch(self, collection: str) -> List[Dict[str, Any]]:
        """
        Fetch a snapshot of a collection.

        Args:
            collection: Collection name (e.g., "materials", "users")

        Returns:
            List of record dicts (may be empty)

        Raises:
            NotFoundError: If the collection does not exist
            RecordSourceError: If the snapshot cannot be read or parsed
        """
        pass

    @abstractmethod
    def list_collections(self) -> List[str]:
        """
        List available collection names.

        Returns:
            Sorted list of collection names
        """
        pass

    def has_collection(self, collection: str) -> bool:
        """Check if a collection is available."""
        return collection in self.list_collections()
