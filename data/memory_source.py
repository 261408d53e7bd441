"""
In-memory record source.

Holds collections in a dict. Used by tests and by callers that already
have records at hand (e.g. a response body from the remote service).
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domain.exceptions import NotFoundError
from .interface import RecordSourceInterface

logger = logging.getLogger(__name__)


class InMemoryRecordSource(RecordSourceInterface):
    """
    Record source backed by a dict of collection -> records.

    Every fetch returns a deep copy, so a caller mutating its snapshot
    never affects later fetches.
    """

    def __init__(self, collections: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None):
        self._collections: Dict[str, List[Dict[str, Any]]] = {}
        for name, records in (collections or {}).items():
            self.replace(name, records)

    def replace(self, collection: str, records: Iterable[Mapping[str, Any]]) -> None:
        """Replace a collection with new records."""
        self._collections[collection] = [dict(record) for record in records]
        logger.debug(f"Stored {len(self._collections[collection])} {collection} records")

    def list_collections(self) -> List[str]:
        return sorted(self._collections)

    def fetch(self, collection: str) -> List[Dict[str, Any]]:
        if collection not in self._collections:
            raise NotFoundError(
                f"Unknown collection: {collection}",
                details={"allowed": self.list_collections()},
            )
        return copy.deepcopy(self._collections[collection])
