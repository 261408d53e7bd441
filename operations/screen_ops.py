"""
Screen Operations for Worksite Reports.

Per-screen state (Record Store snapshot, current ViewSpec, pending export,
loading flag, notifications) with pure transitions.

Fetching is two-phase and last-request-wins: begin_fetch() issues a
request id, and a result or failure carrying an older id is ignored.
Errors never touch the records or the view spec; they only add a
notification.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from config.constants import (
    ERROR_MESSAGES,
    NOTIFICATION_TTL_DEFAULT,
    NOTIFICATION_TTL_ERROR,
    SUCCESS_MESSAGES,
)
from domain.exceptions import ConflictError, RemoteServiceError, ValidationError
from domain.models import DomainSchema, Notification, ViewSpec
from .view_ops import toggle_sort, view

logger = logging.getLogger(__name__)


# ==================== Notifications ====================


def notification_ok(title: str, description: str = "") -> Notification:
    """Success notification (4.2 s)."""
    return Notification("ok", title, description, NOTIFICATION_TTL_DEFAULT)


def notification_info(title: str, description: str = "") -> Notification:
    """Informational notification (4.2 s)."""
    return Notification("info", title, description, NOTIFICATION_TTL_DEFAULT)


def notification_for_error(error: BaseException, title: str = "Request failed") -> Notification:
    """
    Build an error notification (6.5 s) for a failed operation.

    - ValidationError: "Fix form errors" with every message
    - ConflictError: the remote message, or a generic conflict message
    - RemoteServiceError: the remote message, or a generic message
    - anything else: str(error), or a generic message

    Example:
        >>> notification_for_error(RemoteServiceError("Material not found"), "Update failed")
        Notification(tone='err', title='Update failed', description='Material not found', ttl_seconds=6.5)
    """
    if isinstance(error, ValidationError):
        return Notification("err", "Fix form errors", " ".join(error.errors), NOTIFICATION_TTL_ERROR)

    if isinstance(error, ConflictError):
        description = error.message or ERROR_MESSAGES["conflict"]
    elif isinstance(error, RemoteServiceError):
        description = error.message or ERROR_MESSAGES["remote_error"]
    else:
        description = str(error) or ERROR_MESSAGES["remote_error"]

    return Notification("err", title, description, NOTIFICATION_TTL_ERROR)


# ==================== Screen State ====================


@dataclass(frozen=True)
class ScreenState:
    """
    State of one reporting screen.

    Immutable - every transition returns a new instance.

    Example:
        >>> state = ScreenState(kind="materials")
        >>> state, request_id = state.begin_fetch()
        >>> state = state.receive_records(request_id, source.fetch("materials"))
        >>> rows = state.visible_records(MATERIAL_SCHEMA)
    """

    kind: str
    records: Tuple[Mapping[str, Any], ...] = ()
    view_spec: ViewSpec = field(default_factory=ViewSpec)
    pending_export: Optional[str] = None
    request_id: int = 0
    loading: bool = False
    notifications: Tuple[Notification, ...] = ()

    # ---------- Fetch ----------

    def begin_fetch(self) -> Tuple["ScreenState", int]:
        """
        Start a fetch, superseding any fetch still in flight.

        Returns:
            (new state, request id to pass back with the result)
        """
        request_id = self.request_id + 1
        return replace(self, request_id=request_id, loading=True), request_id

    def is_current(self, request_id: int) -> bool:
        return request_id == self.request_id

    def receive_records(self, request_id: int, records: Iterable[Mapping[str, Any]]) -> "ScreenState":
        """
        Replace the Record Store with a fetch result.

        A result for a superseded request is ignored.
        """
        if not self.is_current(request_id):
            logger.debug(f"Ignoring stale {self.kind} result (request {request_id}, current {self.request_id})")
            return self

        snapshot = tuple(records)
        logger.info(f"Loaded {len(snapshot)} {self.kind} records")
        return replace(self, records=snapshot, loading=False)

    def fetch_failed(self, request_id: int, error: BaseException) -> "ScreenState":
        """
        Record a failed fetch.

        Records and view spec are kept; only a notification is added.
        A failure for a superseded request is ignored.
        """
        if not self.is_current(request_id):
            logger.debug(f"Ignoring stale {self.kind} failure (request {request_id})")
            return self

        logger.warning(f"Fetching {self.kind} failed: {error}")
        return replace(
            self,
            loading=False,
            notifications=self.notifications + (notification_for_error(error, "Failed to load"),),
        )

    # ---------- View ----------

    def with_view_spec(self, spec: ViewSpec) -> "ScreenState":
        return replace(self, view_spec=spec)

    def with_query(self, query: str) -> "ScreenState":
        return replace(self, view_spec=replace(self.view_spec, query=query))

    def with_filter(self, field_name: str, value: Any) -> "ScreenState":
        filters = dict(self.view_spec.filters)
        filters[field_name] = value
        return replace(self, view_spec=replace(self.view_spec, filters=filters))

    def toggle_sort(self, field_name: str) -> "ScreenState":
        return replace(self, view_spec=toggle_sort(self.view_spec, field_name))

    def clear_filters(self) -> "ScreenState":
        """Reset query, filters and ranges (sort is kept)."""
        return replace(
            self,
            view_spec=ViewSpec(
                sort_field=self.view_spec.sort_field,
                sort_direction=self.view_spec.sort_direction,
            ),
        )

    def visible_records(self, schema: DomainSchema) -> List[Mapping[str, Any]]:
        """Current view of the Record Store."""
        return view(self.records, self.view_spec, schema)

    # ---------- Export ----------

    def request_export(self, export_format: str) -> "ScreenState":
        return replace(self, pending_export=export_format)

    def export_completed(self, row_count: int, filename: str = "") -> "ScreenState":
        """Clear the pending export and announce it."""
        if self.pending_export == "csv":
            note = notification_ok(
                SUCCESS_MESSAGES["csv_exported"],
                SUCCESS_MESSAGES["csv_exported_detail"].format(count=row_count),
            )
        elif self.pending_export == "pdf":
            note = notification_ok(
                SUCCESS_MESSAGES["pdf_exported"],
                SUCCESS_MESSAGES["pdf_exported_detail"].format(count=row_count, filename=filename),
            )
        else:
            note = notification_ok(
                SUCCESS_MESSAGES["print_ready"],
                SUCCESS_MESSAGES["print_ready_detail"].format(count=row_count),
            )
        return replace(self, pending_export=None, notifications=self.notifications + (note,))

    def export_failed(self, error: BaseException) -> "ScreenState":
        return replace(
            self,
            pending_export=None,
            notifications=self.notifications + (notification_for_error(error, "Export failed"),),
        )

    # ---------- Notifications ----------

    def notify(self, notification: Notification) -> "ScreenState":
        return replace(self, notifications=self.notifications + (notification,))

    def dismiss(self, notification: Notification) -> "ScreenState":
        """Remove the first occurrence of a notification (after its ttl or on click)."""
        remaining = list(self.notifications)
        if notification in remaining:
            remaining.remove(notification)
        return replace(self, notifications=tuple(remaining))
