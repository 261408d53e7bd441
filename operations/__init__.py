"""
Operations layer for Worksite Reports.

Business logic operations - pure functions over record snapshots.
No I/O - returns data structures and strings that services can write.
"""

from .aggregate_ops import (
    aggregate,
    build_cost_rows,
    build_financial_rows,
    compliance_daily,
    count_where,
    sum_field,
    mean_field,
    group_by,
    group_by_fixed,
    bucket_by_month,
    monthly_trend,
)

from .view_ops import (
    view,
    filter_records,
    sort_records,
    toggle_sort,
    parse_filters,
)

from .report_ops import (
    to_csv,
    to_print_document,
    cell_tone,
    render_cells,
    format_value,
    get_columns,
    get_report_title,
    apply_scope,
    build_export_filename,
    get_report_summary,
)

from .screen_ops import (
    ScreenState,
    notification_for_error,
    notification_ok,
    notification_info,
)

__all__ = [
    # Aggregate Operations
    "aggregate",
    "build_cost_rows",
    "build_financial_rows",
    "compliance_daily",
    "count_where",
    "sum_field",
    "mean_field",
    "group_by",
    "group_by_fixed",
    "bucket_by_month",
    "monthly_trend",
    # View Operations
    "view",
    "filter_records",
    "sort_records",
    "toggle_sort",
    "parse_filters",
    # Report Operations
    "to_csv",
    "to_print_document",
    "cell_tone",
    "render_cells",
    "format_value",
    "get_columns",
    "get_report_title",
    "apply_scope",
    "build_export_filename",
    "get_report_summary",
    # Screen Operations
    "ScreenState",
    "notification_for_error",
    "notification_ok",
    "notification_info",
]
