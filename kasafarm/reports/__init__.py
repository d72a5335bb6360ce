"""Derived views over the record cache: totals and CSV export."""

from kasafarm.reports.csv_export import (
    EXPORT_HEADERS,
    CsvExport,
    build_export,
    export_filename,
    record_to_row,
    to_delimited_text,
)
from kasafarm.reports.totals import (
    RecordSummary,
    category_totals,
    net_profit,
    summarize,
)

__all__ = [
    # Export
    "EXPORT_HEADERS",
    "CsvExport",
    "build_export",
    "export_filename",
    "record_to_row",
    "to_delimited_text",
    # Totals
    "RecordSummary",
    "category_totals",
    "net_profit",
    "summarize",
]
