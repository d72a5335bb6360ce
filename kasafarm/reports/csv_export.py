"""
CSV Export

Turns a record list into the spreadsheet-friendly text farmers download:

    Date,Category,Subcategory,Description,Quantity,Unit,Unit Price,Total Amount,Notes

One row per record in the order given (the cache keeps newest first),
rows joined with "\\n", no trailing newline.

DESIGN DECISION: Description and notes are always wrapped in double quotes.
Embedded double quotes are doubled, and any other field containing a
comma, quote or line break is quoted too, so every export parses back
into exactly nine columns. Values without such characters come out
exactly as they always have.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from kasafarm.models.record import FarmRecord

EXPORT_HEADERS = [
    "Date",
    "Category",
    "Subcategory",
    "Description",
    "Quantity",
    "Unit",
    "Unit Price",
    "Total Amount",
    "Notes",
]
EXPORT_FILENAME_PREFIX = "kasafarm-records"
LINE_TERMINATOR = "\n"
ENCODING = "utf-8"

_NEEDS_QUOTING = (",", '"', "\n", "\r")


class CsvExport(BaseModel):
    """A serialized export ready for delivery."""

    filename: str
    content: bytes
    record_count: int

    @property
    def text(self) -> str:
        return self.content.decode(ENCODING)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _text_field(value: Optional[str], always_quote: bool = False) -> str:
    value = value or ""
    if always_quote or any(ch in value for ch in _NEEDS_QUOTING):
        return _quote(value)
    return value


def _decimal_field(value: Optional[Decimal]) -> str:
    """Plain notation, no trailing zeros: 12.50 -> 12.5, 1E+2 -> 100."""
    if value is None:
        return ""
    return format(value.normalize(), "f")


def record_to_row(record: FarmRecord) -> str:
    """Serialize one record as a CSV line (without terminator)."""
    fields = [
        record.record_date.isoformat(),
        record.category.value,
        _text_field(record.subcategory),
        _text_field(record.description, always_quote=True),
        _decimal_field(record.quantity),
        _text_field(record.unit),
        _decimal_field(record.unit_price),
        _decimal_field(record.total_amount),
        _text_field(record.notes, always_quote=True),
    ]
    return ",".join(fields)


def to_delimited_text(records: Iterable[FarmRecord]) -> str:
    """Header line plus one line per record."""
    lines = [",".join(EXPORT_HEADERS)]
    lines.extend(record_to_row(record) for record in records)
    return LINE_TERMINATOR.join(lines)


def export_filename(export_date: date) -> str:
    """kasafarm-records-YYYY-MM-DD.csv"""
    return f"{EXPORT_FILENAME_PREFIX}-{export_date.isoformat()}.csv"


def build_export(
    records: Iterable[FarmRecord],
    export_date: Optional[date] = None,
) -> CsvExport:
    """Serialize records and name the file for the export date (default today)."""
    records = list(records)
    return CsvExport(
        filename=export_filename(export_date or date.today()),
        content=to_delimited_text(records).encode(ENCODING),
        record_count=len(records),
    )
