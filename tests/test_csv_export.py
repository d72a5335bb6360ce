"""Tests for the CSV export."""

import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from kasafarm.reports import (
    EXPORT_HEADERS,
    build_export,
    export_filename,
    record_to_row,
    to_delimited_text,
)

from tests.conftest import make_record

HEADER_LINE = "Date,Category,Subcategory,Description,Quantity,Unit,Unit Price,Total Amount,Notes"


class TestDelimitedText:
    """Tests for to_delimited_text."""

    def test_empty_cache_is_header_only(self):
        assert to_delimited_text([]) == HEADER_LINE

    def test_header_columns(self):
        assert ",".join(EXPORT_HEADERS) == HEADER_LINE

    def test_optional_fields_render_empty(self):
        record = make_record(
            record_date=date(2024, 3, 10),
            category="expense",
            description="Layer feed",
            total_amount=Decimal("2500"),
        )
        assert record_to_row(record) == '2024-03-10,expense,,"Layer feed",,,,2500,""'

    def test_full_record(self):
        record = make_record(
            record_date=date(2024, 3, 12),
            category="sale",
            subcategory="Eggs",
            description="Eggs to market",
            quantity=Decimal("30"),
            unit="trays",
            unit_price=Decimal("350.00"),
            total_amount=Decimal("10500.00"),
            notes="Paid cash",
        )
        assert record_to_row(record) == (
            '2024-03-12,sale,Eggs,"Eggs to market",30,trays,350,10500,"Paid cash"'
        )

    def test_decimals_keep_fraction(self):
        record = make_record(total_amount=Decimal("12.50"), quantity=Decimal("0.25"))
        row = record_to_row(record)
        assert ",0.25," in row
        assert ",12.5," in row

    def test_zero_quantity_is_kept(self):
        record = make_record(quantity=Decimal("0"))
        assert record_to_row(record).split(",")[4] == "0"

    def test_rows_follow_input_order_with_newlines(self):
        first = make_record(id="a", description="First")
        second = make_record(id="b", description="Second")
        text = to_delimited_text([first, second])
        lines = text.split("\n")
        assert lines[0] == HEADER_LINE
        assert '"First"' in lines[1]
        assert '"Second"' in lines[2]
        assert not text.endswith("\n")


class TestEscaping:
    """Embedded quotes and delimiters must not break the column layout."""

    def test_embedded_quotes_are_doubled(self):
        record = make_record(description='Bought "premium" feed', notes='said "ok"')
        row = record_to_row(record)
        assert '"Bought ""premium"" feed"' in row
        assert '"said ""ok"""' in row

    def test_export_parses_back_to_nine_columns(self):
        record = make_record(
            subcategory="Feed, grower",
            description='Mash, "layers"',
            unit="50kg, bag",
            notes="line one\nline two",
        )
        rows = list(csv.reader(io.StringIO(to_delimited_text([record]))))
        assert len(rows) == 2
        assert rows[1] == [
            "2024-03-10",
            "expense",
            "Feed, grower",
            'Mash, "layers"',
            "",
            "50kg, bag",
            "",
            "2500",
            "line one\nline two",
        ]


class TestBuildExport:
    """Tests for filename and encoding."""

    def test_filename_convention(self):
        assert export_filename(date(2024, 3, 15)) == "kasafarm-records-2024-03-15.csv"

    def test_build_export_is_utf8(self):
        record = make_record(description="Maïs для кур")
        export = build_export([record], export_date=date(2024, 3, 15))
        assert export.filename == "kasafarm-records-2024-03-15.csv"
        assert export.record_count == 1
        assert export.content == export.text.encode("utf-8")
        assert "Maïs для кур" in export.text

    def test_build_export_defaults_to_today(self):
        export = build_export([])
        assert export.filename == f"kasafarm-records-{date.today().isoformat()}.csv"
        assert export.text == HEADER_LINE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
