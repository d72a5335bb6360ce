"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted record store because:
1. Farmers can open their records directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (one farm's records are fine)
- No transactions (each call touches a single row)
- Limited query capabilities (we filter and sort in Python)

All owners share one worksheet; every row carries its owner_id and every
lookup matches on it, so one owner can never see or change another's rows.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import uuid4

import gspread
import structlog
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kasafarm.config import GoogleSheetsSettings, get_settings
from kasafarm.models.record import DraftRecord, FarmRecord, RecordCategory
from kasafarm.services.storage.interface import (
    PROTECTED_FIELDS,
    NotFoundError,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)

logger = structlog.get_logger(__name__)


# Column mappings for the records sheet
RECORD_COLUMNS = [
    "id",
    "owner_id",
    "created_at",
    "updated_at",
    "record_date",
    "category",
    "subcategory",
    "description",
    "quantity",
    "unit",
    "unit_price",
    "total_amount",
    "notes",
]

# Only transport failures are worth retrying; a rejected write is final
connection_retry = retry(
    retry=retry_if_exception_type(StorageConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive",
    ]

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @connection_retry
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=self.SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise StorageConnectionError(
                    f"Failed to connect to Google Sheets: {e}"
                ) from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_records_sheet(self) -> gspread.Worksheet:
        """Get or create the records worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.records_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.records_sheet_name,
                rows=1000,
                cols=len(RECORD_COLUMNS),
            )
            sheet.append_row(RECORD_COLUMNS)
        return sheet


class GoogleSheetsRecordStorage(RecordStorageInterface):
    """
    Google Sheets implementation of record storage.

    Records are stored as rows in a worksheet with one record per row.
    Row order is insertion order, which breaks record_date ties.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, record: FarmRecord) -> list:
        """Convert a FarmRecord to a spreadsheet row."""
        return [
            record.id,
            record.owner_id,
            record.created_at.isoformat(),
            record.updated_at.isoformat(),
            record.record_date.isoformat(),
            record.category.value,
            record.subcategory or "",
            record.description,
            str(record.quantity) if record.quantity is not None else "",
            record.unit or "",
            str(record.unit_price) if record.unit_price is not None else "",
            str(record.total_amount),
            record.notes or "",
        ]

    def _row_to_record(self, row: list) -> FarmRecord:
        """Convert a spreadsheet row to a FarmRecord."""
        # Handle missing trailing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return FarmRecord(
            id=safe_get(0),
            owner_id=safe_get(1),
            created_at=datetime.fromisoformat(safe_get(2)),
            updated_at=datetime.fromisoformat(safe_get(3)),
            record_date=date.fromisoformat(safe_get(4)),
            category=RecordCategory(safe_get(5)),
            subcategory=safe_get(6) or None,
            description=safe_get(7),
            quantity=Decimal(safe_get(8)) if safe_get(8) else None,
            unit=safe_get(9) or None,
            unit_price=Decimal(safe_get(10)) if safe_get(10) else None,
            total_amount=Decimal(safe_get(11)),
            notes=safe_get(12) or None,
        )

    def _find_row(self, all_rows: list[list], owner_id: str, record_id: str) -> Optional[int]:
        """1-based sheet row index of an owner's record, or None."""
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if len(row) > 1 and row[0] == record_id and row[1] == owner_id:
                return idx
        return None

    @connection_retry
    async def list_records(self, owner_id: str) -> list[FarmRecord]:
        """List an owner's records, newest record_date first."""
        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list records: {e}") from e

        records = []
        for position, row in enumerate(all_rows):
            if len(row) < 2 or not row[0] or row[1] != owner_id:
                continue
            try:
                records.append((position, self._row_to_record(row)))
            except (ValueError, InvalidOperation) as e:
                # A hand-edited row should not hide every other record
                logger.warning(
                    "malformed_record_row",
                    row_number=position + 2,
                    error=str(e),
                )

        # Newest date first; later rows first within the same date
        records.sort(key=lambda item: (item[1].record_date, item[0]), reverse=True)
        return [record for _, record in records]

    @connection_retry
    async def insert_record(self, owner_id: str, draft: DraftRecord) -> FarmRecord:
        """Append a new record row."""
        now = _utcnow()
        record = FarmRecord(
            id=str(uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )
        try:
            sheet = self._client.get_records_sheet()
            sheet.append_row(self._record_to_row(record), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save record: {e}") from e
        return record

    async def update_record(
        self,
        owner_id: str,
        record_id: str,
        fields: dict[str, Any],
    ) -> FarmRecord:
        """Rewrite an existing record's row with the changed fields."""
        protected = PROTECTED_FIELDS.intersection(fields)
        if protected:
            raise StorageError(
                f"Fields cannot be updated: {', '.join(sorted(protected))}"
            )

        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update record: {e}") from e

        idx = self._find_row(all_rows, owner_id, record_id)
        if idx is None:
            raise NotFoundError(f"Record not found: {record_id}")

        try:
            current = self._row_to_record(all_rows[idx - 1])
            updated = FarmRecord(
                **{**current.model_dump(), **fields, "updated_at": _utcnow()}
            )
        except (ValueError, InvalidOperation) as e:
            raise StorageError(f"Invalid update for {record_id}: {e}") from e

        row_range = (
            f"{rowcol_to_a1(idx, 1)}:{rowcol_to_a1(idx, len(RECORD_COLUMNS))}"
        )
        try:
            sheet.update(
                range_name=row_range,
                values=[self._record_to_row(updated)],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to update record: {e}") from e
        return updated

    async def delete_record(self, owner_id: str, record_id: str) -> None:
        """Delete an owner's record row if present."""
        try:
            sheet = self._client.get_records_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, owner_id, record_id)
            if idx is not None:
                sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete record: {e}") from e
