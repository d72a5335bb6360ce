"""
Farm Record Models

These models define the shapes of the records a farmer logs:
1. DraftRecord - what the producing form builds before the remote store
   has accepted anything
2. FarmRecord - a record the remote store has confirmed (it carries the
   server-assigned id and timestamps)
3. RecordUpdate - a partial set of field changes for an existing record

DESIGN DECISION: FarmRecord is frozen. The cache hands the same objects to
totals and exports, so nothing downstream can mutate what the store holds.

The relation total_amount = quantity * unit_price is a producer-side
default, not a stored constraint. Mismatches are never rejected.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecordCategory(str, Enum):
    """
    The four kinds of farm transaction.

    Closed set: anything else is rejected at validation time.
    """
    EXPENSE = "expense"
    CAPITAL = "capital"
    SALE = "sale"
    PROFIT = "profit"


OPTIONAL_TEXT_FIELDS = ("subcategory", "unit", "notes")
REQUIRED_FIELDS = ("record_date", "category", "description", "total_amount")


def compute_total(quantity: Any, unit_price: Any) -> Decimal:
    """
    Default total for a record: quantity times unit price.

    Floats are routed through str() so 0.1 stays 0.1 instead of its
    binary approximation.
    """
    return Decimal(str(quantity)) * Decimal(str(unit_price))


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# DRAFTS AND UPDATES (client-side shapes)
# =============================================================================

class DraftRecord(BaseModel):
    """
    A record as submitted for creation (or full replacement).

    Has no id, owner or timestamps - the remote store assigns those.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    record_date: date = Field(
        ...,
        description="Calendar date of the transaction"
    )
    category: RecordCategory = Field(
        ...,
        description="Transaction category"
    )
    subcategory: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-text label (e.g., Feed, Eggs)"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the transaction was"
    )
    quantity: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Quantity (e.g., bags of feed)"
    )
    unit: Optional[str] = Field(
        default=None,
        max_length=20,
        description="Unit of measurement (e.g., kg, pcs)"
    )
    unit_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Price per unit"
    )
    total_amount: Decimal = Field(
        ...,
        gt=0,
        description="Total value of the transaction"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Additional notes"
    )

    @model_validator(mode="before")
    @classmethod
    def default_total_from_quantity(cls, data: Any) -> Any:
        """Fill a missing total from quantity and unit price."""
        if not isinstance(data, dict):
            return data
        if data.get("total_amount") not in (None, ""):
            return data

        quantity = data.get("quantity")
        unit_price = data.get("unit_price")
        if quantity in (None, "") or unit_price in (None, ""):
            return data

        try:
            total = compute_total(quantity, unit_price)
        except (InvalidOperation, ValueError):
            # Let field validation report the bad quantity/price
            return data
        return {**data, "total_amount": total}

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def blank_text_is_missing(cls, v: Any) -> Any:
        return _blank_to_none(v)


class RecordUpdate(BaseModel):
    """
    Partial field changes for an existing record.

    Only fields that were explicitly set are sent to the remote store.
    Optional text fields can be cleared by setting them to None (or "");
    required fields cannot.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    record_date: Optional[date] = None
    category: Optional[RecordCategory] = None
    subcategory: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, max_length=20)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    total_amount: Optional[Decimal] = Field(default=None, gt=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def blank_text_is_missing(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def validate_required_not_cleared(self) -> "RecordUpdate":
        """Required fields may change but never become empty."""
        for name in REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    @classmethod
    def from_draft(cls, draft: DraftRecord) -> "RecordUpdate":
        """Full-replacement update: every field of the draft is set."""
        return cls(**draft.model_dump())

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

    def to_fields(self) -> dict[str, Any]:
        """The explicitly set fields, ready for the storage backend."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# CONFIRMED RECORD (server-side shape)
# =============================================================================

class FarmRecord(BaseModel):
    """
    A record confirmed by the remote store.

    CRITICAL: Only the remote store creates these. The client never
    invents ids or timestamps.
    """
    model_config = ConfigDict(frozen=True)

    # Identity (server-assigned, immutable)
    id: str = Field(
        ...,
        min_length=1,
        description="Opaque record identifier"
    )
    owner_id: str = Field(
        ...,
        min_length=1,
        description="Identity the record belongs to"
    )

    record_date: date
    category: RecordCategory
    subcategory: Optional[str] = None
    description: str = Field(..., min_length=1)
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    unit_price: Optional[Decimal] = None
    total_amount: Decimal
    notes: Optional[str] = None

    # Timestamps (server-assigned)
    created_at: datetime
    updated_at: datetime

    def to_draft(self) -> DraftRecord:
        """Editable copy of this record's content (e.g., to prefill a form)."""
        return DraftRecord(
            **self.model_dump(
                exclude={"id", "owner_id", "created_at", "updated_at"}
            )
        )
