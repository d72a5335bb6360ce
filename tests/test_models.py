"""
Tests for KasaFarm Records models

Test strategy:
1. Unit tests for models (drafts, updates, confirmed records)
2. Store behaviour against in-memory and failing backends
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from kasafarm.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from kasafarm.models.record import (
    DraftRecord,
    FarmRecord,
    RecordCategory,
    RecordUpdate,
    compute_total,
)
from kasafarm.models.results import OperationResult
from kasafarm.store import NotAuthenticatedError

from tests.conftest import make_draft, make_record


class TestDraftRecord:
    """Tests for the creation payload."""

    def test_draft_creation(self):
        """Test DraftRecord model creation."""
        draft = DraftRecord(
            record_date=date(2024, 3, 1),
            category="sale",
            subcategory="Eggs",
            description="Eggs to market",
            quantity=Decimal("30"),
            unit="trays",
            unit_price=Decimal("350"),
            total_amount=Decimal("10500"),
        )
        assert draft.category == RecordCategory.SALE
        assert draft.total_amount == Decimal("10500")

    def test_blank_optional_text_becomes_none(self):
        """Forms submit empty strings for untouched optional inputs."""
        draft = make_draft(subcategory="", unit="   ", notes="")
        assert draft.subcategory is None
        assert draft.unit is None
        assert draft.notes is None

    def test_whitespace_is_stripped(self):
        draft = make_draft(description="  Layer feed  ")
        assert draft.description == "Layer feed"

    def test_description_required(self):
        """A blank description is rejected."""
        with pytest.raises(ValidationError):
            make_draft(description="   ")

    def test_total_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_draft(total_amount=Decimal("0"))
        with pytest.raises(ValidationError):
            make_draft(total_amount=Decimal("-5"))

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            make_draft(category="loan")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            make_draft(quantity=Decimal("-1"))

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            make_draft(id="client-made-id")

    def test_total_defaults_to_quantity_times_price(self):
        """Producer-side default when no total is given."""
        draft = DraftRecord(
            record_date=date(2024, 3, 1),
            category="expense",
            description="Feed",
            quantity=Decimal("4"),
            unit_price=Decimal("1250.50"),
        )
        assert draft.total_amount == Decimal("5002.00")

    def test_float_inputs_are_not_binary_rounded(self):
        assert compute_total(0.1, 3) == Decimal("0.3")

    def test_mismatched_total_is_accepted(self):
        """quantity * unit_price is a convention, not a constraint."""
        draft = make_draft(
            quantity=Decimal("2"),
            unit_price=Decimal("100"),
            total_amount=Decimal("150"),
        )
        assert draft.total_amount == Decimal("150")

    def test_missing_total_without_price_rejected(self):
        with pytest.raises(ValidationError):
            DraftRecord(
                record_date=date(2024, 3, 1),
                category="expense",
                description="Feed",
                quantity=Decimal("4"),
            )


class TestRecordUpdate:
    """Tests for partial updates."""

    def test_only_set_fields_are_sent(self):
        update = RecordUpdate(total_amount=Decimal("900"))
        assert update.to_fields() == {"total_amount": Decimal("900")}

    def test_optional_text_can_be_cleared(self):
        update = RecordUpdate(notes="")
        assert update.to_fields() == {"notes": None}

    def test_required_field_cannot_be_cleared(self):
        with pytest.raises(ValidationError, match="description cannot be cleared"):
            RecordUpdate(description=None)

    def test_server_fields_rejected(self):
        with pytest.raises(ValidationError):
            RecordUpdate(owner_id="someone-else")

    def test_from_draft_sets_every_field(self):
        update = RecordUpdate.from_draft(make_draft())
        fields = update.to_fields()
        assert set(fields) == set(DraftRecord.model_fields)
        assert fields["subcategory"] is None

    def test_is_empty(self):
        assert RecordUpdate().is_empty is True
        assert RecordUpdate(unit="kg").is_empty is False


class TestFarmRecord:
    """Tests for confirmed records."""

    def test_record_is_frozen(self):
        record = make_record()
        with pytest.raises(ValidationError):
            record.total_amount = Decimal("1")

    def test_to_draft_drops_server_fields(self):
        record = make_record(notes="Bought in bulk")
        draft = record.to_draft()
        assert draft.notes == "Bought in bulk"
        assert "id" not in draft.model_dump()


class TestOperationResult:
    """Tests for store operation results."""

    def test_failed_carries_error(self):
        error = NotAuthenticatedError("User not authenticated")
        result = OperationResult.failed(error)
        assert result.success is False
        assert result.applied is False
        assert result.error is error
        assert result.error_message == "User not authenticated"

    def test_error_not_serialized(self):
        result = OperationResult.failed(ValueError("boom"))
        assert "error" not in result.model_dump()


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            owner_id="farmer-1",
            entity_id="rec-1",
            description="Record created",
            details={"category": "sale"},
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "record_created"
        assert log_dict["entity_id"] == "rec-1"
        assert log_dict["details"]["category"] == "sale"

    def test_load_failed_is_error(self):
        event = AuditEventBuilder.load_failed("farmer-1", "timeout")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "timeout"

    def test_sign_out_description(self):
        event = AuditEventBuilder.identity_changed("farmer-1", None)
        assert event.description == "Signed out"
        assert event.details["previous_owner_id"] == "farmer-1"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
