"""
Operation Result Models

Store operations never throw remote failures at the caller. They return
one of these instead, and the caller (form, table) decides what to show.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from kasafarm.models.record import FarmRecord


class OperationResult(BaseModel):
    """
    Outcome of a store operation.

    success=True with applied=False means the remote store accepted the
    call but the response arrived after the identity changed, so the
    cache was left alone.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    record: Optional[FarmRecord] = Field(
        default=None,
        description="Confirmed record for create/update"
    )
    record_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Number of records fetched by a load"
    )
    applied: bool = Field(
        default=True,
        description="Was the response applied to the cache?"
    )
    error: Optional[Exception] = Field(
        default=None,
        exclude=True,
        description="The failure, when success is False"
    )
    error_message: Optional[str] = None

    @classmethod
    def ok(
        cls,
        record: Optional[FarmRecord] = None,
        record_count: Optional[int] = None,
        applied: bool = True,
    ) -> "OperationResult":
        return cls(
            success=True,
            record=record,
            record_count=record_count,
            applied=applied,
        )

    @classmethod
    def failed(cls, error: Exception) -> "OperationResult":
        return cls(
            success=False,
            applied=False,
            error=error,
            error_message=str(error),
        )
