"""Errors the record store raises locally, before any remote call."""


class RecordStoreError(Exception):
    """Base exception for record store failures."""
    pass


class NotAuthenticatedError(RecordStoreError):
    """An operation needs a signed-in identity and there is none."""
    pass


class RecordValidationError(RecordStoreError):
    """A create or update payload failed validation."""
    pass
