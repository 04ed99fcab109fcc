"""Validation exceptions for the context store."""

from .base import ContextStoreError


class ValidationError(ContextStoreError):
    """Input validation failed."""

    error_code = "CTX_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "CTX_VAL_002"
