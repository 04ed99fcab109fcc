"""Embedding exceptions for the context store."""

from .base import ContextStoreError


class EmbeddingError(ContextStoreError):
    """Embedding provider failed or returned an unusable vector."""

    error_code = "CTX_EMB_001"
