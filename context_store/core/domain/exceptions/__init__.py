"""Custom exception hierarchy for the context store.

Structured exceptions with error codes, automatic capture of the raise
location, cause chaining and JSON serialization for structured logging.

Import from this package directly:

    from context_store.core.domain.exceptions import ContextStoreError, DimensionMismatchError
"""

# Base classes
from .base import ContextStoreError, RaiseSite

# Configuration exceptions
from .configuration import ConfigurationError, InvalidConfigurationError

# Embedding exceptions
from .embedding import EmbeddingError

# Validation exceptions
from .validation import EmptyQueryError, ValidationError

# Vector store exceptions
from .vector_store import (
    BackendFailureError,
    CollectionNotFoundError,
    DimensionMismatchError,
    InvalidFilterError,
    NotInitializedError,
    VectorStoreError,
)

__all__ = [
    # Base
    "RaiseSite",
    "ContextStoreError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigurationError",
    # Vector Store
    "VectorStoreError",
    "NotInitializedError",
    "DimensionMismatchError",
    "CollectionNotFoundError",
    "InvalidFilterError",
    "BackendFailureError",
    # Embedding
    "EmbeddingError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
]
