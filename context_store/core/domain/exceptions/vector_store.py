"""Vector store exceptions for the context store."""

from .base import ContextStoreError


class VectorStoreError(ContextStoreError):
    """Base error for vector store operations."""

    error_code = "CTX_VEC_001"


class NotInitializedError(VectorStoreError):
    """Operation attempted before connect() or after close()."""

    error_code = "CTX_VEC_002"


class DimensionMismatchError(VectorStoreError):
    """Vector length disagrees with the collection dimension.

    Raised on create (re-creating with another dimension), upsert and query.
    """

    error_code = "CTX_VEC_003"


class CollectionNotFoundError(VectorStoreError):
    """Requested collection does not exist."""

    error_code = "CTX_VEC_004"


class InvalidFilterError(VectorStoreError):
    """Filter expression failed to parse or references a disallowed field."""

    error_code = "CTX_VEC_005"


class BackendFailureError(VectorStoreError):
    """The storage backend itself failed.

    Common causes:
    - Connection loss or Qdrant service is down
    - Invalid URL or API key
    - Constraint or payload violations rejected by Qdrant
    """

    error_code = "CTX_VEC_006"
