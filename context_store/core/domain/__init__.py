"""Domain models for the context store.

- document: CollectionInfo, VectorDocument, SearchResult and hybrid signal types
- utils: collection name normalization

    from context_store.core.domain import VectorDocument, SearchResult
"""

from .document import (
    CollectionInfo,
    HybridSearchOptions,
    SearchResult,
    SignalKind,
    SignalRequest,
    VectorDocument,
)
from .utils import normalize_collection_name

__all__ = [
    # Document models
    "CollectionInfo",
    "VectorDocument",
    "SearchResult",
    # Hybrid search
    "SignalKind",
    "SignalRequest",
    "HybridSearchOptions",
    # Helpers
    "normalize_collection_name",
]
