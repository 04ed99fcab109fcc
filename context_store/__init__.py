"""Vector collection store and hybrid similarity search for source code."""

from .adapters.outbound.vector_store import QdrantVectorStore
from .config import StoreSettings, get_settings, setup_logging
from .core.domain import (
    CollectionInfo,
    HybridSearchOptions,
    SearchResult,
    SignalKind,
    SignalRequest,
    VectorDocument,
)
from .core.ports import EmbeddingPort, VectorStorePort

__version__ = "0.1.0"

__all__ = [
    "QdrantVectorStore",
    "StoreSettings",
    "get_settings",
    "setup_logging",
    "CollectionInfo",
    "VectorDocument",
    "SearchResult",
    "SignalKind",
    "SignalRequest",
    "HybridSearchOptions",
    "EmbeddingPort",
    "VectorStorePort",
]
