"""Port interfaces implemented by outbound adapters."""

from .embedding_port import EmbeddingPort, EmbeddingVector
from .vector_store_port import VectorStorePort

__all__ = ["EmbeddingPort", "EmbeddingVector", "VectorStorePort"]
