"""Qdrant implementation of the vector store port."""

from .catalog import CollectionRegistry
from .connection import QdrantConnection
from .documents import DocumentStore
from .hybrid import HybridFusionEngine
from .qdrant_adapter import QdrantVectorStore
from .search import SimilaritySearchEngine

__all__ = [
    "QdrantConnection",
    "CollectionRegistry",
    "DocumentStore",
    "SimilaritySearchEngine",
    "HybridFusionEngine",
    "QdrantVectorStore",
]
