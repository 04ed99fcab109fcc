"""Qdrant vector store.

Implements VectorStorePort on top of one AsyncQdrantClient. The same
class serves a remote Qdrant server and the in-process backend
(``qdrant_location=":memory:"`` or a local path).
"""

import logging
from collections.abc import Sequence
from typing import Any

from ....config.settings import StoreSettings
from ....core.domain import CollectionInfo, HybridSearchOptions, SearchResult, SignalRequest, VectorDocument
from ....core.ports.vector_store_port import VectorStorePort
from ....core.services.filter_translator import FilterTranslator
from .catalog import CollectionRegistry
from .connection import QdrantConnection
from .documents import DocumentStore
from .hybrid import HybridFusionEngine
from .search import SimilaritySearchEngine

logger = logging.getLogger(__name__)


class QdrantVectorStore(VectorStorePort):
    """Qdrant-backed store for embedded source-code fragments.

    Usage:
        async with QdrantVectorStore(settings) as store:
            await store.create_collection("demo", 768)
            await store.upsert("demo", documents)
            results = await store.search("demo", query_vector, top_k=5)
    """

    def __init__(self, settings: StoreSettings) -> None:
        self.settings = settings
        self._connection = QdrantConnection(settings)
        translator = FilterTranslator()
        self.registry = CollectionRegistry(self._connection)
        self.documents = DocumentStore(
            self._connection, self.registry, translator, default_limit=settings.query_limit
        )
        self.search_engine = SimilaritySearchEngine(
            self._connection, self.registry, translator, default_top_k=settings.search_top_k
        )
        self.fusion_engine = HybridFusionEngine(self.search_engine)

    async def __aenter__(self) -> "QdrantVectorStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    async def connect(self) -> None:
        await self._connection.connect()

    async def close(self) -> None:
        await self._connection.close()

    # Collections

    async def create_collection(
        self, name: str, dimension: int, description: str | None = None
    ) -> None:
        await self.registry.create(name, dimension, description)

    async def create_hybrid_collection(
        self, name: str, dimension: int, description: str | None = None
    ) -> None:
        """Same as create_collection; keyword ranking uses the content index."""
        await self.registry.create(name, dimension, description)

    async def drop_collection(self, name: str) -> None:
        await self.registry.drop(name)

    async def has_collection(self, name: str) -> bool:
        return await self.registry.exists(name)

    async def list_collections(self) -> list[str]:
        return await self.registry.list_names()

    async def describe_collection(self, name: str) -> CollectionInfo:
        return await self.registry.describe(name)

    # Documents

    async def upsert(self, name: str, documents: Sequence[VectorDocument]) -> int:
        return await self.documents.upsert(name, documents)

    async def insert_hybrid(self, name: str, documents: Sequence[VectorDocument]) -> int:
        return await self.documents.upsert(name, documents)

    async def delete(self, name: str, ids: Sequence[str]) -> None:
        await self.documents.delete(name, ids)

    async def get_by_fields(
        self,
        name: str,
        filter_expr: str | None,
        output_fields: Sequence[str],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        return await self.documents.get_by_fields(name, filter_expr, output_fields, limit)

    # Search

    async def search(
        self,
        name: str,
        query_vector: Sequence[float],
        top_k: int | None = None,
        score_threshold: float | None = 0.0,
        filter_expr: str | None = None,
        include_vectors: bool = False,
    ) -> list[SearchResult]:
        return await self.search_engine.search(
            name,
            query_vector,
            top_k=top_k,
            score_threshold=score_threshold,
            filter_expr=filter_expr,
            include_vectors=include_vectors,
        )

    async def hybrid_search(
        self,
        name: str,
        signal_requests: Sequence[SignalRequest],
        options: HybridSearchOptions | None = None,
    ) -> list[SearchResult]:
        return await self.fusion_engine.hybrid_search(name, signal_requests, options)
