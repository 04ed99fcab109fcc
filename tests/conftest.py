"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio

from context_store.adapters.outbound.vector_store import QdrantVectorStore
from context_store.config.settings import StoreSettings
from context_store.core.domain import VectorDocument


@pytest.fixture
def settings():
    """Settings pointing at a fresh in-process Qdrant."""
    return StoreSettings(_env_file=None, qdrant_location=":memory:", qdrant_namespace="test")


@pytest_asyncio.fixture
async def store(settings):
    """A connected store backed by in-memory Qdrant."""
    vector_store = QdrantVectorStore(settings)
    await vector_store.connect()
    yield vector_store
    await vector_store.close()


@pytest_asyncio.fixture
async def demo_store(store):
    """Store with a 4-dimensional "demo" collection."""
    await store.create_collection("demo", 4, "demo collection")
    return store


@pytest.fixture
def make_doc():
    """Factory for VectorDocuments with sensible defaults."""

    def _make(
        doc_id: str,
        vector: list[float],
        content: str = "",
        relative_path: str = "src/app.py",
        start_line: int = 1,
        end_line: int = 10,
        file_extension: str = ".py",
        metadata: dict | None = None,
    ) -> VectorDocument:
        return VectorDocument(
            id=doc_id,
            vector=vector,
            content=content or f"fragment {doc_id}",
            relative_path=relative_path,
            start_line=start_line,
            end_line=end_line,
            file_extension=file_extension,
            metadata=metadata if metadata is not None else {"language": "python"},
        )

    return _make
