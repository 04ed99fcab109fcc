"""Unit tests for the connection lifecycle and backend error wrapping."""

from unittest.mock import AsyncMock, patch

import pytest

from context_store.adapters.outbound.vector_store import QdrantVectorStore
from context_store.adapters.outbound.vector_store.connection import QdrantConnection
from context_store.core.domain.exceptions import (
    BackendFailureError,
    CollectionNotFoundError,
    NotInitializedError,
)

pytestmark = pytest.mark.unit


class TestLifecycle:
    """Tests for connect and close."""

    async def test_operations_before_connect_fail(self, settings):
        """Test that operations before connect fail."""
        store = QdrantVectorStore(settings)

        with pytest.raises(NotInitializedError):
            await store.list_collections()
        with pytest.raises(NotInitializedError):
            await store.search("demo", [1.0, 0.0, 0.0, 0.0])

    async def test_operations_after_close_fail(self, store):
        """Test that operations after close fail."""
        await store.close()

        assert store.is_connected is False
        with pytest.raises(NotInitializedError):
            await store.has_collection("demo")
        with pytest.raises(NotInitializedError):
            await store.upsert("demo", [])

    async def test_close_is_idempotent(self, store):
        """Test that close can be called twice."""
        await store.close()
        await store.close()

        assert store.is_connected is False

    async def test_reconnect_after_close(self, store):
        """Test reconnecting after close."""
        await store.close()
        await store.connect()

        assert store.is_connected is True
        assert await store.list_collections() == []

    async def test_connect_twice_keeps_client(self, store):
        """Test that a second connect keeps the existing client."""
        client = store._connection.client

        await store.connect()

        assert store._connection.client is client

    async def test_async_context_manager(self, settings):
        """Test using the store as an async context manager."""
        async with QdrantVectorStore(settings) as store:
            await store.create_collection("demo", 4)
            assert await store.has_collection("demo")

        assert store.is_connected is False


class TestNaming:
    """Tests for collection naming."""

    def test_physical_and_catalog_names(self, settings):
        """Test physical and catalog collection names."""
        connection = QdrantConnection(settings)

        assert connection.catalog_name == "test_catalog"
        assert connection.physical_name("demo") == "test_collection_demo"


class TestGuard:
    """Tests for backend error wrapping."""

    def test_client_errors_become_backend_failures(self, settings):
        """Test that client errors become BackendFailureError."""
        connection = QdrantConnection(settings)
        original = RuntimeError("connection reset")

        with pytest.raises(BackendFailureError) as exc_info:
            with connection.guard("upsert", "demo"):
                raise original

        error = exc_info.value
        assert error.cause is original
        assert error.__cause__ is original
        assert error.extra_context == {"operation": "upsert", "collection": "demo"}

    def test_store_errors_pass_through(self, settings):
        """Test that store errors pass through the guard."""
        connection = QdrantConnection(settings)

        with pytest.raises(CollectionNotFoundError):
            with connection.guard("search", "demo"):
                raise CollectionNotFoundError("missing")

    async def test_failed_upsert_surfaces_and_writes_nothing(self, demo_store, make_doc):
        """Test that a failed upsert surfaces and writes nothing."""
        client = demo_store._connection.client

        with patch.object(client, "upsert", AsyncMock(side_effect=RuntimeError("disk full"))):
            with pytest.raises(BackendFailureError) as exc_info:
                await demo_store.upsert("demo", [make_doc("1", [1.0, 0.0, 0.0, 0.0])])

        assert exc_info.value.extra_context["collection"] == "demo"
        assert exc_info.value.extra_context["operation"] == "upsert"
        info = await demo_store.describe_collection("demo")
        assert info.document_count == 0

    async def test_failed_search_surfaces(self, demo_store):
        """Test that a failed query surfaces as BackendFailureError."""
        client = demo_store._connection.client

        with patch.object(client, "query_points", AsyncMock(side_effect=ConnectionError("lost"))):
            with pytest.raises(BackendFailureError) as exc_info:
                await demo_store.search("demo", [1.0, 0.0, 0.0, 0.0])

        assert isinstance(exc_info.value.cause, ConnectionError)
