"""Shared Qdrant connection for the vector store components.

One AsyncQdrantClient is opened by connect() and reused by every
component. Qdrant client failures are converted to BackendFailureError
in a single place, guard().
"""

import asyncio
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from qdrant_client import AsyncQdrantClient, models

from ....config.settings import StoreSettings
from ....core.domain.exceptions import BackendFailureError, ContextStoreError, NotInitializedError
from ...common.exception_handler import log_exception

logger = logging.getLogger(__name__)

# Fixed namespaces so the same key always maps to the same point id
CATALOG_ID_NAMESPACE = uuid.UUID("6f1c2a3e-7d4b-4c1e-9a55-3b8e2f0d9c41")
DOCUMENT_ID_NAMESPACE = uuid.UUID("a8d0e7b2-51c3-4f6a-8e29-0c7b4d1f6e93")


def point_id(namespace: uuid.UUID, key: str) -> str:
    """Deterministic Qdrant point id for a string key."""
    return str(uuid.uuid5(namespace, key))


class QdrantConnection:
    """Owns the single AsyncQdrantClient used by the store."""

    def __init__(self, settings: StoreSettings) -> None:
        self.settings = settings
        self._client: AsyncQdrantClient | None = None
        self._lock = asyncio.Lock()

    @property
    def catalog_name(self) -> str:
        return f"{self.settings.qdrant_namespace}_catalog"

    def physical_name(self, token: str) -> str:
        """Qdrant collection name for a normalized collection token."""
        return f"{self.settings.qdrant_namespace}_collection_{token}"

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> AsyncQdrantClient:
        """The live client.

        Raises:
            NotInitializedError: Before connect() or after close().
        """
        if self._client is None:
            raise NotInitializedError("Qdrant client not initialized; call connect() first")
        return self._client

    def _build_client(self) -> AsyncQdrantClient:
        settings = self.settings
        if settings.qdrant_location == ":memory:":
            return AsyncQdrantClient(location=":memory:")
        if settings.in_process:
            return AsyncQdrantClient(path=settings.qdrant_location)
        return AsyncQdrantClient(
            host=settings.qdrant_host,
            port=settings.qdrant_port,
            grpc_port=settings.qdrant_grpc_port,
            prefer_grpc=settings.qdrant_prefer_grpc,
            https=settings.qdrant_https,
            api_key=settings.qdrant_api_key or None,
        )

    async def connect(self) -> None:
        """Open the client and make sure the catalog collection exists."""
        async with self._lock:
            if self._client is not None:
                return

            target = self.settings.qdrant_location or self.settings.qdrant_url
            logger.info("Connecting to Qdrant at: %s", target)
            with self.guard("connect"):
                client = self._build_client()
            try:
                with self.guard("connect"):
                    await self._ensure_catalog(client)
            except BackendFailureError:
                await client.close()
                raise

            self._client = client
            logger.info("Connected to Qdrant (namespace=%s)", self.settings.qdrant_namespace)

    async def _ensure_catalog(self, client: AsyncQdrantClient) -> None:
        if await client.collection_exists(self.catalog_name):
            return
        # The catalog only stores payloads; a 1-d placeholder vector satisfies Qdrant
        await client.create_collection(
            collection_name=self.catalog_name,
            vectors_config=models.VectorParams(size=1, distance=models.Distance.DOT),
        )
        logger.debug("Created catalog collection: %s", self.catalog_name)

    async def close(self) -> None:
        """Release the client. Calling close() again is a no-op."""
        async with self._lock:
            if self._client is None:
                return
            client, self._client = self._client, None
            try:
                await client.close()
            except Exception as e:
                log_exception(e, log=logger, level=logging.WARNING, extra_context={"operation": "close"})
            logger.info("Qdrant connection closed")

    @contextmanager
    def guard(self, operation: str, collection: str | None = None) -> Iterator[None]:
        """Convert Qdrant client failures into BackendFailureError.

        Store exceptions raised inside the block pass through unchanged.
        """
        try:
            yield
        except ContextStoreError:
            raise
        except Exception as e:
            context = {"operation": operation}
            if collection is not None:
                context["collection"] = collection
            error = BackendFailureError(f"Qdrant {operation} failed: {e}", cause=e, context=context)
            log_exception(error, log=logger)
            raise error from e
