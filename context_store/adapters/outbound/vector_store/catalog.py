"""Collection registry backed by a sidecar catalog collection.

Each logical collection has one catalog point holding its name,
dimension, description and creation time. Existence checks and listings
read only the catalog, never the vector collections.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from qdrant_client import models

from ....core.domain import CollectionInfo, normalize_collection_name
from ....core.domain.exceptions import CollectionNotFoundError, DimensionMismatchError, ValidationError
from .connection import CATALOG_ID_NAMESPACE, QdrantConnection, point_id

logger = logging.getLogger(__name__)

CATALOG_PAGE_SIZE = 256

# Payload indexes created with every collection
PAYLOAD_INDEXES: dict[str, Any] = {
    "id": models.PayloadSchemaType.KEYWORD,
    "relative_path": models.PayloadSchemaType.KEYWORD,
    "file_extension": models.PayloadSchemaType.KEYWORD,
    "start_line": models.PayloadSchemaType.INTEGER,
    "end_line": models.PayloadSchemaType.INTEGER,
    "content": models.TextIndexParams(
        type=models.TextIndexType.TEXT,
        tokenizer=models.TokenizerType.WORD,
        min_token_len=2,
        lowercase=True,
    ),
}


def _info_from_payload(payload: dict[str, Any]) -> CollectionInfo:
    return CollectionInfo(
        name=payload["name"],
        dimension=int(payload["dimension"]),
        description=payload.get("description", ""),
        created_at=payload.get("created_at", ""),
    )


class CollectionRegistry:
    """Tracks collection existence, dimension and description."""

    def __init__(self, connection: QdrantConnection) -> None:
        self._conn = connection

    def _catalog_id(self, token: str) -> str:
        return point_id(CATALOG_ID_NAMESPACE, token)

    async def get(self, name: str) -> CollectionInfo | None:
        """Catalog entry for a collection, or None if it does not exist."""
        token = normalize_collection_name(name)
        client = self._conn.client
        with self._conn.guard("catalog_lookup", token):
            records = await client.retrieve(
                collection_name=self._conn.catalog_name,
                ids=[self._catalog_id(token)],
                with_payload=True,
            )
        if not records:
            return None
        return _info_from_payload(records[0].payload or {})

    async def require(self, name: str) -> CollectionInfo:
        """Catalog entry for a collection.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
        """
        info = await self.get(name)
        if info is None:
            raise CollectionNotFoundError(
                f"Collection '{name}' does not exist", context={"collection": name}
            )
        return info

    async def create(self, name: str, dimension: int, description: str | None = None) -> None:
        """Create a collection, or update the description of an existing one.

        Raises:
            ValidationError: If dimension is not a positive integer.
            DimensionMismatchError: If the collection exists with another dimension.
        """
        if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension <= 0:
            raise ValidationError(
                "Collection dimension must be a positive integer",
                context={"collection": name, "dimension": dimension},
            )

        token = normalize_collection_name(name)
        existing = await self.get(token)
        if existing is not None and existing.dimension != dimension:
            raise DimensionMismatchError(
                f"Collection '{token}' already exists with dimension {existing.dimension}",
                context={"collection": token, "expected": existing.dimension, "actual": dimension},
            )

        client = self._conn.client
        physical = self._conn.physical_name(token)
        logger.debug("Creating collection %s (dimension=%d)", token, dimension)

        with self._conn.guard("create_collection", token):
            if await client.collection_exists(physical):
                info = await client.get_collection(physical)
                size = info.config.params.vectors.size
                if size != dimension:
                    raise DimensionMismatchError(
                        f"Storage for '{token}' already has dimension {size}",
                        context={"collection": token, "expected": size, "actual": dimension},
                    )
            else:
                await client.create_collection(
                    collection_name=physical,
                    vectors_config=models.VectorParams(size=dimension, distance=models.Distance.COSINE),
                )
                for field_name, schema in PAYLOAD_INDEXES.items():
                    await client.create_payload_index(
                        collection_name=physical,
                        field_name=field_name,
                        field_schema=schema,
                    )

            created_at = existing.created_at if existing else datetime.now(UTC).isoformat()
            await client.upsert(
                collection_name=self._conn.catalog_name,
                points=[
                    models.PointStruct(
                        id=self._catalog_id(token),
                        vector=[1.0],
                        payload={
                            "name": token,
                            "dimension": dimension,
                            "description": description or "",
                            "created_at": created_at,
                        },
                    )
                ],
                wait=True,
            )

        if existing is None:
            logger.info("Created collection: %s (dimension=%d)", token, dimension)
        else:
            logger.info("Updated collection metadata: %s", token)

    async def drop(self, name: str) -> None:
        """Remove a collection and its catalog entry. Missing collections are a no-op."""
        token = normalize_collection_name(name)
        client = self._conn.client
        physical = self._conn.physical_name(token)

        with self._conn.guard("drop_collection", token):
            if await client.collection_exists(physical):
                await client.delete_collection(collection_name=physical)
            await client.delete(
                collection_name=self._conn.catalog_name,
                points_selector=models.PointIdsList(points=[self._catalog_id(token)]),
                wait=True,
            )
        logger.info("Collection dropped: %s", token)

    async def exists(self, name: str) -> bool:
        return await self.get(name) is not None

    async def list_names(self) -> list[str]:
        """All collection names in lexicographic order."""
        client = self._conn.client
        names: list[str] = []
        offset = None
        with self._conn.guard("list_collections"):
            while True:
                records, offset = await client.scroll(
                    collection_name=self._conn.catalog_name,
                    limit=CATALOG_PAGE_SIZE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                names.extend(r.payload["name"] for r in records if r.payload)
                if offset is None:
                    break
        return sorted(names)

    async def describe(self, name: str) -> CollectionInfo:
        """Catalog entry plus the live document count."""
        info = await self.require(name)
        client = self._conn.client
        with self._conn.guard("count", info.name):
            result = await client.count(
                collection_name=self._conn.physical_name(info.name),
                exact=True,
            )
        info.document_count = result.count
        return info
