"""Document store: upsert, delete and projection queries within a collection."""

import logging
from collections.abc import Sequence
from typing import Any

from qdrant_client import models

from ....core.domain import VectorDocument
from ....core.domain.exceptions import DimensionMismatchError, InvalidFilterError, ValidationError
from ....core.services.filter_translator import FilterTranslator, storage_field
from .catalog import CollectionRegistry
from .connection import DOCUMENT_ID_NAMESPACE, QdrantConnection, point_id

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 100

RAW_VECTOR_KEY = "vector"


def to_payload(doc: VectorDocument) -> dict[str, Any]:
    """Payload stored alongside a document's vector.

    Cosine collections keep a unit-normalised copy of the vector, so the
    caller's original vector is kept in the payload under ``vector``.
    """
    return {
        "id": doc.id,
        RAW_VECTOR_KEY: [float(x) for x in doc.vector],
        "content": doc.content,
        "relative_path": doc.relative_path,
        "start_line": doc.start_line,
        "end_line": doc.end_line,
        "file_extension": doc.file_extension,
        "metadata": dict(doc.metadata or {}),
    }


def from_payload(payload: dict[str, Any], with_vector: bool = False) -> VectorDocument:
    """Rebuild a VectorDocument from a stored payload.

    The vector is left empty unless ``with_vector`` is set.
    """
    return VectorDocument(
        id=str(payload["id"]),
        vector=_raw_vector(payload) if with_vector else [],
        content=payload.get("content", ""),
        relative_path=payload.get("relative_path", ""),
        start_line=int(payload.get("start_line", 1)),
        end_line=int(payload.get("end_line", payload.get("start_line", 1))),
        file_extension=payload.get("file_extension", ""),
        metadata=dict(payload.get("metadata") or {}),
    )


def _raw_vector(payload: dict[str, Any]) -> list[float]:
    raw = payload.get(RAW_VECTOR_KEY)
    return [float(x) for x in raw] if isinstance(raw, list) else []


def _lookup(payload: dict[str, Any], key: str) -> Any:
    value: Any = payload
    for part in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _projection_key(field: str) -> str:
    if field in ("vector", "metadata"):
        return field
    try:
        return storage_field(field)
    except InvalidFilterError:
        raise InvalidFilterError(
            f"Field '{field}' cannot be selected", context={"field": field}
        ) from None


class DocumentStore:
    """Create, replace, delete and project documents keyed by id."""

    def __init__(
        self,
        connection: QdrantConnection,
        registry: CollectionRegistry,
        translator: FilterTranslator,
        default_limit: int = DEFAULT_QUERY_LIMIT,
    ) -> None:
        self._conn = connection
        self._registry = registry
        self._translator = translator
        self._default_limit = default_limit

    async def upsert(self, name: str, documents: Sequence[VectorDocument]) -> int:
        """Insert or replace documents in a single backend request.

        Every vector is checked before anything is written, so a mismatch
        leaves the collection untouched. Repeated ids within one call
        collapse to their last occurrence.

        Returns:
            Number of distinct documents written.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            DimensionMismatchError: If any vector has the wrong length.
        """
        info = await self._registry.require(name)
        if not documents:
            return 0

        for doc in documents:
            if len(doc.vector) != info.dimension:
                raise DimensionMismatchError(
                    f"Document '{doc.id}' has dimension {len(doc.vector)}, "
                    f"collection '{info.name}' expects {info.dimension}",
                    context={
                        "collection": info.name,
                        "document_id": doc.id,
                        "expected": info.dimension,
                        "actual": len(doc.vector),
                    },
                )

        unique = {doc.id: doc for doc in documents}
        points = [
            models.PointStruct(
                id=point_id(DOCUMENT_ID_NAMESPACE, doc.id),
                vector=[float(x) for x in doc.vector],
                payload=to_payload(doc),
            )
            for doc in unique.values()
        ]

        client = self._conn.client
        with self._conn.guard("upsert", info.name):
            await client.upsert(
                collection_name=self._conn.physical_name(info.name),
                points=points,
                wait=True,
            )

        logger.info("Upserted %d documents into %s", len(points), info.name)
        return len(points)

    async def delete(self, name: str, ids: Sequence[str]) -> None:
        """Remove documents by id. Unknown ids are ignored."""
        info = await self._registry.require(name)
        if not ids:
            return

        client = self._conn.client
        with self._conn.guard("delete", info.name):
            await client.delete(
                collection_name=self._conn.physical_name(info.name),
                points_selector=models.PointIdsList(
                    points=[point_id(DOCUMENT_ID_NAMESPACE, doc_id) for doc_id in ids]
                ),
                wait=True,
            )
        logger.info("Deleted %d documents from %s", len(ids), info.name)

    async def get_by_fields(
        self,
        name: str,
        filter_expr: str | None,
        output_fields: Sequence[str],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return only the requested fields of documents matching a filter.

        Args:
            name: Collection name.
            filter_expr: Filter expression, empty for all documents.
            output_fields: Logical field names to return; ``vector`` and
                ``metadata`` are accepted too.
            limit: Maximum number of rows, defaults to 100.

        Returns:
            One dict per document keyed by the requested field names.
        """
        limit = self._default_limit if limit is None else limit
        if limit <= 0:
            raise ValidationError("limit must be positive", context={"limit": limit})
        if not output_fields:
            raise ValidationError("At least one output field is required")

        keys = {field: _projection_key(field) for field in output_fields}
        info = await self._registry.require(name)
        query_filter = self._translator.translate(filter_expr)

        client = self._conn.client
        with self._conn.guard("query", info.name):
            records, _ = await client.scroll(
                collection_name=self._conn.physical_name(info.name),
                scroll_filter=query_filter,
                limit=limit,
                with_payload=True,
                with_vectors=False,
            )

        rows = []
        for record in records:
            payload = record.payload or {}
            row: dict[str, Any] = {}
            for field, key in keys.items():
                if key == RAW_VECTOR_KEY:
                    row[field] = _raw_vector(payload)
                else:
                    row[field] = _lookup(payload, key)
            rows.append(row)
        return rows
