"""Use-case service behind the "index codebase" and "search code" tools.

Chunking and crawling happen upstream; this service receives ready-made
fragments, embeds them and hands them to the vector store.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

from ...core.domain import HybridSearchOptions, SignalKind, SignalRequest, VectorDocument
from ...core.domain.exceptions import EmbeddingError, EmptyQueryError
from ...core.ports.embedding_port import EmbeddingPort
from ...core.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


@dataclass
class CodeFragment:
    """A chunk of a source file, before embedding."""

    relative_path: str
    start_line: int
    end_line: int
    content: str
    language: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def file_extension(self) -> str:
        return PurePosixPath(self.relative_path).suffix


@dataclass
class CodeSearchHit:
    relative_path: str
    start_line: int
    end_line: int
    score: float
    content: str
    language: str | None = None


def fragment_id(fragment: CodeFragment) -> str:
    """Stable id so re-indexing the same fragment replaces it."""
    key = f"{fragment.relative_path}:{fragment.start_line}:{fragment.end_line}:{fragment.content}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def extension_filter(extensions: Sequence[str] | None) -> str | None:
    """Filter expression restricting results to the given file extensions."""
    if not extensions:
        return None
    quoted = ", ".join(json.dumps(ext) for ext in extensions)
    return f"fileExtension in [{quoted}]"


class CodeSearchService:
    """Application service that indexes fragments and answers code searches."""

    def __init__(self, store: VectorStorePort, embedder: EmbeddingPort) -> None:
        self.store = store
        self.embedder = embedder

    async def index_fragments(
        self,
        collection: str,
        fragments: Sequence[CodeFragment],
        description: str | None = None,
    ) -> int:
        """Embed fragments and upsert them, creating the collection if needed.

        Returns:
            Number of documents written.
        """
        if not fragments:
            return 0

        if not await self.store.has_collection(collection):
            await self.store.create_collection(collection, self.embedder.dimension, description)

        embeddings = await self.embedder.embed_batch([f.content for f in fragments])
        if len(embeddings) != len(fragments):
            raise EmbeddingError(
                "Embedding provider returned the wrong number of vectors",
                context={"expected": len(fragments), "actual": len(embeddings)},
            )

        documents = []
        for fragment, embedding in zip(fragments, embeddings):
            metadata = {
                **fragment.metadata,
                "file_name": PurePosixPath(fragment.relative_path).name,
            }
            if fragment.language:
                metadata["language"] = fragment.language
            documents.append(
                VectorDocument(
                    id=fragment_id(fragment),
                    vector=embedding.vector,
                    content=fragment.content,
                    relative_path=fragment.relative_path,
                    start_line=fragment.start_line,
                    end_line=fragment.end_line,
                    file_extension=fragment.file_extension,
                    metadata=metadata,
                )
            )

        written = await self.store.upsert(collection, documents)
        logger.info("Indexed %d fragments into %s", written, collection)
        return written

    async def search_code(
        self,
        collection: str,
        query: str,
        limit: int = 10,
        extensions: Sequence[str] | None = None,
    ) -> list[CodeSearchHit]:
        """Hybrid dense + keyword search over indexed code."""
        clean_query = query.strip() if query else ""
        if not clean_query:
            raise EmptyQueryError("Query cannot be empty or whitespace only")

        embedding = await self.embedder.embed(clean_query)
        results = await self.store.hybrid_search(
            collection,
            [
                SignalRequest(kind=SignalKind.DENSE, data=embedding.vector),
                SignalRequest(kind=SignalKind.KEYWORD, data=clean_query),
            ],
            HybridSearchOptions(limit=limit, filter_expr=extension_filter(extensions)),
        )

        return [
            CodeSearchHit(
                relative_path=r.document.relative_path,
                start_line=r.document.start_line,
                end_line=r.document.end_line,
                score=r.score,
                content=r.document.content,
                language=r.document.metadata.get("language"),
            )
            for r in results
        ]
