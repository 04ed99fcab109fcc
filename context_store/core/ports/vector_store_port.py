"""Vector Store Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..domain import CollectionInfo, HybridSearchOptions, SearchResult, SignalRequest, VectorDocument


class VectorStorePort(ABC):
    """Abstract interface for vector stores.

    Every operation is a coroutine issued against one long-lived backend
    connection. Concurrent reads are safe. Concurrent writes (create, drop,
    upsert, delete) against the same collection are not arbitrated by the
    store; callers needing strict consistency must hold their own
    per-collection lock.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the backend connection."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the backend connection. Safe to call more than once."""
        ...

    @abstractmethod
    async def create_collection(
        self, name: str, dimension: int, description: str | None = None
    ) -> None: ...

    @abstractmethod
    async def drop_collection(self, name: str) -> None: ...

    @abstractmethod
    async def has_collection(self, name: str) -> bool: ...

    @abstractmethod
    async def list_collections(self) -> list[str]: ...

    @abstractmethod
    async def describe_collection(self, name: str) -> CollectionInfo: ...

    @abstractmethod
    async def upsert(self, name: str, documents: Sequence[VectorDocument]) -> int:
        """Insert or replace documents keyed by id, all or nothing."""
        ...

    @abstractmethod
    async def delete(self, name: str, ids: Sequence[str]) -> None: ...

    @abstractmethod
    async def get_by_fields(
        self,
        name: str,
        filter_expr: str | None,
        output_fields: Sequence[str],
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    @abstractmethod
    async def search(
        self,
        name: str,
        query_vector: Sequence[float],
        top_k: int | None = None,
        score_threshold: float | None = 0.0,
        filter_expr: str | None = None,
        include_vectors: bool = False,
    ) -> list[SearchResult]:
        """Dense similarity search, ordered by descending score.

        A ``score_threshold`` of None disables the similarity cut-off.
        """
        ...

    @abstractmethod
    async def hybrid_search(
        self,
        name: str,
        signal_requests: Sequence[SignalRequest],
        options: HybridSearchOptions | None = None,
    ) -> list[SearchResult]:
        """Fuse several ranking signals into one ordered result list."""
        ...
