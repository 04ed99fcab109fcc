"""Dense similarity search and keyword ranking over a collection."""

import logging
import re
from collections.abc import Sequence

from qdrant_client import models

from ....core.domain import SearchResult
from ....core.domain.exceptions import DimensionMismatchError, ValidationError
from ....core.services.filter_translator import FilterTranslator
from .catalog import CollectionRegistry
from .connection import QdrantConnection
from .documents import from_payload

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 10

# Extra candidates fetched so ties at the top_k boundary resolve by id.
# The window doubles while its last score still equals the cut-off score.
TIE_MARGIN = 16

KEYWORD_SCAN_CEILING = 1000
KEYWORD_PAGE_SIZE = 256
_TERM_RE = re.compile(r"[A-Za-z0-9_]+")


def _terms(text: str) -> set[str]:
    return {t.lower() for t in _TERM_RE.findall(text) if len(t) >= 2}


class SimilaritySearchEngine:
    """Ranked nearest-neighbour queries against one collection."""

    def __init__(
        self,
        connection: QdrantConnection,
        registry: CollectionRegistry,
        translator: FilterTranslator,
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self._conn = connection
        self._registry = registry
        self._translator = translator
        self._default_top_k = default_top_k

    async def search(
        self,
        name: str,
        query_vector: Sequence[float],
        top_k: int | None = None,
        score_threshold: float | None = 0.0,
        filter_expr: str | None = None,
        include_vectors: bool = False,
    ) -> list[SearchResult]:
        """Find the documents most similar to a query vector.

        Args:
            name: Collection name.
            query_vector: Query embedding, same length as the collection dimension.
            top_k: Maximum number of results, defaults to 10.
            score_threshold: Minimum cosine similarity (inclusive). None disables it.
            filter_expr: Optional filter expression.
            include_vectors: Return stored vectors with the documents.

        Returns:
            Results ordered by descending score, ties by ascending document id.
            Ties straddling the top_k cut-off are resolved over every tied
            candidate the backend returns; an approximate (HNSW) index may
            still omit some equal-scoring points.

        Raises:
            CollectionNotFoundError: If the collection does not exist.
            DimensionMismatchError: If the query vector has the wrong length.
            InvalidFilterError: If the filter cannot be translated.
        """
        top_k = self._default_top_k if top_k is None else top_k
        if top_k <= 0:
            raise ValidationError("top_k must be positive", context={"top_k": top_k})

        info = await self._registry.require(name)
        if len(query_vector) != info.dimension:
            raise DimensionMismatchError(
                f"Query vector has dimension {len(query_vector)}, "
                f"collection '{info.name}' expects {info.dimension}",
                context={"collection": info.name, "expected": info.dimension, "actual": len(query_vector)},
            )
        query_filter = self._translator.translate(filter_expr)

        client = self._conn.client
        query = [float(x) for x in query_vector]
        fetch = top_k + TIE_MARGIN
        with self._conn.guard("search", info.name):
            while True:
                response = await client.query_points(
                    collection_name=self._conn.physical_name(info.name),
                    query=query,
                    query_filter=query_filter,
                    limit=fetch,
                    score_threshold=score_threshold,
                    with_payload=True,
                    with_vectors=False,
                )
                points = response.points
                # Window full and still tied with the cut-off score: widen it
                if len(points) < fetch or points[-1].score != points[top_k - 1].score:
                    break
                fetch *= 2

        results = []
        for point in points:
            if score_threshold is not None and point.score < score_threshold:
                continue
            results.append(
                SearchResult(
                    document=from_payload(point.payload or {}, with_vector=include_vectors),
                    score=float(point.score),
                )
            )

        results.sort(key=lambda r: (-r.score, r.document.id))
        logger.debug("Search in %s returned %d candidates", info.name, len(results))
        return results[:top_k]

    async def keyword_search(
        self,
        name: str,
        text: str,
        limit: int,
        filter_expr: str | None = None,
    ) -> list[SearchResult]:
        """Rank documents by term coverage of a keyword query.

        Candidates are narrowed on the backend with ``MatchText`` conditions
        on ``content``, one per query term, and the scan stops at
        KEYWORD_SCAN_CEILING documents. Each candidate scores the fraction
        of distinct query terms present among its content tokens.

        Returns:
            Results with score > 0, ordered by descending score then id.
        """
        if limit <= 0:
            raise ValidationError("limit must be positive", context={"limit": limit})

        info = await self._registry.require(name)
        terms = _terms(text)
        if not terms:
            return []

        term_filter = models.Filter(
            should=[
                models.FieldCondition(key="content", match=models.MatchText(text=term))
                for term in sorted(terms)
            ]
        )
        base_filter = self._translator.translate(filter_expr)
        query_filter = models.Filter(must=[term_filter, base_filter]) if base_filter else term_filter

        client = self._conn.client
        results: list[SearchResult] = []
        scanned = 0
        offset = None
        with self._conn.guard("keyword_search", info.name):
            while scanned < KEYWORD_SCAN_CEILING:
                records, offset = await client.scroll(
                    collection_name=self._conn.physical_name(info.name),
                    scroll_filter=query_filter,
                    limit=min(KEYWORD_PAGE_SIZE, KEYWORD_SCAN_CEILING - scanned),
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                scanned += len(records)
                for record in records:
                    document = from_payload(record.payload or {})
                    matched = len(terms & _terms(document.content))
                    if matched:
                        results.append(SearchResult(document=document, score=matched / len(terms)))
                if offset is None:
                    break

        results.sort(key=lambda r: (-r.score, r.document.id))
        logger.debug("Keyword search in %s scanned %d documents", info.name, scanned)
        return results[:limit]
