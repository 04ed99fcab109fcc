"""Hybrid search: dense similarity fused with keyword ranking.

Fusion rule is Reciprocal Rank Fusion with k=60 and equal signal weights
(see core.services.fusion). A dense signal is required; keyword signals
are optional and any other kind is ignored.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from ....core.domain import HybridSearchOptions, SearchResult, SignalKind, SignalRequest
from ....core.domain.exceptions import ValidationError
from ....core.services.fusion import RRF_K, rrf_fuse
from .search import SimilaritySearchEngine

logger = logging.getLogger(__name__)

# "vector" names the dense field in callers that address signals by field
DENSE_KINDS = {SignalKind.DENSE.value, "vector"}

# Each signal fetches this many times the requested limit before fusion
CANDIDATE_POOL_FACTOR = 3


def _kind(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value).lower()
    return str(value).lower()


def _dense_vector(data: Any) -> list[float] | None:
    """Coerce a dense payload (list, tuple, ndarray...) to floats, or None if it is not a vector."""
    if data is None or isinstance(data, (str, bytes, Mapping)):
        return None
    try:
        return [float(x) for x in data]
    except (TypeError, ValueError):
        return None


class HybridFusionEngine:
    """Merges several ranking signals into one ordered result list."""

    def __init__(self, search_engine: SimilaritySearchEngine, rrf_k: int = RRF_K) -> None:
        self._search = search_engine
        self._rrf_k = rrf_k

    async def hybrid_search(
        self,
        name: str,
        signal_requests: Sequence[SignalRequest],
        options: HybridSearchOptions | None = None,
    ) -> list[SearchResult]:
        """Run every recognised signal and fuse the ranked lists.

        With only a dense signal (or a keyword signal that finds nothing)
        the dense search result is returned unchanged.

        Args:
            name: Collection name.
            signal_requests: Signals with their query payloads.
            options: Result limit and optional filter expression.

        Returns:
            Results ordered by descending score, at most ``options.limit``.
        """
        options = options or HybridSearchOptions()
        if options.limit <= 0:
            raise ValidationError("limit must be positive", context={"limit": options.limit})

        dense: SignalRequest | None = None
        keyword: SignalRequest | None = None
        for request in signal_requests:
            kind = _kind(request.kind)
            if kind in DENSE_KINDS and dense is None:
                dense = request
            elif kind == SignalKind.KEYWORD.value and keyword is None:
                keyword = request
            else:
                logger.debug("Ignoring signal kind %r", request.kind)

        query_vector = _dense_vector(dense.data) if dense is not None else None
        if query_vector is None:
            logger.debug("No usable dense signal for %s; returning no results", name)
            return []

        keyword_text = keyword.data if keyword is not None and isinstance(keyword.data, str) else ""
        if not keyword_text.strip():
            return await self._search.search(
                name,
                query_vector,
                top_k=options.limit,
                filter_expr=options.filter_expr,
            )

        pool = options.limit * CANDIDATE_POOL_FACTOR
        dense_results, keyword_results = await asyncio.gather(
            self._search.search(name, query_vector, top_k=pool, filter_expr=options.filter_expr),
            self._search.keyword_search(name, keyword_text, pool, filter_expr=options.filter_expr),
        )
        if not keyword_results:
            return dense_results[: options.limit]

        fused = rrf_fuse(
            {SignalKind.DENSE.value: dense_results, SignalKind.KEYWORD.value: keyword_results},
            limit=options.limit,
            k=self._rrf_k,
        )
        logger.debug(
            "Fused %d dense and %d keyword candidates in %s",
            len(dense_results),
            len(keyword_results),
            name,
        )
        return fused
