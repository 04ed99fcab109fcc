"""Reciprocal Rank Fusion over ranked search result lists.

Each list contributes ``1 / (k + rank)`` to a document's fused score,
with 1-based ranks and equal weight per signal. Documents are identified
by their id; the fused list is ordered by descending fused score, ties
broken by ascending id.
"""

from collections.abc import Mapping

from ..domain import SearchResult

RRF_K = 60


def rrf_fuse(
    ranked_lists: Mapping[str, list[SearchResult]],
    limit: int,
    k: int = RRF_K,
) -> list[SearchResult]:
    """Fuse ranked lists keyed by signal name.

    Args:
        ranked_lists: Signal name -> results already ordered best first.
        limit: Maximum number of fused results.
        k: Rank smoothing constant.

    Returns:
        Fused results. ``source_signals`` holds each contributing signal's
        raw score.
    """
    fused: dict[str, SearchResult] = {}

    for signal, results in ranked_lists.items():
        for rank, result in enumerate(results, start=1):
            doc_id = result.document.id
            entry = fused.get(doc_id)
            if entry is None:
                entry = SearchResult(document=result.document, score=0.0, source_signals={})
                fused[doc_id] = entry
            entry.score += 1.0 / (k + rank)
            entry.source_signals[signal] = result.score

    ordered = sorted(fused.values(), key=lambda r: (-r.score, r.document.id))
    return ordered[:limit]
