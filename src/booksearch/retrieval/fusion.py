"""Reciprocal Rank Fusion (RRF) for combining multiple retrieval results.

RRF merges ranked lists from different retrieval methods (vector search,
keyword search) using only rank positions, so scores from the sources never
need to be comparable or normalized.
"""

import logging
from collections.abc import Sequence

from booksearch.config import settings
from booksearch.models import FusedResult, RankedItem

logger = logging.getLogger(__name__)

RankList = Sequence[RankedItem]


def _processing_order(
    source_names: list[str],
    priority: Sequence[str] | None,
) -> list[int]:
    """Indices of the input lists in the order they are processed.

    Sources named in ``priority`` come first, in that order; the rest keep
    their given relative order.
    """
    if not priority:
        return list(range(len(source_names)))

    order: list[int] = []
    for name in priority:
        for idx, source_name in enumerate(source_names):
            if source_name == name and idx not in order:
                order.append(idx)
    order.extend(idx for idx in range(len(source_names)) if idx not in order)
    return order


def reciprocal_rank_fusion(
    ranked_lists: Sequence[RankList],
    k: int | None = None,
    source_names: Sequence[str] | None = None,
    priority: Sequence[str] | None = None,
) -> list[FusedResult]:
    """
    Combine multiple ranked lists using Reciprocal Rank Fusion.

    RRF score = sum(1 / (k + rank)) for each list where the item appears,
    with rank 1-based. Items absent from a list get nothing from it.

    Source priority decides which copy of an item is kept when several lists
    return the same id (the first one seen) and breaks exact score ties:
    earlier source first, then lower original rank. Within one list only the
    first occurrence of an id counts; later duplicates are ignored.

    Args:
        ranked_lists: Lists of RankedItem, each ordered best-first
        k: RRF constant (default: from settings.rrf_k = 60)
        source_names: Names for each ranked list (for tracking)
        priority: Source names in processing order (default: input order)

    Returns:
        List of FusedResult sorted by fusion_score descending, one per
        distinct id, untruncated
    """
    k = k if k is not None else settings.rrf_k
    if k < 0:
        raise ValueError("k must be non-negative")

    if source_names is None:
        source_names = [f"source_{i}" for i in range(len(ranked_lists))]
    source_names = list(source_names)
    if len(source_names) != len(ranked_lists):
        raise ValueError("Number of source names must match number of ranked lists")

    fused_scores: dict[str, float] = {}
    canonical: dict[str, RankedItem] = {}
    item_sources: dict[str, list[str]] = {}
    item_ranks: dict[str, dict[str, int]] = {}
    first_seen: dict[str, tuple[int, int]] = {}

    for position, list_idx in enumerate(_processing_order(source_names, priority)):
        ranked_list = ranked_lists[list_idx]
        if not ranked_list:
            continue
        source_name = source_names[list_idx]
        seen_in_list: set[str] = set()

        for rank, item in enumerate(ranked_list, start=1):
            item_id = getattr(item, "id", None)
            if not item_id:
                continue
            if item_id in seen_in_list:
                logger.debug(f"Ignoring duplicate id {item_id!r} at rank {rank} in {source_name}")
                continue
            seen_in_list.add(item_id)

            if item_id not in canonical:
                canonical[item_id] = item
                first_seen[item_id] = (position, rank)
                fused_scores[item_id] = 0.0
                item_sources[item_id] = []
                item_ranks[item_id] = {}

            fused_scores[item_id] += 1.0 / (k + rank)
            item_sources[item_id].append(source_name)
            item_ranks[item_id][source_name] = rank

    results = [
        FusedResult.from_item(
            canonical[item_id],
            fusion_score=score,
            sources=item_sources[item_id],
            ranks=item_ranks[item_id],
        )
        for item_id, score in fused_scores.items()
    ]

    # Descending score; exact ties by first-seen source, then original rank
    results.sort(key=lambda r: (-r.fusion_score, *first_seen[r.id]))

    logger.debug(
        f"RRF fused {len(ranked_lists)} lists into {len(results)} items (k={k})"
    )
    return results


def rrf_scores_only(
    ranked_lists: Sequence[RankList],
    k: int | None = None,
) -> dict[str, float]:
    """
    Simple RRF that returns just the fused scores.

    Args:
        ranked_lists: Lists of RankedItem, each ordered best-first
        k: RRF constant (default: from settings.rrf_k)

    Returns:
        Dictionary of item_id -> fusion score
    """
    return {
        result.id: result.fusion_score
        for result in reciprocal_rank_fusion(ranked_lists, k=k)
    }
