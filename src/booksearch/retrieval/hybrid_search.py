"""Hybrid search combining vector similarity and keyword search.

Both retrievers run concurrently; their lists are fused with Reciprocal Rank
Fusion and returned next to the fused ranking so the caller can show all
three views side by side.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from booksearch.config import settings
from booksearch.models import FusedResult, RankedItem
from booksearch.retrieval.fusion import reciprocal_rank_fusion

logger = logging.getLogger(__name__)

VECTOR_SOURCE = "vector"
KEYWORD_SOURCE = "keyword"


class Retriever(Protocol):
    """A retrieval collaborator returning items best-first."""

    async def retrieve(self, query: str, top_k: int | None = None) -> Sequence[RankedItem]: ...


@dataclass
class HybridSearchResult:
    """The three ranked views of one query."""

    vector: list[RankedItem] = field(default_factory=list)
    keyword: list[RankedItem] = field(default_factory=list)
    hybrid: list[FusedResult] = field(default_factory=list)


def display_score(item: RankedItem) -> float:
    """
    Relevance value shown next to an item.

    Fused items show their fusion score. Otherwise the source's native
    signal is used: similarity derived from a cosine distance, then an
    explicit score. Never used for ranking.
    """
    if isinstance(item, FusedResult):
        return item.fusion_score

    metadata = item.metadata
    distance = metadata.get("distance")
    if isinstance(distance, (int, float)) and not isinstance(distance, bool):
        return 1.0 - float(distance)

    score = metadata.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return float(score)

    if item.score is not None:
        return float(item.score)
    return 0.0


class HybridSearch:
    """
    Hybrid search orchestrator.

    Source priority is fixed: vector results first, keyword results second.
    That order decides which copy of a shared item is kept and how exact
    fusion ties are broken, independent of which retriever finishes first.
    """

    def __init__(
        self,
        vector_retriever: Retriever,
        keyword_retriever: Retriever,
        vector_k: int | None = None,
        keyword_k: int | None = None,
        rrf_k: int | None = None,
    ) -> None:
        self.vector_retriever = vector_retriever
        self.keyword_retriever = keyword_retriever
        self.vector_k = vector_k if vector_k is not None else settings.retrieval_vector_k
        self.keyword_k = keyword_k if keyword_k is not None else settings.retrieval_keyword_k
        self.rrf_k = rrf_k if rrf_k is not None else settings.rrf_k

    async def _safe_retrieve(
        self,
        retriever: Retriever,
        query: str,
        top_k: int,
        source: str,
    ) -> list[RankedItem]:
        """Run one retriever, degrading to an empty list on failure."""
        try:
            return list(await retriever.retrieve(query, top_k=top_k))
        except Exception as e:
            logger.warning(f"{source} retrieval failed, continuing without it: {e}")
            return []

    async def search(self, query: str) -> HybridSearchResult:
        """
        Run vector and keyword retrieval and fuse the results.

        Args:
            query: User query text

        Returns:
            HybridSearchResult with the unmodified source lists and the
            fused ranking
        """
        # gather() returns results positionally, so fusion order stays fixed
        vector_results, keyword_results = await asyncio.gather(
            self._safe_retrieve(self.vector_retriever, query, self.vector_k, VECTOR_SOURCE),
            self._safe_retrieve(self.keyword_retriever, query, self.keyword_k, KEYWORD_SOURCE),
        )

        hybrid_results = reciprocal_rank_fusion(
            [vector_results, keyword_results],
            k=self.rrf_k,
            source_names=[VECTOR_SOURCE, KEYWORD_SOURCE],
        )

        logger.debug(
            f"Hybrid search: vector={len(vector_results)}, "
            f"keyword={len(keyword_results)}, fused={len(hybrid_results)}"
        )
        return HybridSearchResult(
            vector=vector_results,
            keyword=keyword_results,
            hybrid=hybrid_results,
        )
