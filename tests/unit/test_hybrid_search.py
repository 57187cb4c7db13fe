"""Unit tests for hybrid search module."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from booksearch.models import FusedResult, RankedItem
from booksearch.retrieval.hybrid_search import (
    HybridSearch,
    HybridSearchResult,
    display_score,
)


def make_items(*ids: str, source: str = "") -> list[RankedItem]:
    """Ranked list of bare items."""
    return [RankedItem(id=item_id, content=f"content-{item_id}", source=source) for item_id in ids]


def mock_retriever(items: list[RankedItem] | None = None, error: Exception | None = None) -> MagicMock:
    """Retriever mock returning ``items`` or raising ``error``."""
    retriever = MagicMock()
    if error is not None:
        retriever.retrieve = AsyncMock(side_effect=error)
    else:
        retriever.retrieve = AsyncMock(return_value=items or [])
    return retriever


class DelayedRetriever:
    """Retriever that answers after a delay."""

    def __init__(self, items: list[RankedItem], delay: float) -> None:
        self.items = items
        self.delay = delay

    async def retrieve(self, query: str, top_k: int | None = None) -> list[RankedItem]:
        await asyncio.sleep(self.delay)
        return self.items


class TestHybridSearch:
    """Tests for the HybridSearch orchestrator."""

    @pytest.mark.asyncio
    async def test_search_returns_three_views(self) -> None:
        """Source lists come back unmodified next to the fused list."""
        vector = make_items("B1", "B2", "B3", source="vector")
        keyword = make_items("B2", "B4", source="keyword")
        searcher = HybridSearch(mock_retriever(vector), mock_retriever(keyword))

        result = await searcher.search("query")

        assert isinstance(result, HybridSearchResult)
        assert result.vector == vector
        assert result.keyword == keyword
        assert [r.id for r in result.hybrid] == ["B2", "B1", "B4", "B3"]

    @pytest.mark.asyncio
    async def test_search_passes_top_k(self) -> None:
        """Each retriever receives its own cut-off."""
        vector_retriever = mock_retriever([])
        keyword_retriever = mock_retriever([])
        searcher = HybridSearch(vector_retriever, keyword_retriever, vector_k=7, keyword_k=3)

        await searcher.search("dune")

        vector_retriever.retrieve.assert_awaited_once_with("dune", top_k=7)
        keyword_retriever.retrieve.assert_awaited_once_with("dune", top_k=3)

    def test_search_default_top_k(self) -> None:
        """Default cut-off is 10 for both sources."""
        searcher = HybridSearch(mock_retriever([]), mock_retriever([]))
        assert searcher.vector_k == 10
        assert searcher.keyword_k == 10
        assert searcher.rrf_k == 60

    @pytest.mark.asyncio
    async def test_search_explicit_zero_top_k(self) -> None:
        """An explicit zero cut-off is passed through, not replaced by the default."""
        vector_retriever = mock_retriever([])
        keyword_retriever = mock_retriever([])
        searcher = HybridSearch(vector_retriever, keyword_retriever, vector_k=0, keyword_k=0)

        await searcher.search("dune")

        assert searcher.vector_k == 0
        assert searcher.keyword_k == 0
        vector_retriever.retrieve.assert_awaited_once_with("dune", top_k=0)
        keyword_retriever.retrieve.assert_awaited_once_with("dune", top_k=0)

    @pytest.mark.asyncio
    async def test_fusion_order_fixed_regardless_of_completion(self) -> None:
        """Vector stays the priority source even when it finishes last."""
        vector = [RankedItem(id="X", content="vector-copy"), RankedItem(id="v")]
        keyword = [RankedItem(id="k"), RankedItem(id="X", content="keyword-copy")]
        searcher = HybridSearch(
            DelayedRetriever(vector, delay=0.05),
            DelayedRetriever(keyword, delay=0.0),
        )

        result = await searcher.search("q")

        assert result.hybrid[0].id == "X"
        assert result.hybrid[0].content == "vector-copy"
        # v (vector rank 2) and k (keyword rank 1) differ in score; k wins
        assert [r.id for r in result.hybrid] == ["X", "k", "v"]
        assert result.hybrid[0].sources == ["vector", "keyword"]

    @pytest.mark.asyncio
    async def test_equal_scores_prefer_vector_source(self) -> None:
        """Exact ties go to the vector item first."""
        searcher = HybridSearch(
            DelayedRetriever(make_items("v1"), delay=0.05),
            DelayedRetriever(make_items("k1"), delay=0.0),
        )

        result = await searcher.search("q")

        assert [r.id for r in result.hybrid] == ["v1", "k1"]

    @pytest.mark.asyncio
    async def test_failed_source_degrades_to_empty(self) -> None:
        """A failing retriever counts as an empty list."""
        keyword = make_items("k1", "k2")
        searcher = HybridSearch(
            mock_retriever(error=RuntimeError("vector store down")),
            mock_retriever(keyword),
        )

        result = await searcher.search("q")

        assert result.vector == []
        assert result.keyword == keyword
        assert [r.id for r in result.hybrid] == ["k1", "k2"]

    @pytest.mark.asyncio
    async def test_both_sources_fail(self) -> None:
        """Total failure yields empty views, not an exception."""
        searcher = HybridSearch(
            mock_retriever(error=RuntimeError("down")),
            mock_retriever(error=TimeoutError()),
        )

        result = await searcher.search("q")

        assert result.vector == []
        assert result.keyword == []
        assert result.hybrid == []

    @pytest.mark.asyncio
    async def test_source_duplicates_kept_in_source_views(self) -> None:
        """Per-source lists are not deduplicated; only the fused view is."""
        vector = [RankedItem(id="a"), RankedItem(id="a"), RankedItem(id="b")]
        searcher = HybridSearch(mock_retriever(vector), mock_retriever([]))

        result = await searcher.search("q")

        assert [i.id for i in result.vector] == ["a", "a", "b"]
        assert [r.id for r in result.hybrid] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_custom_rrf_k(self) -> None:
        """The configured k is used for fusion."""
        searcher = HybridSearch(mock_retriever(make_items("a")), mock_retriever([]), rrf_k=10)

        result = await searcher.search("q")

        assert result.hybrid[0].fusion_score == 1 / 11


class TestDisplayScore:
    """Tests for display_score."""

    def test_fused_result_shows_fusion_score(self) -> None:
        """Fused items display their RRF score."""
        item = FusedResult(id="a", metadata={"distance": 0.1}, fusion_score=0.03)
        assert display_score(item) == 0.03

    def test_distance_converted_to_similarity(self) -> None:
        """Cosine distance is shown as 1 - distance."""
        item = RankedItem(id="a", metadata={"distance": 0.25})
        assert display_score(item) == 0.75

    def test_metadata_score(self) -> None:
        """An explicit metadata score is shown as-is."""
        item = RankedItem(id="a", metadata={"score": 4})
        assert display_score(item) == 4.0

    def test_item_score_fallback(self) -> None:
        """Falls back to the item's native score."""
        assert display_score(RankedItem(id="a", score=0.4)) == 0.4

    def test_no_signal(self) -> None:
        """Nothing to show gives 0."""
        assert display_score(RankedItem(id="a", metadata={"distance": "n/a"})) == 0.0
