"""API routes for booksearch.

Provides:
- /api/hybrid-search with vector, keyword and fused views
- /health for liveness and catalog size
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from booksearch.models import Book, RankedItem
from booksearch.retrieval.hybrid_search import HybridSearch, display_score
from booksearch.storage import BookCatalog

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Search Models
# ============================================================================


class BookInfo(BaseModel):
    """Book payload shown in search results."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    author: str = ""
    content: str = ""
    genre: str = ""
    publication_year: int = Field(default=0, alias="publicationYear")
    image_url: str = Field(default="", alias="imageUrl")


class SearchResult(BaseModel):
    """A book with its displayed relevance score."""

    book: BookInfo
    score: float


class HybridSearchResponse(BaseModel):
    """All three ranked views of a query."""

    model_config = ConfigDict(populate_by_name=True)

    vector_results: list[SearchResult] = Field(default_factory=list, alias="vectorResults")
    keyword_results: list[SearchResult] = Field(default_factory=list, alias="keywordResults")
    hybrid_results: list[SearchResult] = Field(default_factory=list, alias="hybridResults")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    books_count: int
    version: str = "0.1.0"


# ============================================================================
# Helper Functions
# ============================================================================


def get_hybrid_search(request: Request) -> HybridSearch:
    """Get the search orchestrator from app state."""
    searcher = getattr(request.app.state, "hybrid_search", None)
    if searcher is None:
        raise HTTPException(status_code=503, detail="Search is not initialized")
    return searcher


def get_catalog(request: Request) -> BookCatalog:
    """Get the book catalog from app state."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Catalog is not loaded")
    return catalog


def to_search_results(items: list[RankedItem]) -> list[SearchResult]:
    """Map ranked items to API results with their display score."""
    results = []
    for item in items:
        book = Book.from_metadata(item.content, item.metadata)
        if not book.id:
            book.id = item.id
        results.append(SearchResult(
            book=BookInfo(**book.to_dict()),
            score=display_score(item),
        ))
    return results


# ============================================================================
# Search Endpoint
# ============================================================================


@router.get("/api/hybrid-search", response_model=HybridSearchResponse, response_model_by_alias=True)
async def hybrid_search(
    request: Request,
    query: str = Query(..., description="Free-text search query"),
) -> HybridSearchResponse:
    """
    Run vector and keyword search and fuse them with RRF.

    Returns the three views side by side so they can be compared.
    """
    if not query.strip():
        raise HTTPException(status_code=400, detail="Query must not be blank")

    searcher = get_hybrid_search(request)
    result = await searcher.search(query.strip())

    logger.info(
        f"Hybrid search '{query[:50]}': {len(result.vector)} vector, "
        f"{len(result.keyword)} keyword, {len(result.hybrid)} fused"
    )
    return HybridSearchResponse(
        vector_results=to_search_results(result.vector),
        keyword_results=to_search_results(result.keyword),
        hybrid_results=to_search_results(result.hybrid),
    )


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report whether the catalog and search are wired."""
    catalog = getattr(request.app.state, "catalog", None)
    searcher = getattr(request.app.state, "hybrid_search", None)
    ready = catalog is not None and searcher is not None
    return HealthResponse(
        status="healthy" if ready else "degraded",
        books_count=len(catalog) if catalog is not None else 0,
    )
