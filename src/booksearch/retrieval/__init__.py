"""Retrieval layer for booksearch."""

from booksearch.retrieval.embeddings import (
    EmbeddingService,
    cosine_similarity,
    cosine_similarity_batch,
    get_embedding_service,
    parse_vector,
)
from booksearch.retrieval.fusion import (
    RankList,
    reciprocal_rank_fusion,
    rrf_scores_only,
)
from booksearch.retrieval.hybrid_search import (
    HybridSearch,
    HybridSearchResult,
    Retriever,
    display_score,
)
from booksearch.retrieval.keyword_retriever import CatalogKeywordRetriever, tokenize
from booksearch.retrieval.vector_retriever import CatalogVectorRetriever

__all__ = [
    # Embeddings
    "EmbeddingService",
    "get_embedding_service",
    "cosine_similarity",
    "cosine_similarity_batch",
    "parse_vector",
    # Fusion
    "RankList",
    "reciprocal_rank_fusion",
    "rrf_scores_only",
    # Hybrid search
    "HybridSearch",
    "HybridSearchResult",
    "Retriever",
    "display_score",
    # Retrievers
    "CatalogVectorRetriever",
    "CatalogKeywordRetriever",
    "tokenize",
]
