"""booksearch data models."""

from booksearch.models.book import Book
from booksearch.models.graph import EmbeddingNode, GraphEdge, GraphNode, SimilarityGraph
from booksearch.models.ranked_item import FusedResult, RankedItem

__all__ = [
    "Book",
    "RankedItem",
    "FusedResult",
    "EmbeddingNode",
    "GraphNode",
    "GraphEdge",
    "SimilarityGraph",
]
