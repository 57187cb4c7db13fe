"""Similarity graph construction for the knowledge graph view."""

from booksearch.graph.similarity import build_similarity_graph

__all__ = [
    "build_similarity_graph",
]
