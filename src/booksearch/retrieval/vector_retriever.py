"""Vector retriever over the in-memory catalog.

Exact brute-force cosine scan against the stored book embeddings; the query
is embedded with the sentence-transformers service.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

import numpy as np

from booksearch.config import settings
from booksearch.models import Book, RankedItem
from booksearch.retrieval.embeddings import (
    cosine_similarity_batch,
    get_embedding_service,
    parse_vector,
)
from booksearch.storage import BookCatalog

logger = logging.getLogger(__name__)


class QueryEmbedder(Protocol):
    """Anything that can embed a query asynchronously."""

    async def embed(self, text: str) -> Sequence[float]: ...


class CatalogVectorRetriever:
    """
    Vector similarity retriever for catalog books.

    Returned items carry ``score`` = cosine similarity and
    ``metadata["distance"]`` = 1 - similarity, the pgvector convention the
    presentation layer understands.
    """

    source_name = "vector"

    def __init__(
        self,
        catalog: BookCatalog,
        embedding_service: QueryEmbedder | None = None,
    ) -> None:
        self.catalog = catalog
        self.embeddings = embedding_service or get_embedding_service()
        self._vectors: list[tuple[Book, np.ndarray]] | None = None

    def _get_vectors(self) -> list[tuple[Book, np.ndarray]]:
        """Parsed catalog embeddings, computed on first use."""
        if self._vectors is None:
            self._vectors = []
            for book in self.catalog:
                vector = parse_vector(book.embedding)
                if vector is not None:
                    self._vectors.append((book, vector))
            logger.info(
                f"Vector retriever indexed {len(self._vectors)} of "
                f"{len(self.catalog)} books"
            )
        return self._vectors

    async def retrieve(
        self,
        query: str,
        top_k: int | None = None,
    ) -> list[RankedItem]:
        """
        Retrieve books by embedding similarity.

        Args:
            query: Query text
            top_k: Number of results to return

        Returns:
            RankedItems sorted by similarity desc (catalog order on ties)
        """
        if top_k is None:
            top_k = settings.retrieval_vector_k

        query_vector = parse_vector(await self.embeddings.embed(query))
        if query_vector is None:
            logger.warning("Query embedding is empty or malformed")
            return []

        candidates = [
            (book, vector)
            for book, vector in self._get_vectors()
            if vector.shape == query_vector.shape
        ]
        if not candidates:
            return []

        similarities = cosine_similarity_batch(
            query_vector, [vector for _, vector in candidates]
        )
        order = sorted(range(len(candidates)), key=lambda i: -similarities[i])

        results = []
        for i in order[:top_k]:
            book, _ = candidates[i]
            similarity = similarities[i]
            results.append(book.to_ranked_item(
                source=self.source_name,
                score=similarity,
                metadata={"distance": 1.0 - similarity},
            ))

        logger.debug(f"Vector search returned {len(results)} books")
        return results
