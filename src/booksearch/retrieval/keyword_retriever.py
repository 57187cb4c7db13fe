"""Keyword (full-text) retriever over the in-memory catalog.

Mirrors ``plainto_tsquery('english')`` semantics: the query is tokenized,
stopwords are dropped, the remaining words are stemmed, and a book matches
only when every stemmed term occurs in it. Matching books are ranked by
Okapi BM25 over the whole catalog.
"""

import logging
import re

import snowballstemmer
from rank_bm25 import BM25Okapi

from booksearch.config import settings
from booksearch.models import Book, RankedItem
from booksearch.storage import BookCatalog

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)

ENGLISH_STOPWORDS: frozenset[str] = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "from",
    "has", "have", "he", "her", "his", "i", "if", "in", "into", "is", "it",
    "its", "me", "my", "no", "not", "of", "on", "or", "our", "she", "so",
    "that", "the", "their", "them", "then", "there", "these", "they", "this",
    "to", "was", "we", "were", "what", "when", "where", "which", "who",
    "why", "will", "with", "you", "your", "about", "how", "all", "any",
])

_stemmer = snowballstemmer.stemmer("english")


def tokenize(text: str, remove_stopwords: bool = True, stem: bool = True) -> list[str]:
    """Lowercase word tokens, optionally without English stopwords and stemmed."""
    tokens = TOKEN_PATTERN.findall(text.lower())
    if remove_stopwords:
        tokens = [t for t in tokens if t not in ENGLISH_STOPWORDS]
    if stem:
        tokens = _stemmer.stemWords(tokens)
    return tokens


def _book_text(book: Book) -> str:
    return " ".join([book.title, book.author, book.genre, book.content])


class CatalogKeywordRetriever:
    """Full-text retriever ranking books by BM25."""

    source_name = "keyword"

    def __init__(self, catalog: BookCatalog) -> None:
        self.catalog = catalog
        self._books: list[Book] = []
        self._terms: list[frozenset[str]] = []
        self._bm25: BM25Okapi | None = None

    def _build_index(self) -> None:
        """Tokenize the catalog once and build the BM25 index."""
        self._books = list(self.catalog)
        corpus = [tokenize(_book_text(book)) for book in self._books]
        self._terms = [frozenset(tokens) for tokens in corpus]
        # BM25Okapi cannot be built over an empty corpus
        self._bm25 = BM25Okapi(corpus) if corpus else None
        logger.debug(f"Keyword index built over {len(corpus)} books")

    async def retrieve(
        self,
        query: str,
        top_k: int | None = None,
    ) -> list[RankedItem]:
        """
        Retrieve books containing every query term.

        Args:
            query: Query text
            top_k: Maximum number of results

        Returns:
            RankedItems sorted by BM25 score desc (catalog order on ties)
        """
        if top_k is None:
            top_k = settings.retrieval_keyword_k

        terms = list(dict.fromkeys(tokenize(query)))
        if not terms:
            return []

        if self._bm25 is None:
            self._build_index()
        if self._bm25 is None:
            return []

        matching = [
            idx for idx, book_terms in enumerate(self._terms)
            if all(term in book_terms for term in terms)
        ]
        if not matching:
            return []

        scores = self._bm25.get_scores(terms)
        # Stable sort keeps catalog order on equal scores
        matching.sort(key=lambda idx: -scores[idx])

        results = []
        for idx in matching[:top_k]:
            score = float(scores[idx])
            results.append(self._books[idx].to_ranked_item(
                source=self.source_name,
                score=score,
                metadata={"score": score},
            ))
        logger.debug(f"Keyword search for {terms} returned {len(results)} books")
        return results
