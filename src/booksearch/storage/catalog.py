"""In-memory book catalog loaded from a JSON snapshot."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

from booksearch.models import Book, EmbeddingNode

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """Raised when a catalog snapshot cannot be read."""


class BookCatalog:
    """Ordered, read-only collection of books keyed by id."""

    def __init__(self, books: list[Book] | None = None) -> None:
        self._books: list[Book] = []
        self._by_id: dict[str, Book] = {}
        for book in books or []:
            if book.id in self._by_id:
                logger.warning(f"Duplicate book id {book.id!r} in catalog, keeping first")
                continue
            self._books.append(book)
            self._by_id[book.id] = book

    def __len__(self) -> int:
        return len(self._books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self._books)

    def get(self, book_id: str) -> Book | None:
        return self._by_id.get(book_id)

    def embedding_nodes(self) -> list[EmbeddingNode]:
        """Bulk scan of every book as a graph builder input."""
        return [book.to_embedding_node() for book in self._books]


def load_catalog(path: str | Path) -> BookCatalog:
    """
    Load a catalog from a JSON file holding a list of book records.

    Records without an id are skipped with a warning.

    Raises:
        CatalogError: File missing, unreadable, or not a JSON list
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"Catalog {path} must contain a JSON list of books")

    books: list[Book] = []
    for idx, record in enumerate(data):
        if not isinstance(record, dict) or record.get("id") in (None, ""):
            logger.warning(f"Skipping catalog record {idx}: missing id")
            continue
        books.append(Book.from_dict(record))

    catalog = BookCatalog(books)
    logger.info(f"Loaded {len(catalog)} books from {path}")
    return catalog
