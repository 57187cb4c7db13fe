"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from booksearch.config import Settings, get_test_settings
from booksearch.models import Book, RankedItem
from booksearch.retrieval.embeddings import EmbeddingService
from booksearch.storage import BookCatalog


# Query text -> embedding used by the mock embedding service
QUERY_EMBEDDINGS: dict[str, list[float]] = {
    "space": [1.0, 0.0, 0.0],
    "dragons": [0.0, 1.0, 0.0],
    "detective": [0.0, 0.0, 1.0],
}


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return get_test_settings()


@pytest.fixture
def sample_books() -> list[Book]:
    """Small catalog with 3-dimensional embeddings."""
    return [
        Book(
            id="book-1",
            title="Stars Beyond",
            author="A. Nova",
            content="A space opera about a fleet crossing the galaxy.",
            genre="Science Fiction",
            publication_year=1999,
            embedding=[0.9, 0.1, 0.0],
        ),
        Book(
            id="book-2",
            title="Orbital Mechanics",
            author="B. Kepler",
            content="Space travel, orbits and the long way home.",
            genre="Science Fiction",
            publication_year=2005,
            embedding="[0.8, 0.2, 0.0]",
        ),
        Book(
            id="book-3",
            title="The Dragon Crown",
            author="C. Wyrm",
            content="Dragons guard the crown of a fallen kingdom.",
            genre="Fantasy",
            publication_year=2011,
            embedding=[0.0, 1.0, 0.1],
        ),
        Book(
            id="book-4",
            title="Fog Street",
            author="D. Holmes",
            content="A detective walks the foggy streets of London.",
            genre="Mystery",
            publication_year=1987,
            embedding=None,
        ),
    ]


@pytest.fixture
def sample_catalog(sample_books: list[Book]) -> BookCatalog:
    """Catalog built from sample books."""
    return BookCatalog(sample_books)


@pytest.fixture
def catalog_file(tmp_path: Path, sample_books: list[Book]) -> Path:
    """Sample catalog written to a JSON file."""
    path = tmp_path / "books.json"
    path.write_text(
        json.dumps([book.to_dict(include_embedding=True) for book in sample_books]),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def mock_embedding_service() -> EmbeddingService:
    """Mock embedding service for testing without loading models."""
    service = MagicMock(spec=EmbeddingService)
    service.dimensions = 3

    def fake_embed_sync(text: str) -> list[float]:
        return QUERY_EMBEDDINGS.get(text, [0.0, 0.0, 0.0])

    async def fake_embed(text: str) -> list[float]:
        return fake_embed_sync(text)

    service.embed = AsyncMock(side_effect=fake_embed)
    service.embed_sync = MagicMock(side_effect=fake_embed_sync)

    return service


def make_items(*ids: str, source: str = "") -> list[RankedItem]:
    """Ranked list with ``content`` = id and a rank marker in metadata."""
    return [
        RankedItem(id=item_id, content=f"content-{item_id}", metadata={"pos": i}, source=source)
        for i, item_id in enumerate(ids, start=1)
    ]


@pytest.fixture
def items_factory():
    """Factory for ranked lists."""
    return make_items
