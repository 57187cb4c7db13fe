"""Unit tests for the book catalog."""

import json

import pytest

from booksearch.models import Book
from booksearch.storage import BookCatalog, CatalogError, load_catalog


class TestLoadCatalog:
    """Tests for load_catalog."""

    def test_load_catalog(self, catalog_file) -> None:
        """Books load in file order with their embeddings."""
        catalog = load_catalog(catalog_file)

        assert len(catalog) == 4
        assert [b.id for b in catalog] == ["book-1", "book-2", "book-3", "book-4"]
        assert catalog.get("book-2").embedding == "[0.8, 0.2, 0.0]"
        assert catalog.get("book-1").publication_year == 1999

    def test_load_missing_file(self, tmp_path) -> None:
        """A missing file raises CatalogError."""
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.json")

    def test_load_invalid_json(self, tmp_path) -> None:
        """Broken JSON raises CatalogError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_load_non_list(self, tmp_path) -> None:
        """The top level must be a list."""
        path = tmp_path / "obj.json"
        path.write_text(json.dumps({"id": "x"}), encoding="utf-8")

        with pytest.raises(CatalogError, match="JSON list"):
            load_catalog(path)

    def test_load_skips_records_without_id(self, tmp_path) -> None:
        """Records without id are skipped."""
        path = tmp_path / "books.json"
        path.write_text(
            json.dumps([{"title": "No id"}, {"id": 7, "title": "Seven"}, "junk"]),
            encoding="utf-8",
        )

        catalog = load_catalog(path)

        assert [b.id for b in catalog] == ["7"]


class TestBookCatalog:
    """Tests for BookCatalog."""

    def test_duplicate_ids_keep_first(self) -> None:
        """The first book with a given id wins."""
        catalog = BookCatalog([Book(id="a", title="First"), Book(id="a", title="Second")])

        assert len(catalog) == 1
        assert catalog.get("a").title == "First"

    def test_get_unknown_id(self, sample_catalog) -> None:
        """Unknown ids give None."""
        assert sample_catalog.get("missing") is None
        assert [book.id for book in sample_catalog] == ["book-1", "book-2", "book-3", "book-4"]

    def test_embedding_nodes(self, sample_catalog) -> None:
        """Bulk scan projects books to graph nodes."""
        nodes = sample_catalog.embedding_nodes()

        assert [n.id for n in nodes] == ["book-1", "book-2", "book-3", "book-4"]
        assert nodes[0].label == "Stars Beyond"
        assert nodes[0].group == "Science Fiction"
        assert nodes[3].vector is None


class TestBook:
    """Tests for the Book model."""

    def test_from_dict_camel_case(self) -> None:
        """CamelCase snapshot keys are understood."""
        book = Book.from_dict({
            "id": "x",
            "title": "Dune",
            "publicationYear": "1965",
            "imageUrl": "http://img",
            "embedding_raw": "[1, 2]",
            "isbn": "123",
        })

        assert book.publication_year == 1965
        assert book.image_url == "http://img"
        assert book.embedding == "[1, 2]"
        assert book.extra == {"isbn": "123"}

    def test_from_dict_bad_year(self) -> None:
        """Unparsable years default to 0."""
        assert Book.from_dict({"id": "x", "publication_year": "unknown"}).publication_year == 0

    def test_embedding_node_defaults(self) -> None:
        """Missing title and genre get placeholder labels."""
        node = Book(id="x").to_embedding_node()
        assert node.label == "Unknown Title"
        assert node.group == "Unknown Genre"

    def test_to_ranked_item(self) -> None:
        """Ranked items carry book metadata plus source extras."""
        book = Book(id="x", title="Dune", content="Desert planet", genre="SF")

        item = book.to_ranked_item(source="vector", score=0.9, metadata={"distance": 0.1})

        assert item.id == "x"
        assert item.content == "Desert planet"
        assert item.metadata["title"] == "Dune"
        assert item.metadata["distance"] == 0.1
        assert item.score == 0.9

    def test_from_metadata_round_trip(self) -> None:
        """A book view can be rebuilt from a ranked item."""
        book = Book(id="x", title="Dune", author="Herbert", content="Desert", publication_year=1965)
        item = book.to_ranked_item(metadata={"rrf_score": 0.03})

        rebuilt = Book.from_metadata(item.content, item.metadata)

        assert rebuilt.to_dict() == book.to_dict()
