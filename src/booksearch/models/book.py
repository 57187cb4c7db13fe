"""Book model - catalog entries served by search and the graph view."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from booksearch.models.graph import EmbeddingNode
from booksearch.models.ranked_item import RankedItem

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_GENRE = "Unknown Genre"


@dataclass
class Book:
    """
    A catalog book.

    ``embedding`` is kept exactly as the snapshot stores it (a list of floats
    or its text form); parsing happens where it is consumed.
    """

    id: str
    title: str = ""
    author: str = ""
    content: str = ""
    genre: str = ""
    publication_year: int = 0
    image_url: str = ""

    embedding: Sequence[float] | str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_embedding: bool = False) -> dict:
        """Convert to dictionary (the API ``book`` payload)."""
        data = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "content": self.content,
            "genre": self.genre,
            "publicationYear": self.publication_year,
            "imageUrl": self.image_url,
        }
        if include_embedding:
            data["embedding"] = self.embedding
        return data

    def metadata(self) -> dict[str, Any]:
        """Metadata mapping attached to ranked items for this book."""
        return {
            **self.extra,
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "publicationYear": self.publication_year,
            "imageUrl": self.image_url,
        }

    def to_ranked_item(
        self,
        source: str = "",
        score: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> RankedItem:
        """Project to a ranked item with the book text as content."""
        return RankedItem(
            id=self.id,
            content=self.content,
            metadata={**self.metadata(), **(metadata or {})},
            score=score,
            source=source,
        )

    def to_embedding_node(self) -> EmbeddingNode:
        """Project to a graph builder input node."""
        return EmbeddingNode(
            id=self.id,
            label=self.title or UNKNOWN_TITLE,
            group=self.genre or UNKNOWN_GENRE,
            vector=self.embedding,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Book":
        """Create from a catalog record; accepts camelCase or snake_case keys."""
        known = {
            "id", "title", "author", "content", "genre",
            "publicationYear", "publication_year", "imageUrl", "image_url",
            "embedding", "embedding_raw",
        }
        year = data.get("publicationYear", data.get("publication_year", 0))
        try:
            year = int(year or 0)
        except (TypeError, ValueError):
            year = 0
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            author=data.get("author") or "",
            content=data.get("content") or data.get("description") or "",
            genre=data.get("genre") or "",
            publication_year=year,
            image_url=data.get("imageUrl") or data.get("image_url") or "",
            embedding=data.get("embedding", data.get("embedding_raw")),
            extra={k: v for k, v in data.items() if k not in known and k != "description"},
        )

    @classmethod
    def from_metadata(cls, content: Any, metadata: dict[str, Any]) -> "Book":
        """Rebuild a book view from a ranked item's content and metadata."""
        return cls.from_dict({
            **metadata,
            "id": metadata.get("id", ""),
            "content": content if isinstance(content, str) else "",
        })
