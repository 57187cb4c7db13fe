"""Ranked item models - the unit exchanged between retrievers and fusion."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RankedItem:
    """
    An identifiable retrieval result.

    Identity is by ``id`` alone. ``content`` is an opaque payload (usually the
    book text) and ``metadata`` is copied on construction, so callers never
    share a mapping with the item and attaching derived values is always safe.
    """

    id: str
    content: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)

    # Native relevance signal from the producing source (display only)
    score: float | None = None
    source: str = ""

    def __post_init__(self) -> None:
        self.metadata = dict(self.metadata or {})

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "content": self.content,
            "metadata": dict(self.metadata),
            "score": self.score,
            "source": self.source,
        }


@dataclass
class FusedResult(RankedItem):
    """A ranked item carrying its cumulative reciprocal rank fusion score."""

    fusion_score: float = 0.0
    sources: list[str] = field(default_factory=list)  # Contributing lists, in processing order
    ranks: dict[str, int] = field(default_factory=dict)  # 1-based rank per source

    @classmethod
    def from_item(
        cls,
        item: RankedItem,
        fusion_score: float,
        sources: list[str],
        ranks: dict[str, int],
    ) -> "FusedResult":
        """Build a fused result from the canonical (first-seen) item."""
        metadata = dict(item.metadata)
        metadata["rrf_score"] = fusion_score
        return cls(
            id=item.id,
            content=item.content,
            metadata=metadata,
            score=item.score,
            source=item.source,
            fusion_score=fusion_score,
            sources=list(sources),
            ranks=dict(ranks),
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["fusion_score"] = self.fusion_score
        data["sources"] = list(self.sources)
        data["ranks"] = dict(self.ranks)
        return data
