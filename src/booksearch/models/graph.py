"""Similarity graph models used for visualization."""

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass
class EmbeddingNode:
    """
    Input to the similarity graph builder.

    ``vector`` is either a sequence of floats, the raw text form
    ``"[0.1, -0.2, ...]"`` as returned by a bulk store scan, or None.
    """

    id: str
    label: str
    group: str
    vector: Sequence[float] | str | None = None


@dataclass
class GraphNode:
    """A node as rendered by the graph view."""

    id: str
    label: str
    group: str
    value: float = 1.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "group": self.group,
            "value": self.value,
        }


@dataclass
class GraphEdge:
    """Undirected weighted edge between two distinct nodes."""

    source: str
    target: str
    weight: float

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "value": self.weight,
        }


@dataclass
class SimilarityGraph:
    """Nodes plus thresholded cosine-similarity edges."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def neighbors(self, node_id: str) -> list[str]:
        """Ids linked to ``node_id``, in edge order."""
        result: list[str] = []
        for edge in self.edges:
            if edge.source == node_id:
                result.append(edge.target)
            elif edge.target == node_id:
                result.append(edge.source)
        return result

    def degree(self, node_id: str) -> int:
        return len(self.neighbors(node_id))

    def to_dict(self) -> dict:
        """Serialize to the ``{nodes, links}`` shape the frontend consumes."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [edge.to_dict() for edge in self.edges],
        }
