"""Cosine similarity graph builder.

Turns a snapshot of embedded items into a sparse undirected graph: every
item becomes a node, and each pair whose cosine similarity strictly exceeds
the threshold is linked by an edge weighted with that similarity.

The pairwise scan is exact and O(N^2 * D), which is fine for catalogs of a
few hundred items.
"""

import logging
from collections.abc import Sequence

import numpy as np

from booksearch.config import settings
from booksearch.models import EmbeddingNode, GraphEdge, GraphNode, SimilarityGraph
from booksearch.retrieval.embeddings import (
    cosine_from_norms,
    parse_vector,
    scale_vector,
    vector_norm,
)

logger = logging.getLogger(__name__)


def _parse_scaled(raw) -> np.ndarray | None:
    vector = parse_vector(raw)
    return scale_vector(vector) if vector is not None else None


def build_similarity_graph(
    nodes: Sequence[EmbeddingNode],
    threshold: float | None = None,
    node_value: float = 1.0,
) -> SimilarityGraph:
    """
    Build a thresholded cosine similarity graph.

    Every input node is emitted. Nodes with a missing or malformed vector are
    kept as isolated nodes. Pairs with different dimensions, and pairs whose
    nodes share an id, are skipped. A pair is linked only when its similarity
    is strictly greater than ``threshold``.

    Args:
        nodes: Items to place in the graph, in output order
        threshold: Minimum similarity, exclusive (default: from
            settings.graph_similarity_threshold = 0.50)
        node_value: Display value assigned to every node

    Returns:
        SimilarityGraph with all nodes and edges ordered by (i, j)
    """
    threshold = threshold if threshold is not None else settings.graph_similarity_threshold

    graph = SimilarityGraph(
        nodes=[
            GraphNode(id=n.id, label=n.label, group=n.group, value=node_value)
            for n in nodes
        ]
    )

    vectors: list[np.ndarray | None] = [_parse_scaled(n.vector) for n in nodes]
    norms: list[float] = [vector_norm(v) if v is not None else 0.0 for v in vectors]

    malformed = sum(1 for v in vectors if v is None)
    if malformed:
        logger.debug(f"{malformed} of {len(nodes)} nodes have no usable vector")

    skipped_pairs = 0
    repeated_pairs = 0
    for i in range(len(nodes)):
        vec_i = vectors[i]
        if vec_i is None:
            continue
        for j in range(i + 1, len(nodes)):
            vec_j = vectors[j]
            if vec_j is None:
                continue
            if nodes[i].id == nodes[j].id:
                repeated_pairs += 1
                continue
            if vec_i.shape != vec_j.shape:
                skipped_pairs += 1
                continue

            similarity = cosine_from_norms(vec_i, vec_j, norms[i], norms[j])
            if similarity > threshold:
                graph.edges.append(GraphEdge(
                    source=nodes[i].id,
                    target=nodes[j].id,
                    weight=min(similarity, 1.0),
                ))

    if skipped_pairs:
        logger.warning(f"Skipped {skipped_pairs} pairs with mismatched vector dimensions")
    if repeated_pairs:
        logger.warning(f"Skipped {repeated_pairs} pairs of nodes sharing an id")

    logger.debug(
        f"Similarity graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges "
        f"(threshold={threshold})"
    )
    return graph
