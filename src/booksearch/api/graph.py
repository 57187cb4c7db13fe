"""Knowledge graph endpoint: book similarity graph for visualization."""

import logging

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from booksearch.api.routes import get_catalog
from booksearch.graph import build_similarity_graph

logger = logging.getLogger(__name__)

router = APIRouter()


class GraphNodeInfo(BaseModel):
    id: str
    label: str
    group: str
    value: float


class GraphLinkInfo(BaseModel):
    source: str
    target: str
    value: float


class GraphDataResponse(BaseModel):
    """Force-graph payload: nodes plus similarity links."""

    nodes: list[GraphNodeInfo] = Field(default_factory=list)
    links: list[GraphLinkInfo] = Field(default_factory=list)


@router.get("/api/graph/data", response_model=GraphDataResponse)
async def get_graph_data(
    request: Request,
    threshold: float | None = Query(default=None, ge=-1.0, le=1.0),
) -> GraphDataResponse:
    """Get graph data for visualization.

    Every catalog book is a node; books whose embeddings are more similar
    than the threshold are linked.
    """
    catalog = get_catalog(request)
    graph = build_similarity_graph(catalog.embedding_nodes(), threshold=threshold)

    logger.info(f"Graph data: {len(graph.nodes)} nodes, {len(graph.edges)} links")
    return GraphDataResponse(**graph.to_dict())
