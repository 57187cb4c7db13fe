"""FastAPI application for booksearch.

Serves hybrid (vector + keyword) book search and the book similarity graph.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booksearch.api.graph import router as graph_router
from booksearch.api.routes import router
from booksearch.config import settings
from booksearch.retrieval import CatalogKeywordRetriever, CatalogVectorRetriever, HybridSearch
from booksearch.storage import BookCatalog, load_catalog

logger = logging.getLogger(__name__)


def build_hybrid_search(catalog: BookCatalog) -> HybridSearch:
    """Wire the catalog retrievers into a hybrid search orchestrator."""
    return HybridSearch(
        vector_retriever=CatalogVectorRetriever(catalog),
        keyword_retriever=CatalogKeywordRetriever(catalog),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting booksearch API...")

    # Anything already placed on app.state (e.g. by tests) is kept
    if getattr(app.state, "catalog", None) is None:
        if settings.catalog_path:
            app.state.catalog = load_catalog(settings.catalog_path)
        else:
            logger.info("No catalog_path configured, starting with an empty catalog")
            app.state.catalog = BookCatalog()

    if getattr(app.state, "hybrid_search", None) is None:
        app.state.hybrid_search = build_hybrid_search(app.state.catalog)

    yield

    logger.info("Shutting down booksearch API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="booksearch",
        description="Hybrid semantic book search with rank fusion and a similarity graph",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(graph_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "booksearch.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
