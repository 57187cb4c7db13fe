#!/usr/bin/env python3
"""Run a hybrid search against a catalog snapshot and print the three views.

Usage:
    python scripts/search.py "space opera with political intrigue" --catalog ./data/books.json

    # JSON output, custom cut-offs
    python scripts/search.py "dragons" -c ./data/books.json --vector-k 20 --keyword-k 20 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from booksearch.config import settings
from booksearch.retrieval import (
    CatalogKeywordRetriever,
    CatalogVectorRetriever,
    HybridSearch,
    display_score,
)
from booksearch.storage import CatalogError, load_catalog

logger = logging.getLogger(__name__)


async def run_search(
    query: str,
    catalog_path: str,
    vector_k: int,
    keyword_k: int,
    rrf_k: int,
    as_json: bool,
) -> int:
    try:
        catalog = load_catalog(catalog_path)
    except CatalogError as e:
        logger.error(str(e))
        return 1

    searcher = HybridSearch(
        vector_retriever=CatalogVectorRetriever(catalog),
        keyword_retriever=CatalogKeywordRetriever(catalog),
        vector_k=vector_k,
        keyword_k=keyword_k,
        rrf_k=rrf_k,
    )
    result = await searcher.search(query)

    views = {
        "vector": result.vector,
        "keyword": result.keyword,
        "hybrid": result.hybrid,
    }

    if as_json:
        print(json.dumps(
            {name: [item.to_dict() for item in items] for name, items in views.items()},
            ensure_ascii=False,
            indent=2,
        ))
        return 0

    for name, items in views.items():
        print(f"\n=== {name} ({len(items)}) ===")
        for rank, item in enumerate(items, start=1):
            title = item.metadata.get("title") or item.id
            print(f"{rank:3d}. {display_score(item):.6f}  {title}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Hybrid (vector + keyword) book search")
    parser.add_argument("query", help="Search query")
    parser.add_argument(
        "-c", "--catalog",
        type=str,
        default=settings.catalog_path,
        help=f"Catalog JSON path (default: {settings.catalog_path})",
    )
    parser.add_argument("--vector-k", type=int, default=settings.retrieval_vector_k)
    parser.add_argument("--keyword-k", type=int, default=settings.retrieval_keyword_k)
    parser.add_argument("--rrf-k", type=int, default=settings.rrf_k)
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if not args.catalog:
        parser.error("a catalog path is required (--catalog or CATALOG_PATH)")

    sys.exit(asyncio.run(run_search(
        query=args.query,
        catalog_path=args.catalog,
        vector_k=args.vector_k,
        keyword_k=args.keyword_k,
        rrf_k=args.rrf_k,
        as_json=args.json,
    )))


if __name__ == "__main__":
    main()
