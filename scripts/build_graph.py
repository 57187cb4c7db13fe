#!/usr/bin/env python3
"""Build the book similarity graph from a catalog snapshot.

Usage:
    python scripts/build_graph.py --catalog ./data/books.json

    # Stricter links, write to file
    python scripts/build_graph.py -c ./data/books.json --threshold 0.7 -o graph.json
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from booksearch.config import settings
from booksearch.graph import build_similarity_graph
from booksearch.storage import CatalogError, load_catalog

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Build the book similarity graph")
    parser.add_argument(
        "-c", "--catalog",
        type=str,
        default=settings.catalog_path,
        help=f"Catalog JSON path (default: {settings.catalog_path})",
    )
    parser.add_argument(
        "-t", "--threshold",
        type=float,
        default=settings.graph_similarity_threshold,
        help=f"Similarity a pair must exceed (default: {settings.graph_similarity_threshold})",
    )
    parser.add_argument("-o", "--output", type=str, help="Write JSON here instead of stdout")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if not args.catalog:
        parser.error("a catalog path is required (--catalog or CATALOG_PATH)")

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        logger.error(str(e))
        sys.exit(1)

    start_time = time.perf_counter()
    graph = build_similarity_graph(catalog.embedding_nodes(), threshold=args.threshold)
    elapsed = time.perf_counter() - start_time

    isolated = sum(1 for node in graph.nodes if graph.degree(node.id) == 0)
    logger.info(
        f"Built graph in {elapsed:.2f}s: {len(graph.nodes)} nodes, "
        f"{len(graph.edges)} links, {isolated} isolated"
    )

    payload = json.dumps(graph.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        logger.info(f"Wrote {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
