#!/usr/bin/env python3
"""Compute embeddings for catalog books that do not have one yet.

Embeds "title + description" with the configured sentence-transformers model
and writes the catalog back (or to --output).

Usage:
    python scripts/embed_catalog.py --catalog ./data/books.json

    # Re-embed everything
    python scripts/embed_catalog.py -c ./data/books.json --force -b 128
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
from booksearch.retrieval import get_embedding_service, parse_vector
from booksearch.storage import CatalogError, load_catalog

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Embed catalog books")
    parser.add_argument(
        "-c", "--catalog",
        type=str,
        default=settings.catalog_path,
        help=f"Catalog JSON path (default: {settings.catalog_path})",
    )
    parser.add_argument("-o", "--output", type=str, help="Output path (default: overwrite catalog)")
    parser.add_argument(
        "-b", "--batch-size",
        type=int,
        default=settings.embedding_batch_size,
        help=f"Embedding batch size (default: {settings.embedding_batch_size})",
    )
    parser.add_argument("-f", "--force", action="store_true", help="Re-embed books that have embeddings")
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

    books = [
        book for book in catalog
        if args.force or parse_vector(book.embedding) is None
    ]
    logger.info(f"{len(books)} of {len(catalog)} books need embeddings")

    service = get_embedding_service()
    start_time = time.perf_counter()

    for i in range(0, len(books), args.batch_size):
        batch = books[i:i + args.batch_size]
        texts = [f"{book.title}\n{book.content}".strip() for book in batch]
        for book, embedding in zip(batch, service.embed_batch_sync(texts), strict=True):
            book.embedding = embedding
        logger.info(f"Progress: {min(i + len(batch), len(books))}/{len(books)}")

    elapsed = time.perf_counter() - start_time
    logger.info(f"Embedded {len(books)} books in {elapsed:.1f}s")

    records = []
    for book in catalog:
        record = book.to_dict(include_embedding=True)
        record.update(book.extra)
        records.append(record)

    output = Path(args.output or args.catalog)
    output.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(f"Wrote {output}")


if __name__ == "__main__":
    main()
