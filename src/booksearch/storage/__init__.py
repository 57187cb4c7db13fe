"""Storage layer for booksearch."""

from booksearch.storage.catalog import BookCatalog, CatalogError, load_catalog

__all__ = ["BookCatalog", "CatalogError", "load_catalog"]
