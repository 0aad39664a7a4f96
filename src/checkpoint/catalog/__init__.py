"""Subject and shift catalog."""

from checkpoint.catalog.loader import Catalog, catalog_from_dict, load_catalog

__all__ = [
    "Catalog",
    "catalog_from_dict",
    "load_catalog",
]
