from .loader import CatalogError, get_catalog, load_catalog

__all__ = ["CatalogError", "get_catalog", "load_catalog"]
