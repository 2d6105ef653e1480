from shopify_bulk_export.cache.base import DisabledResultCache, ResultCache, compute_cache_key
from shopify_bulk_export.cache.file_store import FileResultCache, resolve_cache_dir
from shopify_bulk_export.cache.memory_store import InMemoryResultCache

__all__ = [
    "DisabledResultCache",
    "FileResultCache",
    "InMemoryResultCache",
    "ResultCache",
    "compute_cache_key",
    "resolve_cache_dir",
]
