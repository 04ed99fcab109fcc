"""Backend-independent store services."""

from .filter_translator import FilterTranslator, storage_field
from .fusion import RRF_K, rrf_fuse

__all__ = ["FilterTranslator", "storage_field", "RRF_K", "rrf_fuse"]
