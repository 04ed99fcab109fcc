"""Composition root: the one place where the store backend is chosen."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.vector_store.qdrant_adapter import QdrantVectorStore
from ..config.logging import setup_logging
from ..config.settings import StoreSettings, get_settings
from ..core.ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


def build_vector_store(settings: StoreSettings) -> VectorStorePort:
    """Create an unconnected store for the given settings."""
    backend = "in-process Qdrant" if settings.in_process else "Qdrant server"
    logger.info("Initializing QdrantVectorStore (%s)...", backend)
    return QdrantVectorStore(settings)


@lru_cache
def get_vector_store() -> VectorStorePort:
    """Process-wide store built from environment settings, with logging configured."""
    settings = get_settings()
    setup_logging(settings)
    return build_vector_store(settings)
