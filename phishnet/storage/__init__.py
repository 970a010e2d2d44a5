"""Entity store backends."""

import logging

from phishnet.core.config import Settings
from phishnet.storage.base import Storage
from phishnet.storage.database import DatabaseStorage
from phishnet.storage.memory import MemStorage

logger = logging.getLogger(__name__)

__all__ = ["Storage", "MemStorage", "DatabaseStorage", "create_storage"]


def create_storage(settings: Settings) -> Storage:
    """Build the store selected by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemStorage()
    if backend == "database":
        logger.info("Using database storage")
        return DatabaseStorage(
            database_url=settings.DATABASE_URL,
            create_tables=settings.AUTO_CREATE_TABLES,
        )
    raise ValueError(f"Unknown STORAGE_BACKEND '{settings.STORAGE_BACKEND}'")
