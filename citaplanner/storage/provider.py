# ============================================================================
# FILE: citaplanner/storage/provider.py
# Builds the Store for one unit of work (a request, a task, a script run)
# ============================================================================
import abc
import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from citaplanner.config.settings import Settings
from citaplanner.storage.base import Store
from citaplanner.storage.memory_store import MemoryStore

logger = logging.getLogger(__name__)


class StoreProvider(abc.ABC):
    """Callable returning a context manager that yields a Store."""

    def __call__(self):
        return self.session()

    @abc.abstractmethod
    def session(self):
        """Context manager yielding a Store for one unit of work."""


class MemoryStoreProvider(StoreProvider):
    """Shares one MemoryStore across every unit of work."""

    def __init__(self, store: MemoryStore = None):
        self.store = store or MemoryStore()

    @contextmanager
    def session(self) -> Iterator[Store]:
        yield self.store


class SQLStoreProvider(StoreProvider):
    """Opens a fresh SQLAlchemy session per unit of work."""

    def __init__(self, session_factory: Callable):
        self.session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Store]:
        from citaplanner.storage.sql_store import SQLStore

        db = self.session_factory()
        try:
            yield SQLStore(db)
        finally:
            db.close()


def build_store_provider(settings: Settings) -> StoreProvider:
    """Pick the backend named by STORAGE_BACKEND."""
    if settings.use_memory_store:
        provider = MemoryStoreProvider()
        if settings.SEED_DEMO_DATA:
            from citaplanner.scripts.seed_demo import seed_demo_data

            seed_demo_data(provider.store)
        logger.info("Using in-memory storage backend")
        return provider

    # Imported here so memory deployments never build a PostgreSQL engine
    from citaplanner.config.database import SessionLocal

    logger.info("Using PostgreSQL storage backend")
    return SQLStoreProvider(SessionLocal)
