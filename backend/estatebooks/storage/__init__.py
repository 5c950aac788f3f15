from .base import EntityStore, PersistenceError, new_record_id
from .memory import MemoryEntityStore
from .sql import SqlEntityStore


def build_entity_store(backend: str) -> EntityStore:
    """Factory used by the app: "sql" (default) or "memory"."""
    backend = (backend or "sql").lower()
    if backend == "sql":
        return SqlEntityStore()
    if backend == "memory":
        return MemoryEntityStore()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


__all__ = [
    "EntityStore", "PersistenceError", "new_record_id",
    "MemoryEntityStore", "SqlEntityStore", "build_entity_store",
]
