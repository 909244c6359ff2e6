from .base import DataStore, StoreError
from .postgrest import PostgrestStore
from .sql import SqlStore


def build_store(config) -> DataStore:
    """Pick the data store named by ``STORE_BACKEND``."""
    backend = (config.get("STORE_BACKEND") or "sql").lower()
    if backend == "rest":
        url = config.get("DATA_STORE_URL")
        key = config.get("DATA_STORE_KEY")
        if not url or not key:
            raise RuntimeError("STORE_BACKEND=rest needs DATA_STORE_URL and DATA_STORE_KEY")
        return PostgrestStore(
            url,
            key,
            timeout=config.get("STORE_TIMEOUT_SECONDS", 10.0),
            read_retries=config.get("STORE_READ_RETRIES", 1),
        )
    if backend == "sql":
        return SqlStore()
    raise RuntimeError(f"Unknown STORE_BACKEND {backend!r}")


__all__ = [
    "DataStore",
    "StoreError",
    "PostgrestStore",
    "SqlStore",
    "build_store",
]
