# tychee_core/storage/__init__.py

from .keys import DataKey, StorageKey, INSTANCE, PERSISTENT
from .models import AuthMode, CredentialRecord, CredentialStatus, Permission, SessionKeyRecord
from .provider import StorageProvider
from .providers.memory_provider import InMemoryStorage
from .providers.sqlite_provider import SQLiteStorage
import os


def load_storage_provider(config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for selecting the runtime storage backend.

    For now:
        - memory (default)
        - sqlite
    """
    config = config or {}
    provider = (config.get("provider") or os.getenv("TYCHEE_STORAGE_PROVIDER", "memory")).lower()

    if provider == "memory":
        return InMemoryStorage()

    if provider == "sqlite":
        db_path = config.get("sqlite_path") or os.getenv("TYCHEE_DB_PATH", "db/tychee_state.db")
        return SQLiteStorage(db_path)

    raise ValueError(f"Unknown storage provider: {provider}")


__all__ = [
    "DataKey",
    "StorageKey",
    "INSTANCE",
    "PERSISTENT",
    "AuthMode",
    "CredentialRecord",
    "CredentialStatus",
    "Permission",
    "SessionKeyRecord",
    "StorageProvider",
    "InMemoryStorage",
    "SQLiteStorage",
    "load_storage_provider",
]
