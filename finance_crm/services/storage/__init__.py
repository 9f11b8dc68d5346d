"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the state
the client keeps locally: the session and the audit history.
"""

from finance_crm.services.storage.interface import (
    AuditStorageInterface,
    SessionStoreError,
    SessionStoreInterface,
    StorageError,
)
from finance_crm.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySessionStore,
)
from finance_crm.services.storage.file_store import FileSessionStore

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SessionStoreInterface",
    # Exceptions
    "SessionStoreError",
    "StorageError",
    # Implementations
    "FileSessionStore",
    "InMemoryAuditStorage",
    "InMemorySessionStore",
]
