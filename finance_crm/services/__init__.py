"""Services package."""

from finance_crm.services.api import (
    FinanceApiClient,
    NetworkError,
    NonSuccessStatusError,
    OfflineFallbackAdapter,
    RequestFailedError,
    ResponseCache,
    ensure_success,
    install_offline_fallback,
    is_success,
)
from finance_crm.services.storage import (
    AuditStorageInterface,
    FileSessionStore,
    InMemoryAuditStorage,
    InMemorySessionStore,
    SessionStoreError,
    SessionStoreInterface,
    StorageError,
)

__all__ = [
    # API
    "FinanceApiClient",
    "NetworkError",
    "NonSuccessStatusError",
    "OfflineFallbackAdapter",
    "RequestFailedError",
    "ResponseCache",
    "ensure_success",
    "install_offline_fallback",
    "is_success",
    # Storage services
    "AuditStorageInterface",
    "FileSessionStore",
    "InMemoryAuditStorage",
    "InMemorySessionStore",
    "SessionStoreError",
    "SessionStoreInterface",
    "StorageError",
]
