"""Finance API services package."""

from finance_crm.services.api.client import (
    FinanceApiClient,
    NetworkError,
    NonSuccessStatusError,
    RequestFailedError,
    ensure_success,
    is_success,
)
from finance_crm.services.api.offline import (
    OFFLINE_HEADER,
    OfflineFallbackAdapter,
    ResponseCache,
    install_offline_fallback,
)

__all__ = [
    "FinanceApiClient",
    "NetworkError",
    "NonSuccessStatusError",
    "OFFLINE_HEADER",
    "OfflineFallbackAdapter",
    "RequestFailedError",
    "ResponseCache",
    "ensure_success",
    "install_offline_fallback",
    "is_success",
]
