"""
Component wiring for Finance CRM

This module builds the object graph the UI talks to:
session store -> API client (+ offline fallback) -> auth exchange ->
dashboard controller, all sharing one audit logger.

DESIGN DECISION: There is exactly one session store per app instance
and every component that needs the session gets that same store.
Nothing reads credentials from anywhere else.
"""

from typing import Callable, NamedTuple, Optional

import requests
import structlog

from finance_crm.audit import AuditLogger, configure_logging
from finance_crm.config import (
    ApiSettings,
    AppSettings,
    AuthSettings,
    SessionBackend,
    get_settings,
)
from finance_crm.dashboard import DashboardController, NotificationCenter
from finance_crm.services.api import (
    FinanceApiClient,
    OfflineFallbackAdapter,
    install_offline_fallback,
)
from finance_crm.services.auth import AuthExchange
from finance_crm.services.storage import (
    FileSessionStore,
    InMemoryAuditStorage,
    InMemorySessionStore,
    SessionStoreInterface,
)


logger = structlog.get_logger("finance_crm.orchestrator")


class AppComponents(NamedTuple):
    session_store: SessionStoreInterface
    api_client: FinanceApiClient
    auth: AuthExchange
    audit_logger: AuditLogger
    notifier: NotificationCenter
    dashboard: DashboardController
    offline_adapter: Optional[OfflineFallbackAdapter]


def create_session_store(auth_settings: AuthSettings) -> SessionStoreInterface:
    """The session store selected by AUTH_SESSION_BACKEND."""
    if auth_settings.session_backend == SessionBackend.FILE:
        return FileSessionStore(auth_settings.session_file)
    return InMemorySessionStore()


def create_app_components(
    api_settings: Optional[ApiSettings] = None,
    auth_settings: Optional[AuthSettings] = None,
    app_settings: Optional[AppSettings] = None,
    http_session: Optional[requests.Session] = None,
    navigate: Optional[Callable[[str], None]] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        api_settings: API configuration; loaded from the environment if None
        auth_settings: Auth configuration; loaded from the environment if None
        app_settings: App configuration; loaded from the environment if None
        http_session: requests session to use (tests pass one with a fake adapter)
        navigate: Route hook called by login/logout

    Returns:
        AppComponents with every service wired together
    """
    if api_settings is None or auth_settings is None or app_settings is None:
        settings = get_settings()
        api_settings = api_settings or settings.api
        auth_settings = auth_settings or settings.auth
        app_settings = app_settings or settings.app

    configure_logging(app_settings.log_level)

    session_store = create_session_store(auth_settings)
    audit_logger = AuditLogger(InMemoryAuditStorage(max_events=app_settings.audit_history_size))
    notifier = NotificationCenter()

    api_client = FinanceApiClient(
        base_url=api_settings.base_url,
        session_store=session_store,
        http_session=http_session,
    )

    offline_adapter = None
    if api_settings.offline_fallback_enabled:
        offline_adapter = install_offline_fallback(
            api_client.http_session,
            scope=api_settings.base_url,
            populate=api_settings.offline_cache_populate,
        )

    auth = AuthExchange(
        session_store=session_store,
        settings=auth_settings,
        api_client=api_client,
        audit_logger=audit_logger,
        navigate=navigate,
    )

    dashboard = DashboardController(
        api_client=api_client,
        auth=auth,
        audit_logger=audit_logger,
        notifier=notifier,
        summary_honors_filters=api_settings.summary_honors_filters,
        recent_limit=app_settings.recent_movements_limit,
    )

    logger.info(
        "app_components_created",
        base_url=api_settings.base_url,
        auth_mode=auth_settings.mode.value,
        session_backend=auth_settings.session_backend.value,
        offline_fallback=offline_adapter is not None,
    )

    return AppComponents(
        session_store=session_store,
        api_client=api_client,
        auth=auth,
        audit_logger=audit_logger,
        notifier=notifier,
        dashboard=dashboard,
        offline_adapter=offline_adapter,
    )
