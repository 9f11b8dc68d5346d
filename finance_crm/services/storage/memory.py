"""
In-Memory Storage Implementations

The in-memory session store is the "session lives as long as the tab"
variant. The audit storage keeps a bounded history so the UI can show
recent activity without any external backend.
"""

from collections import deque
from typing import Optional
from uuid import UUID

from finance_crm.models.audit import AuditEvent
from finance_crm.models.session import Session
from finance_crm.services.storage.interface import (
    AuditStorageInterface,
    SessionStoreInterface,
)


class InMemorySessionStore(SessionStoreInterface):
    """
    Session held in a single attribute.

    Assigning a reference is atomic, so concurrent readers see either the
    old session or the new one, never a mix.
    """

    def __init__(self, session: Optional[Session] = None):
        self._session = session

    async def set_session(self, session: Session) -> None:
        self._session = session

    async def get_session(self) -> Optional[Session]:
        return self._session

    async def clear(self) -> None:
        self._session = None


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded, append-only audit history."""

    def __init__(self, max_events: int = 200):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = list(self._events)
        events.reverse()
        return events[:limit]
