"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for the two pieces of
state the client keeps locally. This allows us to:
1. Keep the session in memory (tab lifetime) or persist the token
2. Use in-memory fakes for testing
3. Keep the auth exchange and API client decoupled from where the
   session lives

The session store is read by every API call and written only by the
auth exchange. Writes are whole-object replacements.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finance_crm.models.audit import AuditEvent
from finance_crm.models.session import Session


class SessionStoreInterface(ABC):
    """
    Abstract interface for the current authentication session.

    A single instance is shared by the components of one app; it is
    injected, never imported as a global.
    """

    @abstractmethod
    async def set_session(self, session: Session) -> None:
        """
        Replace the current session.

        Args:
            session: The new session (identity + token)

        Raises:
            SessionStoreError: If a persisted session cannot be written
        """
        pass

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """
        Read the current session.

        Returns:
            The session if one exists, None otherwise
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """
        Destroy the current session (logout).

        Clearing an empty store is a no-op.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one load cycle).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SessionStoreError(StorageError):
    """A persisted session could not be read or written."""
    pass
