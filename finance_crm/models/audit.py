"""
Audit Models for Finance CRM

Every significant client action is logged for audit purposes.
This provides:
1. Traceability of logins, load cycles and mutations
2. Debugging information when the API misbehaves
3. A visible activity history for the user

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Authentication
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Load cycles
    LOAD_STARTED = "load_started"
    LOAD_COMPLETED = "load_completed"
    LOAD_FAILED = "load_failed"
    LOAD_SUPERSEDED = "load_superseded"

    # Mutations
    MOVEMENT_CREATED = "movement_created"
    MOVEMENT_CREATE_FAILED = "movement_create_failed"
    MOVEMENT_DELETED = "movement_deleted"
    MOVEMENT_DELETE_FAILED = "movement_delete_failed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'session', 'movement', 'load_cycle')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to (server ids are strings)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one load cycle)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded(email, mode)
        event = AuditEventBuilder.load_completed(cycle, counts, correlation_id)
    """

    @staticmethod
    def login_succeeded(email: str, mode: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="session",
            entity_id=email,
            description=f"Login succeeded for {email}",
            details={"auth_mode": mode},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(email: str, mode: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            entity_id=email,
            description=f"Login failed for {email}",
            details={"auth_mode": mode},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def logout(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="session",
            entity_id=email,
            description=f"Session closed for {email}",
            is_user_action=True,
        )

    @staticmethod
    def load_started(
        cycle: int,
        query: dict[str, str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_STARTED,
            severity=AuditSeverity.DEBUG,
            entity_type="load_cycle",
            entity_id=str(cycle),
            correlation_id=correlation_id,
            description=f"Load cycle {cycle} started",
            details={"query": query},
        )

    @staticmethod
    def load_completed(
        cycle: int,
        receitas: int,
        despesas: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_COMPLETED,
            entity_type="load_cycle",
            entity_id=str(cycle),
            correlation_id=correlation_id,
            description=f"Load cycle {cycle} completed",
            details={
                "receitas": receitas,
                "despesas": despesas,
            },
        )

    @staticmethod
    def load_failed(
        cycle: int,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="load_cycle",
            entity_id=str(cycle),
            correlation_id=correlation_id,
            description=f"Load cycle {cycle} failed; previous data kept",
            error_message=error_message,
        )

    @staticmethod
    def load_superseded(
        cycle: int,
        latest_cycle: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_SUPERSEDED,
            severity=AuditSeverity.DEBUG,
            entity_type="load_cycle",
            entity_id=str(cycle),
            correlation_id=correlation_id,
            description=f"Load cycle {cycle} discarded, superseded by cycle {latest_cycle}",
            details={"latest_cycle": latest_cycle},
        )

    @staticmethod
    def movement_created(
        kind: str,
        descricao: str,
        valor: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_CREATED,
            entity_type="movement",
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} created: {descricao[:200]} - R$ {valor}",
            details={
                "tipo": kind,
                "descricao": descricao,
                "valor": valor,
            },
            is_user_action=True,
        )

    @staticmethod
    def movement_create_failed(
        kind: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="movement",
            correlation_id=correlation_id,
            description=f"Failed to create {kind}",
            details={"tipo": kind},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def movement_deleted(
        movement_id: str,
        kind: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_DELETED,
            entity_type="movement",
            entity_id=movement_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} {movement_id} deleted",
            details={"tipo": kind},
            is_user_action=True,
        )

    @staticmethod
    def movement_delete_failed(
        movement_id: str,
        kind: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="movement",
            entity_id=movement_id,
            correlation_id=correlation_id,
            description=f"Failed to delete {kind} {movement_id}",
            details={"tipo": kind},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        field_errors: dict[str, str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            entity_id=form,
            correlation_id=correlation_id,
            description=f"{form.capitalize()} form rejected with {len(field_errors)} invalid fields",
            details={"fields": field_errors},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
