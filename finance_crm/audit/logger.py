"""
Audit Logger

DESIGN DECISION: Every significant client action is logged.
This provides:
1. Traceability of logins, load cycles and mutations
2. Debugging capability when the API misbehaves
3. An activity history the user can see

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_crm.models.audit import AuditEvent, AuditEventBuilder
from finance_crm.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: Optional[str] = None):
    """Structured logger for modules that log outside the audit trail."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend (for the activity history), if given
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_crm.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_login_succeeded(self, email: str, mode: str) -> None:
        """Log a successful login."""
        await self.log(AuditEventBuilder.login_succeeded(email=email, mode=mode))

    async def log_login_failed(self, email: str, mode: str, reason: str) -> None:
        """Log a rejected login."""
        await self.log(AuditEventBuilder.login_failed(email=email, mode=mode, reason=reason))

    async def log_logout(self, email: str) -> None:
        """Log a logout."""
        await self.log(AuditEventBuilder.logout(email=email))

    async def log_load_started(
        self,
        cycle: int,
        query: dict[str, str],
        correlation_id: UUID,
    ) -> None:
        """Log the start of a load cycle."""
        await self.log(AuditEventBuilder.load_started(
            cycle=cycle,
            query=query,
            correlation_id=correlation_id,
        ))

    async def log_load_completed(
        self,
        cycle: int,
        receitas: int,
        despesas: int,
        correlation_id: UUID,
    ) -> None:
        """Log a load cycle whose results were applied."""
        await self.log(AuditEventBuilder.load_completed(
            cycle=cycle,
            receitas=receitas,
            despesas=despesas,
            correlation_id=correlation_id,
        ))

    async def log_load_failed(
        self,
        cycle: int,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed load cycle."""
        await self.log(AuditEventBuilder.load_failed(
            cycle=cycle,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_load_superseded(
        self,
        cycle: int,
        latest_cycle: int,
        correlation_id: UUID,
    ) -> None:
        """Log a load cycle whose results were discarded."""
        await self.log(AuditEventBuilder.load_superseded(
            cycle=cycle,
            latest_cycle=latest_cycle,
            correlation_id=correlation_id,
        ))

    async def log_movement_created(
        self,
        kind: str,
        descricao: str,
        valor: str,
        correlation_id: UUID,
    ) -> None:
        """Log a created movement."""
        await self.log(AuditEventBuilder.movement_created(
            kind=kind,
            descricao=descricao,
            valor=valor,
            correlation_id=correlation_id,
        ))

    async def log_movement_create_failed(
        self,
        kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed create."""
        await self.log(AuditEventBuilder.movement_create_failed(
            kind=kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_movement_deleted(
        self,
        movement_id: str,
        kind: str,
        correlation_id: UUID,
    ) -> None:
        """Log a deleted movement."""
        await self.log(AuditEventBuilder.movement_deleted(
            movement_id=movement_id,
            kind=kind,
            correlation_id=correlation_id,
        ))

    async def log_movement_delete_failed(
        self,
        movement_id: str,
        kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed delete."""
        await self.log(AuditEventBuilder.movement_delete_failed(
            movement_id=movement_id,
            kind=kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        form: str,
        field_errors: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a form rejected by validation."""
        await self.log(AuditEventBuilder.validation_failed(
            form=form,
            field_errors=field_errors,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a submit) or load
    cycle. Pass it through all subsequent operations.
    """
    return uuid4()
