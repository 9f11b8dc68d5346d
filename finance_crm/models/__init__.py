"""
Data Models Package

This package contains all Pydantic models used by the Finance CRM client.
All data received from the API is parsed into these schemas.
"""

from finance_crm.models.movement import (
    DashboardState,
    DashboardSummary,
    Filters,
    KindFilter,
    LoadStatus,
    Movement,
    MovementKind,
    parse_movement_date,
)
from finance_crm.models.session import Session
from finance_crm.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Movement models
    "DashboardState",
    "DashboardSummary",
    "Filters",
    "KindFilter",
    "LoadStatus",
    "Movement",
    "MovementKind",
    "parse_movement_date",
    # Session
    "Session",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
