"""Dashboard state, load cycles and notifications."""

from finance_crm.dashboard.controller import (
    CREATED_MESSAGES,
    DELETED_MESSAGES,
    DELETE_FAILED_MESSAGE,
    INVALID_FORM_MESSAGE,
    LOAD_FAILED_MESSAGE,
    SAVE_FAILED_MESSAGE,
    SUMMARY_ENDPOINT,
    DashboardController,
    SubmitOutcome,
)
from finance_crm.dashboard.forms import (
    MOVEMENT_FORM_KEYS,
    MOVEMENT_TIPO_KEY,
    mark_movement_saved,
    reset_movement_form,
)
from finance_crm.dashboard.movements import (
    RECENT_MOVEMENTS_LIMIT,
    merge_and_filter,
    stamp_kind,
)
from finance_crm.dashboard.notifications import (
    Notification,
    NotificationCenter,
    NotificationLevel,
)

__all__ = [
    "CREATED_MESSAGES",
    "DELETED_MESSAGES",
    "DELETE_FAILED_MESSAGE",
    "INVALID_FORM_MESSAGE",
    "LOAD_FAILED_MESSAGE",
    "SAVE_FAILED_MESSAGE",
    "SUMMARY_ENDPOINT",
    "DashboardController",
    "SubmitOutcome",
    "MOVEMENT_FORM_KEYS",
    "MOVEMENT_TIPO_KEY",
    "mark_movement_saved",
    "reset_movement_form",
    "RECENT_MOVEMENTS_LIMIT",
    "merge_and_filter",
    "stamp_kind",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
]
