"""Form validation package."""

from finance_crm.validation.validator import (
    FIELD_MESSAGES,
    FieldError,
    FormValidationError,
    LoginForm,
    MovementForm,
    ValidationResult,
    parse_amount,
    parse_form,
    summarize_errors,
    validate,
)

__all__ = [
    "FIELD_MESSAGES",
    "FieldError",
    "FormValidationError",
    "LoginForm",
    "MovementForm",
    "ValidationResult",
    "parse_amount",
    "parse_form",
    "summarize_errors",
    "validate",
]
