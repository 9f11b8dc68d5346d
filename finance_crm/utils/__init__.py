"""Display helpers."""

from finance_crm.utils.formatting import format_currency, format_date

__all__ = ["format_currency", "format_date"]
