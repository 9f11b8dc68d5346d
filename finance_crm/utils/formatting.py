"""
Display formatting in the app's fixed locale (pt-BR, BRL).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from finance_crm.models.movement import parse_movement_date


Number = Union[Decimal, int, float]


def format_currency(valor: Optional[Number], com_simbolo: bool = True) -> str:
    """
    Format an amount as Brazilian Real.

    >>> format_currency(Decimal("1234.5"))
    'R$ 1.234,50'
    >>> format_currency(-10)
    '-R$ 10,00'
    """
    if valor is None:
        valor = Decimal("0")
    amount = Decimal(str(valor)) if isinstance(valor, float) else Decimal(valor)

    text = f"{abs(amount):,.2f}"
    # 1,234.50 -> 1.234,50
    text = text.replace(",", "X").replace(".", ",").replace("X", ".")

    simbolo = "R$ " if com_simbolo else ""
    sinal = "-" if amount < 0 else ""
    return f"{sinal}{simbolo}{text}"


def format_date(value: Union[str, date, datetime, None]) -> str:
    """
    Format a date as dd/mm/yyyy.

    Strings the API sends are parsed first; anything unparseable is
    shown as it came.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")

    parsed = parse_movement_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y")
