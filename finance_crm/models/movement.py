"""
Core Data Models for Finance CRM

These models define the schemas for everything the client receives from,
or sends to, the finance API. They are designed to:
1. Enforce type safety at runtime
2. Keep the client-side merged view explicit (a movement always has a kind)
3. Be immutable snapshots, so a state update is one reference swap

DESIGN DECISION: The API is the system of record. Nothing here derives
totals or ids; they are always taken from the server.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class MovementKind(str, Enum):
    """
    Kind of a movement.

    The kind is implied by the endpoint a movement lives under
    (/receitas or /despesas); it is never part of a create payload.
    """
    RECEITA = "receita"
    DESPESA = "despesa"

    @property
    def endpoint(self) -> str:
        """Collection endpoint for this kind."""
        return "/receitas" if self is MovementKind.RECEITA else "/despesas"


class KindFilter(str, Enum):
    """Client-side filter over the merged movement list."""
    TODOS = "todos"
    RECEITA = "receita"
    DESPESA = "despesa"

    def matches(self, kind: MovementKind) -> bool:
        return self is KindFilter.TODOS or self.value == kind.value


class LoadStatus(str, Enum):
    """
    State of the dashboard load cycle.

    IDLE -> LOADING -> LOADED | LOAD_FAILED, and any new cycle
    (filter change, refresh, mutation) goes back to LOADING.
    """
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


# =============================================================================
# API RECORDS
# =============================================================================

class Movement(BaseModel):
    """
    A single income or expense entry as shown on the dashboard.

    The API returns records without `tipo`; the controller stamps it
    from the endpoint the record was fetched from.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        description="Server-assigned identifier"
    )
    descricao: str = Field(
        default="",
        description="Free-text description"
    )
    valor: Decimal = Field(
        ...,
        description="Amount, two-decimal currency semantics"
    )
    categoria: str = Field(
        default="",
        description="Category label"
    )
    data: str = Field(
        ...,
        description="Date string as returned by the API"
    )
    tipo: MovementKind

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        """Some backends send numeric ids."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator('valor', mode='before')
    @classmethod
    def coerce_valor(cls, v):
        """Amounts may come back as strings (e.g. from NUMERIC columns)."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @property
    def parsed_date(self) -> Optional[datetime]:
        """The `data` field as a datetime, or None if it cannot be parsed."""
        return parse_movement_date(self.data)


class DashboardSummary(BaseModel):
    """
    Aggregate totals computed by the server.

    CRITICAL: The client never recomputes these. After every mutation the
    summary is refetched so there is a single source of truth.
    """
    model_config = ConfigDict(frozen=True)

    total_receitas: Decimal = Decimal("0")
    total_despesas: Decimal = Decimal("0")
    saldo: Decimal = Decimal("0")

    @field_validator('total_receitas', 'total_despesas', 'saldo', mode='before')
    @classmethod
    def coerce_number(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v


class Filters(BaseModel):
    """
    Dashboard filters.

    inicio, fim and busca are applied by the server (query parameters);
    tipo is applied client-side over the merged list.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    inicio: Optional[date] = None
    fim: Optional[date] = None
    busca: Optional[str] = None
    tipo: KindFilter = KindFilter.TODOS

    @field_validator('inicio', 'fim', 'busca', mode='before')
    @classmethod
    def empty_is_absent(cls, v):
        """Form inputs send '' for 'not set'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_query_params(self) -> dict[str, str]:
        """Server-side filters as query parameters, omitting unset ones."""
        params = {}
        if self.inicio:
            params["inicio"] = self.inicio.isoformat()
        if self.fim:
            params["fim"] = self.fim.isoformat()
        if self.busca:
            params["busca"] = self.busca
        return params

    def server_side_key(self) -> tuple:
        """The part of the filter whose change requires a refetch."""
        return (self.inicio, self.fim, self.busca)


# =============================================================================
# DASHBOARD STATE
# =============================================================================

class DashboardState(BaseModel):
    """
    Snapshot of everything the dashboard displays.

    Replaced as a whole on every transition, so readers never see a
    summary from one load cycle next to lists from another.
    """
    model_config = ConfigDict(frozen=True)

    status: LoadStatus = LoadStatus.IDLE
    summary: Optional[DashboardSummary] = None
    receitas: tuple[Movement, ...] = ()
    despesas: tuple[Movement, ...] = ()
    filters: Filters = Field(default_factory=Filters)
    form_errors: dict[str, str] = Field(default_factory=dict)
    last_error: Optional[str] = None
    loaded_at: Optional[datetime] = None

    @property
    def is_loading(self) -> bool:
        return self.status == LoadStatus.LOADING

    @property
    def has_data(self) -> bool:
        return self.summary is not None


def parse_movement_date(value: str) -> Optional[datetime]:
    """
    Parse the date strings the API is known to send.

    Accepts plain ISO dates ("2024-01-05") and ISO datetimes, with or
    without a trailing "Z".
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    # Compare naive and aware values on the same footing
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
