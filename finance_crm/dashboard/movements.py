"""
Client-side view of the movement lists.

The server already applied the date and text filters when the lists
were fetched. What is left for the client is the kind filter, the
ordering, and the cap of the "recent movements" table.
"""

from datetime import datetime
from typing import Any, Iterable, Union

from finance_crm.models.movement import Filters, KindFilter, Movement, MovementKind


RECENT_MOVEMENTS_LIMIT = 6


def stamp_kind(records: Any, kind: MovementKind) -> tuple[Movement, ...]:
    """
    Parse API records into movements of the given kind.

    The list endpoints do not send `tipo`; it is implied by the endpoint.

    Raises:
        TypeError: If the body is not a list
        pydantic.ValidationError: If a record is malformed
    """
    if not isinstance(records, list):
        raise TypeError(f"Expected a list of {kind.value}s, got {type(records).__name__}")
    return tuple(
        Movement.model_validate({**record, "tipo": kind})
        for record in records
    )


def _newest_first_key(movement: Movement) -> datetime:
    # Unparseable dates sort last
    return movement.parsed_date or datetime.min


def merge_and_filter(
    receitas: Iterable[Movement],
    despesas: Iterable[Movement],
    filters: Union[Filters, KindFilter, str] = KindFilter.TODOS,
    limit: int = RECENT_MOVEMENTS_LIMIT,
) -> list[Movement]:
    """
    Merge both lists, keep the selected kind, newest first, capped at `limit`.

    The sort is stable: movements with the same date keep fetch order
    (receitas before despesas, each in server order).
    """
    if isinstance(filters, Filters):
        kind_filter = filters.tipo
    else:
        kind_filter = KindFilter(filters)

    merged = [*receitas, *despesas]
    selected = [m for m in merged if kind_filter.matches(m.tipo)]
    selected.sort(key=_newest_first_key, reverse=True)
    return selected[:limit]
