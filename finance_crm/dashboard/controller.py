"""
Dashboard Controller

Owns the dashboard state and every transition of it:
- load cycles (summary + receitas + despesas, fetched concurrently)
- filter changes
- create and delete mutations, each followed by a full reload

CRITICAL: Load cycles are tagged with a monotonically increasing sequence
number. When a cycle finishes, its results are applied only if no newer
cycle has started since. Otherwise they are discarded, success or failure.

State is an immutable DashboardState snapshot. Every transition builds a
new snapshot and swaps the reference, so the UI never renders a summary
from one cycle next to lists from another.
"""

import asyncio
from datetime import datetime
from typing import Any, Mapping, Optional
from urllib.parse import quote

import structlog
from pydantic import BaseModel, Field, ValidationError

from finance_crm.audit import AuditLogger, create_correlation_id
from finance_crm.dashboard.movements import (
    RECENT_MOVEMENTS_LIMIT,
    merge_and_filter,
    stamp_kind,
)
from finance_crm.dashboard.notifications import NotificationCenter
from finance_crm.models.movement import (
    DashboardState,
    DashboardSummary,
    Filters,
    LoadStatus,
    Movement,
    MovementKind,
)
from finance_crm.services.api import FinanceApiClient, NetworkError, ensure_success
from finance_crm.services.auth import AuthExchange
from finance_crm.validation import FormValidationError, MovementForm, parse_form


logger = structlog.get_logger("finance_crm.dashboard")

SUMMARY_ENDPOINT = "/dashboard"

LOAD_FAILED_MESSAGE = "Nao foi possivel carregar os dados do dashboard."
INVALID_FORM_MESSAGE = "Revise os campos destacados."
SAVE_FAILED_MESSAGE = "Nao foi possivel salvar. Tente novamente."
DELETE_FAILED_MESSAGE = "Nao foi possivel remover o registro."

CREATED_MESSAGES = {
    MovementKind.RECEITA: "Receita adicionada!",
    MovementKind.DESPESA: "Despesa adicionada!",
}
DELETED_MESSAGES = {
    MovementKind.RECEITA: "Receita removida.",
    MovementKind.DESPESA: "Despesa removida.",
}


class SubmitOutcome(BaseModel):
    """Result of submit_movement()."""

    success: bool
    field_errors: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None
    reloaded: bool = False


class DashboardController:
    """
    Coordinates the dashboard against the finance API.

    Args:
        api_client: Authenticated API client
        auth: Auth exchange, used by logout()
        audit_logger: Optional audit trail
        notifier: Where user-facing toasts are queued
        summary_honors_filters: Send the date/text filters to /dashboard too
        recent_limit: Size of the recent movements table
    """

    def __init__(
        self,
        api_client: FinanceApiClient,
        auth: Optional[AuthExchange] = None,
        audit_logger: Optional[AuditLogger] = None,
        notifier: Optional[NotificationCenter] = None,
        summary_honors_filters: bool = False,
        recent_limit: int = RECENT_MOVEMENTS_LIMIT,
    ):
        self._api = api_client
        self._auth = auth
        self._audit_logger = audit_logger
        self._notifier = notifier or NotificationCenter()
        self._summary_honors_filters = summary_honors_filters
        self._recent_limit = recent_limit

        self._state = DashboardState()
        self._cycle = 0
        # Filters the loaded lists and summary were fetched with
        self._applied_filters = Filters()

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def cycle(self) -> int:
        """Sequence number of the most recently started load cycle."""
        return self._cycle

    @property
    def notifier(self) -> NotificationCenter:
        return self._notifier

    # =========================================================================
    # LOAD CYCLE
    # =========================================================================

    async def load_all(self, filters: Optional[Filters] = None) -> bool:
        """
        Fetch summary, receitas and despesas concurrently and apply them.

        Args:
            filters: New filters for this cycle; current ones if None

        Returns:
            True if this cycle's results were applied
        """
        self._cycle += 1
        cycle = self._cycle
        correlation_id = create_correlation_id()

        target_filters = filters if filters is not None else self._state.filters
        self._state = self._state.model_copy(update={
            "status": LoadStatus.LOADING,
            "filters": target_filters,
        })

        query = target_filters.to_query_params()
        summary_params = query if self._summary_honors_filters else None

        if self._audit_logger:
            await self._audit_logger.log_load_started(
                cycle=cycle,
                query=query,
                correlation_id=correlation_id,
            )

        results = await asyncio.gather(
            self._fetch_json(SUMMARY_ENDPOINT, summary_params),
            self._fetch_json(MovementKind.RECEITA.endpoint, query),
            self._fetch_json(MovementKind.DESPESA.endpoint, query),
            return_exceptions=True,
        )

        if cycle != self._cycle:
            logger.info("load_cycle_superseded", cycle=cycle, latest_cycle=self._cycle)
            if self._audit_logger:
                await self._audit_logger.log_load_superseded(
                    cycle=cycle,
                    latest_cycle=self._cycle,
                    correlation_id=correlation_id,
                )
            return False

        failure: Optional[Exception] = None
        for result in results:
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failure = result
                break

        if failure is None:
            summary_body, receitas_body, despesas_body = results
            try:
                summary = DashboardSummary.model_validate(summary_body)
                receitas = stamp_kind(receitas_body, MovementKind.RECEITA)
                despesas = stamp_kind(despesas_body, MovementKind.DESPESA)
            except (ValidationError, TypeError) as e:
                failure = e

        if failure is not None:
            error_message = str(failure) or type(failure).__name__
            logger.warning("load_cycle_failed", cycle=cycle, error=error_message)
            self._state = self._state.model_copy(update={
                "status": LoadStatus.LOAD_FAILED,
                "filters": self._applied_filters.model_copy(update={"tipo": target_filters.tipo}),
                "last_error": error_message,
            })
            self._notifier.error(LOAD_FAILED_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_load_failed(
                    cycle=cycle,
                    error_message=error_message,
                    correlation_id=correlation_id,
                )
            return False

        self._state = DashboardState(
            status=LoadStatus.LOADED,
            summary=summary,
            receitas=receitas,
            despesas=despesas,
            filters=target_filters,
            form_errors=self._state.form_errors,
            last_error=None,
            loaded_at=datetime.utcnow(),
        )
        self._applied_filters = target_filters

        if self._audit_logger:
            await self._audit_logger.log_load_completed(
                cycle=cycle,
                receitas=len(receitas),
                despesas=len(despesas),
                correlation_id=correlation_id,
            )
        return True

    async def _fetch_json(self, endpoint: str, params: Optional[dict[str, str]]) -> Any:
        response = await self._api.request(endpoint, params=params)
        ensure_success(response, endpoint)
        return response.json()

    async def refresh(self) -> bool:
        """Reload with the current filters."""
        return await self.load_all()

    async def set_filters(self, **changes: Any) -> bool:
        """
        Update filters.

        Only a change to inicio, fim or busca starts a new load cycle;
        tipo is applied client-side over the lists already loaded.

        Returns:
            True if the filters were applied (and, when a reload was
            needed, its results too)
        """
        current = self._state.filters
        updated = Filters.model_validate({**current.model_dump(), **changes})

        if updated.server_side_key() != current.server_side_key():
            return await self.load_all(updated)

        self._state = self._state.model_copy(update={"filters": updated})
        return True

    def recent_movements(self) -> list[Movement]:
        """Newest movements matching the kind filter, capped."""
        return merge_and_filter(
            self._state.receitas,
            self._state.despesas,
            self._state.filters,
            limit=self._recent_limit,
        )

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def submit_movement(self, form: Mapping[str, Any]) -> SubmitOutcome:
        """
        Validate and create a movement, then reload everything.

        Nothing is sent when validation fails. On a failed request the
        form errors are left as they were so the user can retry.
        """
        correlation_id = create_correlation_id()

        try:
            movement = parse_form(form, MovementForm)
        except FormValidationError as e:
            self._state = self._state.model_copy(update={"form_errors": e.field_errors})
            self._notifier.error(INVALID_FORM_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    "movement",
                    e.field_errors,
                    correlation_id=correlation_id,
                )
            return SubmitOutcome(success=False, field_errors=e.field_errors)

        kind = movement.tipo
        endpoint = kind.endpoint

        try:
            response = await self._api.request(
                endpoint,
                method="POST",
                body=movement.to_payload(),
            )
            ensure_success(response, endpoint)
        except NetworkError as e:
            logger.warning("movement_create_failed", kind=kind.value, error=str(e))
            self._notifier.error(SAVE_FAILED_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_movement_create_failed(
                    kind=kind.value,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return SubmitOutcome(success=False, error=str(e))

        self._state = self._state.model_copy(update={"form_errors": {}})
        self._notifier.success(CREATED_MESSAGES[kind])
        if self._audit_logger:
            await self._audit_logger.log_movement_created(
                kind=kind.value,
                descricao=movement.descricao,
                valor=str(movement.valor),
                correlation_id=correlation_id,
            )

        reloaded = await self.load_all()
        return SubmitOutcome(success=True, reloaded=reloaded)

    async def delete_movement(self, movement_id: str, tipo: Any) -> bool:
        """
        Delete a movement, then reload everything.

        Returns:
            True if the API accepted the delete
        """
        correlation_id = create_correlation_id()
        kind = MovementKind(tipo)
        endpoint = f"{kind.endpoint}/{quote(str(movement_id), safe='')}"

        try:
            response = await self._api.request(endpoint, method="DELETE")
            ensure_success(response, endpoint)
        except NetworkError as e:
            logger.warning("movement_delete_failed", id=str(movement_id), error=str(e))
            self._notifier.error(DELETE_FAILED_MESSAGE)
            if self._audit_logger:
                await self._audit_logger.log_movement_delete_failed(
                    movement_id=str(movement_id),
                    kind=kind.value,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return False

        self._notifier.success(DELETED_MESSAGES[kind])
        if self._audit_logger:
            await self._audit_logger.log_movement_deleted(
                movement_id=str(movement_id),
                kind=kind.value,
                correlation_id=correlation_id,
            )

        await self.load_all()
        return True

    async def logout(self) -> None:
        """End the session and forget everything loaded under it."""
        # Any cycle still in flight belongs to the old session
        self._cycle += 1
        self._state = DashboardState()
        self._applied_filters = Filters()
        if self._auth:
            await self._auth.logout()
