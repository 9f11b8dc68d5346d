"""
Streamlit Frontend for Finance CRM

The dashboard a single user opens to follow income and expenses:
totals, filters, the most recent movements, and a form to add new ones.

DESIGN PRINCIPLES:
1. The API is the source of truth; every change is followed by a reload
2. Invalid input never leaves the page (field messages instead)
3. Failures are toasts, never a broken page
4. Every page except login requires a session

Components are created once per browser session, so the in-memory
session store lives exactly as long as the tab.
"""

import asyncio
from datetime import date

import streamlit as st

from finance_crm.config import validate_all_settings
from finance_crm.dashboard import (
    MOVEMENT_TIPO_KEY,
    NotificationLevel,
    mark_movement_saved,
    reset_movement_form,
)
from finance_crm.models.movement import KindFilter, LoadStatus, MovementKind
from finance_crm.orchestrator import AppComponents, create_app_components
from finance_crm.services.api import NetworkError
from finance_crm.services.auth import (
    DASHBOARD_ROUTE,
    LOGIN_ROUTE,
    AuthError,
    token_expiry,
)
from finance_crm.utils import format_currency, format_date
from finance_crm.validation import FormValidationError, ValidationResult, summarize_errors


# Page configuration
st.set_page_config(
    page_title="MyFinanceCRM",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

ACTIVITY_ROUTE = "/atividade"
SETTINGS_ROUTE = "/configuracoes"

PAGES = {
    "📊 Dashboard": DASHBOARD_ROUTE,
    "🕑 Atividade": ACTIVITY_ROUTE,
    "⚙️ Configurações": SETTINGS_ROUTE,
}

TOAST_ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.ERROR: "❌",
    NotificationLevel.INFO: "ℹ️",
}

KIND_LABELS = {
    KindFilter.TODOS: "Todos",
    KindFilter.RECEITA: "Receitas",
    KindFilter.DESPESA: "Despesas",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def navigate(route: str) -> None:
    """Route hook handed to the auth exchange."""
    st.session_state.route = route


def get_components() -> AppComponents:
    """Get or create this browser session's components."""
    if "components" not in st.session_state:
        try:
            st.session_state.components = create_app_components(navigate=navigate)
        except Exception as e:
            st.error(f"Falha ao iniciar: {e}")
            st.info("Configure FINANCE_API_BASE_URL no arquivo `.env`.")
            st.stop()
    return st.session_state.components


def show_notifications(components: AppComponents) -> None:
    for notification in components.notifier.drain():
        st.toast(notification.message, icon=TOAST_ICONS[notification.level])


def main():
    """Main application entry point."""
    components = get_components()

    if "route" not in st.session_state:
        st.session_state.route = LOGIN_ROUTE

    session = run_async(components.auth.current_session())

    # Protected-route guard
    if session is None:
        if st.session_state.route != LOGIN_ROUTE:
            navigate(LOGIN_ROUTE)
        render_login_page(components)
        show_notifications(components)
        return

    if st.session_state.route == LOGIN_ROUTE:
        navigate(DASHBOARD_ROUTE)

    st.sidebar.title("💰 MyFinanceCRM")
    st.sidebar.caption(session.user_email)
    expiry = token_expiry(session.api_token) if session.api_token else None
    if expiry:
        st.sidebar.caption(f"Sessão válida até {expiry.strftime('%d/%m/%Y %H:%M')} UTC")
    st.sidebar.markdown("---")

    labels = list(PAGES)
    current = next(
        (label for label, route in PAGES.items() if route == st.session_state.route),
        labels[0],
    )
    page = st.sidebar.radio("Navegar para:", labels, index=labels.index(current))
    navigate(PAGES[page])

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sair"):
        try:
            run_async(components.dashboard.logout())
        except Exception as e:
            run_async(components.audit_logger.log_error("logout_failed", str(e)))
            st.sidebar.error("Nao foi possivel sair. Tente de novo.")
        else:
            st.rerun()

    if st.session_state.route == DASHBOARD_ROUTE:
        render_dashboard_page(components)
    elif st.session_state.route == ACTIVITY_ROUTE:
        render_activity_page(components)
    elif st.session_state.route == SETTINGS_ROUTE:
        render_settings_page()

    show_notifications(components)


def render_login_page(components: AppComponents):
    """Render the login page."""
    st.title("💰 MyFinanceCRM")
    st.markdown("Entre para acompanhar suas receitas e despesas.")

    with st.form("login_form"):
        email = st.text_input("Email", placeholder="voce@exemplo.com")
        password = st.text_input("Senha", type="password")
        submitted = st.form_submit_button("Entrar", type="primary")

    if not submitted:
        return

    try:
        run_async(components.auth.login(email, password))
    except FormValidationError as e:
        st.error(summarize_errors(ValidationResult(valid=False, field_errors=e.field_errors)))
    except AuthError as e:
        st.error(str(e))
    except NetworkError:
        st.error("Nao foi possivel conectar ao servidor. Tente novamente.")
    else:
        st.rerun()


def render_dashboard_page(components: AppComponents):
    """Render the dashboard page."""
    dashboard = components.dashboard

    if dashboard.state.status == LoadStatus.IDLE:
        with st.spinner("Carregando..."):
            run_async(dashboard.load_all())

    header_col, refresh_col = st.columns([5, 1])
    with header_col:
        st.title("📊 Dashboard")
    with refresh_col:
        if st.button("🔄 Atualizar"):
            with st.spinner("Atualizando..."):
                run_async(dashboard.refresh())

    state = dashboard.state

    if state.status == LoadStatus.LOAD_FAILED:
        if state.has_data:
            st.warning("Exibindo os últimos dados carregados.")
        else:
            st.error("Nao foi possivel carregar os dados do dashboard.")

    # Summary cards
    summary = state.summary
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Receitas", format_currency(summary.total_receitas if summary else None))
    with col2:
        st.metric("Despesas", format_currency(summary.total_despesas if summary else None))
    with col3:
        st.metric("Saldo", format_currency(summary.saldo if summary else None))

    st.markdown("---")
    render_filters(components)

    st.markdown("---")
    render_recent_movements(components)

    st.markdown("---")
    render_movement_form(components)

    if state.loaded_at:
        st.caption(f"Atualizado em {state.loaded_at.strftime('%d/%m/%Y %H:%M:%S')} UTC")


def render_filters(components: AppComponents):
    dashboard = components.dashboard
    filters = dashboard.state.filters

    st.subheader("🔎 Filtros")
    with st.form("filters_form"):
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            inicio = st.date_input("Início", value=filters.inicio, format="DD/MM/YYYY")
        with col2:
            fim = st.date_input("Fim", value=filters.fim, format="DD/MM/YYYY")
        with col3:
            busca = st.text_input("Busca", value=filters.busca or "")
        with col4:
            kinds = list(KindFilter)
            tipo = st.selectbox(
                "Tipo",
                options=kinds,
                index=kinds.index(filters.tipo),
                format_func=lambda k: KIND_LABELS[k],
            )
        applied = st.form_submit_button("Aplicar filtros")

    if applied:
        with st.spinner("Carregando..."):
            run_async(dashboard.set_filters(inicio=inicio, fim=fim, busca=busca, tipo=tipo))
        st.rerun()


def render_recent_movements(components: AppComponents):
    dashboard = components.dashboard

    st.subheader("🧾 Movimentações recentes")
    movements = dashboard.recent_movements()
    if not movements:
        st.info("Nenhuma movimentação encontrada.")
        return

    header = st.columns([2, 4, 3, 3, 2, 1])
    for col, label in zip(header, ["Data", "Descrição", "Categoria", "Valor", "Tipo", ""]):
        col.markdown(f"**{label}**")

    for movement in movements:
        cols = st.columns([2, 4, 3, 3, 2, 1])
        cols[0].write(format_date(movement.data))
        cols[1].write(movement.descricao)
        cols[2].write(movement.categoria)
        cols[3].write(format_currency(movement.valor))
        cols[4].write("Receita" if movement.tipo == MovementKind.RECEITA else "Despesa")
        if cols[5].button("🗑️", key=f"delete-{movement.tipo.value}-{movement.id}"):
            with st.spinner("Removendo..."):
                run_async(dashboard.delete_movement(movement.id, movement.tipo))
            st.rerun()


def render_movement_form(components: AppComponents):
    dashboard = components.dashboard
    errors = dashboard.state.form_errors

    reset_movement_form(st.session_state)

    st.subheader("➕ Nova movimentação")
    with st.form("movement_form"):
        col1, col2 = st.columns(2)
        with col1:
            tipo = st.selectbox(
                "Tipo",
                options=list(MovementKind),
                format_func=lambda k: "Receita" if k == MovementKind.RECEITA else "Despesa",
                key=MOVEMENT_TIPO_KEY,
            )
            descricao = st.text_input("Descrição", key="movement_descricao")
            if "descricao" in errors:
                st.caption(f":red[{errors['descricao']}]")
            valor = st.text_input("Valor", placeholder="0,00", key="movement_valor")
            if "valor" in errors:
                st.caption(f":red[{errors['valor']}]")
        with col2:
            categoria = st.text_input("Categoria", key="movement_categoria")
            if "categoria" in errors:
                st.caption(f":red[{errors['categoria']}]")
            data = st.date_input("Data", value=date.today(), format="DD/MM/YYYY", key="movement_data")
            if "data" in errors:
                st.caption(f":red[{errors['data']}]")
        submitted = st.form_submit_button("Salvar", type="primary")

    if submitted:
        with st.spinner("Salvando..."):
            outcome = run_async(dashboard.submit_movement({
                "descricao": descricao,
                "valor": valor,
                "categoria": categoria,
                "data": data,
                "tipo": tipo,
            }))
        if outcome.success:
            mark_movement_saved(st.session_state)
        st.rerun()


def render_activity_page(components: AppComponents):
    """Render the recent activity page."""
    st.title("🕑 Atividade recente")

    storage = components.audit_logger.storage
    if storage is None:
        st.info("O histórico de atividade não está habilitado.")
        return

    events = run_async(storage.get_recent_events(limit=50))
    if not events:
        st.info("Nenhuma atividade registrada ainda.")
        return

    st.dataframe(
        [
            {
                "Quando": event.timestamp.strftime("%d/%m/%Y %H:%M:%S"),
                "Evento": event.event_type.value,
                "Nível": event.severity.value,
                "Detalhes": ", ".join(f"{k}={v}" for k, v in event.details.items()),
            }
            for event in events
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Configurações")

    st.markdown("### Status da configuração")

    status = validate_all_settings()

    sections = [
        ("API financeira", "api"),
        ("Autenticação", "auth"),
        ("Aplicação", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Não configurado")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuração")
    st.markdown(
        "Para configurar a aplicação, crie um arquivo `.env`. "
        "Veja `.env.example` para as variáveis disponíveis."
    )


if __name__ == "__main__":
    main()
