"""
Authentication Exchange

Turns user credentials into a session holding an API bearer token.

Two modes are supported, chosen by configuration:
- DELEGATED: POST /auth/login and keep the access_token the API returns
- LOCAL: compare against the single configured identity and mint the
  token here with the shared secret

In LOCAL mode the email is matched ignoring case and surrounding spaces;
the password must match exactly.

CRITICAL: A failed login never creates or modifies a session. The store
is written once, after the token is in hand.
"""

import hmac
from typing import Callable, Optional

import structlog

from finance_crm.audit import AuditLogger
from finance_crm.config.settings import AuthMode, AuthSettings
from finance_crm.models.session import Session
from finance_crm.services.api import (
    FinanceApiClient,
    NetworkError,
    ensure_success,
)
from finance_crm.services.auth.tokens import mint_token
from finance_crm.services.storage import SessionStoreInterface
from finance_crm.validation import FormValidationError, LoginForm, parse_form


logger = structlog.get_logger("finance_crm.auth")

DASHBOARD_ROUTE = "/dashboard"
LOGIN_ROUTE = "/login"
LOGIN_ENDPOINT = "/auth/login"

# Statuses the login endpoint uses for "wrong email or password"
REJECTED_LOGIN_STATUSES = {400, 401, 403}


class AuthError(Exception):
    """Base exception for authentication errors."""
    pass


class InvalidCredentialsError(AuthError):
    """Email and password do not match."""

    def __init__(self, message: str = "Credenciais inválidas"):
        super().__init__(message)


class AuthConfigurationError(AuthError):
    """The configured auth mode is missing what it needs."""
    pass


class AuthExchange:
    """
    Login/logout against the configured authority.

    Args:
        session_store: Where the resulting session is written
        settings: Auth configuration (mode, local identity, secret)
        api_client: Required in DELEGATED mode
        audit_logger: Optional audit trail
        navigate: Called with the route to show after login/logout
    """

    def __init__(
        self,
        session_store: SessionStoreInterface,
        settings: AuthSettings,
        api_client: Optional[FinanceApiClient] = None,
        audit_logger: Optional[AuditLogger] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ):
        self._store = session_store
        self._settings = settings
        self._api = api_client
        self._audit_logger = audit_logger
        self._navigate = navigate

    @property
    def mode(self) -> AuthMode:
        return self._settings.mode

    async def current_session(self) -> Optional[Session]:
        return await self._store.get_session()

    async def is_authenticated(self) -> bool:
        return await self._store.get_session() is not None

    async def login(self, email: str, password: str) -> Session:
        """
        Exchange credentials for a session.

        Returns:
            The new session, already written to the store

        Raises:
            FormValidationError: Malformed email or short password (no network call)
            InvalidCredentialsError: Credentials rejected
            AuthConfigurationError: Mode is missing its configuration
            NetworkError: DELEGATED mode could not reach the API
        """
        try:
            form = parse_form({"email": email, "password": password}, LoginForm)
        except FormValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed("login", e.field_errors)
            raise

        try:
            if self.mode == AuthMode.LOCAL:
                token = self._mint_local(form.email, form.password)
            else:
                token = await self._delegate(form.email, form.password)
        except (AuthError, NetworkError) as e:
            logger.info("login_rejected", email=form.email, mode=self.mode.value, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_login_failed(
                    email=form.email,
                    mode=self.mode.value,
                    reason=str(e),
                )
            raise

        session = Session(user_email=form.email, api_token=token)
        await self._store.set_session(session)

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(email=form.email, mode=self.mode.value)

        if self._navigate:
            self._navigate(DASHBOARD_ROUTE)

        return session

    async def logout(self) -> None:
        """Destroy the session and go back to the login screen."""
        session = await self._store.get_session()
        await self._store.clear()

        if session and self._audit_logger:
            await self._audit_logger.log_logout(session.user_email)

        if self._navigate:
            self._navigate(LOGIN_ROUTE)

    def _mint_local(self, email: str, password: str) -> str:
        """Check the fixed identity and sign a token for it."""
        settings = self._settings
        if not (settings.admin_email and settings.admin_password and settings.jwt_secret):
            raise AuthConfigurationError(
                "Local auth needs AUTH_ADMIN_EMAIL, AUTH_ADMIN_PASSWORD and AUTH_JWT_SECRET"
            )

        email_ok = hmac.compare_digest(
            email.strip().lower().encode("utf-8"),
            settings.admin_email.strip().lower().encode("utf-8"),
        )
        password_ok = hmac.compare_digest(
            password.encode("utf-8"),
            settings.admin_password.encode("utf-8"),
        )
        if not (email_ok and password_ok):
            raise InvalidCredentialsError()

        return mint_token(
            email=email,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_hours=settings.token_ttl_hours,
        )

    async def _delegate(self, email: str, password: str) -> str:
        """Let the API check the credentials and issue the token."""
        if self._api is None:
            raise AuthConfigurationError("Delegated auth needs an API client")

        response = await self._api.request(
            LOGIN_ENDPOINT,
            method="POST",
            body={"email": email, "password": password},
        )
        if response.status_code in REJECTED_LOGIN_STATUSES:
            raise InvalidCredentialsError()
        ensure_success(response, LOGIN_ENDPOINT)

        try:
            body = response.json()
            token = body["access_token"]
        except (ValueError, KeyError, TypeError):
            raise AuthError("Login response did not include an access token")

        if not isinstance(token, str) or not token:
            raise AuthError("Login response did not include an access token")

        token_type = body.get("token_type")
        if token_type and str(token_type).lower() != "bearer":
            logger.warning("unexpected_token_type", token_type=token_type)

        return token
