"""Session state and token lifecycle management."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyinventory._api import auth as _auth_api
from pyinventory._constants import AUTH_LOGIN_ENDPOINT, STORE_KEY_TOKEN, STORE_KEY_USER
from pyinventory._transport import SleepFunc, Transport
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import AuthenticationError, InventoryError, NotConfiguredError
from pyinventory.models._base import utcnow
from pyinventory.models.notification import NotificationType
from pyinventory.models.user import UserIdentity, UserRole
from pyinventory.notifications import Notifier, NullNotifier
from pyinventory.storage import LocalStore

_logger = logging.getLogger(__name__)

#: Lifetime the API grants a bearer token.
DEFAULT_TOKEN_TTL = timedelta(days=7)


class SessionState(StrEnum):
    UNINITIALIZED = "uninitialized"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class Session(BaseModel):
    """Immutable token + identity pair.

    Parameters
    ----------
    token : str
        Bearer token sent as ``Authorization: Bearer <token>``.
    user : UserIdentity
        The authenticated user.
    issued_at : datetime
        When the token was obtained (login, restore or refresh).
    ttl : timedelta
        Token validity; the API issues 7-day tokens.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: str
    user: UserIdentity
    issued_at: datetime = Field(default_factory=utcnow)
    ttl: timedelta = DEFAULT_TOKEN_TTL

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + self.ttl

    @property
    def is_expired(self) -> bool:
        return utcnow() >= self.expires_at


StateListener = Callable[[SessionState], None]


class SessionManager:
    """Sole owner of the bearer token.

    The transport reads the token through :meth:`auth_headers` and reports
    HTTP 401 through :meth:`handle_unauthorized`; nothing else mutates it.

    Lifecycle::

        UNINITIALIZED -> RESTORING -> AUTHENTICATED | ANONYMOUS
        AUTHENTICATED -> ANONYMOUS   (logout, failed refresh, 401)

    While authenticated a background task renews the token every
    ``config.token_refresh_interval`` seconds.
    """

    def __init__(
        self,
        config: InventoryConfig,
        store: LocalStore,
        *,
        notifier: Notifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._config = config
        self._store = store
        self._notifier: Notifier = notifier or NullNotifier()
        self._sleep = sleep
        self._transport: Transport | None = None
        self._session: Session | None = None
        self._state = SessionState.UNINITIALIZED
        self._refresh_task: asyncio.Task[None] | None = None
        # Bumped whenever the session is replaced or dropped; in-flight
        # verify/refresh results from an older generation are discarded.
        self._generation = 0
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Wiring and accessors
    # ------------------------------------------------------------------

    def bind_transport(self, transport: Transport) -> None:
        self._transport = transport

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise NotConfiguredError("Session manager has no transport. Use 'async with InventoryClient(...)'")
        if not self._config.remote_configured:
            raise NotConfiguredError("No remote API is configured")
        return self._transport

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if self._session is not None else None

    @property
    def user(self) -> UserIdentity | None:
        return self._session.user if self._session is not None else None

    @property
    def role(self) -> UserRole | None:
        return self._session.user.role if self._session is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def auth_headers(self) -> dict[str, str]:
        token = self.token
        if not token:
            return {}
        return {"authorization": f"Bearer {token}"}

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a state-change callback; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        if state is SessionState.AUTHENTICATED:
            self._start_refresh_timer()
        else:
            self._stop_refresh_timer()
        if previous is state:
            return
        _logger.info("Session state %s -> %s", previous.value, state.value)
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.debug("session listener failed", exc_info=True)

    def _persist(self) -> None:
        if self._session is None:
            return
        self._store.set(STORE_KEY_USER, self._session.user.to_wire())
        self._store.set(STORE_KEY_TOKEN, self._session.token)

    def _purge(self) -> bool:
        """Drop the in-memory and persisted session; returns whether one existed."""
        existed = self._session is not None or self._store.get(STORE_KEY_TOKEN) is not None
        self._generation += 1
        self._session = None
        self._store.remove(STORE_KEY_USER)
        self._store.remove(STORE_KEY_TOKEN)
        return existed

    def set_token(self, token: str) -> None:
        """Replace the bearer token of the current session (memory and store)."""
        if self._session is None:
            raise NotConfiguredError("Cannot set a token without an authenticated user")
        self._session = self._session.model_copy(update={"token": token, "issued_at": utcnow()})
        self._store.set(STORE_KEY_TOKEN, token)

    def clear(self) -> None:
        """Drop the session silently (no user notification)."""
        self._purge()
        self._set_state(SessionState.ANONYMOUS)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def init(self) -> SessionState:
        """Restore a persisted session, verifying its token remotely.

        Any failure purges the persisted credentials. Without a configured
        remote nothing can be verified, so the stored session is kept but
        not used. The manager always ends in ``AUTHENTICATED`` or
        ``ANONYMOUS``.
        """
        self._set_state(SessionState.RESTORING)
        if not self._config.remote_configured:
            _logger.debug("No remote configured; starting anonymous")
            self._set_state(SessionState.ANONYMOUS)
            return self._state
        try:
            saved_user: Any = self._store.get(STORE_KEY_USER)
            saved_token: Any = self._store.get(STORE_KEY_TOKEN)
            if saved_user and isinstance(saved_token, str) and saved_token:
                if isinstance(saved_user, str):
                    user = UserIdentity.model_validate_json(saved_user)
                else:
                    user = UserIdentity.model_validate(saved_user)
                self._session = Session(token=saved_token, user=user)
                generation = self._generation
                await _auth_api.verify_token(self._require_transport())
                if generation == self._generation:
                    self._set_state(SessionState.AUTHENTICATED)
        except (InventoryError, ValueError) as exc:
            _logger.warning("Stored session rejected: %s", exc)
            self._purge()
        finally:
            if self._state is SessionState.RESTORING:
                self._session = None
                self._set_state(SessionState.ANONYMOUS)
        return self._state

    async def login(self, email: str, password: str) -> UserIdentity:
        """Authenticate and persist the returned token and user.

        Raises
        ------
        AuthenticationError
            Bad credentials, a malformed response, or any transport
            failure (chained as ``__cause__``).
        """
        transport = self._require_transport()
        try:
            token, user = await _auth_api.login(transport, email, password)
        except InventoryError as exc:
            self._notifier.notify(NotificationType.ERROR, "Login Failed", str(exc))
            if isinstance(exc, AuthenticationError):
                raise
            raise AuthenticationError(f"Login failed: {exc}", endpoint=AUTH_LOGIN_ENDPOINT) from exc

        self._generation += 1
        self._session = Session(token=token, user=user)
        self._persist()
        self._set_state(SessionState.AUTHENTICATED)
        self._notifier.notify(NotificationType.SUCCESS, f"Welcome back, {user.name}!")
        return user

    def logout(self) -> None:
        """Clear the session everywhere. Safe to call repeatedly."""
        existed = self._purge()
        self._set_state(SessionState.ANONYMOUS)
        if existed:
            self._notifier.notify(NotificationType.SUCCESS, "You have been successfully logged out.")

    async def refresh(self) -> bool:
        """Renew the token; on any failure log out (fail closed)."""
        transport = self._require_transport()
        generation = self._generation
        try:
            token = await _auth_api.refresh_token(transport)
        except InventoryError as exc:
            _logger.warning("Token refresh failed: %s", exc)
            if generation == self._generation:
                self.logout()
            return False

        if generation != self._generation or self._session is None:
            _logger.debug("Discarding refreshed token for a session that ended mid-request")
            return False
        self.set_token(token)
        _logger.debug("Token refreshed")
        return True

    def handle_unauthorized(self) -> None:
        """Called by the transport on HTTP 401."""
        if self._session is None and self._store.get(STORE_KEY_TOKEN) is None:
            return
        _logger.info("Received HTTP 401; dropping session token")
        self.clear()

    async def close(self) -> None:
        """Stop background work. The session itself is left intact."""
        task = self._refresh_task
        self._refresh_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Scheduled refresh
    # ------------------------------------------------------------------

    def _start_refresh_timer(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        if self._config.token_refresh_interval <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._refresh_task = loop.create_task(self._refresh_loop(), name="pyinventory-token-refresh")

    def _stop_refresh_timer(self) -> None:
        task = self._refresh_task
        self._refresh_task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # A refresh that logs out from inside the loop exits on its own.
        if task is not current:
            task.cancel()

    async def _refresh_loop(self) -> None:
        while self._state is SessionState.AUTHENTICATED:
            await self._sleep(self._config.token_refresh_interval)
            if self._state is not SessionState.AUTHENTICATED:
                break
            await self.refresh()
