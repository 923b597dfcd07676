"""Auth provider -- wires the session core around one user manager.

:class:`AuthProvider` owns, for a single user-manager instance, the
:class:`~oidc_session.state.store.AuthStateStore`, the
:class:`~oidc_session.navigator.NavigatorCoordinator`, the
:class:`~oidc_session.reconciler.StartupReconciler` and the
:class:`~oidc_session.bridge.EventBridge`. The hosting layer activates it with
:meth:`AuthProvider.start` (or ``async with``), reads
:attr:`AuthProvider.context` and tears it down with :meth:`AuthProvider.stop`.

Typical usage::

    provider = AuthProvider(user_manager=my_user_manager)
    async with provider:
        auth = provider.context
        if not auth.is_authenticated:
            await auth.signin_redirect()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from oidc_session.bridge import EventBridge
from oidc_session.exceptions import ConfigError, UnsupportedEnvironmentError
from oidc_session.models import AuthState, UserManagerSettings
from oidc_session.navigator import (
    NavigatorCoordinator,
    NavigatorPolicy,
    unsupported_environment,
)
from oidc_session.operations import NavigatorOperation, UserManagerOperation
from oidc_session.reconciler import StartupReconciler
from oidc_session.state.store import AuthStateStore, Listener
from oidc_session.utils import LocationLike, maybe_await

logger = logging.getLogger(__name__)

UserManagerFactory = Callable[[UserManagerSettings], Any]


@dataclass(frozen=True)
class AuthContext:
    """Read-only view handed to the UI layer.

    Combines a state snapshot with callables pre-bound to the user manager.
    A new context is built whenever it is requested; the callables are the
    same objects across contexts of one provider.
    """

    is_loading: bool
    is_authenticated: bool
    user: Any
    active_navigator: Optional[NavigatorOperation]
    error: Any
    settings: Any
    events: Any
    signin_popup: Callable[..., Any]
    signin_silent: Callable[..., Any]
    signin_redirect: Callable[..., Any]
    signin_resource_owner_credentials: Callable[..., Any]
    signout_popup: Callable[..., Any]
    signout_redirect: Callable[..., Any]
    signout_silent: Callable[..., Any]
    clear_stale_state: Callable[..., Any]
    query_session_status: Callable[..., Any]
    revoke_tokens: Callable[..., Any]
    start_silent_renew: Callable[..., Any]
    stop_silent_renew: Callable[..., Any]
    remove_user: Callable[[], Any]


class AuthProvider:
    """Session core for one user manager.

    The user manager is picked once, at construction:

    * ``user_manager`` if given (``settings`` is then ignored);
    * else ``user_manager_factory(settings)`` if a factory is given;
    * else none -- the provider only carries ``settings`` and every
      operation raises :class:`~oidc_session.exceptions.UnsupportedEnvironmentError`.

    Args:
        settings: Settings for constructing a user manager, as a
            :class:`~oidc_session.models.UserManagerSettings` or a mapping.
        user_manager: A pre-constructed user manager.
        user_manager_factory: Builds a user manager from ``settings``.
        on_signin_callback: Hook called after a sign-in callback is consumed.
        skip_signin_callback: Never consume sign-in callbacks at startup.
        match_signout_callback: Decides from the settings whether the page
            load is a sign-out callback.
        on_signout_callback: Hook called after a sign-out callback is consumed.
        on_remove_user: Hook called after :meth:`remove_user`.
        location: Location inspected at startup. Defaults to the current
            location installed by the host.
        navigator_policy: Handling of overlapping navigator operations.

    Raises:
        ConfigError: If ``user_manager_factory`` is given without ``settings``.
    """

    def __init__(
        self,
        settings: Union[UserManagerSettings, Mapping[str, Any], None] = None,
        *,
        user_manager: Any = None,
        user_manager_factory: Optional[UserManagerFactory] = None,
        on_signin_callback: Optional[Callable[[Any], Any]] = None,
        skip_signin_callback: bool = False,
        match_signout_callback: Optional[Callable[[Any], bool]] = None,
        on_signout_callback: Optional[Callable[[Any], Any]] = None,
        on_remove_user: Optional[Callable[[], Any]] = None,
        location: Optional[LocationLike] = None,
        navigator_policy: NavigatorPolicy = NavigatorPolicy.LAST_WINS,
    ) -> None:
        if isinstance(settings, Mapping):
            settings = UserManagerSettings.model_validate(dict(settings))

        if user_manager is None and user_manager_factory is not None:
            if settings is None:
                raise ConfigError("user_manager_factory requires settings")
            user_manager = user_manager_factory(settings)
        if user_manager is None:
            logger.debug("No user manager configured; operations are unsupported")

        self._user_manager = user_manager
        self._settings = user_manager.settings if user_manager is not None else settings
        self._on_remove_user = on_remove_user

        self._store = AuthStateStore()
        self._coordinator = NavigatorCoordinator(
            user_manager, self._store.dispatch, policy=navigator_policy
        )
        self._reconciler = StartupReconciler(
            user_manager,
            self._store.dispatch,
            on_signin_callback=on_signin_callback,
            skip_signin_callback=skip_signin_callback,
            match_signout_callback=match_signout_callback,
            on_signout_callback=on_signout_callback,
            location=location,
        )
        self._bridge = EventBridge(user_manager, self._store.dispatch)

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def user_manager(self) -> Any:
        return self._user_manager

    @property
    def settings(self) -> Any:
        return self._settings

    @property
    def state(self) -> AuthState:
        """The current session state snapshot."""
        return self._store.state

    @property
    def context(self) -> AuthContext:
        """Snapshot of the state plus the bound operations."""
        state = self._store.state
        navigators = {op.value: fn for op, fn in self._coordinator.navigators.items()}
        passthrough = {op.value: fn for op, fn in self._coordinator.passthrough.items()}
        return AuthContext(
            is_loading=state.is_loading,
            is_authenticated=state.is_authenticated,
            user=state.user,
            active_navigator=state.active_navigator,
            error=state.error,
            settings=self._settings,
            events=getattr(self._user_manager, "events", None),
            remove_user=(
                self.remove_user
                if self._user_manager is not None
                else unsupported_environment("remove_user")
            ),
            **navigators,
            **passthrough,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every new state. Returns an unsubscribe function."""
        return self._store.subscribe(listener)

    def navigator(self, op: NavigatorOperation) -> Callable[..., Any]:
        """Return the coordinated callable for navigator operation *op*."""
        return self._coordinator.navigators[op]

    def operation(self, op: UserManagerOperation) -> Callable[..., Any]:
        """Return the pass-through callable for management operation *op*."""
        return self._coordinator.passthrough[op]

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Activate the provider.

        Subscribes to user-manager notifications, then runs startup
        reconciliation. Reconciliation only ever runs once per user
        manager, so restarting after :meth:`stop` only re-subscribes.
        """
        self._bridge.attach()
        await self._reconciler.run()

    async def stop(self) -> None:
        """Deactivate the provider and release the event subscriptions."""
        self._bridge.detach()

    async def __aenter__(self) -> AuthProvider:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def remove_user(self) -> None:
        """Remove the stored user, then call the ``on_remove_user`` hook.

        Raises:
            UnsupportedEnvironmentError: If no user manager is configured.
        """
        if self._user_manager is None:
            raise UnsupportedEnvironmentError("remove_user")
        await self._user_manager.remove_user()
        if self._on_remove_user is not None:
            await maybe_await(self._on_remove_user())
