"""Session state machine: event types, the reducer, and the state store.

The store is the single owner of :class:`~oidc_session.models.AuthState`.
Every change goes through :meth:`AuthStateStore.dispatch`, which applies
:func:`reducer` to the current snapshot.

Typical usage::

    from oidc_session.state import AuthStateStore, NavigatorInit

    store = AuthStateStore()
    store.dispatch(NavigatorInit(NavigatorOperation.SIGNIN_POPUP))
    assert store.state.is_loading
"""

from oidc_session.state.events import (
    AuthEvent,
    Error,
    Initialised,
    NavigatorClose,
    NavigatorInit,
    UserLoaded,
    UserSignedOut,
    UserUnloaded,
)
from oidc_session.state.reducer import reducer
from oidc_session.state.store import AuthStateStore

__all__ = [
    "AuthEvent",
    "AuthStateStore",
    "Error",
    "Initialised",
    "NavigatorClose",
    "NavigatorInit",
    "UserLoaded",
    "UserSignedOut",
    "UserUnloaded",
    "reducer",
]
