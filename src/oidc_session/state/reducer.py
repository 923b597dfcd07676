"""The session reducer: a pure, total transition function.

``reducer(state, event)`` returns the next :class:`~oidc_session.models.AuthState`.
It has no side effects beyond a warning log for unknown events, and it never
raises. Each next state is constructed field by field; fields a transition
does not mention carry over from the previous state.

Transitions:

==================================  =====================================================
Event                               Effect
==================================  =====================================================
``Initialised`` / ``UserLoaded``    set ``user``, derive ``is_authenticated``,
                                    ``is_loading=False``, clear ``error``
``UserSignedOut`` / ``UserUnloaded`` clear ``user``, ``is_authenticated=False``
``NavigatorInit``                   ``is_loading=True``, ``active_navigator=method``
                                    (an unrecognised method is an unknown event)
``NavigatorClose``                  ``is_loading=False``, clear ``active_navigator``
``Error``                           ``is_loading=False``, set ``error``
anything else                       ``is_loading=False``, ``error=UnknownEventError``
==================================  =====================================================
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from oidc_session.exceptions import UnknownEventError
from oidc_session.models import AuthState
from oidc_session.operations import NavigatorOperation
from oidc_session.state.events import (
    Error,
    Initialised,
    NavigatorClose,
    NavigatorInit,
    UserLoaded,
    UserSignedOut,
    UserUnloaded,
)

logger = logging.getLogger(__name__)


def _is_authenticated(user: Any) -> bool:
    # Records without an expiry flag count as current.
    if user is None:
        return False
    if isinstance(user, Mapping):
        return not user.get("expired", False)
    return not getattr(user, "expired", False)


def _navigator_operation(method: Any) -> Optional[NavigatorOperation]:
    try:
        return NavigatorOperation(method)
    except (TypeError, ValueError):
        return None


def reducer(state: AuthState, event: Any) -> AuthState:
    """Apply *event* to *state* and return the next state.

    Args:
        state: The current snapshot.
        event: One of the event types in :mod:`oidc_session.state.events`.
            Any other value is treated as an unknown event.

    Returns:
        A new :class:`~oidc_session.models.AuthState`.
    """
    if isinstance(event, (Initialised, UserLoaded)):
        return AuthState(
            is_loading=False,
            is_authenticated=_is_authenticated(event.user),
            user=event.user,
            active_navigator=state.active_navigator,
            error=None,
        )

    if isinstance(event, (UserSignedOut, UserUnloaded)):
        return AuthState(
            is_loading=state.is_loading,
            is_authenticated=False,
            user=None,
            active_navigator=state.active_navigator,
            error=state.error,
        )

    if isinstance(event, NavigatorInit):
        method = _navigator_operation(event.method)
        if method is not None:
            return AuthState(
                is_loading=True,
                is_authenticated=state.is_authenticated,
                user=state.user,
                active_navigator=method,
                error=state.error,
            )
        return _unknown(state, f"{event.type} {event.method!r}")

    if isinstance(event, NavigatorClose):
        return AuthState(
            is_loading=False,
            is_authenticated=state.is_authenticated,
            user=state.user,
            active_navigator=None,
            error=state.error,
        )

    if isinstance(event, Error):
        return AuthState(
            is_loading=False,
            is_authenticated=state.is_authenticated,
            user=state.user,
            active_navigator=state.active_navigator,
            error=event.error,
        )

    return _unknown(state, getattr(event, "type", type(event).__name__))


def _unknown(state: AuthState, event_type: str) -> AuthState:
    logger.warning("Reducer received unknown event type %r", event_type)
    return AuthState(
        is_loading=False,
        is_authenticated=state.is_authenticated,
        user=state.user,
        active_navigator=state.active_navigator,
        error=UnknownEventError(f"unknown type {event_type}"),
    )
