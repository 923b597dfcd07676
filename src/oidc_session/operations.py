"""Enumerated user-manager operations and their lookup table.

The session core exposes two fixed groups of user-manager capabilities:

* :class:`NavigatorOperation` -- sign-in/sign-out flows that move the session
  through a loading state and are tracked in
  :attr:`~oidc_session.models.AuthState.active_navigator`.
* :class:`UserManagerOperation` -- management calls exposed as-is, without
  any state transitions.

Each member's value is the name of the method that implements it on a
:class:`~oidc_session.protocols.UserManager`. :func:`resolve_operations`
turns a concrete user manager into an explicit table mapping every member to
its bound implementation, or ``None`` when the user manager lacks it.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Optional, TypeVar

_OpT = TypeVar("_OpT", bound=enum.Enum)


class NavigatorOperation(str, enum.Enum):
    """Sign-in and sign-out flows that transition through a loading state."""

    SIGNIN_POPUP = "signin_popup"
    SIGNIN_SILENT = "signin_silent"
    SIGNIN_REDIRECT = "signin_redirect"
    SIGNIN_RESOURCE_OWNER_CREDENTIALS = "signin_resource_owner_credentials"
    SIGNOUT_POPUP = "signout_popup"
    SIGNOUT_REDIRECT = "signout_redirect"
    SIGNOUT_SILENT = "signout_silent"


class UserManagerOperation(str, enum.Enum):
    """Management calls passed straight through to the user manager."""

    CLEAR_STALE_STATE = "clear_stale_state"
    QUERY_SESSION_STATUS = "query_session_status"
    REVOKE_TOKENS = "revoke_tokens"
    START_SILENT_RENEW = "start_silent_renew"
    STOP_SILENT_RENEW = "stop_silent_renew"


def resolve_operations(
    user_manager: Any,
    operations: type[_OpT],
) -> dict[_OpT, Optional[Callable[..., Any]]]:
    """Build the lookup table from each operation to its implementation.

    Args:
        user_manager: The user manager to inspect, or ``None`` when no user
            manager is configured.
        operations: The operation enum to resolve (:class:`NavigatorOperation`
            or :class:`UserManagerOperation`).

    Returns:
        A dict with one entry per enum member. The value is the user
        manager's bound method, or ``None`` if it does not provide a
        callable of that name.
    """
    table: dict[_OpT, Optional[Callable[..., Any]]] = {}
    for op in operations:
        impl = getattr(user_manager, op.value, None) if user_manager is not None else None
        table[op] = impl if callable(impl) else None
    return table
