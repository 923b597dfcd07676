"""oidc_session -- client-side OpenID Connect session state.

This package tracks whether a user is authenticated, drives sign-in and
sign-out flows through a user manager (the component that actually talks to
the identity provider), and keeps the local session state in step with the
user manager's asynchronous notifications.

Typical usage::

    from oidc_session import AuthProvider

    provider = AuthProvider(user_manager=my_user_manager)
    async with provider:
        auth = provider.context
        if not auth.is_authenticated:
            await auth.signin_redirect()

Modules:
    provider: :class:`AuthProvider` and the :class:`AuthContext` surface.
    state: Event types, the reducer, and the state store.
    navigator: Wrapping of sign-in/sign-out flows.
    reconciler: Startup reconciliation.
    bridge: Forwarding of user-manager notifications.
    guards: Authentication guard for protected entry points.
    config: Settings files, environment, and precedence resolution.
    app: The ``oidc-session`` developer CLI.
"""

__version__ = "0.1.0"

from oidc_session.exceptions import (  # noqa: E402
    AuthSessionError,
    NavigatorBusyError,
    SigninError,
    SignoutError,
    UnsupportedEnvironmentError,
)
from oidc_session.guards import authentication_required, require_authentication  # noqa: E402
from oidc_session.models import AuthState, UserManagerSettings  # noqa: E402
from oidc_session.navigator import NavigatorPolicy  # noqa: E402
from oidc_session.operations import NavigatorOperation, UserManagerOperation  # noqa: E402
from oidc_session.provider import AuthContext, AuthProvider  # noqa: E402
from oidc_session.utils import (  # noqa: E402
    Location,
    has_auth_params,
    reset_current_location,
    set_current_location,
)

__all__ = [
    "AuthContext",
    "AuthProvider",
    "AuthSessionError",
    "AuthState",
    "Location",
    "NavigatorBusyError",
    "NavigatorOperation",
    "NavigatorPolicy",
    "SigninError",
    "SignoutError",
    "UnsupportedEnvironmentError",
    "UserManagerOperation",
    "UserManagerSettings",
    "authentication_required",
    "has_auth_params",
    "require_authentication",
    "reset_current_location",
    "set_current_location",
]
