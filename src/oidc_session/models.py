"""Pydantic models shared across oidc_session.

**Session state** -- :class:`AuthState`, the immutable snapshot produced by the
reducer in :mod:`oidc_session.state.reducer`. A new instance is built for every
transition; nothing mutates a snapshot in place.

**Configuration** -- :class:`UserManagerSettings`, the settings a user manager
is constructed from. Loaded and merged by :mod:`oidc_session.config`.
Unknown keys are preserved in ``model_extra`` so provider-specific options
reach the user manager untouched.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from oidc_session.operations import NavigatorOperation


# --- Session state ---


class AuthState(BaseModel):
    """Snapshot of the client-side authentication session.

    ``is_authenticated`` is never set on its own: the reducer derives it
    from ``user`` on every transition that touches ``user``.

    Example::

        state = AuthState()
        assert state.is_loading and not state.is_authenticated
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_loading: bool = Field(
        default=True,
        description="True while initialisation or a navigator operation is in flight",
    )
    is_authenticated: bool = Field(
        default=False,
        description="True iff a non-expired user is present",
    )
    user: Any = Field(default=None, description="The current session record")
    active_navigator: Optional[NavigatorOperation] = Field(
        default=None, description="The in-flight navigator operation"
    )
    error: Any = Field(
        default=None, description="Last error; cleared when a user loads"
    )

    def to_summary(self) -> dict[str, Any]:
        """Return a JSON-friendly view of the state for display."""
        return {
            "is_loading": self.is_loading,
            "is_authenticated": self.is_authenticated,
            "user": None if self.user is None else repr(self.user),
            "active_navigator": (
                None if self.active_navigator is None else self.active_navigator.value
            ),
            "error": None if self.error is None else str(self.error),
        }


# --- Configuration ---


class UserManagerSettings(BaseModel):
    """Settings used to construct a user manager.

    Only the common OpenID Connect client fields are declared; anything
    else is kept as an extra field.

    Example::

        UserManagerSettings(
            authority="https://id.example.com",
            client_id="spa",
            redirect_uri="https://app.example.com/callback",
        )
    """

    model_config = ConfigDict(extra="allow")

    authority: str = Field(description="Identity provider issuer URL")
    client_id: str = Field(description="OAuth2 client identifier")
    redirect_uri: str = Field(description="Where the provider returns after sign-in")
    post_logout_redirect_uri: Optional[str] = Field(
        default=None, description="Where the provider returns after sign-out"
    )
    silent_redirect_uri: Optional[str] = None
    popup_redirect_uri: Optional[str] = None
    scope: str = Field(default="openid", description="Space-separated scopes")
    response_type: str = "code"
    automatic_silent_renew: bool = True
