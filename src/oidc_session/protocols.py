"""Structural interfaces for the external collaborators of the session core.

The user manager performs the actual identity-provider work (network calls,
token persistence, silent renewal). The core only relies on the shapes
declared here, so any object with matching attributes can be plugged in.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class SessionRecord(Protocol):
    """The signed-in user as resolved by the user manager.

    Opaque to the session core except for :attr:`expired`.
    """

    @property
    def expired(self) -> bool: ...


@runtime_checkable
class UserManagerEvents(Protocol):
    """Subscription surface for user-manager lifecycle notifications."""

    def add_user_loaded(self, callback: Callable[[Any], Any]) -> None: ...

    def remove_user_loaded(self, callback: Callable[[Any], Any]) -> None: ...

    def add_user_unloaded(self, callback: Callable[[], Any]) -> None: ...

    def remove_user_unloaded(self, callback: Callable[[], Any]) -> None: ...

    def add_user_signed_out(self, callback: Callable[[], Any]) -> None: ...

    def remove_user_signed_out(self, callback: Callable[[], Any]) -> None: ...

    def add_silent_renew_error(self, callback: Callable[[Any], Any]) -> None: ...

    def remove_silent_renew_error(self, callback: Callable[[Any], Any]) -> None: ...


@runtime_checkable
class UserManager(Protocol):
    """Minimum contract of a user manager.

    Implementations may additionally provide any of the methods named by
    :class:`~oidc_session.operations.NavigatorOperation` and
    :class:`~oidc_session.operations.UserManagerOperation`; the ones they
    lack are reported as unsupported when called.
    """

    settings: Any
    events: UserManagerEvents

    async def get_user(self) -> Optional[SessionRecord]: ...

    async def remove_user(self) -> None: ...

    async def signin_callback(self, url: Optional[str] = None) -> Optional[SessionRecord]: ...

    async def signout_callback(self, url: Optional[str] = None) -> Any: ...
