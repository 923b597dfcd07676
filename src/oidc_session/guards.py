"""Authentication guard for protected entry points.

:func:`require_authentication` starts a redirect sign-in when nothing else is
already resolving the session. :func:`authentication_required` wraps an async
handler so it only runs for an authenticated session.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar

from oidc_session.provider import AuthContext
from oidc_session.utils import LocationLike, has_auth_params, maybe_await

T = TypeVar("T")


async def require_authentication(
    auth: AuthContext,
    *,
    location: Optional[LocationLike] = None,
    on_before_signin: Optional[Callable[[], Any]] = None,
    signin_redirect_args: Optional[dict[str, Any]] = None,
) -> bool:
    """Ensure the session is authenticated, redirecting to sign-in if needed.

    No redirect is started while the location is a sign-in callback, the
    session is loading, a navigator operation is active, or the user is
    already authenticated.

    Args:
        auth: The current context from :attr:`AuthProvider.context
            <oidc_session.provider.AuthProvider.context>`.
        location: Location to check for callback parameters. Defaults to
            the current location installed by the host.
        on_before_signin: Called (and awaited if needed) right before the
            redirect starts.
        signin_redirect_args: Keyword arguments for ``signin_redirect``.

    Returns:
        ``auth.is_authenticated``.
    """
    if (
        has_auth_params(location)
        or auth.is_loading
        or auth.active_navigator is not None
        or auth.is_authenticated
    ):
        return auth.is_authenticated

    if on_before_signin is not None:
        await maybe_await(on_before_signin())
    await auth.signin_redirect(**(signin_redirect_args or {}))
    return False


def authentication_required(
    get_auth: Callable[[], AuthContext],
    *,
    location: Optional[LocationLike] = None,
    on_redirecting: Optional[Callable[[], Any]] = None,
    on_before_signin: Optional[Callable[[], Any]] = None,
    signin_redirect_args: Optional[dict[str, Any]] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[Optional[T]]]]:
    """Decorate an async handler so it only runs when authenticated.

    When the session is not authenticated the handler is skipped, the guard
    runs, and the result of ``on_redirecting()`` (or ``None``) is returned.
    ``location`` is checked for callback parameters on every call; leave it
    unset to check the current location installed by the host.

    Example::

        @authentication_required(lambda: provider.context)
        async def show_profile() -> str:
            return provider.state.user.profile["name"]
    """

    def decorator(handler: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[Optional[T]]]:
        @functools.wraps(handler)
        async def wrapper(*args: Any, **kwargs: Any) -> Optional[T]:
            auth = get_auth()
            if await require_authentication(
                auth,
                location=location,
                on_before_signin=on_before_signin,
                signin_redirect_args=signin_redirect_args,
            ):
                return await handler(*args, **kwargs)
            if on_redirecting is not None:
                return await maybe_await(on_redirecting())
            return None

        return wrapper

    return decorator
