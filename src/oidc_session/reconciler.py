"""Startup reconciliation -- resolves the session state on first activation.

The reconciler runs once per user-manager instance:

1. If the current location is a sign-in callback (and the caller did not opt
   out), the pending redirect is consumed with ``signin_callback()`` and the
   optional ``on_signin_callback`` hook is called with the result.
2. Otherwise, or if that produced no user, any stored user is loaded with
   ``get_user()``.
3. :class:`~oidc_session.state.events.Initialised` is dispatched with the
   resolved user. A failure in steps 1-3 is dispatched as an
   :class:`~oidc_session.state.events.Error` normalized with
   :func:`~oidc_session.utils.signin_error`.

Independently of the outcome above, if ``match_signout_callback(settings)``
is true the sign-out redirect is consumed with ``signout_callback()`` and
``on_signout_callback`` is called; failures there are normalized with
:func:`~oidc_session.utils.signout_error`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from oidc_session.state.events import Error, Initialised
from oidc_session.utils import (
    LocationLike,
    has_auth_params,
    maybe_await,
    signin_error,
    signout_error,
)

logger = logging.getLogger(__name__)


class StartupReconciler:
    """Determines the initial session state for one user manager.

    Args:
        user_manager: The user manager to reconcile against, or ``None``
            (reconciliation is then skipped).
        dispatch: Callback applying an event to the session state.
        on_signin_callback: Called with the user returned by
            ``signin_callback()``. May be a coroutine function.
        skip_signin_callback: Never consume a sign-in callback, even when the
            location carries callback parameters.
        match_signout_callback: Called with the user manager's settings;
            returning true means the page load is a sign-out callback.
        on_signout_callback: Called with the response of
            ``signout_callback()``. May be a coroutine function.
        location: Location inspected for callback parameters. Defaults to
            the current location installed by the host.
    """

    def __init__(
        self,
        user_manager: Any,
        dispatch: Callable[[Any], Any],
        *,
        on_signin_callback: Optional[Callable[[Any], Any]] = None,
        skip_signin_callback: bool = False,
        match_signout_callback: Optional[Callable[[Any], bool]] = None,
        on_signout_callback: Optional[Callable[[Any], Any]] = None,
        location: Optional[LocationLike] = None,
    ) -> None:
        self._user_manager = user_manager
        self._dispatch = dispatch
        self._on_signin_callback = on_signin_callback
        self._skip_signin_callback = skip_signin_callback
        self._match_signout_callback = match_signout_callback
        self._on_signout_callback = on_signout_callback
        self._location = location
        self._did_initialize = False

    @property
    def did_initialize(self) -> bool:
        """Whether reconciliation has already started for this user manager."""
        return self._did_initialize

    async def run(self) -> bool:
        """Run the reconciliation sequence unless it already ran.

        The one-shot flag is set before the first suspension point, so
        overlapping or repeated calls return immediately.

        Returns:
            True if this call performed the reconciliation.
        """
        if self._user_manager is None:
            logger.debug("No user manager configured, skipping reconciliation")
            return False
        if self._did_initialize:
            return False
        self._did_initialize = True

        await self._resolve_signin()
        await self._resolve_signout()
        return True

    async def _resolve_signin(self) -> None:
        um = self._user_manager
        try:
            user = None
            if has_auth_params(self._location) and not self._skip_signin_callback:
                logger.debug("Location carries sign-in callback parameters")
                user = await um.signin_callback()
                if self._on_signin_callback is not None:
                    await maybe_await(self._on_signin_callback(user))
            if user is None:
                user = await um.get_user()
            self._dispatch(Initialised(user))
            logger.info("Session initialised (user %s)", "present" if user is not None else "absent")
        except Exception as exc:
            logger.info("Sign-in resolution failed: %s", exc)
            self._dispatch(Error(signin_error(exc)))

    async def _resolve_signout(self) -> None:
        um = self._user_manager
        try:
            if self._match_signout_callback is not None and self._match_signout_callback(
                um.settings
            ):
                logger.debug("Location matches the sign-out callback")
                response = await um.signout_callback()
                if self._on_signout_callback is not None:
                    await maybe_await(self._on_signout_callback(response))
        except Exception as exc:
            logger.info("Sign-out resolution failed: %s", exc)
            self._dispatch(Error(signout_error(exc)))
