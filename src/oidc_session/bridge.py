"""Event bridge -- forwards user-manager notifications into the session state.

Four notifications are re-tagged as reducer events:

=====================  ==================================================
Notification           Event
=====================  ==================================================
user loaded (user)     :class:`~oidc_session.state.events.UserLoaded`
user unloaded          :class:`~oidc_session.state.events.UserUnloaded`
user signed out        :class:`~oidc_session.state.events.UserSignedOut`
silent renew error     :class:`~oidc_session.state.events.Error`
=====================  ==================================================

Subscriptions are held as a scoped resource in a :class:`contextlib.ExitStack`,
so every subscription that was added is removed on teardown, including when
``attach()`` fails halfway through.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Callable, Optional

from oidc_session.state.events import Error, UserLoaded, UserSignedOut, UserUnloaded

logger = logging.getLogger(__name__)


class EventBridge:
    """Subscribes the session state to a user manager's notifications.

    Args:
        user_manager: The user manager whose ``events`` are observed, or
            ``None`` (the bridge then never subscribes).
        dispatch: Callback applying an event to the session state.

    Example::

        with EventBridge(user_manager, store.dispatch):
            ...  # state follows user-manager notifications here
    """

    def __init__(self, user_manager: Any, dispatch: Callable[[Any], Any]) -> None:
        self._user_manager = user_manager
        self._dispatch = dispatch
        self._stack: Optional[ExitStack] = None

    @property
    def attached(self) -> bool:
        return self._stack is not None

    def _handle_user_loaded(self, user: Any) -> None:
        self._dispatch(UserLoaded(user))

    def _handle_user_unloaded(self) -> None:
        self._dispatch(UserUnloaded())

    def _handle_user_signed_out(self) -> None:
        self._dispatch(UserSignedOut())

    def _handle_silent_renew_error(self, error: Any) -> None:
        self._dispatch(Error(error))

    def attach(self) -> None:
        """Subscribe all four handlers. Does nothing if already attached.

        Raises:
            Exception: Whatever the user manager raised while subscribing.
                Subscriptions added before the failure are removed first.
        """
        if self._stack is not None:
            return
        events = getattr(self._user_manager, "events", None)
        if events is None:
            logger.debug("No user manager events to subscribe to")
            return

        subscriptions = (
            ("user_loaded", self._handle_user_loaded),
            ("user_unloaded", self._handle_user_unloaded),
            ("user_signed_out", self._handle_user_signed_out),
            ("silent_renew_error", self._handle_silent_renew_error),
        )
        with ExitStack() as stack:
            for name, handler in subscriptions:
                add = getattr(events, f"add_{name}")
                remove = getattr(events, f"remove_{name}")
                add(handler)
                stack.callback(remove, handler)
            self._stack = stack.pop_all()
        logger.debug("Subscribed to user manager events")

    def detach(self) -> None:
        """Remove every subscription added by :meth:`attach`."""
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.close()
            logger.debug("Unsubscribed from user manager events")

    def __enter__(self) -> EventBridge:
        self.attach()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.detach()
