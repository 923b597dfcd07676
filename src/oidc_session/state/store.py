"""The session state store.

:class:`AuthStateStore` owns the current :class:`~oidc_session.models.AuthState`
for one user-manager instance. It applies events through the reducer and
notifies listeners after every transition, in dispatch order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from oidc_session.models import AuthState
from oidc_session.state.reducer import reducer as default_reducer

logger = logging.getLogger(__name__)

Listener = Callable[[AuthState], Any]


class AuthStateStore:
    """Holds the session state and applies transitions.

    Args:
        initial: Starting snapshot. Defaults to ``AuthState()``
            (``is_loading=True``, ``is_authenticated=False``).
        reducer: Transition function. Defaults to
            :func:`oidc_session.state.reducer.reducer`.

    Example::

        store = AuthStateStore()
        unsubscribe = store.subscribe(lambda s: print(s.is_loading))
        store.dispatch(Initialised(user=None))   # prints False
        unsubscribe()
    """

    def __init__(
        self,
        initial: Optional[AuthState] = None,
        reducer: Callable[[AuthState, Any], AuthState] = default_reducer,
    ) -> None:
        self._state = initial if initial is not None else AuthState()
        self._reducer = reducer
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AuthState:
        """The current snapshot."""
        return self._state

    def dispatch(self, event: Any) -> AuthState:
        """Apply *event* and notify listeners.

        Args:
            event: The event to apply.

        Returns:
            The new state.
        """
        self._state = self._reducer(self._state, event)
        logger.debug(
            "Dispatched %s -> loading=%s authenticated=%s navigator=%s",
            getattr(event, "type", type(event).__name__),
            self._state.is_loading,
            self._state.is_authenticated,
            self._state.active_navigator,
        )
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as exc:
                logger.warning("State listener %r failed: %s", listener, exc)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* to be called with each new state.

        Returns:
            A function that removes the listener. Calling it twice is safe.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
