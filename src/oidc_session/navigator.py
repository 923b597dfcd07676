"""Navigator coordinator -- wraps sign-in/sign-out flows with state transitions.

Every navigator operation runs through the same envelope:

1. dispatch :class:`~oidc_session.state.events.NavigatorInit`;
2. await the user manager's method with the caller's arguments;
3. on failure dispatch :class:`~oidc_session.state.events.Error` with the
   raised exception as-is and return ``None`` instead of raising;
4. always dispatch :class:`~oidc_session.state.events.NavigatorClose`.

Failures are therefore observed through
:attr:`AuthState.error <oidc_session.models.AuthState.error>`, never through
the call itself. Operations the user manager does not implement are
replaced by a callable that raises
:class:`~oidc_session.exceptions.UnsupportedEnvironmentError` as soon as it
is called, without touching the state.

``active_navigator`` is a single slot. With the default
:attr:`NavigatorPolicy.LAST_WINS` two overlapping operations share it: the
second ``NavigatorInit`` overwrites the first method and whichever operation
finishes first clears it. :attr:`NavigatorPolicy.REJECT_CONCURRENT` refuses
to start an operation while another is in flight instead.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Optional

from oidc_session.exceptions import NavigatorBusyError, UnsupportedEnvironmentError
from oidc_session.operations import (
    NavigatorOperation,
    UserManagerOperation,
    resolve_operations,
)
from oidc_session.state.events import Error, NavigatorClose, NavigatorInit

logger = logging.getLogger(__name__)

Dispatch = Callable[[Any], Any]


class NavigatorPolicy(str, enum.Enum):
    """How overlapping navigator operations are handled."""

    LAST_WINS = "last_wins"
    REJECT_CONCURRENT = "reject_concurrent"


def unsupported_environment(name: str) -> Callable[..., Any]:
    """Return a callable that raises :class:`UnsupportedEnvironmentError` for *name*."""

    def unsupported(*args: Any, **kwargs: Any) -> Any:
        raise UnsupportedEnvironmentError(name)

    unsupported.__name__ = name
    return unsupported


class NavigatorCoordinator:
    """Builds the navigator and pass-through callables for one user manager.

    Args:
        user_manager: The user manager whose methods are wrapped, or
            ``None`` when none is configured (every operation is then
            unsupported).
        dispatch: Callback applying an event to the session state, usually
            :meth:`AuthStateStore.dispatch
            <oidc_session.state.store.AuthStateStore.dispatch>`.
        policy: Handling of overlapping navigator operations.

    Example::

        coordinator = NavigatorCoordinator(user_manager, store.dispatch)
        signin = coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]
        user = await signin()
    """

    def __init__(
        self,
        user_manager: Any,
        dispatch: Dispatch,
        policy: NavigatorPolicy = NavigatorPolicy.LAST_WINS,
    ) -> None:
        self._dispatch = dispatch
        self._policy = policy
        self._in_flight = 0

        self.navigators: dict[NavigatorOperation, Callable[..., Any]] = {
            op: self._wrap(op, impl)
            for op, impl in resolve_operations(user_manager, NavigatorOperation).items()
        }
        self.passthrough: dict[UserManagerOperation, Callable[..., Any]] = {
            op: impl if impl is not None else unsupported_environment(op.value)
            for op, impl in resolve_operations(user_manager, UserManagerOperation).items()
        }

    @property
    def in_flight(self) -> int:
        """Number of navigator operations currently awaiting the user manager."""
        return self._in_flight

    def _wrap(
        self,
        op: NavigatorOperation,
        impl: Optional[Callable[..., Any]],
    ) -> Callable[..., Any]:
        if impl is None:
            return unsupported_environment(op.value)

        async def navigate(*args: Any, **kwargs: Any) -> Any:
            if self._policy is NavigatorPolicy.REJECT_CONCURRENT and self._in_flight:
                raise NavigatorBusyError(
                    f"Cannot start {op.value} while another navigator operation is in flight"
                )
            self._in_flight += 1
            self._dispatch(NavigatorInit(op))
            try:
                return await impl(*args, **kwargs)
            except Exception as exc:
                logger.debug("Navigator operation %s failed: %s", op.value, exc)
                self._dispatch(Error(exc))
                return None
            finally:
                self._in_flight -= 1
                self._dispatch(NavigatorClose())

        navigate.__name__ = op.value
        return navigate
