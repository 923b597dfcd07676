"""Events consumed by the session reducer.

Each event is a frozen dataclass with a class-level ``type`` tag. Events are
transient: they are built, dispatched, and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from oidc_session.operations import NavigatorOperation


@dataclass(frozen=True)
class Initialised:
    """Startup reconciliation resolved the user (possibly ``None``)."""

    user: Optional[Any] = None
    type: ClassVar[str] = "INITIALISED"


@dataclass(frozen=True)
class UserLoaded:
    """The user manager loaded or renewed the user."""

    user: Optional[Any] = None
    type: ClassVar[str] = "USER_LOADED"


@dataclass(frozen=True)
class UserSignedOut:
    """The identity provider reported that the user signed out."""

    type: ClassVar[str] = "USER_SIGNED_OUT"


@dataclass(frozen=True)
class UserUnloaded:
    """The user manager dropped the stored user."""

    type: ClassVar[str] = "USER_UNLOADED"


@dataclass(frozen=True)
class NavigatorInit:
    """A navigator operation started."""

    method: NavigatorOperation
    type: ClassVar[str] = "NAVIGATOR_INIT"


@dataclass(frozen=True)
class NavigatorClose:
    """A navigator operation finished, successfully or not."""

    type: ClassVar[str] = "NAVIGATOR_CLOSE"


@dataclass(frozen=True)
class Error:
    """An operation failed; ``error`` is recorded in state as given."""

    error: Any
    type: ClassVar[str] = "ERROR"


AuthEvent = Union[
    Initialised,
    UserLoaded,
    UserSignedOut,
    UserUnloaded,
    NavigatorInit,
    NavigatorClose,
    Error,
]
