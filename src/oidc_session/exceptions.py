"""Exception hierarchy for oidc_session.

All exceptions inherit from :class:`AuthSessionError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`oidc_session.exit_codes`. The CLI entry point :func:`oidc_session.app.main`
catches ``AuthSessionError`` and exits with the appropriate code.

Most of these never escape the session core: sign-in, sign-out and
navigator failures are recorded in :attr:`AuthState.error
<oidc_session.models.AuthState.error>` instead of being raised. The one
exception callers must handle is :class:`UnsupportedEnvironmentError`, which
signals a configuration mistake at the call site.

Subclass hierarchy::

    AuthSessionError (exit 1)
    +-- SigninError                  (exit 3)
    +-- SignoutError                 (exit 3)
    +-- UnknownEventError            (exit 1)
    +-- NavigatorBusyError           (exit 1)
    +-- UnsupportedEnvironmentError  (exit 2)
    +-- ConfigError                  (exit 1)
    +-- InvalidUsageError            (exit 2)
"""

from __future__ import annotations

from typing import Any

from oidc_session.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class AuthSessionError(Exception):
    """Base exception for all oidc_session errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
        cause: The original value this error was built from, when the
            error normalizer had to replace a non-exception value.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        cause: Any = None,
    ):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code
        self.cause = cause


class SigninError(AuthSessionError):
    """Raised (or recorded in state) when resolving the signed-in user fails."""

    exit_code = EXIT_AUTH_FAILURE


class SignoutError(AuthSessionError):
    """Raised (or recorded in state) when consuming a sign-out callback fails."""

    exit_code = EXIT_AUTH_FAILURE


class UnknownEventError(AuthSessionError):
    """Recorded in state when the reducer receives an event it does not know."""


class NavigatorBusyError(AuthSessionError):
    """Raised when a navigator operation starts while another is in flight.

    Only used with :attr:`NavigatorPolicy.REJECT_CONCURRENT
    <oidc_session.navigator.NavigatorPolicy.REJECT_CONCURRENT>`.
    """


class UnsupportedEnvironmentError(AuthSessionError):
    """Raised when an operation the user manager does not provide is called.

    Named after the operation so the message points at the missing
    capability, e.g. ``UserManager.signin_popup``.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, operation: str):
        super().__init__(
            f"UserManager.{operation} was called from an unsupported context. "
            "Pass a user manager implementation that provides it, or defer "
            "the call until one is configured."
        )
        self.operation = operation


class ConfigError(AuthSessionError):
    """Raised for configuration problems (missing or invalid settings files, bad values)."""


class InvalidUsageError(AuthSessionError):
    """Raised for invalid CLI arguments such as malformed event specs."""

    exit_code = EXIT_INVALID_USAGE
