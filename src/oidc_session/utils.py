"""Small helpers used by the session core.

* :func:`has_auth_params` -- decides whether a page load is the target of an
  identity-provider redirect callback.
* :func:`normalize_error_fn` and the pre-built :func:`signin_error` /
  :func:`signout_error` -- turn arbitrary failure values into exceptions with
  a stable message.
* The *current location* -- the URL of the hosting environment. The host
  installs it once at its boundary via :func:`set_current_location`; core
  functions accept an explicit location and only fall back to it.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
from urllib.parse import parse_qs, urlsplit

from oidc_session.exceptions import AuthSessionError, SigninError, SignoutError


@dataclass(frozen=True)
class Location:
    """The query (``search``) and fragment (``hash``) parts of a URL.

    Both keep their leading delimiter, like a browser location does:
    ``Location(search="?code=abc&state=xyz", hash="")``.
    """

    search: str = ""
    hash: str = ""

    @classmethod
    def from_url(cls, url: str) -> Location:
        """Split *url* into a :class:`Location`."""
        parts = urlsplit(url)
        return cls(
            search=f"?{parts.query}" if parts.query else "",
            hash=f"#{parts.fragment}" if parts.fragment else "",
        )


LocationLike = Union[Location, str, Any]


# ------------------------------------------------------------------ #
# Current location (installed by the hosting environment)
# ------------------------------------------------------------------ #

_current_location: Optional[Location] = None


def get_current_location() -> Location:
    """Return the location installed by the host, or an empty one."""
    if _current_location is None:
        return Location()
    return _current_location


def set_current_location(location: LocationLike) -> None:
    """Install *location* as the current location of the hosting environment.

    Args:
        location: A :class:`Location`, a URL string, or any object with
            ``search`` and ``hash`` attributes.
    """
    global _current_location
    _current_location = _coerce_location(location)


def reset_current_location() -> None:
    """Forget the installed location. Mostly useful in tests."""
    global _current_location
    _current_location = None


def _coerce_location(location: LocationLike) -> Location:
    if isinstance(location, Location):
        return location
    if isinstance(location, str):
        return Location.from_url(location)
    return Location(
        search=getattr(location, "search", "") or "",
        hash=getattr(location, "hash", "") or "",
    )


# ------------------------------------------------------------------ #
# Callback detection
# ------------------------------------------------------------------ #


def _query_has_auth_params(query: str) -> bool:
    if query.startswith("?"):
        query = query[1:]
    params = parse_qs(query)
    if not params.get("state"):
        return False
    return bool(params.get("code") or params.get("error"))


def has_auth_params(location: Optional[LocationLike] = None) -> bool:
    """Return True if *location* is an identity-provider sign-in callback.

    A callback carries a ``state`` parameter together with either ``code``
    (success) or ``error`` (failure). The query string is checked first,
    then the fragment read as a query string. Parameters with empty values
    do not count.

    Args:
        location: The location to inspect. Defaults to the current location
            installed with :func:`set_current_location`.

    Example::

        >>> has_auth_params("https://app.example.com/?code=abc&state=xyz")
        True
        >>> has_auth_params("https://app.example.com/#error=access_denied&state=xyz")
        True
        >>> has_auth_params("https://app.example.com/?code=abc")
        False
    """
    loc = get_current_location() if location is None else _coerce_location(location)
    if _query_has_auth_params(loc.search):
        return True
    return _query_has_auth_params(loc.hash.replace("#", "?", 1))


# ------------------------------------------------------------------ #
# Error normalization
# ------------------------------------------------------------------ #


def normalize_error_fn(
    fallback_message: str,
    error_cls: type[AuthSessionError] = AuthSessionError,
) -> Callable[[Any], Exception]:
    """Build a function that turns any failure value into an exception.

    Exceptions pass through unchanged. Anything else (a rejected payload,
    an error string, ``None``) is replaced by ``error_cls(fallback_message)``
    with the original value kept on ``cause``.
    """

    def normalize(error: Any) -> Exception:
        if isinstance(error, Exception):
            return error
        return error_cls(fallback_message, cause=error)

    return normalize


signin_error = normalize_error_fn("Sign-in failed", SigninError)
signout_error = normalize_error_fn("Sign-out failed", SignoutError)


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it as-is.

    Lets caller-supplied hooks be plain functions or coroutine functions.
    """
    if inspect.isawaitable(value):
        return await value
    return value
