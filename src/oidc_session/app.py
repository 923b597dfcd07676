"""Typer application and CLI entry point for oidc-session.

The ``oidc-session`` command is a developer tool around the session core:

* ``check-callback URL`` -- tells whether a URL is a sign-in callback.
* ``settings`` -- shows the resolved user-manager settings.
* ``replay EVENT...`` -- runs a sequence of events through the reducer and
  prints the resulting session state.

:func:`main` is the console-script entry point declared in ``pyproject.toml``.
"""

from __future__ import annotations

import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import typer

from oidc_session import __version__
from oidc_session.exceptions import AuthSessionError, InvalidUsageError
from oidc_session.exit_codes import EXIT_GENERIC_FAILURE
from oidc_session.output import get_output


app = typer.Typer(
    name="oidc-session",
    help="Inspect and simulate OpenID Connect client session state.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oidc-session {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~oidc_session.output.OutputManager` from the
    CLI flags and, with ``--verbose``, routes ``oidc_session`` debug logs
    to stderr.
    """
    from oidc_session.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    if verbose:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
        package_logger = logging.getLogger("oidc_session")
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)


# ------------------------------------------------------------------ #
# check-callback
# ------------------------------------------------------------------ #


@app.command("check-callback")
def check_callback(
    url: str = typer.Argument(help="URL of the page load to inspect."),
) -> None:
    """Report whether URL is the target of a sign-in redirect callback.

    Example::

        oidc-session check-callback "https://app.example.com/?code=abc&state=xyz"
    """
    from oidc_session.utils import Location, has_auth_params

    location = Location.from_url(url)
    is_callback = has_auth_params(location)
    get_output().print_mapping(
        {
            "url": url,
            "search": location.search,
            "hash": location.hash,
            "is_callback": is_callback,
        },
        title="Callback check",
    )


# ------------------------------------------------------------------ #
# settings
# ------------------------------------------------------------------ #


@app.command("settings")
def show_settings(
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Settings JSON file (defaults to the config dir)."
    ),
    authority: Optional[str] = typer.Option(None, "--authority", help="Override authority."),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Override client_id."),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Override redirect_uri."
    ),
) -> None:
    """Show the resolved user-manager settings.

    Precedence: command-line overrides, then ``OIDC_SESSION_*`` environment
    variables, then the settings file.
    """
    from oidc_session.config import resolve_settings

    overrides = {
        "authority": authority,
        "client_id": client_id,
        "redirect_uri": redirect_uri,
    }
    try:
        settings = resolve_settings(path=file, overrides=overrides)
    except AuthSessionError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code)
    get_output().print_mapping(settings.model_dump(mode="json"), title="Settings")


# ------------------------------------------------------------------ #
# replay
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ReplayUser:
    """Stand-in session record used by ``replay``."""

    expired: bool = False
    name: str = "replay-user"


def parse_event_spec(spec: str) -> Any:
    """Turn an event spec such as ``navigator_init:signin_popup`` into an event.

    Recognised specs: ``init``, ``init:expired``, ``init:none``,
    ``user_loaded``, ``user_loaded:expired``, ``signed_out``, ``unloaded``,
    ``navigator_init:<operation>``, ``navigator_close``, ``error:<message>``.

    Raises:
        InvalidUsageError: If *spec* is not recognised.
    """
    from oidc_session.operations import NavigatorOperation
    from oidc_session.state.events import (
        Error,
        Initialised,
        NavigatorClose,
        NavigatorInit,
        UserLoaded,
        UserSignedOut,
        UserUnloaded,
    )

    name, _, arg = spec.partition(":")
    name = name.strip().lower()

    if name in ("init", "user_loaded"):
        if arg == "none":
            user = None
        elif arg in ("", "expired"):
            user = ReplayUser(expired=arg == "expired")
        else:
            raise InvalidUsageError(f"Unknown user modifier in event spec: {spec!r}")
        return Initialised(user) if name == "init" else UserLoaded(user)
    if name == "signed_out":
        return UserSignedOut()
    if name == "unloaded":
        return UserUnloaded()
    if name == "navigator_init":
        try:
            return NavigatorInit(NavigatorOperation(arg))
        except ValueError:
            valid = ", ".join(op.value for op in NavigatorOperation)
            raise InvalidUsageError(
                f"Unknown navigator operation {arg!r}. Valid operations: {valid}"
            ) from None
    if name == "navigator_close":
        return NavigatorClose()
    if name == "error":
        return Error(AuthSessionError(arg or "error"))
    raise InvalidUsageError(f"Unknown event spec: {spec!r}")


@app.command("replay")
def replay(
    events: List[str] = typer.Argument(help="Event specs to apply in order."),
    trace: bool = typer.Option(
        False, "--trace", "-t", help="Print the state after every event."
    ),
) -> None:
    """Apply EVENTS to a fresh session state and print the final state.

    Example::

        oidc-session replay navigator_init:signin_popup user_loaded navigator_close
    """
    from oidc_session.state import AuthStateStore

    store = AuthStateStore()
    try:
        parsed = [parse_event_spec(spec) for spec in events]
    except AuthSessionError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    rows = []
    for event in parsed:
        store.dispatch(event)
        rows.append({"event": event.type, **store.state.to_summary()})
        get_output().debug(f"{event.type}: {rows[-1]}")

    if trace:
        get_output().print_transitions(rows)
    else:
        get_output().print_mapping(store.state.to_summary(), title="Session state")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``oidc-session`` console script.

    Unhandled :class:`~oidc_session.exceptions.AuthSessionError` instances
    cause a clean exit with the error's ``exit_code``; anything else exits
    with :data:`~oidc_session.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except AuthSessionError as exc:
        get_output().error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        get_output().error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
