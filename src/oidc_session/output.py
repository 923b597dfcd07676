"""Rendering for the ``oidc-session`` CLI.

Session data (state snapshots, settings, transition traces) goes to
**stdout**; diagnostics go to **stderr**. The stdout format is picked once:

* ``--json`` -- machine-readable JSON.
* ``--plain`` -- tab-separated lines, one record per line.
* otherwise Rich tables when stdout is a terminal and colour is allowed,
  plain lines when piped.

``NO_COLOR`` and ``TERM=dumb`` disable colour the same way ``--no-color`` does.

The :class:`OutputManager` is built in :func:`~oidc_session.app.main_callback`,
installed with :func:`set_output` and fetched by commands via :func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Stdout formats. ``AUTO`` resolves to ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders session data and diagnostics for the CLI.

    Args:
        format: Stdout format. ``AUTO`` resolves from TTY detection.
        no_color: Disable colour and Rich markup.
        quiet: Drop informational messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Session data (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_mapping(self, data: dict[str, Any], title: Optional[str] = None) -> None:
        """Print one flat record, e.g. a state summary or a settings object.

        Plain mode prints ``field<TAB>value`` lines. Rich mode prints a
        two-column table, or highlighted JSON when a value is nested.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.PLAIN:
            for key, value in data.items():
                self.print_data(f"{key}\t{_plain_value(value)}")
        elif any(isinstance(v, (dict, list)) for v in data.values()):
            self._stdout.print(Syntax(_to_json(data), "json", word_wrap=True))
        else:
            table = Table(title=title, header_style="bold cyan")
            table.add_column("field")
            table.add_column("value")
            for key, value in data.items():
                table.add_row(key, _plain_value(value))
            self._stdout.print(table)

    def print_transitions(self, rows: Sequence[dict[str, Any]]) -> None:
        """Print a state trace: one row per applied event.

        Every row carries the same keys (``event`` followed by the state
        summary fields). Plain mode prints a tab-separated header line and
        one line per row; JSON mode prints a list of objects.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(list(rows)))
            return
        if not rows:
            return
        columns = list(rows[0])
        if self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(columns))
            for row in rows:
                self.print_data("\t".join(_plain_value(row[c]) for c in columns))
            return

        table = Table(title="Transitions", header_style="bold cyan")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(_plain_value(row[c]) for c in columns))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def error(self, message: str) -> None:
        """Never suppressed, not even by ``--quiet``."""
        self._diagnostic(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(message, label="[debug]", style="dim")

    def _diagnostic(self, message: str, label: str = "", style: str = "") -> None:
        text = f"{label} {message}" if label else message
        if self._no_color:
            print(text, file=sys.stderr, flush=True)
        elif style:
            self._stderr.print(text, style=style, markup=False, highlight=False)
        else:
            self._stderr.print(text, markup=False)


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when NO_COLOR is set (to anything) or TERM=dumb."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed :class:`OutputManager` (used between tests)."""
    global _output
    _output = None
