"""Rendering of transport results for the ``apitransport`` CLI.

Decoded response values go to stdout so they can be piped; everything
else (failure messages, byte counts, progress) goes to stderr.  The
format is picked once per invocation:

* ``json`` -- JSON values pretty-printed, text passed through;
* ``plain`` -- one ``key<TAB>value`` line per mapping entry, one line per
  list item;
* ``rich`` -- JSON values syntax-highlighted, chosen automatically on an
  interactive terminal unless colour is disabled (``--no-color``,
  ``NO_COLOR``, ``TERM=dumb``).

Library code does not use this module; it logs through :mod:`logging`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from apitransport.models import SDKError


class OutputFormat(str, Enum):
    """Output formats for decoded values; ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes transport results and diagnostics for one CLI invocation.

    Args:
        format: Format for decoded values.  ``AUTO`` resolves on TTY detection.
        no_color: Disable colour and Rich markup on both streams.
        quiet: Drop informational diagnostics; errors and warnings remain.
        verbose: Show debug diagnostics.
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
            interactive = _is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=format == OutputFormat.RICH)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Transport results
    # ------------------------------------------------------------------ #

    def print_value(self, value: Any) -> None:
        """Write a decoded response value to stdout.

        ``None`` (an empty body) prints nothing.  Binary bodies are never
        written to the terminal; their size is reported on stderr.
        """
        if value is None:
            return
        if isinstance(value, (bytes, bytearray)):
            self.info(f"<{len(value)} bytes of binary data>")
            return
        if self._format == OutputFormat.JSON:
            self._write(_as_json(value))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(value):
                self._write(line)
        elif isinstance(value, (dict, list)):
            self._stdout.print(Syntax(_as_json(value), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(value), markup=False)

    def print_failure(self, error: Any) -> None:
        """Report the ``error`` arm of a failed :data:`~apitransport.models.SDKResponse`.

        An :class:`~apitransport.models.SDKError` is reported by its message;
        a decoded error body is announced on stderr and written to stdout.
        """
        if isinstance(error, SDKError):
            self.error(error.message)
            return
        self.error("Request failed")
        self.print_value(error)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def warning(self, message: str) -> None:
        self._diagnostic(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(message, label="[debug]", style="dim")

    def _diagnostic(self, message: str, label: str = "", style: Optional[str] = None) -> None:
        text = f"{label} {message}" if label else message
        if self._no_color or style is None:
            print(text, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[{style}]{escape(text)}[/{style}]")

    def _write(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)


def _as_json(value: Any) -> str:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _plain_lines(value: Any) -> list[str]:
    if isinstance(value, dict):
        return [f"{key}\t{item}" for key, item in value.items()]
    if isinstance(value, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in value
        ]
    return [str(value)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
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
    """Forget the installed manager; the next :func:`get_output` builds a new one."""
    global _output
    _output = None
