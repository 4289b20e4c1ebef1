# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, registration)."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, overload

import typer
from rich.console import Console
from rich.text import Text

from ..core.logging import fail as core_fail
from ..core.logging import ok as core_ok
from ..core.logging import warn as core_warn
from ..errors import ResolverError

EXIT_READY: Final[int] = 0
EXIT_NOT_READY: Final[int] = 1
EXIT_ERROR: Final[int] = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_ERROR) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code

    @classmethod
    def from_resolver_error(cls, error: ResolverError) -> CLIError:
        """Return a CLI error reporting ``error`` as ``<kind>: <message>``."""

        return cls(f"{error.kind}: {error}", exit_code=EXIT_ERROR)


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool
    use_color: bool | None = None
    debug_enabled: bool = False
    _key_value_re: re.Pattern[str] = re.compile(r"([\w.-]+)=(\".*?\"|\S+)")

    def fail(self, message: str) -> None:
        """Log a failure message on standard error."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload; ``key=value`` pairs are highlighted.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated stderr console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger instance bound to a dedicated Rich console.
    """

    console = Console(no_color=no_color, highlight=False, stderr=True)
    return CLILogger(
        console=console,
        use_emoji=emoji,
        use_color=False if no_color else None,
        debug_enabled=debug,
    )


CommandCallable = Callable[..., int | None]
CommandDecoratorCallable = Callable[[CommandCallable], CommandCallable]


@overload
def register_command(
    app: typer.Typer,
    callback: CommandCallable,
    *,
    name: str | None = None,
    help_text: str | None = None,
) -> CommandCallable: ...


@overload
def register_command(
    app: typer.Typer,
    callback: None = ...,
    *,
    name: str | None = None,
    help_text: str | None = None,
) -> CommandDecoratorCallable: ...


def register_command(
    app: typer.Typer,
    callback: CommandCallable | None = None,
    *,
    name: str | None = None,
    help_text: str | None = None,
) -> CommandDecoratorCallable | CommandCallable:
    """Register a command on ``app`` with consistent metadata handling.

    Args:
        app: Typer application receiving the command registration.
        callback: Optional callable to register immediately.
        name: Optional explicit command name.
        help_text: Help text shown in CLI usage output.

    Returns:
        CommandDecoratorCallable | CommandCallable: Either the registered callback or
        a decorator for deferred registration.
    """

    decorator: CommandDecoratorCallable = app.command(name=name, help=help_text)
    if callback is not None:
        return decorator(callback)
    return decorator


__all__: Final = [
    "CLIError",
    "CLILogger",
    "EXIT_ERROR",
    "EXIT_NOT_READY",
    "EXIT_READY",
    "build_cli_logger",
    "register_command",
]
