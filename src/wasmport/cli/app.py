# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .catalog import catalog_app
from .resolve import resolve_command
from .shared import register_command

app = typer.Typer(
    help="Resolve WebAssembly build plans for native bioinformatics tools.",
    no_args_is_help=True,
    add_completion=False,
)
register_command(
    app,
    resolve_command,
    name="resolve",
    help_text="Resolve a tool profile into an ordered build plan with diagnostics.",
)
app.add_typer(catalog_app, name="catalog")


def main() -> None:
    """Run the ``wasmport`` command line."""

    app()


__all__ = ["app", "main"]
