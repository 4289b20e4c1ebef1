# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``wasmport catalog``: validate and inspect pattern catalogs."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from ..catalog.loader import load_catalog
from ..catalog.model_catalog import PatternCatalog
from ..catalog.registry import default_catalog
from ..core.console import detect_tty, get_console_manager
from ..errors import ResolverError
from .rendering import build_catalog_table, build_signatures_table
from .shared import CLIError, build_cli_logger, register_command

catalog_app = typer.Typer(help="Validate and inspect pattern catalogs.", no_args_is_help=True)


def _load(catalog: Path | None) -> PatternCatalog:
    return default_catalog() if catalog is None else load_catalog(catalog)


def _summary(catalog: PatternCatalog) -> dict[str, object]:
    return {
        "version": catalog.version,
        "checksum": catalog.checksum,
        "rules": [
            {
                "id": rule.identifier,
                "priority": rule.priority,
                "when": rule.predicate.describe(),
                "flags": [entry.namespace for entry in rule.flags],
                "stages": [template.name for template in rule.stages],
            }
            for rule in sorted(catalog.rules, key=lambda item: (-item.priority, item.index))
        ],
        "signatures": [
            {
                "id": signature.identifier,
                "severity": signature.severity.value,
                "triggers": list(signature.triggers),
            }
            for signature in catalog.signatures
        ],
        "exclusions": [
            {"id": exclusion.identifier, "capabilities": list(exclusion.capabilities)}
            for exclusion in catalog.exclusions
        ],
    }


@register_command(catalog_app, name="validate", help_text="Load a catalog and report whether it is valid.")
def catalog_validate(
    catalog: Path | None = typer.Option(None, "--catalog", "-c", help="Catalog JSON file or directory."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji output."),
) -> None:
    """Load a catalog and report whether it is valid."""

    logger = build_cli_logger(emoji=emoji)
    try:
        loaded = _load(catalog)
    except ResolverError as exc:
        error = CLIError.from_resolver_error(exc)
        logger.fail(str(error))
        raise typer.Exit(code=error.exit_code) from exc
    logger.ok(
        f"catalog {loaded.version} is valid: {len(loaded.rules)} rules, "
        f"{len(loaded.signatures)} signatures, {len(loaded.exclusions)} exclusions",
    )
    logger.echo(f"checksum {loaded.checksum}")


@register_command(catalog_app, name="show", help_text="Print the rules and signatures of a catalog.")
def catalog_show(
    catalog: Path | None = typer.Option(None, "--catalog", "-c", help="Catalog JSON file or directory."),
    output_format: str = typer.Option(
        "table",
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: table (default) or json.",
    ),
) -> None:
    """Print the rules and signatures of a catalog."""

    logger = build_cli_logger(emoji=True)
    try:
        loaded = _load(catalog)
    except ResolverError as exc:
        error = CLIError.from_resolver_error(exc)
        logger.fail(str(error))
        raise typer.Exit(code=error.exit_code) from exc
    if output_format.lower() == "json":
        logger.echo(json.dumps(_summary(loaded), indent=2))
        return
    if output_format.lower() != "table":
        raise typer.BadParameter("Choose 'table' or 'json'", param_hint="--format")
    console = get_console_manager().get(color=detect_tty(), emoji=True)
    console.print(build_catalog_table(loaded))
    console.print(build_signatures_table(loaded))


__all__ = ["catalog_app", "catalog_show", "catalog_validate"]
