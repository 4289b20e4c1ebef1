# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``wasmport resolve``: turn a tool profile into a build plan."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

import typer

from ..catalog.loader import load_catalog
from ..config import Config, load_config
from ..core.console import detect_tty, get_console_manager
from ..core.logging import configure_debug_logging
from ..core.severity import Severity
from ..engine.flags import parse_overrides
from ..errors import ResolverError
from ..linting.linter import LinterSettings
from ..plan.models import BuildPlan
from ..profile.loader import load_profile, load_signals
from ..resolver import Resolver
from .rendering import render_plan
from .shared import EXIT_NOT_READY, EXIT_READY, CLIError, CLILogger, build_cli_logger

TABLE_FORMAT: Final[str] = "table"
JSON_FORMAT: Final[str] = "json"
OUTPUT_FORMATS: Final[frozenset[str]] = frozenset({TABLE_FORMAT, JSON_FORMAT})


@dataclass(slots=True)
class ResolveOptions:
    """Normalised inputs of the resolve command."""

    profile: Path
    signals: Path | None
    out: Path | None
    output_format: str
    flags: tuple[str, ...]


def resolve_command(
    profile: Path = typer.Option(..., "--profile", "-p", help="Tool profile document (JSON or TOML)."),
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        "-c",
        help="Catalog JSON file or directory (defaults to the packaged catalog).",
    ),
    signals: Path | None = typer.Option(None, "--signals", "-s", help="Source signals document (JSON or TOML)."),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write the plan as JSON to this path."),
    output_format: str = typer.Option(
        TABLE_FORMAT,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: table (default) or json.",
    ),
    flag: list[str] | None = typer.Option(
        None,
        "--flag",
        help="Force a merged flag value, e.g. thread.mode=disabled (repeatable).",
    ),
    preload_threshold: int | None = typer.Option(
        None,
        "--preload-threshold",
        min=0,
        help="Warn when preloaded assets exceed this many bytes.",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Directory holding pyproject.toml/wasmport.toml (default: current directory).",
    ),
    emoji: bool | None = typer.Option(None, "--emoji/--no-emoji", help="Toggle emoji output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable coloured output."),
    debug: bool = typer.Option(False, "--debug", help="Log rule matching and flag merging to stderr."),
) -> None:
    """Resolve a build plan; exit 0 when ready, 1 when blocked, 2 on invalid input."""

    configure_debug_logging(debug)
    logger = build_cli_logger(emoji=emoji is not False, debug=debug, no_color=no_color)
    options = ResolveOptions(
        profile=profile,
        signals=signals,
        out=out,
        output_format=output_format.lower(),
        flags=tuple(flag or ()),
    )
    try:
        if options.output_format not in OUTPUT_FORMATS:
            raise CLIError(f"unsupported format '{output_format}'; choose table or json")
        config = load_config(
            root if root is not None else Path.cwd(),
            {
                "catalog_path": catalog,
                "preload_warning_bytes": preload_threshold,
                "use_emoji": emoji,
                "use_color": False if no_color else None,
            },
        )
        logger.use_emoji = config.use_emoji
        plan = run_resolve(options, config, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except ResolverError as exc:
        error = CLIError.from_resolver_error(exc)
        logger.fail(str(error))
        raise typer.Exit(code=error.exit_code) from exc
    raise typer.Exit(code=EXIT_READY if plan.ready else EXIT_NOT_READY)


def run_resolve(options: ResolveOptions, config: Config, logger: CLILogger) -> BuildPlan:
    """Resolve and report a plan using the effective ``config``.

    Raises:
        ResolverError: If the profile, signals, overrides, or catalog are invalid.
    """

    tool_profile = load_profile(options.profile)
    source_signals = load_signals(options.signals) if options.signals is not None else None
    overrides = parse_overrides(options.flags)
    settings = LinterSettings(preload_threshold_bytes=config.preload_warning_bytes)
    if config.catalog_path is not None:
        resolver = Resolver.for_catalog(load_catalog(config.catalog_path), settings=settings)
    else:
        resolver = Resolver(settings=settings)
    plan = resolver.resolve(tool_profile, signals=source_signals, overrides=overrides)
    logger.debug(f"catalog={plan.catalog_version} checksum={plan.catalog_checksum[:12]} stages={len(plan.stages)}")

    if options.out is not None:
        options.out.parent.mkdir(parents=True, exist_ok=True)
        options.out.write_text(plan.to_json() + "\n", encoding="utf-8")
    if options.output_format == JSON_FORMAT:
        logger.echo(plan.to_json())
    else:
        use_color = detect_tty() if config.use_color is None else config.use_color
        console = get_console_manager().get(color=use_color, emoji=config.use_emoji)
        render_plan(console, plan)
        _report_status(plan, logger)
    if options.out is not None and options.output_format != JSON_FORMAT:
        logger.ok(f"plan written to {options.out}")
    return plan


def _report_status(plan: BuildPlan, logger: CLILogger) -> None:
    if plan.ready:
        logger.ok(f"{plan.tool}: plan ready ({len(plan.stages)} stages)")
        warnings = sum(1 for diagnostic in plan.diagnostics if diagnostic.severity is Severity.WARNING)
        if warnings:
            logger.warn(f"{plan.tool}: {warnings} warning{'s' if warnings != 1 else ''} to review")
        return
    blocking = len(plan.blocking)
    logger.fail(f"{plan.tool}: plan not ready ({blocking} blocking diagnostic{'s' if blocking != 1 else ''})")


__all__ = ["JSON_FORMAT", "ResolveOptions", "TABLE_FORMAT", "resolve_command", "run_resolve"]
