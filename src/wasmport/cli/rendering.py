# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rich rendering helpers for build plans and catalogs."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..catalog.model_catalog import PatternCatalog, render_flag_value
from ..core.severity import severity_style
from ..plan.models import BuildPlan


def build_diagnostics_table(plan: BuildPlan) -> Table:
    """Return a table listing the plan's diagnostics.

    Args:
        plan: Build plan whose diagnostics are rendered.

    Returns:
        Table: Rich table ready for printing.
    """

    table = Table(title="Diagnostics", box=box.SIMPLE, expand=True)
    table.add_column("Severity", style="bold", no_wrap=True)
    table.add_column("Signature", overflow="fold")
    table.add_column("Capability", overflow="fold")
    table.add_column("Message", overflow="fold")
    table.add_column("Suggested fix", overflow="fold")
    for diagnostic in plan.diagnostics:
        severity = Text(diagnostic.severity.value, style=severity_style(diagnostic.severity))
        if diagnostic.mitigated:
            severity.append(" (mitigated)", style="dim")
        table.add_row(
            severity,
            diagnostic.signature or "-",
            diagnostic.capability or "-",
            Text(diagnostic.message),
            Text(diagnostic.suggested_fix or "-"),
        )
    return table


def build_stages_table(plan: BuildPlan) -> Table:
    """Return a table listing the plan's stages in execution order."""

    table = Table(title="Stages", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Stage", style="bold")
    table.add_column("Kind")
    table.add_column("Command", overflow="fold")
    for position, stage in enumerate(plan.stages, start=1):
        table.add_row(str(position), stage.name, stage.kind.value, Text(stage.command))
    return table


def build_flags_table(plan: BuildPlan) -> Table:
    """Return a table of merged flags with the rule that supplied each value."""

    table = Table(title="Merged flags", box=box.SIMPLE, expand=True)
    table.add_column("Namespace", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_column("Rule", style="dim")
    for namespace in sorted(plan.merged_flags):
        table.add_row(
            namespace,
            Text(render_flag_value(plan.merged_flags[namespace])),
            plan.flag_origins.get(namespace, "-"),
        )
    return table


def render_plan(console: Console, plan: BuildPlan) -> None:
    """Print the stages, flags, and diagnostics of ``plan``."""

    console.print(build_stages_table(plan))
    console.print(build_flags_table(plan))
    if plan.diagnostics:
        console.print(build_diagnostics_table(plan))


def build_catalog_table(catalog: PatternCatalog) -> Table:
    """Return a table summarising the rules of ``catalog`` in precedence order."""

    table = Table(title=f"Catalog {catalog.version}", box=box.SIMPLE, expand=True)
    table.add_column("Rule", style="bold")
    table.add_column("Priority", justify="right")
    table.add_column("When", overflow="fold")
    table.add_column("Flags", overflow="fold")
    table.add_column("Stages", overflow="fold")
    for rule in sorted(catalog.rules, key=lambda item: (-item.priority, item.index)):
        table.add_row(
            rule.identifier,
            str(rule.priority),
            rule.predicate.describe(),
            ", ".join(entry.namespace for entry in rule.flags) or "-",
            ", ".join(template.name for template in rule.stages) or "-",
        )
    return table


def build_signatures_table(catalog: PatternCatalog) -> Table:
    """Return a table summarising the failure signatures of ``catalog``."""

    table = Table(title="Signatures", box=box.SIMPLE, expand=True)
    table.add_column("Signature", style="bold")
    table.add_column("Severity")
    table.add_column("Triggers", overflow="fold")
    table.add_column("Mitigated by", overflow="fold")
    for signature in catalog.signatures:
        table.add_row(
            signature.identifier,
            Text(signature.severity.value, style=severity_style(signature.severity)),
            ", ".join(signature.triggers) or "(condition)",
            ", ".join(condition.describe() for condition in signature.mitigated_by) or "-",
        )
    return table


__all__ = [
    "build_catalog_table",
    "build_diagnostics_table",
    "build_flags_table",
    "build_signatures_table",
    "build_stages_table",
    "render_plan",
]
