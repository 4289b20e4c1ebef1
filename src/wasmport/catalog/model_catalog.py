# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog aggregate models used by the resolver."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Set
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import CatalogParseError, DuplicateRuleError
from ..profile.models import ToolProfile
from .model_predicate import PredicateKey
from .model_rule import RuleDefinition
from .model_signature import ExclusionDefinition, SignatureDefinition
from .model_stage import StageKind
from .types import FlagValue

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FlagFormat:
    """Command-line rendering of a flag namespace for specific stage kinds.

    ``choices`` maps a rendered value to a literal argument and takes
    precedence over ``template``; an empty choice renders nothing. Values with
    neither a choice nor a template are not passed on the command line.
    """

    namespace: str
    template: str | None
    phases: frozenset[StageKind]
    choices: Mapping[str, str] = field(default_factory=dict)
    each: bool = False

    def applies_to(self, kind: StageKind) -> bool:
        """Return ``True`` when the flag is passed to stages of ``kind``."""

        return kind in self.phases

    def render(self, value: FlagValue) -> tuple[str, ...]:
        """Return the command-line arguments for ``value``."""

        items: tuple[FlagValue, ...] = value if isinstance(value, tuple) and self.each else (value,)
        arguments: list[str] = []
        for item in items:
            text = render_flag_value(item)
            if text in self.choices:
                argument = self.choices[text]
            elif self.template is not None:
                argument = self.template.replace("{value}", text)
            else:
                argument = ""
            if argument:
                arguments.append(argument)
        return tuple(arguments)


def render_flag_value(value: FlagValue) -> str:
    """Return the textual form of a flag value as passed on a command line."""

    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, tuple):
        return json.dumps(list(value), separators=(",", ":"))
    return str(value)


@dataclass(frozen=True, slots=True)
class PatternCatalog:
    """Materialised rules, signatures, and exclusions paired with a deterministic checksum."""

    version: str
    rules: tuple[RuleDefinition, ...]
    signatures: tuple[SignatureDefinition, ...]
    exclusions: tuple[ExclusionDefinition, ...]
    flag_formats: Mapping[str, FlagFormat]
    declared_capabilities: frozenset[str]
    checksum: str
    source: Path | None = None
    _ordered_rules: tuple[RuleDefinition, ...] = field(init=False, repr=False, compare=False)
    _known_capabilities: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate identifiers and rule ambiguity, then cache lookup structures."""

        _ensure_unique((rule.identifier for rule in self.rules), label="rule")
        _ensure_unique((signature.identifier for signature in self.signatures), label="signature")
        _ensure_unique((exclusion.identifier for exclusion in self.exclusions), label="exclusion")
        seen: dict[tuple[PredicateKey, int], str] = {}
        for rule in self.rules:
            key = (rule.predicate.canonical_key, rule.priority)
            if key in seen:
                raise DuplicateRuleError(seen[key], rule.identifier, priority=rule.priority)
            seen[key] = rule.identifier
        _ensure_fetch_stages_are_roots(self.rules)
        ordered = tuple(sorted(self.rules, key=lambda rule: (-rule.priority, rule.index)))
        object.__setattr__(self, "_ordered_rules", ordered)
        known: set[str] = set(self.declared_capabilities)
        for rule in self.rules:
            known.update(rule.predicate.referenced_capabilities)
        for signature in self.signatures:
            known.update(signature.triggers)
        for exclusion in self.exclusions:
            known.update(exclusion.capabilities)
        object.__setattr__(self, "_known_capabilities", frozenset(known))

    @property
    def known_capabilities(self) -> frozenset[str]:
        """Return every capability the catalog declares or references."""

        return self._known_capabilities

    def rules_matching(self, profile: ToolProfile) -> tuple[RuleDefinition, ...]:
        """Return rules whose predicate holds for ``profile``.

        Rules are ordered by descending priority, then by declaration order.

        Args:
            profile: Tool profile under resolution.

        Returns:
            tuple[RuleDefinition, ...]: Matching rules in precedence order.
        """

        capabilities = frozenset(profile.capabilities())
        matched = tuple(rule for rule in self._ordered_rules if rule.predicate.matches(capabilities))
        LOGGER.debug("matched rules: %s", ", ".join(rule.identifier for rule in matched) or "<none>")
        return matched

    def signatures_for(self, capabilities: Set[str]) -> tuple[SignatureDefinition, ...]:
        """Return signatures relevant to ``capabilities`` in declaration order.

        Condition-only signatures (no triggers) are always relevant.
        """

        return tuple(
            signature
            for signature in self.signatures
            if not signature.triggers or any(trigger in capabilities for trigger in signature.triggers)
        )

    def exclusions_violated(self, capabilities: Set[str]) -> tuple[ExclusionDefinition, ...]:
        """Return exclusions whose capabilities are all present."""

        return tuple(
            exclusion
            for exclusion in self.exclusions
            if all(capability in capabilities for capability in exclusion.capabilities)
        )

    def rule(self, identifier: str) -> RuleDefinition:
        """Return the rule registered under ``identifier``.

        Raises:
            KeyError: If ``identifier`` is not known to the catalog.
        """

        for rule in self.rules:
            if rule.identifier == identifier:
                return rule
        raise KeyError(identifier)


def _ensure_fetch_stages_are_roots(rules: Iterable[RuleDefinition]) -> None:
    """Reject fetch stages that depend on configure, compile, or link stages."""

    templates = [template for rule in rules for template in rule.stages]
    building = {template.name for template in templates if template.kind is not StageKind.FETCH_DEPENDENCY}
    for template in templates:
        if template.kind is not StageKind.FETCH_DEPENDENCY:
            continue
        offending = sorted(building.intersection(template.depends_on))
        if offending:
            raise CatalogParseError(
                f"fetch stage '{template.name}' may not depend on build stages: {', '.join(offending)}",
            )


def _ensure_unique(identifiers: Iterable[str], *, label: str) -> None:
    """Raise when an identifier occurs more than once."""

    seen: set[str] = set()
    for identifier in identifiers:
        if identifier in seen:
            raise CatalogParseError(f"duplicate {label} identifier '{identifier}'")
        seen.add(identifier)


__all__ = ["FlagFormat", "PatternCatalog", "render_flag_value"]
