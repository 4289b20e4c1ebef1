# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Priority-aware accumulation of flag values keyed by namespace."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Final

from ..catalog.model_rule import validate_namespace
from ..catalog.types import FlagValue
from ..errors import CatalogParseError, ConfigError

LOGGER = logging.getLogger(__name__)

OVERRIDE_ORIGIN: Final[str] = "<override>"


@dataclass(frozen=True, slots=True)
class FlagProvenance:
    """Record of the rule that supplied the winning value of a namespace."""

    namespace: str
    value: FlagValue
    rule: str
    priority: int | None
    replaced: tuple[str, ...] = ()


class FlagAccumulator:
    """Fold flag contributions so that higher or equal priority replaces the holder."""

    def __init__(self) -> None:
        self._holders: dict[str, FlagProvenance] = {}

    def offer(self, namespace: str, value: FlagValue, *, rule: str, priority: int) -> bool:
        """Offer ``value`` for ``namespace`` on behalf of ``rule``.

        Args:
            namespace: Flag namespace the value belongs to.
            value: Concrete flag value.
            rule: Identifier of the contributing rule.
            priority: Priority of the contributing rule.

        Returns:
            bool: ``True`` when the value became the namespace's holder.
        """

        holder = self._holders.get(namespace)
        if holder is not None:
            if holder.priority is None or priority < holder.priority:
                LOGGER.debug(
                    "flag %s: %s (p%d) kept over %s (p%d)",
                    namespace,
                    holder.rule,
                    holder.priority if holder.priority is not None else 0,
                    rule,
                    priority,
                )
                return False
            LOGGER.debug("flag %s: %s (p%d) replaces %s", namespace, rule, priority, holder.rule)
        self._holders[namespace] = FlagProvenance(
            namespace=namespace,
            value=value,
            rule=rule,
            priority=priority,
            replaced=_replaced_chain(holder),
        )
        return True

    def override(self, namespace: str, value: FlagValue) -> None:
        """Force ``value`` for ``namespace`` regardless of rule priorities."""

        holder = self._holders.get(namespace)
        LOGGER.debug("flag %s overridden by caller", namespace)
        self._holders[namespace] = FlagProvenance(
            namespace=namespace,
            value=value,
            rule=OVERRIDE_ORIGIN,
            priority=None,
            replaced=_replaced_chain(holder),
        )

    def merged(self) -> dict[str, FlagValue]:
        """Return the winning value of every namespace, ordered by namespace."""

        return {namespace: self._holders[namespace].value for namespace in sorted(self._holders)}

    def provenance(self) -> dict[str, FlagProvenance]:
        """Return the provenance of every namespace, ordered by namespace."""

        return {namespace: self._holders[namespace] for namespace in sorted(self._holders)}


def _replaced_chain(holder: FlagProvenance | None) -> tuple[str, ...]:
    if holder is None:
        return ()
    return (*holder.replaced, holder.rule)


def parse_override(text: str) -> tuple[str, FlagValue]:
    """Parse a ``namespace=value`` override supplied on the command line.

    JSON scalars (``true``, ``4``, ``"text"``) and JSON string arrays are
    decoded; anything else is kept as a plain string.

    Args:
        text: Raw override expression.

    Returns:
        tuple[str, FlagValue]: Namespace and decoded value.

    Raises:
        ConfigError: If the expression is not of the form ``namespace=value``.
    """

    namespace, separator, raw = text.partition("=")
    namespace = namespace.strip()
    if not separator or not namespace:
        raise ConfigError(f"flag override '{text}' must look like namespace=value")
    try:
        validate_namespace(namespace, context="flag override")
    except CatalogParseError as exc:
        raise ConfigError(str(exc)) from exc
    return namespace, _decode_override_value(raw.strip())


def _decode_override_value(raw: str) -> FlagValue:
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(decoded, (bool, int, float, str)):
        return decoded
    if isinstance(decoded, list) and all(isinstance(item, str) for item in decoded):
        return tuple(decoded)
    return raw


def parse_overrides(items: Iterable[str]) -> dict[str, FlagValue]:
    """Parse several overrides; a later entry for the same namespace wins."""

    overrides: dict[str, FlagValue] = {}
    for item in items:
        namespace, value = parse_override(item)
        overrides[namespace] = value
    return overrides


def normalise_overrides(overrides: Mapping[str, FlagValue] | None) -> dict[str, FlagValue]:
    """Return ``overrides`` with list values frozen into tuples."""

    if not overrides:
        return {}
    return {
        namespace: tuple(value) if isinstance(value, list) else value
        for namespace, value in overrides.items()
    }


__all__ = [
    "FlagAccumulator",
    "FlagProvenance",
    "OVERRIDE_ORIGIN",
    "normalise_overrides",
    "parse_override",
    "parse_overrides",
]
