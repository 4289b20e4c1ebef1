# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Known failure signatures and capability exclusions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from ..core.severity import Severity, parse_severity
from ..errors import CatalogParseError
from .model_rule import validate_namespace
from .types import FlagValue, JSONValue
from .utils import (
    capability_array,
    expect_int,
    expect_string,
    object_array,
    optional_string,
)

PRELOAD_TOTAL_BYTES_ABOVE: Final[str] = "preload-total-bytes-above"
CONDITION_KINDS: Final[frozenset[str]] = frozenset({PRELOAD_TOTAL_BYTES_ABOVE})


def _parse_severity(value: JSONValue | None, *, key: str, context: str) -> Severity:
    """Return the severity named by ``value``."""

    raw = expect_string(value, key=key, context=context)
    try:
        return parse_severity(raw)
    except ValueError as exc:
        raise CatalogParseError(f"{context}: unknown severity '{raw}'") from exc


@dataclass(frozen=True, slots=True)
class FlagCondition:
    """Test against merged flags; holds when the namespace is set (to ``equals``, if given)."""

    namespace: str
    equals: FlagValue | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> FlagCondition:
        """Build a flag condition from a ``mitigatedBy[]`` object."""

        namespace = validate_namespace(
            expect_string(data.get("namespace"), key="namespace", context=context),
            context=context,
        )
        equals = data.get("equals")
        if equals is not None and not isinstance(equals, (str, int, float, bool)):
            raise CatalogParseError(f"{context}: expected 'equals' to be a scalar")
        return cls(namespace=namespace, equals=equals)

    def holds(self, flags: Mapping[str, FlagValue]) -> bool:
        """Return ``True`` when ``flags`` satisfies the condition."""

        if self.namespace not in flags:
            return False
        return self.equals is None or flags[self.namespace] == self.equals

    def describe(self) -> str:
        """Return a short rendering such as ``compression.zlib=dynamic``."""

        return self.namespace if self.equals is None else f"{self.namespace}={self.equals}"


@dataclass(frozen=True, slots=True)
class SignatureCondition:
    """Built-in check evaluated against the whole profile."""

    kind: str
    threshold_bytes: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> SignatureCondition:
        """Build a condition from a signature ``condition`` object."""

        kind = expect_string(data.get("kind"), key="kind", context=context)
        if kind not in CONDITION_KINDS:
            raise CatalogParseError(f"{context}: unknown condition kind '{kind}'")
        threshold = expect_int(data.get("thresholdBytes"), key="thresholdBytes", context=context)
        if threshold < 0:
            raise CatalogParseError(f"{context}: 'thresholdBytes' must not be negative")
        return cls(kind=kind, threshold_bytes=threshold)


@dataclass(frozen=True, slots=True)
class SignatureDefinition:
    """Known failure pattern with its severity and suggested fix."""

    identifier: str
    triggers: tuple[str, ...]
    severity: Severity
    message: str
    suggested_fix: str
    mitigated_by: tuple[FlagCondition, ...]
    mitigated_severity: Severity | None
    condition: SignatureCondition | None
    index: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, index: int, context: str) -> SignatureDefinition:
        """Build a signature from a catalog ``signatures[]`` object.

        Raises:
            CatalogParseError: If the signature is malformed or can never fire.
        """

        identifier = expect_string(data.get("id"), key="id", context=context)
        sig_context = f"{context}[{identifier}]"
        triggers = capability_array(data.get("triggers"), key="triggers", context=sig_context)
        raw_condition = data.get("condition")
        condition = (
            SignatureCondition.from_mapping(raw_condition, context=f"{sig_context}.condition")
            if isinstance(raw_condition, Mapping)
            else None
        )
        if raw_condition is not None and condition is None:
            raise CatalogParseError(f"{sig_context}: expected 'condition' to be an object")
        if not triggers and condition is None:
            raise CatalogParseError(f"{sig_context}: a signature needs 'triggers' or a 'condition'")
        mitigated_raw = data.get("mitigatedSeverity")
        return cls(
            identifier=identifier,
            triggers=triggers,
            severity=_parse_severity(data.get("severity"), key="severity", context=sig_context),
            message=expect_string(data.get("message"), key="message", context=sig_context),
            suggested_fix=optional_string(data.get("suggestedFix"), key="suggestedFix", context=sig_context) or "",
            mitigated_by=tuple(
                FlagCondition.from_mapping(entry, context=f"{sig_context}.mitigatedBy[{position}]")
                for position, entry in enumerate(
                    object_array(data.get("mitigatedBy"), key="mitigatedBy", context=sig_context),
                )
            ),
            mitigated_severity=(
                None
                if mitigated_raw is None
                else _parse_severity(mitigated_raw, key="mitigatedSeverity", context=sig_context)
            ),
            condition=condition,
            index=index,
        )

    def mitigation(self, flags: Mapping[str, FlagValue]) -> FlagCondition | None:
        """Return the first mitigating condition satisfied by ``flags``."""

        for condition in self.mitigated_by:
            if condition.holds(flags):
                return condition
        return None


@dataclass(frozen=True, slots=True)
class ExclusionDefinition:
    """Set of capabilities that may not be declared together."""

    identifier: str
    capabilities: tuple[str, ...]
    message: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> ExclusionDefinition:
        """Build an exclusion from a catalog ``exclusions[]`` object."""

        identifier = expect_string(data.get("id"), key="id", context=context)
        ex_context = f"{context}[{identifier}]"
        capabilities = capability_array(data.get("capabilities"), key="capabilities", context=ex_context)
        if len(set(capabilities)) < 2:
            raise CatalogParseError(f"{ex_context}: an exclusion needs at least two distinct capabilities")
        return cls(
            identifier=identifier,
            capabilities=capabilities,
            message=optional_string(data.get("message"), key="message", context=ex_context) or "",
        )


__all__ = [
    "CONDITION_KINDS",
    "ExclusionDefinition",
    "FlagCondition",
    "PRELOAD_TOTAL_BYTES_ABOVE",
    "SignatureCondition",
    "SignatureDefinition",
]
