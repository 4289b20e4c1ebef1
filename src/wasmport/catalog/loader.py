# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High-level loader that materialises pattern catalogs."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from ..errors import CatalogParseError
from .checksum import compute_catalog_checksum, compute_mapping_checksum
from .io import load_document
from .model_catalog import FlagFormat, PatternCatalog
from .model_rule import RuleDefinition, validate_namespace
from .model_signature import ExclusionDefinition, SignatureDefinition
from .model_stage import StageKind
from .scanner import CatalogScanner
from .schema import SchemaRepository, default_schema_repository
from .types import JSONValue
from .utils import (
    capability_array,
    expect_mapping,
    expect_string,
    object_array,
    optional_mapping,
    optional_string,
    string_array,
)

LOGGER = logging.getLogger(__name__)

_LIST_SECTIONS: Final[tuple[str, ...]] = ("capabilities", "exclusions", "rules", "signatures")
_DEFAULT_FLAG_PHASES: Final[tuple[str, ...]] = (StageKind.COMPILE.value, StageKind.LINK.value)

CatalogSource = Path | Mapping[str, JSONValue]


@dataclass(slots=True)
class CatalogLoader:
    """Loader that validates and materialises catalog documents."""

    schema_root: Path | None = None
    _schemas: SchemaRepository = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise the schema repository after dataclass setup."""

        if self.schema_root is None:
            self._schemas = default_schema_repository()
        else:
            self._schemas = SchemaRepository.load(self.schema_root)

    def load(self, source: CatalogSource) -> PatternCatalog:
        """Load a catalog from a file, a directory of documents, or a mapping.

        Args:
            source: JSON file, directory scanned for JSON documents, or an in-memory document.

        Returns:
            PatternCatalog: Validated catalog.

        Raises:
            CatalogParseError: If any document is malformed.
            DuplicateRuleError: If two rules share a predicate and priority.
        """

        if isinstance(source, Mapping):
            return self.load_mapping(source)
        if source.is_dir():
            return self.load_directory(source)
        return self.load_file(source)

    def load_file(self, path: Path) -> PatternCatalog:
        """Load a catalog stored in a single JSON document."""

        document = load_document(path)
        self._schemas.validate(document, context=str(path))
        checksum = compute_catalog_checksum(path.parent, (path,))
        return self._materialise(document, context=str(path), checksum=checksum, source=path)

    def load_directory(self, root: Path) -> PatternCatalog:
        """Load and merge every catalog document found beneath ``root``."""

        paths = CatalogScanner(root).catalog_documents()
        if not paths:
            raise CatalogParseError(f"{root}: no catalog documents found")
        documents: list[tuple[str, Mapping[str, JSONValue]]] = []
        for path in paths:
            document = load_document(path)
            self._schemas.validate(document, context=str(path))
            documents.append((str(path), document))
        merged = merge_documents(documents)
        checksum = compute_catalog_checksum(root, paths)
        return self._materialise(merged, context=str(root), checksum=checksum, source=root)

    def load_mapping(self, document: Mapping[str, JSONValue], *, context: str = "<catalog>") -> PatternCatalog:
        """Load a catalog from an in-memory document."""

        self._schemas.validate(document, context=context)
        return self._materialise(
            document,
            context=context,
            checksum=compute_mapping_checksum(document),
            source=None,
        )

    def _materialise(
        self,
        document: Mapping[str, JSONValue],
        *,
        context: str,
        checksum: str,
        source: Path | None,
    ) -> PatternCatalog:
        """Convert a schema-valid document into a :class:`PatternCatalog`."""

        rules = tuple(
            RuleDefinition.from_mapping(entry, index=index, context=f"{context}.rules")
            for index, entry in enumerate(object_array(document.get("rules"), key="rules", context=context))
        )
        signatures = tuple(
            SignatureDefinition.from_mapping(entry, index=index, context=f"{context}.signatures")
            for index, entry in enumerate(
                object_array(document.get("signatures"), key="signatures", context=context),
            )
        )
        exclusions = tuple(
            ExclusionDefinition.from_mapping(entry, context=f"{context}.exclusions")
            for entry in object_array(document.get("exclusions"), key="exclusions", context=context)
        )
        catalog = PatternCatalog(
            version=expect_string(document.get("version"), key="version", context=context),
            rules=rules,
            signatures=signatures,
            exclusions=exclusions,
            flag_formats=_parse_flag_formats(document.get("flagFormats"), context=f"{context}.flagFormats"),
            declared_capabilities=frozenset(
                capability_array(document.get("capabilities"), key="capabilities", context=context),
            ),
            checksum=checksum,
            source=source,
        )
        LOGGER.debug(
            "loaded catalog %s (%d rules, %d signatures) from %s",
            catalog.version,
            len(rules),
            len(signatures),
            context,
        )
        return catalog


def merge_documents(documents: Sequence[tuple[str, Mapping[str, JSONValue]]]) -> dict[str, JSONValue]:
    """Merge several catalog documents into one, preserving declaration order.

    List sections are concatenated in document order; ``flagFormats`` entries
    must not be redefined and every document declaring ``version`` must agree.

    Raises:
        CatalogParseError: On conflicting versions or flag formats.
    """

    merged: dict[str, JSONValue] = {}
    lists: dict[str, list[JSONValue]] = {section: [] for section in _LIST_SECTIONS}
    formats: dict[str, JSONValue] = {}
    for context, document in documents:
        for key in ("schemaVersion", "version"):
            value = document.get(key)
            if value is None:
                continue
            if key in merged and merged[key] != value:
                raise CatalogParseError(f"{context}: '{key}' {value!r} conflicts with {merged[key]!r}")
            merged[key] = value
        for section in _LIST_SECTIONS:
            lists[section].extend(_section_items(document.get(section), key=section, context=context))
        flag_formats = optional_mapping(document.get("flagFormats"), key="flagFormats", context=context)
        for namespace, entry in flag_formats.items():
            if namespace in formats:
                raise CatalogParseError(f"{context}: flag format '{namespace}' defined more than once")
            formats[namespace] = entry
    if "version" not in merged:
        raise CatalogParseError("catalog documents do not declare a 'version'")
    for section, items in lists.items():
        merged[section] = items
    merged["flagFormats"] = formats
    return merged


def _section_items(value: JSONValue | None, *, key: str, context: str) -> list[JSONValue]:
    """Return the items of a list section, treating ``None`` as empty."""

    if value is None:
        return []
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise CatalogParseError(f"{context}: expected '{key}' to be an array")
    return list(value)


def _parse_flag_formats(value: JSONValue | None, *, context: str) -> Mapping[str, FlagFormat]:
    """Parse the ``flagFormats`` table keyed by namespace."""

    formats: dict[str, FlagFormat] = {}
    for namespace, raw in optional_mapping(value, key="flagFormats", context=context).items():
        entry_context = f"{context}[{namespace}]"
        entry = expect_mapping(raw, key=namespace, context=context)
        phases = string_array(entry.get("phases"), key="phases", context=entry_context) or _DEFAULT_FLAG_PHASES
        try:
            kinds = frozenset(StageKind(phase) for phase in phases)
        except ValueError as exc:
            raise CatalogParseError(f"{entry_context}: {exc}") from exc
        each = entry.get("each", False)
        if not isinstance(each, bool):
            raise CatalogParseError(f"{entry_context}: expected 'each' to be a boolean")
        template = optional_string(entry.get("format"), key="format", context=entry_context)
        choices = _string_table(entry.get("values"), context=entry_context)
        if template is None and not choices:
            raise CatalogParseError(f"{entry_context}: a flag format needs 'format' or 'values'")
        formats[namespace] = FlagFormat(
            namespace=validate_namespace(namespace, context=entry_context),
            template=template,
            phases=kinds,
            choices=choices,
            each=each,
        )
    return dict(sorted(formats.items()))


def _string_table(value: JSONValue | None, *, context: str) -> dict[str, str]:
    """Return a ``values`` table mapping rendered flag values to arguments."""

    table: dict[str, str] = {}
    for key, item in optional_mapping(value, key="values", context=context).items():
        if not isinstance(item, str):
            raise CatalogParseError(f"{context}: expected 'values.{key}' to be a string")
        table[key] = item
    return table


def load_catalog(source: CatalogSource, *, schema_root: Path | None = None) -> PatternCatalog:
    """Load a catalog from ``source`` using a fresh :class:`CatalogLoader`."""

    return CatalogLoader(schema_root=schema_root).load(source)


__all__ = ["CatalogLoader", "CatalogSource", "load_catalog", "merge_documents"]
