# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem scanning utilities for the pattern catalog."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .types import CATALOG_SCHEMA_FILENAME


@dataclass(slots=True)
class CatalogScanner:
    """Scan a catalog directory tree for the JSON documents it contributes."""

    catalog_root: Path

    def catalog_documents(self) -> tuple[Path, ...]:
        """Return sorted catalog document paths.

        Files whose name starts with ``_`` and schema documents are skipped.

        Returns:
            tuple[Path, ...]: Sorted catalog document paths.
        """
        paths: list[Path] = []
        for json_path in self.catalog_root.rglob("*.json"):
            if json_path.name.startswith("_"):
                continue
            if json_path.name == CATALOG_SCHEMA_FILENAME:
                continue
            paths.append(json_path)
        return tuple(sorted(paths))


__all__ = ["CatalogScanner"]
