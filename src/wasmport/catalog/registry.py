# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Process-wide catalog holder with atomic hot reload."""

from __future__ import annotations

import logging
from functools import lru_cache
from threading import Lock

from .loader import CatalogSource, load_catalog
from .model_catalog import PatternCatalog
from .schema import DATA_ROOT
from .types import DEFAULT_CATALOG_FILENAME

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def default_catalog() -> PatternCatalog:
    """Return the catalog shipped with the package, loaded once per process."""

    return load_catalog(DATA_ROOT / DEFAULT_CATALOG_FILENAME)


class CatalogRegistry:
    """Hold the active :class:`PatternCatalog` shared by concurrent resolutions.

    Readers take a reference to the current catalog and keep using it for the
    whole resolution. :meth:`reload` builds the replacement completely before
    swapping the reference, so readers never observe a partial catalog.
    """

    def __init__(self, catalog: PatternCatalog | None = None) -> None:
        self._catalog = catalog
        self._lock = Lock()

    def get(self) -> PatternCatalog:
        """Return the active catalog, falling back to the packaged default."""

        catalog = self._catalog
        if catalog is not None:
            return catalog
        with self._lock:
            if self._catalog is None:
                self._catalog = default_catalog()
            return self._catalog

    def reload(self, source: CatalogSource) -> PatternCatalog:
        """Load ``source`` and make it the active catalog.

        A failing load leaves the previously active catalog in place.

        Args:
            source: Catalog file, directory, or in-memory document.

        Returns:
            PatternCatalog: The newly active catalog.
        """

        replacement = load_catalog(source)
        with self._lock:
            previous = self._catalog
            self._catalog = replacement
        LOGGER.debug(
            "catalog swapped: %s -> %s",
            previous.checksum if previous is not None else "<none>",
            replacement.checksum,
        )
        return replacement


DEFAULT_REGISTRY = CatalogRegistry()

__all__ = ["CatalogRegistry", "DEFAULT_REGISTRY", "default_catalog"]
