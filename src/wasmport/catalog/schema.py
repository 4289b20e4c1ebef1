# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Schema loading utilities for validating catalog documents."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Final

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from ..errors import CatalogParseError
from .io import load_schema
from .types import CATALOG_SCHEMA_FILENAME, JSONValue

DATA_ROOT: Final[Path] = Path(__file__).resolve().parent / "data"


@dataclass(slots=True)
class SchemaRepository:
    """Hold the JSON schema validator applied to every catalog document."""

    schema_path: Path
    validator: Draft202012Validator

    @classmethod
    def load(cls, schema_root: Path | None = None) -> SchemaRepository:
        """Load the catalog schema validator from disk.

        Args:
            schema_root: Optional override for the directory holding ``catalog.schema.json``.

        Returns:
            SchemaRepository: Repository configured with the catalog validator.
        """
        schema_path = (schema_root or DATA_ROOT) / CATALOG_SCHEMA_FILENAME
        schema = load_schema(schema_path)
        return cls(schema_path=schema_path, validator=Draft202012Validator(schema))

    def validate(self, document: Mapping[str, JSONValue], *, context: str) -> None:
        """Validate ``document`` against the catalog schema.

        Args:
            document: Raw catalog document.
            context: Source description used in error messages.

        Raises:
            CatalogParseError: When the document fails schema validation.
        """

        errors = sorted(self.validator.iter_errors(document), key=lambda error: [str(part) for part in error.absolute_path])
        if not errors:
            return
        first: JsonSchemaValidationError = errors[0]
        location = "/".join(str(part) for part in first.absolute_path) or "<root>"
        raise CatalogParseError(f"{context}: {location}: {first.message}")


@lru_cache(maxsize=1)
def default_schema_repository() -> SchemaRepository:
    """Return the cached repository for the packaged catalog schema."""

    return SchemaRepository.load()


__all__ = ["DATA_ROOT", "SchemaRepository", "default_schema_repository"]
