# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool profile and source-signal models consumed by the resolver."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import capabilities as caps


class BuildSystemKind(str, Enum):
    """Build systems a native tool may ship with."""

    SINGLE_FILE = "single-file"
    AUTOCONF = "autoconf"
    CMAKE = "cmake"
    CUSTOM_MAKEFILE = "custom-makefile"


class ThreadingModel(str, Enum):
    """Threading strategies a tool may rely on."""

    NONE = "none"
    NATIVE_THREADS = "native-threads"
    SANDBOX_THREADS = "sandbox-threads"


class InstructionSetUsage(str, Enum):
    """Instruction-set features used by the tool sources."""

    SIMD = "simd"
    X86_ASSEMBLY = "x86-specific-assembly"


class CompressionLibrary(str, Enum):
    """Compression libraries the tool reads or writes through."""

    ZLIB = "zlib"
    BZIP2 = "bzip2"
    LZMA = "lzma"


class Dependency(BaseModel):
    """Named library requirement of a tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)
    header_only: bool = Field(default=False, alias="headerOnly")


class PreloadAsset(BaseModel):
    """File bundled into the sandbox's virtual filesystem before start-up."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    path: str = Field(min_length=1)
    approximate_size_bytes: int = Field(ge=0, alias="approximateSizeBytes")


class ToolProfile(BaseModel):
    """Structured description of the build-relevant traits of a native tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(default="tool", min_length=1)
    build_system_kind: BuildSystemKind = Field(alias="buildSystemKind")
    dependencies: tuple[Dependency, ...] = Field(default_factory=tuple)
    threading_model: ThreadingModel = Field(default=ThreadingModel.NONE, alias="threadingModel")
    instruction_set_usage: frozenset[InstructionSetUsage] = Field(
        default_factory=frozenset,
        alias="instructionSetUsage",
    )
    compression_io: frozenset[CompressionLibrary] = Field(default_factory=frozenset, alias="compressionIO")
    async_imports: tuple[str, ...] = Field(default_factory=tuple, alias="asyncImports")
    preload_assets: tuple[PreloadAsset, ...] = Field(default_factory=tuple, alias="preloadAssets")
    memory_hint: int | None = Field(default=None, gt=0, alias="memoryHint")

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, value: Any) -> Any:
        """Accept bare names and ``{name: {...}}`` mappings for dependencies."""

        if value is None:
            return ()
        if isinstance(value, Mapping):
            coerced = []
            for key, item in value.items():
                if item is not None and not isinstance(item, Mapping):
                    raise ValueError(f"dependency '{key}' must map to an object")
                coerced.append({"name": key, **(item or {})})
            return coerced
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("dependencies")
    @classmethod
    def _unique_dependencies(cls, value: tuple[Dependency, ...]) -> tuple[Dependency, ...]:
        """Reject duplicate dependency names and order them by name."""

        seen: set[str] = set()
        for dependency in value:
            if dependency.name in seen:
                raise ValueError(f"dependency '{dependency.name}' declared more than once")
            seen.add(dependency.name)
        return tuple(sorted(value, key=lambda item: item.name))

    @field_validator("async_imports")
    @classmethod
    def _unique_async_imports(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Drop repeated async import names while preserving declaration order."""

        if any(not name for name in value):
            raise ValueError("async import names must be non-empty")
        return tuple(dict.fromkeys(value))

    @property
    def preload_total_bytes(self) -> int:
        """Return the approximate size of all preloaded assets."""

        return sum(asset.approximate_size_bytes for asset in self.preload_assets)

    @property
    def compiled_dependencies(self) -> tuple[Dependency, ...]:
        """Return dependencies that must be built rather than only included."""

        return tuple(dependency for dependency in self.dependencies if not dependency.header_only)

    def capabilities(self) -> tuple[str, ...]:
        """Return the capability keys describing this profile, in a stable order."""

        keys: list[str] = [caps.capability(caps.BUILD, self.build_system_kind.value)]
        for dependency in self.dependencies:
            keys.append(caps.capability(caps.DEPENDENCY, dependency.name))
            if dependency.header_only:
                keys.append(caps.capability(caps.HEADER_ONLY, dependency.name))
        keys.append(caps.capability(caps.THREADING, self.threading_model.value))
        keys.extend(caps.capability(caps.ISA, usage.value) for usage in sorted(self.instruction_set_usage))
        keys.extend(caps.capability(caps.COMPRESSION, library.value) for library in sorted(self.compression_io))
        if self.async_imports:
            keys.append(caps.ASYNC_IMPORTS)
        if self.preload_assets:
            keys.append(caps.ASSETS_PRELOAD)
        keys.append(caps.MEMORY_FIXED if self.memory_hint is not None else caps.MEMORY_GROWTH)
        return tuple(keys)


class SourceSignals(BaseModel):
    """Source-level observations supplied by the caller alongside a profile."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    symbols: tuple[str, ...] = Field(default_factory=tuple)
    ifdefs: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("symbols", "ifdefs")
    @classmethod
    def _dedupe(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Drop blank and repeated entries while preserving order."""

        return tuple(dict.fromkeys(item for item in value if item))

    def capabilities(self) -> tuple[str, ...]:
        """Return capability keys derived from the declared signals."""

        keys = [caps.capability(caps.SYMBOL, symbol) for symbol in self.symbols]
        keys.extend(caps.capability(caps.IFDEF, guard) for guard in self.ifdefs)
        return tuple(keys)


__all__ = [
    "BuildSystemKind",
    "CompressionLibrary",
    "Dependency",
    "InstructionSetUsage",
    "PreloadAsset",
    "SourceSignals",
    "ThreadingModel",
    "ToolProfile",
]
