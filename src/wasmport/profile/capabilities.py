# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Capability keys shared by profiles, rules, and signatures."""

from __future__ import annotations

from typing import Final

CAPABILITY_SEPARATOR: Final[str] = ":"

BUILD: Final[str] = "build"
DEPENDENCY: Final[str] = "dependency"
HEADER_ONLY: Final[str] = "header-only"
THREADING: Final[str] = "threading"
ISA: Final[str] = "isa"
COMPRESSION: Final[str] = "compression"
ASYNC: Final[str] = "async"
ASSETS: Final[str] = "assets"
MEMORY: Final[str] = "memory"
SYMBOL: Final[str] = "symbol"
IFDEF: Final[str] = "ifdef"

CAPABILITY_KINDS: Final[frozenset[str]] = frozenset(
    {BUILD, DEPENDENCY, HEADER_ONLY, THREADING, ISA, COMPRESSION, ASYNC, ASSETS, MEMORY, SYMBOL, IFDEF},
)

ASYNC_IMPORTS: Final[str] = f"{ASYNC}{CAPABILITY_SEPARATOR}imports"
ASSETS_PRELOAD: Final[str] = f"{ASSETS}{CAPABILITY_SEPARATOR}preload"
MEMORY_FIXED: Final[str] = f"{MEMORY}{CAPABILITY_SEPARATOR}fixed"
MEMORY_GROWTH: Final[str] = f"{MEMORY}{CAPABILITY_SEPARATOR}growth"


def capability(kind: str, value: str) -> str:
    """Return the capability key for ``kind`` and ``value``."""

    return f"{kind}{CAPABILITY_SEPARATOR}{value}"


def split_capability(key: str) -> tuple[str, str]:
    """Split a capability key into its ``(kind, value)`` parts.

    Raises:
        ValueError: If ``key`` is not of the form ``kind:value`` with a known kind.
    """

    kind, sep, value = key.partition(CAPABILITY_SEPARATOR)
    if not sep or not value:
        raise ValueError(f"capability '{key}' must be of the form 'kind:value'")
    if kind not in CAPABILITY_KINDS:
        raise ValueError(f"capability '{key}' uses unknown kind '{kind}'")
    return kind, value


__all__ = [
    "ASSETS_PRELOAD",
    "ASYNC_IMPORTS",
    "BUILD",
    "CAPABILITY_KINDS",
    "COMPRESSION",
    "DEPENDENCY",
    "HEADER_ONLY",
    "IFDEF",
    "ISA",
    "MEMORY_FIXED",
    "MEMORY_GROWTH",
    "SYMBOL",
    "THREADING",
    "capability",
    "split_capability",
]
