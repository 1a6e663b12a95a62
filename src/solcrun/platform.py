# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host platform detection for compiler release lists."""

from __future__ import annotations

import platform
from typing import Final

LINUX_AMD64: Final[str] = "linux-amd64"
LINUX_AARCH64: Final[str] = "linux-aarch64"
MACOS_AMD64: Final[str] = "macosx-amd64"
WINDOWS_AMD64: Final[str] = "windows-amd64"


def _normalize_architecture(machine: str) -> str:
    """Return normalised architecture identifier derived from ``machine``.

    Args:
        machine: Raw architecture string reported by the platform.

    Returns:
        str: Normalised architecture identifier.
    """

    normalized = machine.lower()
    if normalized in {"x86_64", "amd64"}:
        return "x86_64"
    if normalized in {"aarch64", "arm64"}:
        return "arm64"
    return normalized


def detect_platform(system: str | None = None, machine: str | None = None) -> str:
    """Return the release-list platform identifier for the host.

    macOS releases are universal binaries published under ``macosx-amd64``.
    Unknown combinations map to ``<system>-<machine>`` so that catalog
    lookups fail softly instead of raising.
    """

    resolved_system = (system or platform.system()).lower()
    resolved_machine = _normalize_architecture(machine or platform.machine())
    if resolved_system == "linux":
        return LINUX_AARCH64 if resolved_machine == "arm64" else LINUX_AMD64
    if resolved_system == "darwin":
        return MACOS_AMD64
    if resolved_system == "windows":
        return WINDOWS_AMD64
    return f"{resolved_system}-{resolved_machine}"


def is_windows_platform(identifier: str) -> bool:
    """Return ``True`` when ``identifier`` names a Windows release list."""

    return identifier.startswith("windows")


__all__ = [
    "LINUX_AARCH64",
    "LINUX_AMD64",
    "MACOS_AMD64",
    "WINDOWS_AMD64",
    "detect_platform",
    "is_windows_platform",
]
