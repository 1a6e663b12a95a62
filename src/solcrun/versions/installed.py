# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Live index of compiler versions present under the install root.

Layout: ``<root>/<version>/solc-<version>`` with a sibling
``<root>/.global_version`` holding the default version string.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from packaging.version import InvalidVersion, Version

from ..errors import SolcIoError
from .semver import short_version

BINARY_NAME: Final[str] = "solc"
GLOBAL_VERSION_FILE: Final[str] = ".global_version"


def version_dir(install_root: Path, version: Version) -> Path:
    """Return the directory holding ``version`` under ``install_root``."""

    return install_root / str(short_version(version))


def binary_path(install_root: Path, version: Version) -> Path:
    """Return the executable path for ``version`` under ``install_root``."""

    label = str(short_version(version))
    return install_root / label / f"{BINARY_NAME}-{label}"


def lock_path(install_root: Path, version: Version) -> Path:
    """Return the advisory lock file guarding installs of ``version``."""

    return install_root / f".{short_version(version)}.lock"


def installed_versions(install_root: Path) -> list[Version]:
    """Return the versions installed under ``install_root``, sorted ascending.

    The directory is scanned on every call. Entries whose name is not a
    version or whose binary is missing are skipped.

    Raises:
        SolcIoError: If the install root exists but cannot be listed.
    """

    if not install_root.is_dir():
        return []
    versions: list[Version] = []
    try:
        entries = list(install_root.iterdir())
    except OSError as exc:
        raise SolcIoError(install_root, exc) from exc
    for entry in entries:
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        try:
            version = Version(entry.name)
        except InvalidVersion:
            continue
        if binary_path(install_root, version).is_file():
            versions.append(version)
    return sorted(versions)


def find_installed_binary(install_root: Path, version: Version) -> Path | None:
    """Return the installed binary for ``version`` or ``None`` when absent."""

    candidate = binary_path(install_root, version)
    return candidate if candidate.is_file() else None


def global_version(install_root: Path) -> Version | None:
    """Return the version recorded in ``.global_version``, if any."""

    path = install_root / GLOBAL_VERSION_FILE
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return Version(raw)
    except InvalidVersion:
        return None


def set_global_version(install_root: Path, version: Version) -> Path:
    """Record ``version`` as the default compiler and return the file written.

    Raises:
        SolcIoError: If the file cannot be written.
    """

    path = install_root / GLOBAL_VERSION_FILE
    try:
        install_root.mkdir(parents=True, exist_ok=True)
        path.write_text(str(short_version(version)), encoding="utf-8")
    except OSError as exc:
        raise SolcIoError(path, exc) from exc
    return path


__all__ = [
    "BINARY_NAME",
    "GLOBAL_VERSION_FILE",
    "binary_path",
    "find_installed_binary",
    "global_version",
    "installed_versions",
    "lock_path",
    "set_global_version",
    "version_dir",
]
