# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Checksum verification of compiler binaries against the release catalog."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Final

from packaging.version import Version

from ..errors import ChecksumMismatchError, ChecksumNotFoundError, SolcIoError
from ..platform import is_windows_platform
from ..versions.installed import binary_path
from ..versions.semver import short_version

if TYPE_CHECKING:
    from ..compiler.handle import CompilerHandle
    from ..versions.catalog import VersionCatalog

LOGGER = logging.getLogger(__name__)

# Windows release digests before this version do not match the published binaries.
WINDOWS_CHECKSUM_CUTOFF: Final[Version] = Version("0.7.2")


def sha256_hex(data: bytes) -> str:
    """Return the lowercase hex sha256 digest of ``data``."""

    return hashlib.sha256(data).hexdigest()


def verify_digest(version: Version, data: bytes, catalog: VersionCatalog, file: Path) -> None:
    """Compare ``data`` against the digest recorded for ``version``.

    Args:
        version: Compiler version the bytes belong to.
        data: Full binary contents.
        catalog: Catalog holding the expected digest.
        file: Path reported in mismatch errors.

    Raises:
        ChecksumNotFoundError: If the catalog has no digest for ``version``.
        ChecksumMismatchError: If the digests differ.
    """

    normalized = short_version(version)
    if not catalog.usable:
        LOGGER.debug("catalog unavailable; skipping checksum for %s", normalized)
        return
    if is_windows_platform(catalog.platform) and normalized < WINDOWS_CHECKSUM_CUTOFF:
        LOGGER.debug("skipping checksum for windows compiler %s", normalized)
        return
    expected = catalog.checksum(normalized)
    if expected is None:
        raise ChecksumNotFoundError(normalized)
    detected = sha256_hex(data)
    if detected != expected:
        raise ChecksumMismatchError(normalized, expected, detected, file)


def verify_checksum(
    handle: CompilerHandle,
    catalog: VersionCatalog,
    install_root: Path | None = None,
) -> None:
    """Verify the binary behind ``handle`` against ``catalog``.

    The binary is the handle's own path, or the installed binary for its
    version when ``install_root`` is given. An unusable catalog verifies
    nothing and succeeds without reading the file.

    Raises:
        ChecksumNotFoundError: If the catalog has no digest for the version.
        ChecksumMismatchError: If the digests differ.
        SolcIoError: If the binary cannot be read.
    """

    if not catalog.usable:
        return
    path = binary_path(install_root, handle.version) if install_root is not None else handle.path
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SolcIoError(path, exc) from exc
    verify_digest(handle.version, data, catalog, path)


__all__ = ["WINDOWS_CHECKSUM_CUTOFF", "sha256_hex", "verify_checksum", "verify_digest"]
