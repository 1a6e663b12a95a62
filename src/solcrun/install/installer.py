# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Download and install compiler releases into the install root."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import tempfile
from pathlib import Path

import requests
from filelock import FileLock
from packaging.version import Version

from ..compiler.handle import CompilerHandle
from ..config import SolcSettings
from ..errors import InstallError, SolcError
from ..versions.catalog import VersionCatalog
from ..versions.installed import binary_path, find_installed_binary, lock_path
from ..versions.semver import short_version
from .integrity import verify_digest
from .reporter import NullReporter, Reporter

LOGGER = logging.getLogger(__name__)


def _fetch_artifact(url: str, *, timeout: float) -> bytes:
    """Return the body of ``url``.

    Raises:
        requests.RequestException: If the request fails or returns an error status.
    """

    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def _make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _write_atomic(destination: Path, data: bytes) -> None:
    """Write ``data`` next to ``destination`` and move it into place."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        _make_executable(temp_path)
        os.replace(temp_path, destination)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class Installer:
    """Install compiler versions listed in a :class:`VersionCatalog`.

    Installs of the same version are serialised through a lock file in the
    install root, so concurrent callers in one or several processes end up
    with a single download. Different versions install independently.
    """

    def __init__(
        self,
        settings: SolcSettings,
        catalog: VersionCatalog,
        reporter: Reporter | None = None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._reporter: Reporter = reporter if reporter is not None else NullReporter()

    @property
    def install_root(self) -> Path:
        """Return the directory compilers are installed into."""

        return self._settings.install_root

    @property
    def catalog(self) -> VersionCatalog:
        """Return the catalog installs are resolved against."""

        return self._catalog

    def artifact_url(self, version: Version) -> str:
        """Return the download URL for ``version``.

        Raises:
            InstallError: If the catalog does not list ``version``.
        """

        artifact = self._catalog.artifact(version)
        if artifact is None:
            raise InstallError(version, f"version is not listed for platform {self._catalog.platform}")
        return f"{self._settings.binaries_url}/{self._catalog.platform}/{artifact}"

    def install(self, version: Version, *, force: bool = False) -> CompilerHandle:
        """Install ``version`` unless it is already present.

        Args:
            version: Compiler version to install; build metadata is ignored.
            force: Reinstall even when the binary already exists.

        Returns:
            CompilerHandle: Handle for the installed binary.

        Raises:
            InstallError: If the download, verification or write fails.
        """

        normalized = short_version(version)
        if not force:
            existing = find_installed_binary(self.install_root, normalized)
            if existing is not None:
                return CompilerHandle(existing, normalized)

        try:
            self.install_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._reporter.on_install_start(normalized)
            self._reporter.on_install_error(normalized, str(exc))
            raise InstallError(normalized, exc) from exc

        with FileLock(str(lock_path(self.install_root, normalized))):
            # Another process may have finished the install while we waited.
            existing = find_installed_binary(self.install_root, normalized)
            if existing is not None and not force:
                LOGGER.debug("solc %s installed concurrently", normalized)
                return CompilerHandle(existing, normalized)
            return self._install_locked(normalized)

    async def install_async(self, version: Version, *, force: bool = False) -> CompilerHandle:
        """Run :meth:`install` in a worker thread."""

        return await asyncio.to_thread(self.install, version, force=force)

    def _install_locked(self, version: Version) -> CompilerHandle:
        destination = binary_path(self.install_root, version)
        self._reporter.on_install_start(version)
        try:
            url = self.artifact_url(version)
            LOGGER.debug("downloading solc %s from %s", version, url)
            data = _fetch_artifact(url, timeout=self._settings.download_timeout)
            verify_digest(version, data, self._catalog, destination)
            _write_atomic(destination, data)
        except (SolcError, OSError, requests.RequestException) as exc:
            self._reporter.on_install_error(version, str(exc))
            if isinstance(exc, InstallError):
                raise
            raise InstallError(version, exc) from exc
        self._reporter.on_install_success(version)
        return CompilerHandle(destination, version)


__all__ = ["Installer"]
