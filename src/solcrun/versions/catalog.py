# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable snapshot of installable compiler releases and their checksums."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Final

import requests
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_BINARIES_URL
from ..platform import detect_platform
from .semver import short_version, sorted_versions

LOGGER = logging.getLogger(__name__)

RELEASE_LIST_NAME: Final[str] = "list.json"


class BuildInfo(BaseModel):
    """One build entry of a soliditylang ``list.json`` release list."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    path: str
    version: str
    build: str | None = None
    long_version: str | None = Field(default=None, alias="longVersion")
    prerelease: str | None = None
    sha256: str | None = None


class ReleaseList(BaseModel):
    """Top-level document of a soliditylang ``list.json`` release list."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    builds: list[BuildInfo] = Field(default_factory=list)
    releases: dict[str, str] = Field(default_factory=dict)
    latest_release: str | None = Field(default=None, alias="latestRelease")


def _normalize_digest(value: str) -> str:
    digest = value.strip().lower()
    return digest[2:] if digest.startswith("0x") else digest


@dataclass(frozen=True, slots=True)
class VersionCatalog:
    """Known installable versions, ascending, with their expected sha256 digests.

    ``usable`` records whether the release list was loaded successfully. An
    unusable catalog offers no remote versions and disables checksum
    verification.
    """

    versions: tuple[Version, ...] = ()
    checksums: Mapping[Version, str] = field(default_factory=lambda: MappingProxyType({}))
    artifacts: Mapping[Version, str] = field(default_factory=lambda: MappingProxyType({}))
    platform: str = field(default_factory=detect_platform)
    usable: bool = False

    @classmethod
    def unavailable(cls, *, platform: str | None = None) -> VersionCatalog:
        """Return the catalog used when the release list could not be loaded."""

        return cls(platform=platform or detect_platform(), usable=False)

    @classmethod
    def from_release_list(cls, releases: ReleaseList, *, platform: str) -> VersionCatalog:
        """Build a catalog from a parsed release list.

        Only full releases are listed as installable versions; pre-release
        builds are ignored. Versions are sorted at load time so resolution can
        rely on ascending order.
        """

        checksums: dict[Version, str] = {}
        artifacts: dict[Version, str] = {}
        for build in releases.builds:
            if build.prerelease:
                continue
            try:
                version = short_version(Version(build.version))
            except InvalidVersion:
                LOGGER.debug("skipping build with invalid version %r", build.version)
                continue
            if build.sha256:
                checksums[version] = _normalize_digest(build.sha256)
            artifacts.setdefault(version, build.path)

        for raw_version, artifact in releases.releases.items():
            try:
                version = short_version(Version(raw_version))
            except InvalidVersion:
                LOGGER.debug("skipping release with invalid version %r", raw_version)
                continue
            artifacts[version] = artifact

        return cls(
            versions=sorted_versions(artifacts),
            checksums=MappingProxyType(checksums),
            artifacts=MappingProxyType(artifacts),
            platform=platform,
            usable=True,
        )

    @classmethod
    def from_json(cls, payload: str | bytes, *, platform: str) -> VersionCatalog:
        """Parse a ``list.json`` document.

        Raises:
            pydantic.ValidationError: If ``payload`` is not a valid release list.
        """

        return cls.from_release_list(ReleaseList.model_validate_json(payload), platform=platform)

    def checksum(self, version: Version) -> str | None:
        """Return the lowercase hex sha256 digest recorded for ``version``."""

        return self.checksums.get(short_version(version))

    def artifact(self, version: Version) -> str | None:
        """Return the release file name for ``version`` relative to the platform directory."""

        return self.artifacts.get(short_version(version))

    @property
    def latest(self) -> Version | None:
        """Return the newest installable version, if any."""

        return self.versions[-1] if self.versions else None

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and short_version(version) in self.artifacts


def release_list_url(binaries_url: str, platform: str) -> str:
    """Return the URL of the release list for ``platform``."""

    return f"{binaries_url.rstrip('/')}/{platform}/{RELEASE_LIST_NAME}"


def _fetch_release_list(url: str, *, timeout: float) -> bytes:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def load_catalog(
    source: str | Path | None = None,
    *,
    platform: str | None = None,
    binaries_url: str = DEFAULT_BINARIES_URL,
    timeout: float = 30.0,
) -> VersionCatalog:
    """Load the release catalog once; never raises.

    Args:
        source: Local ``list.json`` path or URL. When omitted the list is
            fetched from ``binaries_url`` for ``platform``.
        platform: Release-list platform identifier; detected when omitted.
        binaries_url: Base URL of the binaries mirror.
        timeout: Network timeout in seconds.

    Returns:
        VersionCatalog: Loaded catalog, or :meth:`VersionCatalog.unavailable`
        when the list could not be read or parsed.
    """

    target_platform = platform or detect_platform()
    location = str(source) if source is not None else release_list_url(binaries_url, target_platform)
    try:
        if location.startswith(("http://", "https://")):
            payload = _fetch_release_list(location, timeout=timeout)
        else:
            payload = Path(location).expanduser().read_bytes()
        catalog = VersionCatalog.from_json(payload, platform=target_platform)
    except (OSError, ValueError, requests.RequestException) as exc:
        LOGGER.error("failed to load compiler release list from %s: %s", location, exc)
        return VersionCatalog.unavailable(platform=target_platform)
    LOGGER.debug("loaded %d compiler releases from %s", len(catalog.versions), location)
    return catalog


__all__ = [
    "BuildInfo",
    "RELEASE_LIST_NAME",
    "ReleaseList",
    "VersionCatalog",
    "load_catalog",
    "release_list_url",
]
