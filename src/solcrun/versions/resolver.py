# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Choose, and install when needed, the compiler version a requirement asks for."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from packaging.version import Version

from ..compiler.handle import CompilerHandle
from ..errors import VersionNotFoundError
from .catalog import VersionCatalog
from .installed import binary_path, installed_versions
from .semver import VersionRequirement, parse_version_requirement, source_version_requirement

if TYPE_CHECKING:
    from ..install.installer import Installer

LOGGER = logging.getLogger(__name__)


def find_matching_installation(
    versions: Sequence[Version],
    requirement: VersionRequirement,
) -> Version | None:
    """Return the highest version in ascending ``versions`` that satisfies ``requirement``."""

    for version in reversed(versions):
        if requirement.matches(version):
            return version
    return None


class ResolutionAction(str, Enum):
    """What the resolver does with the matched version."""

    USE_LOCAL = "use-local"
    INSTALL_REMOTE = "install-remote"


@dataclass(frozen=True, slots=True)
class ResolutionPlan:
    """Decision taken for one requirement."""

    version: Version
    action: ResolutionAction
    local: Version | None
    remote: Version | None


def plan_resolution(
    local: Sequence[Version],
    remote: Sequence[Version],
    requirement: VersionRequirement,
) -> ResolutionPlan:
    """Pick the version to use from installed and installable candidates.

    An installable version is preferred only when it is strictly newer than
    the best installed match.

    Raises:
        VersionNotFoundError: If neither list has a satisfying version.
    """

    local_match = find_matching_installation(local, requirement)
    remote_match = find_matching_installation(remote, requirement)
    if remote_match is not None and (local_match is None or remote_match > local_match):
        return ResolutionPlan(remote_match, ResolutionAction.INSTALL_REMOTE, local_match, remote_match)
    if local_match is not None:
        return ResolutionPlan(local_match, ResolutionAction.USE_LOCAL, local_match, remote_match)
    raise VersionNotFoundError(str(requirement))


def _as_requirement(requirement: VersionRequirement | str) -> VersionRequirement:
    if isinstance(requirement, VersionRequirement):
        return requirement
    return parse_version_requirement(requirement)


class VersionResolver:
    """Resolve requirements against the live install root and a catalog."""

    def __init__(self, catalog: VersionCatalog, installer: Installer) -> None:
        self._catalog = catalog
        self._installer = installer

    @property
    def catalog(self) -> VersionCatalog:
        return self._catalog

    def installed_versions(self) -> list[Version]:
        """Return the versions currently installed, scanned afresh."""

        return installed_versions(self._installer.install_root)

    def plan(self, requirement: VersionRequirement | str) -> ResolutionPlan:
        """Return the resolution decision for ``requirement`` without installing."""

        return plan_resolution(self.installed_versions(), self._catalog.versions, _as_requirement(requirement))

    def ensure_installed(self, requirement: VersionRequirement | str) -> Version:
        """Return the version satisfying ``requirement``, installing it when chosen remotely.

        Raises:
            VersionRequirementParseError: If a string requirement is malformed.
            VersionNotFoundError: If no version satisfies the requirement.
            InstallError: If the chosen version fails to install.
        """

        plan = self.plan(requirement)
        if plan.action is ResolutionAction.INSTALL_REMOTE:
            LOGGER.debug("installing solc %s for '%s'", plan.version, requirement)
            self._installer.install(plan.version)
        return plan.version

    async def ensure_installed_async(self, requirement: VersionRequirement | str) -> Version:
        """Cooperative counterpart of :meth:`ensure_installed`."""

        plan = self.plan(requirement)
        if plan.action is ResolutionAction.INSTALL_REMOTE:
            LOGGER.debug("installing solc %s for '%s'", plan.version, requirement)
            await self._installer.install_async(plan.version)
        return plan.version

    def detect_version(self, source: str) -> Version:
        """Return the installed version satisfying the pragma of ``source``.

        Raises:
            PragmaNotFoundError: If ``source`` has no version pragma.
        """

        return self.ensure_installed(source_version_requirement(source))

    def resolve_handle(self, source: str) -> CompilerHandle:
        """Return a handle for the compiler that should build ``source``."""

        version = self.detect_version(source)
        return CompilerHandle(binary_path(self._installer.install_root, version), version)


__all__ = [
    "ResolutionAction",
    "ResolutionPlan",
    "VersionResolver",
    "find_matching_installation",
    "plan_resolution",
]
