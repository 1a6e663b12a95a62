# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate an already available compiler without resolving a pragma."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from packaging.version import Version

from ..config import SOLC_PATH_ENV, SolcSettings
from ..errors import SolcIoError
from ..versions.installed import find_installed_binary, global_version
from .handle import CompilerHandle
from .invocation import probe_version

LOGGER = logging.getLogger(__name__)

DEFAULT_BINARY = "solc"


def find_installed_compiler(version: Version, install_root: Path) -> CompilerHandle | None:
    """Return a handle for ``version`` if it is installed under ``install_root``."""

    binary = find_installed_binary(install_root, version)
    if binary is None:
        return None
    return CompilerHandle(binary, version)


def default_compiler(settings: SolcSettings, environ: Mapping[str, str] | None = None) -> CompilerHandle:
    """Return the compiler used when no version is requested.

    Lookup order: the ``SOLC_PATH`` environment variable, the version recorded
    in ``.global_version`` when it is installed, then ``solc`` on ``PATH``.
    Binaries found through the environment or ``PATH`` are probed for their
    version.

    Raises:
        SolcIoError: If no compiler can be found.
        VersionParseError: If the located binary reports an unparsable version.
    """

    env = os.environ if environ is None else environ
    override = env.get(SOLC_PATH_ENV)
    if override:
        LOGGER.debug("using compiler from %s=%s", SOLC_PATH_ENV, override)
        return CompilerHandle(Path(override), probe_version(Path(override)))

    selected = global_version(settings.install_root)
    if selected is not None:
        handle = find_installed_compiler(selected, settings.install_root)
        if handle is not None:
            return handle
        LOGGER.debug("global compiler version %s is not installed", selected)

    located = shutil.which(DEFAULT_BINARY)
    if located is None:
        raise SolcIoError(DEFAULT_BINARY, FileNotFoundError(f"'{DEFAULT_BINARY}' was not found on PATH"))
    return CompilerHandle(Path(located), probe_version(Path(located)))


__all__ = ["DEFAULT_BINARY", "default_compiler", "find_installed_compiler"]
