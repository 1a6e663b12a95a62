# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version-gated command-line features of the compiler."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final

from packaging.version import Version

from ..versions.semver import AnyVersion, short_version


class Feature(str, Enum):
    """Command-line flags that only exist from a given compiler release onward."""

    BASE_PATH = "base-path"
    INCLUDE_PATH = "include-path"


# Inclusive lower bounds; see the 0.6.9 and 0.8.8 release notes.
FEATURE_GATES: Final[Mapping[Feature, Version]] = MappingProxyType(
    {
        Feature.BASE_PATH: Version("0.6.9"),
        Feature.INCLUDE_PATH: Version("0.8.8"),
    },
)


def supports(version: AnyVersion, feature: Feature) -> bool:
    """Return ``True`` when ``version`` accepts the flag behind ``feature``.

    Only the release triple is compared, so a nightly build of a gated
    release counts as that release.
    """

    return short_version(version) >= FEATURE_GATES[feature]


__all__ = ["FEATURE_GATES", "Feature", "supports"]
