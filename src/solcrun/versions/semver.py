# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version parsing, pragma extraction and requirement matching.

Compilers report semantic versions, including ``-nightly``/``-develop``
pre-releases and build metadata, so their ``--version`` output is parsed
with :mod:`semver`. Installed and released compilers are addressed by their
``major.minor.patch`` triple, which is a :class:`packaging.version.Version`.

Solidity pragmas use npm-style ranges where whitespace separates comparators
that must all hold (``>=0.6.2 <0.8.21``), a bare version means an exact
match, and ``^``/``~`` describe compatible ranges. Every comparator is
expanded into plain ``>=``/``<``/``==`` clauses which are then compared as
semantic versions.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Final, TypeAlias

import semver
from packaging.version import InvalidVersion, Version

from ..errors import PragmaNotFoundError, VersionParseError, VersionRequirementParseError

AnyVersion: TypeAlias = "Version | semver.Version"

VERSION_OUTPUT_PREFIX: Final[str] = "Version: "

_PRAGMA_PATTERN: Final[re.Pattern[str]] = re.compile(r"pragma\s+solidity\s+(?P<version>.+?);")
_OPERATOR_GAP: Final[re.Pattern[str]] = re.compile(r"(\^|~>?|>=|<=|>|<|==?)\s+")
_COMPARATOR_SPLIT: Final[re.Pattern[str]] = re.compile(r"[\s,]+")
_COMPARATOR: Final[re.Pattern[str]] = re.compile(
    r"""
    ^(?P<op>\^|~>?|>=|<=|>|<|==?)?
    v?(?P<major>\d+|[xX*])
    (?:\.(?P<minor>\d+|[xX*]))?
    (?:\.(?P<patch>\d+|[xX*]))?
    (?P<pre>-[0-9A-Za-z.-]+)?
    (?:\+[0-9A-Za-z.-]+)?$
    """,
    re.VERBOSE,
)
_CLAUSE: Final[re.Pattern[str]] = re.compile(r"^(?P<op>==|>=|<=|>|<)(?P<version>.+)$")
_WILDCARDS: Final[frozenset[str]] = frozenset({"x", "X", "*"})
_OPERATORS: Final[dict[str, Callable[[semver.Version, semver.Version], bool]]] = {
    "==": operator.eq,
    ">=": operator.ge,
    ">": operator.gt,
    "<": operator.lt,
    "<=": operator.le,
}


def parse_version(raw: str) -> Version:
    """Return ``raw`` parsed as a release version.

    Raises:
        VersionParseError: If ``raw`` is not a valid version string.
    """

    text = raw.strip()
    try:
        return Version(text)
    except InvalidVersion as exc:
        raise VersionParseError(text, str(exc)) from exc


def parse_compiler_version(raw: str) -> semver.Version:
    """Return ``raw`` parsed as a semantic version.

    Pre-release and build metadata are kept verbatim, case included.

    Raises:
        VersionParseError: If ``raw`` is not a valid semantic version.
    """

    text = raw.strip()
    try:
        return semver.Version.parse(text)
    except (TypeError, ValueError) as exc:
        raise VersionParseError(text, str(exc)) from exc


def _release_triple(version: Version) -> tuple[int, int, int]:
    major, minor, patch = (tuple(version.release) + (0, 0, 0))[:3]
    return major, minor, patch


def compiler_version(version: AnyVersion | str) -> semver.Version:
    """Return ``version`` as a semantic version.

    Release versions become their triple; a local label becomes build
    metadata.
    """

    if isinstance(version, semver.Version):
        return version
    if isinstance(version, Version):
        major, minor, patch = _release_triple(version)
        return semver.Version(major, minor, patch, build=version.local)
    return parse_compiler_version(str(version))


def short_version(version: AnyVersion) -> Version:
    """Return ``version`` reduced to its ``major.minor.patch`` triple."""

    if isinstance(version, semver.Version):
        return Version(f"{version.major}.{version.minor}.{version.patch}")
    major, minor, patch = _release_triple(version)
    return Version(f"{major}.{minor}.{patch}")


def parse_version_output(stdout: str) -> semver.Version:
    """Parse the output of ``solc --version``.

    The version lives on the last non-blank line, optionally prefixed with
    ``Version: ``. Linux builds report ``g++`` as part of the build metadata,
    which is not a valid identifier; it is rewritten to ``gcc``.

    Args:
        stdout: Decoded standard output of the version query.

    Returns:
        semver.Version: Compiler version including pre-release and build metadata.

    Raises:
        VersionParseError: If no version line exists or it cannot be parsed.
    """

    lines = [line for line in stdout.splitlines() if line.strip()]
    if not lines:
        raise VersionParseError("", "no version found in compiler output")
    candidate = lines[-1].strip()
    if candidate.startswith(VERSION_OUTPUT_PREFIX):
        candidate = candidate[len(VERSION_OUTPUT_PREFIX) :]
    return parse_compiler_version(candidate.replace(".g++", ".gcc"))


def find_version_pragma(source: str) -> str | None:
    """Return the expression of the first ``pragma solidity`` directive in ``source``."""

    match = _PRAGMA_PATTERN.search(source)
    if match is None:
        return None
    return match.group("version").strip()


@dataclass(frozen=True, slots=True)
class Comparator:
    """A single ``<op><version>`` clause."""

    op: str
    version: semver.Version

    def matches(self, candidate: semver.Version) -> bool:
        return _OPERATORS[self.op](candidate, self.version)

    def __str__(self) -> str:
        return f"{self.op}{self.version}"


def _same_release(left: semver.Version, right: semver.Version) -> bool:
    return (left.major, left.minor, left.patch) == (right.major, right.minor, right.patch)


@dataclass(frozen=True, slots=True)
class VersionRequirement:
    """Comparator set extracted from a version pragma.

    ``alternatives`` holds one comparator tuple per ``||`` branch; a version
    satisfies the requirement when every comparator of any branch holds.
    """

    alternatives: tuple[tuple[Comparator, ...], ...]
    expression: str = field(default="", compare=False)

    def matches(self, version: AnyVersion) -> bool:
        """Return ``True`` when ``version`` satisfies the requirement.

        Build metadata never takes part in matching. A pre-release only
        matches a branch that names a pre-release of the same
        ``major.minor.patch``.
        """

        candidate = compiler_version(version)
        return any(self._branch_matches(branch, candidate) for branch in self.alternatives)

    @staticmethod
    def _branch_matches(branch: tuple[Comparator, ...], candidate: semver.Version) -> bool:
        if not all(comparator.matches(candidate) for comparator in branch):
            return False
        if candidate.prerelease is None:
            return True
        return any(
            comparator.version.prerelease is not None and _same_release(comparator.version, candidate)
            for comparator in branch
        )

    @property
    def normalized(self) -> str:
        """Return the expanded comparator form, branches joined by ``||``."""

        return " || ".join(",".join(str(comparator) for comparator in branch) or "*" for branch in self.alternatives)

    def __str__(self) -> str:
        return self.expression or self.normalized


def parse_version_requirement(expression: str) -> VersionRequirement:
    """Parse a pragma version expression into a :class:`VersionRequirement`.

    Args:
        expression: Raw pragma expression such as ``^0.8.0`` or ``>=0.6.2 <0.8.21``.

    Returns:
        VersionRequirement: Parsed comparator set.

    Raises:
        VersionRequirementParseError: If the expression is empty or malformed.
    """

    text = expression.strip()
    if not text:
        raise VersionRequirementParseError(expression, "empty expression")
    alternatives: list[tuple[Comparator, ...]] = []
    for branch in text.split("||"):
        clauses = normalize_requirement(branch, expression=expression)
        alternatives.append(tuple(_parse_clause(clause, expression=expression) for clause in clauses))
    return VersionRequirement(alternatives=tuple(alternatives), expression=text)


def _parse_clause(clause: str, *, expression: str) -> Comparator:
    match = _CLAUSE.match(clause)
    if match is None:
        raise VersionRequirementParseError(expression, f"unexpected clause '{clause}'")
    try:
        version = semver.Version.parse(match.group("version"))
    except (TypeError, ValueError) as exc:
        raise VersionRequirementParseError(expression, str(exc)) from exc
    return Comparator(match.group("op"), version)


def normalize_requirement(branch: str, *, expression: str | None = None) -> list[str]:
    """Return the plain clauses equivalent to a whitespace-separated comparator list.

    Args:
        branch: A single ``||`` branch of a pragma expression.
        expression: Full expression used for error reporting.

    Returns:
        list[str]: Comparator clauses; an empty list matches every version.

    Raises:
        VersionRequirementParseError: If a comparator is malformed.
    """

    source = expression if expression is not None else branch
    compact = _OPERATOR_GAP.sub(r"\1", branch.strip())
    tokens = [token for token in _COMPARATOR_SPLIT.split(compact) if token]
    if not tokens:
        raise VersionRequirementParseError(source, "empty comparator list")
    clauses: list[str] = []
    for token in tokens:
        clauses.extend(_expand_comparator(token, expression=source))
    return clauses


def _expand_comparator(token: str, *, expression: str) -> list[str]:
    match = _COMPARATOR.match(token)
    if match is None:
        raise VersionRequirementParseError(expression, f"unexpected comparator '{token}'")
    op = match.group("op") or "="
    major = _component(match.group("major"))
    minor = _component(match.group("minor"))
    patch = _component(match.group("patch")) if minor is not None else None
    pre = match.group("pre") or ""
    if major is None:
        if op in {"<", ">"}:
            raise VersionRequirementParseError(expression, f"wildcard cannot be bounded by '{op}'")
        return []
    if pre and patch is None:
        raise VersionRequirementParseError(expression, f"pre-release requires a full version in '{token}'")

    lower = f"{major}.{minor or 0}.{patch or 0}{pre}"
    exact = minor is not None and patch is not None
    partial_upper = _partial_upper(major, minor)

    if op in {"=", "=="}:
        return [f"=={lower}"] if exact else [f">={lower}", f"<{partial_upper}"]
    if op == ">=":
        return [f">={lower}"]
    if op == ">":
        return [f">{lower}"] if exact else [f">={partial_upper}"]
    if op == "<":
        return [f"<{lower}"]
    if op == "<=":
        return [f"<={lower}"] if exact else [f"<{partial_upper}"]
    if op in {"~", "~>"}:
        return [f">={lower}", f"<{partial_upper if minor is None else f'{major}.{minor + 1}.0'}"]
    return [f">={lower}", f"<{_caret_upper(major, minor, patch)}"]


def _component(raw: str | None) -> int | None:
    if raw is None or raw in _WILDCARDS:
        return None
    return int(raw)


def _partial_upper(major: int, minor: int | None) -> str:
    if minor is None:
        return f"{major + 1}.0.0"
    return f"{major}.{minor + 1}.0"


def _caret_upper(major: int, minor: int | None, patch: int | None) -> str:
    if major > 0 or minor is None:
        return f"{major + 1}.0.0"
    if minor > 0 or patch is None:
        return f"0.{minor + 1}.0"
    return f"0.0.{patch + 1}"


def source_version_requirement(source: str) -> VersionRequirement:
    """Return the version requirement declared by ``source``.

    Raises:
        PragmaNotFoundError: If ``source`` has no version pragma.
        VersionRequirementParseError: If the pragma expression is malformed.
    """

    expression = find_version_pragma(source)
    if expression is None:
        raise PragmaNotFoundError()
    return parse_version_requirement(expression)


def sorted_versions(versions: Iterable[Version]) -> tuple[Version, ...]:
    """Return ``versions`` deduplicated and sorted ascending."""

    return tuple(sorted(set(versions)))


__all__ = [
    "AnyVersion",
    "Comparator",
    "VERSION_OUTPUT_PREFIX",
    "VersionRequirement",
    "compiler_version",
    "find_version_pragma",
    "normalize_requirement",
    "parse_compiler_version",
    "parse_version",
    "parse_version_output",
    "parse_version_requirement",
    "short_version",
    "sorted_versions",
    "source_version_requirement",
]
