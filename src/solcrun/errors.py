# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by compiler resolution, installation and invocation."""

from __future__ import annotations

from pathlib import Path

from packaging.version import Version


class SolcError(RuntimeError):
    """Base class for every error raised by :mod:`solcrun`."""


class PragmaNotFoundError(SolcError):
    """Raised when source text carries no ``pragma solidity`` directive."""

    def __init__(self) -> None:
        super().__init__("no solidity version pragma found in source")


class VersionRequirementParseError(SolcError):
    """Raised when a version pragma expression cannot be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"invalid version requirement '{expression}': {reason}")
        self.expression = expression
        self.reason = reason


class VersionParseError(SolcError):
    """Raised when a compiler reports a version string that is not valid semver."""

    def __init__(self, raw: str, reason: str | None = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"unable to parse compiler version '{raw}'{detail}")
        self.raw = raw


class VersionNotFoundError(SolcError):
    """Raised when neither installed nor installable versions satisfy a requirement."""

    def __init__(self, requirement: str) -> None:
        super().__init__(f"no compiler version found satisfying '{requirement}'")
        self.requirement = requirement


class ChecksumNotFoundError(SolcError):
    """Raised when a usable catalog has no digest recorded for ``version``."""

    def __init__(self, version: Version) -> None:
        super().__init__(f"no checksum recorded for compiler version {version}")
        self.version = version


class ChecksumMismatchError(SolcError):
    """Raised when an installed binary does not hash to the catalog digest."""

    def __init__(self, version: Version, expected: str, detected: str, file: Path) -> None:
        super().__init__(
            f"checksum mismatch for compiler {version}: expected {expected}, found {detected} for file {file}",
        )
        self.version = version
        self.expected = expected
        self.detected = detected
        self.file = file


class SolcIoError(SolcError):
    """Raised for filesystem or process-spawn failures; always names the offending path."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        super().__init__(f"{cause} ({path})")
        self.path = Path(path)
        self.cause = cause


class InvalidUtf8Error(SolcError):
    """Raised when compiler stdout is not valid UTF-8."""

    def __init__(self) -> None:
        super().__init__("compiler output is not valid UTF-8")


class DeserializationError(SolcError):
    """Raised when compiler stdout is text but not the expected JSON shape."""


class SerializationError(SolcError):
    """Raised when a compile request cannot be encoded as JSON."""


class InvocationFailedError(SolcError):
    """Raised when the compiler process exits with a non-zero status."""

    def __init__(self, status: int, stdout: str, stderr: str) -> None:
        message = stderr.strip() or stdout.strip() or "<no output>"
        super().__init__(f"compiler exited with status {status}: {message}")
        self.status = status
        self.stdout = stdout
        self.stderr = stderr


class InstallError(SolcError):
    """Raised when downloading or installing a compiler version fails."""

    def __init__(self, version: Version, cause: BaseException | str) -> None:
        super().__init__(f"failed to install compiler {version}: {cause}")
        self.version = version
        self.cause = cause


__all__ = [
    "ChecksumMismatchError",
    "ChecksumNotFoundError",
    "DeserializationError",
    "InstallError",
    "InvalidUtf8Error",
    "InvocationFailedError",
    "PragmaNotFoundError",
    "SerializationError",
    "SolcError",
    "SolcIoError",
    "VersionNotFoundError",
    "VersionParseError",
    "VersionRequirementParseError",
]
