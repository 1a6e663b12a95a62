# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable value identifying one compiler binary and its invocation options."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from functools import total_ordering
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import semver
from packaging.version import Version

from ..process import PIPE, CommandSpec
from ..versions.semver import compiler_version, short_version
from . import invocation
from .features import Feature, supports as feature_supported

if TYPE_CHECKING:
    from ..versions.catalog import VersionCatalog
    from .models import CompilerOutput

ModelT = TypeVar("ModelT")

STANDARD_JSON_FLAG = "--standard-json"


def _as_path_set(paths: Iterable[str | os.PathLike[str]]) -> frozenset[Path]:
    return frozenset(Path(path) for path in paths)


@total_ordering
@dataclass(frozen=True, eq=True)
class CompilerHandle:
    """Compiler binary plus the path options it is invoked with.

    Handles never change after construction; every ``with_*`` method returns
    a new handle. The version is a semantic version; release versions given
    as :class:`packaging.version.Version` or text are converted. Ordering
    compares the path, then the version, then the option sets.
    """

    path: Path
    version: semver.Version
    base_path: Path | None = None
    allow_paths: frozenset[Path] = field(default_factory=frozenset)
    include_paths: frozenset[Path] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "version", compiler_version(self.version))
        if self.base_path is not None:
            object.__setattr__(self, "base_path", Path(self.base_path))
        object.__setattr__(self, "allow_paths", _as_path_set(self.allow_paths))
        object.__setattr__(self, "include_paths", _as_path_set(self.include_paths))

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> CompilerHandle:
        """Probe ``path --version`` and return a handle for the reported version."""

        binary = Path(path)
        return cls(binary, invocation.probe_version(binary))

    @classmethod
    async def from_path_async(cls, path: str | os.PathLike[str]) -> CompilerHandle:
        """Cooperative counterpart of :meth:`from_path`."""

        binary = Path(path)
        return cls(binary, await invocation.probe_version_async(binary))

    @property
    def short_version(self) -> Version:
        """Return the ``major.minor.patch`` part of :attr:`version`."""

        return short_version(self.version)

    def supports(self, feature: Feature) -> bool:
        """Return ``True`` when this compiler accepts ``feature``."""

        return feature_supported(self.version, feature)

    def with_base_path(self, base_path: str | os.PathLike[str] | None) -> CompilerHandle:
        """Return a copy using ``base_path`` as working directory and ``--base-path``."""

        return replace(self, base_path=Path(base_path) if base_path is not None else None)

    def with_allow_paths(self, paths: Iterable[str | os.PathLike[str]]) -> CompilerHandle:
        """Return a copy whose allow paths are ``paths``."""

        return replace(self, allow_paths=_as_path_set(paths))

    def with_allow_path(self, path: str | os.PathLike[str]) -> CompilerHandle:
        """Return a copy with ``path`` added to the allow paths."""

        return replace(self, allow_paths=self.allow_paths | {Path(path)})

    def with_include_paths(self, paths: Iterable[str | os.PathLike[str]]) -> CompilerHandle:
        """Return a copy whose include paths are ``paths``."""

        return replace(self, include_paths=_as_path_set(paths))

    def with_include_path(self, path: str | os.PathLike[str]) -> CompilerHandle:
        """Return a copy with ``path`` added to the include paths."""

        return replace(self, include_paths=self.include_paths | {Path(path)})

    def build_invocation(self) -> CommandSpec:
        """Return the ``--standard-json`` command for this handle.

        ``--base-path`` is only passed to compilers that understand it, and
        ``--include-path`` additionally requires a base path. The working
        directory follows the base path whether or not the flag is passed.

        Returns:
            CommandSpec: Command with stdin, stdout and stderr piped.
        """

        args: list[str] = [str(self.path)]
        if self.allow_paths:
            args.extend(["--allow-paths", ",".join(sorted(str(path) for path in self.allow_paths))])
        if self.base_path is not None and self.supports(Feature.BASE_PATH):
            if self.supports(Feature.INCLUDE_PATH):
                for include in sorted(self.include_paths - {self.base_path}):
                    args.extend(["--include-path", str(include)])
            args.extend(["--base-path", str(self.base_path)])
        args.append(STANDARD_JSON_FLAG)
        return CommandSpec(tuple(args), cwd=self.base_path, stdin=PIPE, stdout=PIPE, stderr=PIPE)

    def verify_checksum(self, catalog: VersionCatalog) -> None:
        """Check this binary against ``catalog``.

        Raises:
            ChecksumNotFoundError: If the catalog has no digest for the version.
            ChecksumMismatchError: If the binary digest differs.
            SolcIoError: If the binary cannot be read.
        """

        from ..install.integrity import verify_checksum

        verify_checksum(self, catalog)

    def compile_output(self, compiler_input: Any) -> bytes:
        """Run the compiler on ``compiler_input`` and return raw stdout."""

        return invocation.compile_output(self, compiler_input)

    async def compile_output_async(self, compiler_input: Any) -> bytes:
        """Cooperative counterpart of :meth:`compile_output`."""

        return await invocation.compile_output_async(self, compiler_input)

    def compile(self, compiler_input: Any) -> CompilerOutput:
        """Compile ``compiler_input`` into a :class:`CompilerOutput`."""

        return invocation.compile(self, compiler_input)

    async def compile_async(self, compiler_input: Any) -> CompilerOutput:
        """Cooperative counterpart of :meth:`compile`."""

        return await invocation.compile_async(self, compiler_input)

    def compile_as(self, compiler_input: Any, model: type[ModelT]) -> ModelT:
        """Compile ``compiler_input`` and deserialize stdout as ``model``."""

        return invocation.compile_as(self, compiler_input, model)

    async def compile_as_async(self, compiler_input: Any, model: type[ModelT]) -> ModelT:
        """Cooperative counterpart of :meth:`compile_as`."""

        return await invocation.compile_as_async(self, compiler_input, model)

    def compile_source(self, path: str | os.PathLike[str]) -> CompilerOutput:
        """Compile every source file under ``path``."""

        return invocation.compile_source(self, Path(path))

    def compile_exact(self, compiler_input: Any) -> CompilerOutput:
        """Compile and keep only output for files named in ``compiler_input``."""

        return invocation.compile_exact(self, compiler_input)

    def _sort_key(self) -> tuple[Any, ...]:
        return (
            str(self.path),
            self.version,
            self.base_path is not None,
            str(self.base_path) if self.base_path is not None else "",
            tuple(sorted(str(path) for path in self.allow_paths)),
            tuple(sorted(str(path) for path in self.include_paths)),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CompilerHandle):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __fspath__(self) -> str:
        return str(self.path)

    def __str__(self) -> str:
        return f"solc {self.version} ({self.path})"


__all__ = ["CompilerHandle", "STANDARD_JSON_FLAG"]
