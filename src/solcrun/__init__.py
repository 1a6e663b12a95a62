# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Versioned Solidity compiler orchestration."""

from __future__ import annotations

from importlib import metadata

from .compiler.batch import CompiledMany, CompileResult, compile_many, compile_many_blocking
from .compiler.handle import CompilerHandle
from .compiler.invocation import (
    compile_as,
    compile_as_async,
    compile_async,
    compile_output,
    compile_output_async,
    probe_version,
    probe_version_async,
)
from .compiler.models import CompilerInput, CompilerOutput
from .config import SolcSettings
from .errors import SolcError
from .versions.catalog import VersionCatalog, load_catalog
from .versions.resolver import VersionResolver

__all__ = [
    "CompileResult",
    "CompiledMany",
    "CompilerHandle",
    "CompilerInput",
    "CompilerOutput",
    "SolcError",
    "SolcSettings",
    "VersionCatalog",
    "VersionResolver",
    "__version__",
    "compile_as",
    "compile_as_async",
    "compile_async",
    "compile_many",
    "compile_many_blocking",
    "compile_output",
    "compile_output_async",
    "load_catalog",
    "probe_version",
    "probe_version_async",
]

try:
    __version__ = metadata.version("solcrun")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
