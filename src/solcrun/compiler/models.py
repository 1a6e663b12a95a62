# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Standard-JSON request and response shapes exchanged with the compiler."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

from ..errors import SolcIoError

SOLIDITY: Final[str] = "Solidity"
YUL: Final[str] = "Yul"
LANGUAGE_EXTENSIONS: Final[Mapping[str, str]] = {".sol": SOLIDITY, ".yul": YUL}

DEFAULT_OUTPUT_SELECTION: Final[dict[str, dict[str, list[str]]]] = {
    "*": {
        "*": ["abi", "evm.bytecode", "evm.deployedBytecode", "evm.methodIdentifiers"],
        "": ["ast"],
    },
}


def _default_settings() -> dict[str, Any]:
    return {"outputSelection": copy.deepcopy(DEFAULT_OUTPUT_SELECTION)}


class Source(BaseModel):
    """Source unit passed inline to the compiler."""

    model_config = ConfigDict(extra="allow")

    content: str


class CompilerInput(BaseModel):
    """Standard-JSON compile request."""

    model_config = ConfigDict(extra="allow")

    language: str = SOLIDITY
    sources: dict[str, Source] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=_default_settings)

    @classmethod
    def from_sources(
        cls,
        sources: Mapping[str | Path, str],
        *,
        language: str = SOLIDITY,
        settings: Mapping[str, Any] | None = None,
    ) -> CompilerInput:
        """Return a request compiling ``sources`` (path to text)."""

        return cls(
            language=language,
            sources={str(path): Source(content=text) for path, text in sources.items()},
            settings=copy.deepcopy(dict(settings)) if settings is not None else _default_settings(),
        )

    @classmethod
    def read_from(cls, root: Path, *, settings: Mapping[str, Any] | None = None) -> list[CompilerInput]:
        """Read ``.sol`` and ``.yul`` files under ``root`` into one request per language.

        Args:
            root: Source file or directory searched recursively.
            settings: Optional compiler settings applied to every request.

        Returns:
            list[CompilerInput]: Requests in language order, skipping empty languages.

        Raises:
            SolcIoError: If a source file cannot be read.
        """

        files = [root] if root.is_file() else sorted(path for path in root.rglob("*") if path.is_file())
        grouped: dict[str, dict[str | Path, str]] = {}
        for path in files:
            language = LANGUAGE_EXTENSIONS.get(path.suffix)
            if language is None:
                continue
            try:
                grouped.setdefault(language, {})[path] = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise SolcIoError(path, exc) from exc
        return [
            cls.from_sources(grouped[language], language=language, settings=settings)
            for language in (SOLIDITY, YUL)
            if language in grouped
        ]


class CompilerOutput(BaseModel):
    """Standard-JSON compile response.

    Only the top-level sections are modelled; their contents are kept as
    plain JSON for downstream processing.
    """

    model_config = ConfigDict(extra="allow")

    errors: list[dict[str, Any]] = Field(default_factory=list)
    sources: dict[str, dict[str, Any]] = Field(default_factory=dict)
    contracts: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def has_errors(self) -> bool:
        """Return ``True`` when any diagnostic has ``error`` severity."""

        return any(entry.get("severity") == "error" for entry in self.errors)

    def merge(self, other: CompilerOutput) -> CompilerOutput:
        """Return a new output combining ``self`` and ``other``."""

        return self.model_copy(
            update={
                "errors": [*self.errors, *other.errors],
                "sources": {**self.sources, **other.sources},
                "contracts": {**self.contracts, **other.contracts},
            },
        )

    def retain_files(self, files: Iterable[str | Path]) -> CompilerOutput:
        """Return a copy keeping only sources and contracts of ``files``."""

        keep = {str(path) for path in files}
        return self.model_copy(
            update={
                "sources": {name: data for name, data in self.sources.items() if name in keep},
                "contracts": {name: data for name, data in self.contracts.items() if name in keep},
            },
        )


__all__ = [
    "CompilerInput",
    "CompilerOutput",
    "DEFAULT_OUTPUT_SELECTION",
    "LANGUAGE_EXTENSIONS",
    "SOLIDITY",
    "Source",
    "YUL",
]
