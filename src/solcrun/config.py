# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and environment handling for solcrun."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .platform import detect_platform

SVM_HOME_ENV: Final[str] = "SVM_HOME"
SOLC_PATH_ENV: Final[str] = "SOLC_PATH"
BINARIES_URL_ENV: Final[str] = "SOLCRUN_BINARIES_URL"
JOBS_ENV: Final[str] = "SOLCRUN_JOBS"
XDG_DATA_HOME_ENV: Final[str] = "XDG_DATA_HOME"

DEFAULT_BINARIES_URL: Final[str] = "https://binaries.soliditylang.org"
DEFAULT_DOWNLOAD_TIMEOUT: Final[float] = 60.0
INSTALL_DIR_NAME: Final[str] = "svm"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def default_install_root(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory holding installed compiler versions.

    Resolution order: ``SVM_HOME``, an existing ``~/.svm`` directory, then
    ``$XDG_DATA_HOME/svm`` (``~/.local/share/svm`` when unset).

    Args:
        environ: Environment mapping consulted instead of :data:`os.environ`.

    Returns:
        Path: Install root; the directory may not exist yet.
    """

    env = os.environ if environ is None else environ
    override = env.get(SVM_HOME_ENV)
    if override:
        return Path(override).expanduser()
    home_dot_svm = Path.home() / ".svm"
    if home_dot_svm.is_dir():
        return home_dot_svm
    data_home = env.get(XDG_DATA_HOME_ENV)
    data_dir = Path(data_home).expanduser() if data_home else Path.home() / ".local" / "share"
    return data_dir / INSTALL_DIR_NAME


def _default_jobs() -> int:
    return max(os.cpu_count() or 1, 1)


class SolcSettings(BaseModel):
    """Runtime settings shared by the resolver, installer and CLI."""

    model_config = ConfigDict(frozen=True)

    install_root: Path = Field(default_factory=default_install_root)
    binaries_url: str = DEFAULT_BINARIES_URL
    platform: str = Field(default_factory=detect_platform)
    download_timeout: float = Field(default=DEFAULT_DOWNLOAD_TIMEOUT, gt=0)
    jobs: int = Field(default_factory=_default_jobs, ge=1)
    use_color: bool = True
    use_emoji: bool = True

    @field_validator("binaries_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("binaries_url must not be empty")
        return stripped

    @field_validator("install_root")
    @classmethod
    def _expand_install_root(cls, value: Path) -> Path:
        return value.expanduser()

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> SolcSettings:
        """Build settings from environment variables plus explicit overrides.

        Args:
            environ: Environment mapping consulted instead of :data:`os.environ`.
            **overrides: Field values taking precedence over the environment;
                ``None`` values are ignored.

        Returns:
            SolcSettings: Validated settings instance.

        Raises:
            ConfigError: If any value fails validation.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {"install_root": default_install_root(env)}
        binaries_url = env.get(BINARIES_URL_ENV)
        if binaries_url:
            values["binaries_url"] = binaries_url
        jobs = env.get(JOBS_ENV)
        if jobs:
            try:
                values["jobs"] = int(jobs)
            except ValueError as exc:
                raise ConfigError(f"{JOBS_ENV} must be an integer, got '{jobs}'") from exc
        values.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


__all__ = [
    "BINARIES_URL_ENV",
    "ConfigError",
    "DEFAULT_BINARIES_URL",
    "JOBS_ENV",
    "SOLC_PATH_ENV",
    "SVM_HOME_ENV",
    "SolcSettings",
    "default_install_root",
]
