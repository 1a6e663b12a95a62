# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared state handed from the root callback to every command."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import NoReturn

import typer

from ..config import SolcSettings
from ..errors import SolcError, SolcIoError
from ..install.installer import Installer
from ..install.reporter import ConsoleReporter
from ..logging import Messages
from ..versions.catalog import VersionCatalog, load_catalog
from ..versions.resolver import VersionResolver


@dataclass(slots=True)
class CliState:
    """Settings plus lazily loaded services for one CLI invocation."""

    settings: SolcSettings
    catalog_source: str | None = None
    _catalog: VersionCatalog | None = field(default=None, repr=False)
    _messages: Messages | None = field(default=None, repr=False)

    @property
    def messages(self) -> Messages:
        """Return the status-line printer for this invocation."""

        if self._messages is None:
            self._messages = Messages.from_settings(self.settings)
        return self._messages

    def catalog(self) -> VersionCatalog:
        """Return the release catalog, loading it on first use."""

        if self._catalog is None:
            self._catalog = load_catalog(
                self.catalog_source,
                platform=self.settings.platform,
                binaries_url=self.settings.binaries_url,
                timeout=self.settings.download_timeout,
            )
        return self._catalog

    def installer(self) -> Installer:
        return Installer(self.settings, self.catalog(), reporter=ConsoleReporter(self.messages))

    def resolver(self) -> VersionResolver:
        return VersionResolver(self.catalog(), self.installer())


def get_state(ctx: typer.Context) -> CliState:
    """Return the :class:`CliState` stored by the root callback."""

    state = ctx.find_object(CliState)
    if state is None:
        state = CliState(settings=SolcSettings.from_env())
        ctx.obj = state
    return state


def abort(exc: SolcError, state: CliState) -> NoReturn:
    """Report ``exc`` and exit with status 1."""

    state.messages.fail(str(exc))
    raise typer.Exit(code=1) from exc


def read_source(path: Path) -> str:
    """Return the text of ``path``.

    Raises:
        SolcIoError: If the file cannot be read.
    """

    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SolcIoError(path, exc) from exc


__all__ = ["CliState", "abort", "get_state", "read_source"]
