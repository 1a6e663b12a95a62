# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared state."""

from __future__ import annotations

from pathlib import Path

import typer

from ..config import ConfigError, SolcSettings
from ..logging import Messages, configure_verbose_logging, stdout_is_terminal
from . import build, versions
from .state import CliState

app = typer.Typer(help="Install, select and run versioned Solidity compilers.", no_args_is_help=True)


@app.callback()
def main(
    ctx: typer.Context,
    install_root: Path | None = typer.Option(
        None,
        "--install-root",
        help="Directory holding installed compilers.",
    ),
    catalog: str | None = typer.Option(
        None,
        "--catalog",
        help="Release list path or URL used instead of the binaries mirror.",
    ),
    binaries_url: str | None = typer.Option(None, "--binaries-url", help="Base URL of the binaries mirror."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in CLI output."),
    color: bool = typer.Option(True, "--color/--no-color", help="Toggle ANSI colour in CLI output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Stream debug logging to stderr."),
) -> None:
    """Build the shared :class:`CliState` for the invoked command."""

    if verbose:
        configure_verbose_logging()
    try:
        settings = SolcSettings.from_env(
            install_root=install_root,
            binaries_url=binaries_url,
            use_emoji=emoji,
            use_color=color,
        )
    except ConfigError as exc:
        Messages(use_color=color and stdout_is_terminal(), use_emoji=emoji).fail(str(exc))
        raise typer.Exit(code=2) from exc
    ctx.obj = CliState(settings=settings, catalog_source=catalog)


versions.register(app)
build.register(app)

__all__ = ["app", "main"]
