# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version management commands: ``version``, ``ls``, ``install``, ``use``, ``verify``, ``resolve``."""

from __future__ import annotations

from pathlib import Path

import typer

from ..compiler.discovery import find_installed_compiler
from ..compiler.handle import CompilerHandle
from ..errors import SolcError, VersionNotFoundError
from ..install.integrity import verify_checksum
from ..versions.installed import global_version, installed_versions, set_global_version
from ..versions.resolver import ResolutionAction
from ..versions.semver import parse_version, source_version_requirement
from .state import abort, get_state, read_source


def version_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Compiler binary to query."),
) -> None:
    """Print the version reported by a compiler binary."""

    state = get_state(ctx)
    try:
        handle = CompilerHandle.from_path(path)
    except SolcError as exc:
        abort(exc, state)
    typer.echo(str(handle.version))


def ls_command(
    ctx: typer.Context,
    remote: bool = typer.Option(False, "--remote", help="Also list versions available for install."),
) -> None:
    """List installed compiler versions."""

    state = get_state(ctx)
    try:
        installed = installed_versions(state.settings.install_root)
    except SolcError as exc:
        abort(exc, state)
    selected = global_version(state.settings.install_root)

    state.messages.section("Installed")
    if not installed:
        state.messages.info(f"No compilers installed in {state.settings.install_root}")
    for version in installed:
        marker = " (global)" if selected is not None and version == selected else ""
        typer.echo(f"{version}{marker}")

    if not remote:
        return
    catalog = state.catalog()
    state.messages.section("Available")
    if not catalog.usable:
        state.messages.warn("Release list unavailable")
        return
    installed_set = set(installed)
    for version in catalog.versions:
        if version not in installed_set:
            typer.echo(str(version))


def install_command(
    ctx: typer.Context,
    versions: list[str] = typer.Argument(..., help="Compiler versions to install."),
    force: bool = typer.Option(False, "--force", help="Reinstall versions that are already present."),
) -> None:
    """Download and install compiler versions."""

    state = get_state(ctx)
    installer = state.installer()
    try:
        for raw in versions:
            handle = installer.install(parse_version(raw), force=force)
            state.messages.info(f"{handle.version} -> {handle.path}")
    except SolcError as exc:
        abort(exc, state)


def use_command(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Installed version to make the default."),
) -> None:
    """Select the default compiler version."""

    state = get_state(ctx)
    try:
        parsed = parse_version(version)
        if find_installed_compiler(parsed, state.settings.install_root) is None:
            raise VersionNotFoundError(version)
        set_global_version(state.settings.install_root, parsed)
    except SolcError as exc:
        abort(exc, state)
    state.messages.ok(f"Using solc {parsed}")


def verify_command(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Installed version to verify."),
) -> None:
    """Check an installed compiler against the release list checksum."""

    state = get_state(ctx)
    try:
        parsed = parse_version(version)
        handle = find_installed_compiler(parsed, state.settings.install_root)
        if handle is None:
            raise VersionNotFoundError(version)
        catalog = state.catalog()
        verify_checksum(handle, catalog)
    except SolcError as exc:
        abort(exc, state)
    if not catalog.usable:
        state.messages.warn("Release list unavailable; checksum not verified")
        return
    state.messages.ok(f"solc {parsed} matches the release checksum")


def resolve_command(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Source file whose pragma selects the compiler."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report the decision without installing."),
) -> None:
    """Resolve and install the compiler required by a source file."""

    state = get_state(ctx)
    resolver = state.resolver()
    try:
        text = read_source(source)
        if dry_run:
            plan = resolver.plan(source_version_requirement(text))
            action = "install" if plan.action is ResolutionAction.INSTALL_REMOTE else "use installed"
            typer.echo(f"{plan.version} ({action})")
            return
        handle = resolver.resolve_handle(text)
    except SolcError as exc:
        abort(exc, state)
    typer.echo(f"{handle.version} {handle.path}")


def register(app: typer.Typer) -> None:
    """Register the version management commands with ``app``."""

    app.command("version")(version_command)
    app.command("ls")(ls_command)
    app.command("install")(install_command)
    app.command("use")(use_command)
    app.command("verify")(verify_command)
    app.command("resolve")(resolve_command)


__all__ = [
    "install_command",
    "ls_command",
    "register",
    "resolve_command",
    "use_command",
    "verify_command",
    "version_command",
]
