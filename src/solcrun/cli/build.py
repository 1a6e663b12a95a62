# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Implementation of the ``solcrun compile`` command."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from ..compiler.batch import CompiledMany, CompileJob, compile_many_blocking
from ..compiler.invocation import as_mapping
from ..compiler.models import CompilerInput, CompilerOutput
from ..errors import SolcError, SolcIoError
from .state import CliState, abort, get_state, read_source


def _prepare_jobs(state: CliState, sources: list[Path], base_path: Path | None) -> list[CompileJob]:
    resolver = state.resolver()
    jobs: list[CompileJob] = []
    for source in sources:
        text = read_source(source)
        handle = resolver.resolve_handle(text)
        if base_path is not None:
            handle = handle.with_base_path(base_path).with_allow_path(base_path)
        jobs.append((handle, CompilerInput.from_sources({str(source): text})))
    return jobs


def _report(state: CliState, compiled: CompiledMany) -> None:
    messages = state.messages
    messages.section("Compilation")
    for result in compiled:
        names = ", ".join(result.input.sources)
        output = result.output
        if output is None:
            messages.fail(f"{names}: {result.error}")
            continue
        diagnostics = [entry for entry in output.errors if entry.get("severity") == "error"]
        if diagnostics:
            for entry in diagnostics:
                message = entry.get("formattedMessage") or entry.get("message") or "error"
                messages.fail(f"{names}: {str(message).strip()}")
            continue
        warnings = len(output.errors)
        suffix = f" ({warnings} warning(s))" if warnings else ""
        messages.ok(f"{names} with solc {result.handle.version}{suffix}")


def _write_output(compiled: CompiledMany, destination: Path) -> None:
    merged = CompilerOutput()
    for output, _, _ in compiled.outputs():
        merged = merged.merge(output)
    try:
        destination.write_text(json.dumps(as_mapping(merged), indent=2, sort_keys=True), encoding="utf-8")
    except OSError as exc:
        raise SolcIoError(destination, exc) from exc


def compile_command(
    ctx: typer.Context,
    sources: list[Path] = typer.Argument(..., help="Source files to compile."),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Maximum concurrent compilers."),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write merged standard-JSON output here."),
    base_path: Path | None = typer.Option(None, "--base-path", help="Root used for import resolution."),
) -> None:
    """Resolve, install and run the compiler each source file asks for."""

    state = get_state(ctx)
    try:
        prepared = _prepare_jobs(state, sources, base_path)
        compiled = compile_many_blocking(prepared, jobs or state.settings.jobs)
        _report(state, compiled)
        if out is not None:
            _write_output(compiled, out)
    except SolcError as exc:
        abort(exc, state)

    if compiled.has_errors():
        failed = sum(1 for result in compiled if result.output is None or result.output.has_errors())
        state.messages.warn(f"{failed} of {len(compiled)} job(s) failed")
        raise typer.Exit(code=1)


def register(app: typer.Typer) -> None:
    """Register the compile command with ``app``."""

    app.command("compile")(compile_command)


__all__ = ["compile_command", "register"]
