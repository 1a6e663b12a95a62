# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the solcrun command-line interface."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from solcrun.cli.app import app
from solcrun.install import installer as installer_module

BINARY = b"#!/bin/sh\necho downloaded\n"
SOURCE = "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.0;\ncontract C {}\n"


def _invoke(install_root: Path, *args: str, catalog: Path | None = None):
    base = ["--install-root", str(install_root), "--no-color", "--no-emoji"]
    if catalog is not None:
        base.extend(["--catalog", str(catalog)])
    return CliRunner().invoke(app, [*base, *args])


def test_version_command(fake_solc, install_root: Path) -> None:
    result = _invoke(install_root, "version", str(fake_solc("0.8.19+commit.abc123.Linux.g++")))

    assert result.exit_code == 0
    assert "0.8.19+commit.abc123.Linux.gcc" in result.stdout


def test_version_command_reports_failure(install_root: Path, tmp_path: Path) -> None:
    result = _invoke(install_root, "version", str(tmp_path / "missing-solc"))

    assert result.exit_code == 1
    assert "missing-solc" in result.stdout


def test_ls_marks_global_version(install_root: Path, installed_compiler: Callable[..., Path]) -> None:
    installed_compiler("0.7.6")
    installed_compiler("0.8.19")
    assert _invoke(install_root, "use", "0.8.19").exit_code == 0

    result = _invoke(install_root, "ls")

    assert result.exit_code == 0
    assert "0.7.6" in result.stdout
    assert "0.8.19 (global)" in result.stdout


def test_ls_remote_lists_uninstalled(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    release_list_file: Callable[..., Path],
) -> None:
    installed_compiler("0.8.19")
    catalog = release_list_file([("0.8.19", None), ("0.8.24", None)])

    result = _invoke(install_root, "ls", "--remote", catalog=catalog)

    assert result.exit_code == 0
    available = result.stdout.split("Available", 1)[1]
    assert "0.8.24" in available
    assert "0.8.19" not in available


def test_use_requires_installed_version(install_root: Path) -> None:
    result = _invoke(install_root, "use", "0.9.0")

    assert result.exit_code == 1
    assert "0.9.0" in result.stdout


def test_install_command(
    install_root: Path,
    release_list_file: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(installer_module, "_fetch_artifact", lambda url, *, timeout: BINARY)
    catalog = release_list_file([("0.8.19", BINARY)])

    result = _invoke(install_root, "install", "0.8.19", catalog=catalog)

    assert result.exit_code == 0, result.stdout
    assert (install_root / "0.8.19" / "solc-0.8.19").read_bytes() == BINARY
    assert "Installed solc 0.8.19" in result.stdout


def test_install_command_reports_checksum_failure(
    install_root: Path,
    release_list_file: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(installer_module, "_fetch_artifact", lambda url, *, timeout: b"tampered")
    catalog = release_list_file([("0.8.19", BINARY)])

    result = _invoke(install_root, "install", "0.8.19", catalog=catalog)

    assert result.exit_code == 1
    assert "checksum mismatch" in result.stdout


def test_verify_command(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    release_list_file: Callable[..., Path],
) -> None:
    binary = installed_compiler("0.8.19")

    good = _invoke(install_root, "verify", "0.8.19", catalog=release_list_file([("0.8.19", binary.read_bytes())]))
    bad = _invoke(install_root, "verify", "0.8.19", catalog=release_list_file([("0.8.19", b"other")]))

    assert good.exit_code == 0
    assert "matches the release checksum" in good.stdout
    assert bad.exit_code == 1
    assert "checksum mismatch" in bad.stdout


def test_verify_with_unavailable_catalog_warns(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    tmp_path: Path,
) -> None:
    installed_compiler("0.8.19")

    result = _invoke(install_root, "verify", "0.8.19", catalog=tmp_path / "missing.json")

    assert result.exit_code == 0
    assert "checksum not verified" in result.stdout


def test_resolve_dry_run(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    release_list_file: Callable[..., Path],
    tmp_path: Path,
) -> None:
    installed_compiler("0.8.19")
    source = tmp_path / "C.sol"
    source.write_text(SOURCE, encoding="utf-8")
    catalog = release_list_file([("0.8.19", None), ("0.8.24", None)])

    result = _invoke(install_root, "resolve", str(source), "--dry-run", catalog=catalog)

    assert result.exit_code == 0
    assert "0.8.24 (install)" in result.stdout
    assert not (install_root / "0.8.24").exists()


def test_resolve_without_pragma(install_root: Path, tmp_path: Path) -> None:
    source = tmp_path / "C.sol"
    source.write_text("contract C {}\n", encoding="utf-8")

    result = _invoke(install_root, "resolve", str(source), catalog=tmp_path / "missing.json")

    assert result.exit_code == 1
    assert "pragma" in result.stdout


def test_compile_command_writes_merged_output(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    tmp_path: Path,
) -> None:
    installed_compiler("0.8.19")
    first = tmp_path / "A.sol"
    second = tmp_path / "B.sol"
    first.write_text(SOURCE, encoding="utf-8")
    second.write_text(SOURCE, encoding="utf-8")
    out = tmp_path / "out.json"

    result = _invoke(
        install_root,
        "compile",
        str(first),
        str(second),
        "--jobs",
        "2",
        "--out",
        str(out),
        catalog=tmp_path / "missing.json",
    )

    assert result.exit_code == 0, result.stdout
    merged = json.loads(out.read_text(encoding="utf-8"))
    assert set(merged["sources"]) == {str(first), str(second)}
    assert "with solc 0.8.19" in result.stdout


def test_compile_command_fails_on_error_diagnostics(
    install_root: Path,
    installed_compiler: Callable[..., Path],
    tmp_path: Path,
) -> None:
    installed_compiler("0.8.19", mode="diagnostic")
    source = tmp_path / "A.sol"
    source.write_text(SOURCE, encoding="utf-8")

    result = _invoke(install_root, "compile", str(source), catalog=tmp_path / "missing.json")

    assert result.exit_code == 1
    assert "ParserError: bad" in result.stdout
    assert "1 of 1 job(s) failed" in result.stdout
