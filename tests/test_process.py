# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the blocking and cooperative process runners."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from solcrun.errors import SolcIoError
from solcrun.process import CommandSpec, run_command, run_command_async


def test_run_command_collects_streams(fake_solc) -> None:
    output = run_command(CommandSpec((str(fake_solc("0.8.19")), "--version")))

    assert output.success
    assert "Version: 0.8.19" in output.stdout_text()
    assert output.stderr == b""


@pytest.mark.asyncio
async def test_missing_executable_raises_io_error(tmp_path: Path) -> None:
    missing = tmp_path / "solc"

    with pytest.raises(SolcIoError) as excinfo:
        await run_command_async(CommandSpec((str(missing), "--version")))

    assert excinfo.value.path == missing


@pytest.mark.asyncio
async def test_child_is_reaped_when_pipes_fail(fake_solc, monkeypatch: pytest.MonkeyPatch) -> None:
    binary = fake_solc("0.8.19")
    spawned: list[asyncio.subprocess.Process] = []
    spawn = asyncio.create_subprocess_exec

    async def recording_spawn(*args, **kwargs) -> asyncio.subprocess.Process:
        process = await spawn(*args, **kwargs)
        spawned.append(process)
        return process

    async def reset_pipe(self, input=None):  # noqa: A002
        raise ConnectionResetError("pipe reset")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_spawn)
    monkeypatch.setattr(asyncio.subprocess.Process, "communicate", reset_pipe)

    with pytest.raises(SolcIoError):
        await run_command_async(CommandSpec((str(binary), "--standard-json")))

    assert len(spawned) == 1
    assert spawned[0].returncode is not None
