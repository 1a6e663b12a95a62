# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` and ``asyncio`` process execution.

Both runners take the same :class:`CommandSpec` and return the same
:class:`ProcessOutput`; they differ only in how they wait.
"""

from __future__ import annotations

import asyncio
import contextlib
import shlex
import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# from compiler handles and never pass through a shell.
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import SolcIoError

PIPE = subprocess.PIPE


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Fully prepared process invocation."""

    args: tuple[str, ...]
    cwd: Path | None = None
    stdin: int = PIPE
    stdout: int = PIPE
    stderr: int = PIPE

    @property
    def program(self) -> Path:
        """Return the executable named by the command."""

        return Path(self.args[0])

    def __str__(self) -> str:
        rendered = shlex.join(self.args)
        return f"{rendered} (cwd={self.cwd})" if self.cwd is not None else rendered


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Exit status and captured streams of a finished process."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def success(self) -> bool:
        """Return ``True`` when the process exited with status zero."""

        return self.returncode == 0

    def stdout_text(self) -> str:
        """Return stdout decoded leniently for diagnostics."""

        return self.stdout.decode("utf-8", errors="replace")

    def stderr_text(self) -> str:
        """Return stderr decoded leniently for diagnostics."""

        return self.stderr.decode("utf-8", errors="replace")


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Argument list whose executable is an absolute path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If a bare executable name is not on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(spec: CommandSpec, *, stdin: bytes | None = None) -> ProcessOutput:
    """Run ``spec`` to completion, feeding ``stdin`` and collecting both output streams.

    Raises:
        SolcIoError: If the process cannot be spawned or its pipes fail.
    """

    try:
        normalized = _normalize_args(spec.args)
        # Bandit: argument list comes from a compiler handle; no shell expansion.
        with subprocess.Popen(  # nosec B603
            normalized,
            cwd=str(spec.cwd) if spec.cwd is not None else None,
            stdin=spec.stdin,
            stdout=spec.stdout,
            stderr=spec.stderr,
        ) as process:
            stdout, stderr = process.communicate(stdin)
    except OSError as exc:
        raise SolcIoError(spec.program, exc) from exc
    return ProcessOutput(returncode=process.returncode, stdout=stdout or b"", stderr=stderr or b"")


async def run_command_async(spec: CommandSpec, *, stdin: bytes | None = None) -> ProcessOutput:
    """Cooperative counterpart of :func:`run_command`.

    Spawning, writing ``stdin`` and waiting for exit all suspend the calling
    task instead of blocking the event loop.

    Raises:
        SolcIoError: If the process cannot be spawned or its pipes fail.
    """

    try:
        normalized = _normalize_args(spec.args)
        process = await asyncio.create_subprocess_exec(
            *normalized,
            cwd=str(spec.cwd) if spec.cwd is not None else None,
            stdin=spec.stdin,
            stdout=spec.stdout,
            stderr=spec.stderr,
        )
    except OSError as exc:
        raise SolcIoError(spec.program, exc) from exc
    try:
        stdout, stderr = await process.communicate(stdin)
    except OSError as exc:
        raise SolcIoError(spec.program, exc) from exc
    finally:
        # The child must not outlive a failed or cancelled exchange.
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
    returncode = process.returncode if process.returncode is not None else await process.wait()
    return ProcessOutput(returncode=returncode, stdout=stdout or b"", stderr=stderr or b"")


__all__ = ["CommandSpec", "PIPE", "ProcessOutput", "run_command", "run_command_async"]
