# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bounded-concurrency compilation of many (handle, input) jobs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from ..errors import SolcError
from .handle import CompilerHandle
from .invocation import compile_async
from .models import CompilerOutput

LOGGER = logging.getLogger(__name__)

CompileJob = tuple[CompilerHandle, Any]


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of one batch job paired with the job that produced it."""

    outcome: CompilerOutput | SolcError
    handle: CompilerHandle
    input: Any

    @property
    def ok(self) -> bool:
        """Return ``True`` when the job produced output."""

        return not isinstance(self.outcome, SolcError)

    @property
    def output(self) -> CompilerOutput | None:
        """Return the compiler output, or ``None`` when the job failed."""

        return None if isinstance(self.outcome, SolcError) else self.outcome

    @property
    def error(self) -> SolcError | None:
        """Return the raised error, or ``None`` when the job succeeded."""

        return self.outcome if isinstance(self.outcome, SolcError) else None


@dataclass(frozen=True, slots=True)
class CompiledMany:
    """Results of :func:`compile_many` in completion order."""

    results: tuple[CompileResult, ...]

    def outputs(self) -> list[tuple[CompilerOutput, CompilerHandle, Any]]:
        """Return ``(output, handle, input)`` for every successful job."""

        return [
            (result.outcome, result.handle, result.input)
            for result in self.results
            if not isinstance(result.outcome, SolcError)
        ]

    def errors(self) -> list[tuple[SolcError, CompilerHandle, Any]]:
        """Return ``(error, handle, input)`` for every failed job."""

        return [
            (result.outcome, result.handle, result.input)
            for result in self.results
            if isinstance(result.outcome, SolcError)
        ]

    def has_errors(self) -> bool:
        """Return ``True`` when any job failed or reported error diagnostics."""

        return any(result.error is not None or result.outcome.has_errors() for result in self.results)

    def __iter__(self) -> Iterator[CompileResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


async def _run_job(handle: CompilerHandle, compiler_input: Any) -> CompileResult:
    try:
        outcome: CompilerOutput | SolcError = await compile_async(handle, compiler_input)
    except SolcError as exc:
        LOGGER.debug("job for %s failed: %s", handle, exc)
        outcome = exc
    return CompileResult(outcome=outcome, handle=handle, input=compiler_input)


async def compile_many(jobs: Iterable[CompileJob], limit: int) -> CompiledMany:
    """Compile ``jobs`` with at most ``limit`` compilers running at once.

    Jobs are started in submission order as slots free up. A failing job
    records its error and does not affect the others; nothing is retried.

    Args:
        jobs: ``(handle, input)`` pairs.
        limit: Maximum number of concurrent compiler processes.

    Returns:
        CompiledMany: One result per job, in completion order.

    Raises:
        ValueError: If ``limit`` is smaller than one.
    """

    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    pending_jobs = iter(jobs)
    running: set[asyncio.Task[CompileResult]] = set()
    results: list[CompileResult] = []

    def _refill() -> None:
        while len(running) < limit:
            job = next(pending_jobs, None)
            if job is None:
                return
            handle, compiler_input = job
            running.add(asyncio.create_task(_run_job(handle, compiler_input)))

    _refill()
    try:
        while running:
            done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                running.discard(task)
                results.append(task.result())
            _refill()
    except BaseException:
        for task in running:
            task.cancel()
        raise
    return CompiledMany(tuple(results))


def compile_many_blocking(jobs: Iterable[CompileJob], limit: int) -> CompiledMany:
    """Run :func:`compile_many` to completion from synchronous code."""

    return asyncio.run(compile_many(jobs, limit))


__all__ = ["CompileJob", "CompileResult", "CompiledMany", "compile_many", "compile_many_blocking"]
