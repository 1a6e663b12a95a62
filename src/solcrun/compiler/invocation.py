# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run compilers over the ``--standard-json`` protocol, blocking or cooperatively.

Command construction comes from :meth:`CompilerHandle.build_invocation` and
output mapping is shared below; only the run-and-collect step differs
between :func:`compile_output` and :func:`compile_output_async`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import semver
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import (
    DeserializationError,
    InvalidUtf8Error,
    InvocationFailedError,
    SerializationError,
)
from ..process import CommandSpec, ProcessOutput, run_command, run_command_async
from ..versions.semver import parse_version_output
from .models import CompilerInput, CompilerOutput

if TYPE_CHECKING:
    from .handle import CompilerHandle

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

VERSION_FLAG = "--version"


def serialize_input(compiler_input: Any) -> bytes:
    """Encode ``compiler_input`` as the JSON document written to stdin.

    Args:
        compiler_input: Pydantic model, mapping, or any JSON-serializable value.

    Returns:
        bytes: UTF-8 encoded JSON.

    Raises:
        SerializationError: If the value cannot be encoded.
    """

    try:
        if isinstance(compiler_input, BaseModel):
            return compiler_input.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        return json.dumps(compiler_input).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"unable to serialize compiler input: {exc}") from exc


def _map_output(spec: CommandSpec, output: ProcessOutput) -> bytes:
    if not output.success:
        LOGGER.debug("%s exited with status %d", spec, output.returncode)
        raise InvocationFailedError(output.returncode, output.stdout_text(), output.stderr_text())
    return output.stdout


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidUtf8Error() from exc


def _deserialize(raw: bytes, model: type[ModelT]) -> ModelT:
    text = _decode(raw)
    try:
        return TypeAdapter(model).validate_json(text)
    except ValidationError as exc:
        raise DeserializationError(f"unable to deserialize compiler output: {exc}") from exc


def compile_output(handle: CompilerHandle, compiler_input: Any) -> bytes:
    """Run ``handle`` on ``compiler_input`` and return its raw stdout.

    Raises:
        SerializationError: If the input cannot be encoded.
        SolcIoError: If the compiler cannot be spawned.
        InvocationFailedError: If the compiler exits with a non-zero status.
    """

    payload = serialize_input(compiler_input)
    spec = handle.build_invocation()
    LOGGER.debug("running %s", spec)
    return _map_output(spec, run_command(spec, stdin=payload))


async def compile_output_async(handle: CompilerHandle, compiler_input: Any) -> bytes:
    """Cooperative counterpart of :func:`compile_output`."""

    payload = serialize_input(compiler_input)
    spec = handle.build_invocation()
    LOGGER.debug("running %s", spec)
    return _map_output(spec, await run_command_async(spec, stdin=payload))


def compile_as(handle: CompilerHandle, compiler_input: Any, model: type[ModelT]) -> ModelT:
    """Compile and deserialize stdout as ``model``.

    Raises:
        InvalidUtf8Error: If stdout is not UTF-8.
        DeserializationError: If stdout does not match ``model``.
    """

    return _deserialize(compile_output(handle, compiler_input), model)


async def compile_as_async(handle: CompilerHandle, compiler_input: Any, model: type[ModelT]) -> ModelT:
    """Cooperative counterpart of :func:`compile_as`."""

    return _deserialize(await compile_output_async(handle, compiler_input), model)


def compile(handle: CompilerHandle, compiler_input: Any) -> CompilerOutput:  # noqa: A001
    """Compile into the default :class:`CompilerOutput` shape."""

    return compile_as(handle, compiler_input, CompilerOutput)


async def compile_async(handle: CompilerHandle, compiler_input: Any) -> CompilerOutput:
    """Cooperative counterpart of :func:`compile`."""

    return await compile_as_async(handle, compiler_input, CompilerOutput)


def compile_source(handle: CompilerHandle, path: Path) -> CompilerOutput:
    """Compile every ``.sol`` and ``.yul`` file under ``path``.

    One request is sent per language and the outputs are merged.
    """

    output = CompilerOutput()
    for compiler_input in CompilerInput.read_from(path):
        output = output.merge(compile(handle, compiler_input))
    return output


def compile_exact(handle: CompilerHandle, compiler_input: CompilerInput) -> CompilerOutput:
    """Compile and drop output for files that were not part of ``compiler_input``."""

    return compile(handle, compiler_input).retain_files(compiler_input.sources)


def _version_spec(path: Path) -> CommandSpec:
    return CommandSpec((str(path), VERSION_FLAG))


def version_from_output(spec: CommandSpec, output: ProcessOutput) -> semver.Version:
    """Map the result of a ``--version`` query to a semantic version.

    Raises:
        InvocationFailedError: If the query exited with a non-zero status.
        InvalidUtf8Error: If stdout is not UTF-8.
        VersionParseError: If stdout holds no parsable version.
    """

    return parse_version_output(_decode(_map_output(spec, output)))


def probe_version(path: Path) -> semver.Version:
    """Return the version reported by ``path --version``."""

    spec = _version_spec(Path(path))
    return version_from_output(spec, run_command(spec))


async def probe_version_async(path: Path) -> semver.Version:
    """Cooperative counterpart of :func:`probe_version`."""

    spec = _version_spec(Path(path))
    return version_from_output(spec, await run_command_async(spec))


def as_mapping(output: CompilerOutput) -> Mapping[str, Any]:
    """Return ``output`` as plain JSON data, including unmodelled sections."""

    return output.model_dump(mode="json")


__all__ = [
    "VERSION_FLAG",
    "as_mapping",
    "compile",
    "compile_as",
    "compile_as_async",
    "compile_async",
    "compile_exact",
    "compile_output",
    "compile_output_async",
    "compile_source",
    "probe_version",
    "probe_version_async",
    "serialize_input",
    "version_from_output",
]
