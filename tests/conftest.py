# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import hashlib
import json
import stat
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
from packaging.version import Version

from solcrun.config import SolcSettings
from solcrun.versions.catalog import VersionCatalog
from solcrun.versions.installed import binary_path

FAKE_SOLC_TEMPLATE = """#!{python}
import json
import os
import sys
import time

VERSION = {version!r}
MODE = {mode!r}
DELAY = {delay!r}

args = sys.argv[1:]
if "--version" in args:
    sys.stdout.write("solc, the solidity compiler commandline interface\\n")
    sys.stdout.write("Version: " + VERSION + "\\n")
    sys.exit(0)

payload = sys.stdin.read()
if DELAY:
    time.sleep(DELAY)
if MODE == "fail":
    sys.stderr.write("fatal: compiler exploded\\n")
    sys.exit(3)
if MODE == "invalid-utf8":
    sys.stdout.buffer.write(b"\\xff\\xfe\\xfd")
    sys.exit(0)
if MODE == "garbage":
    sys.stdout.write("this is not json")
    sys.exit(0)

request = json.loads(payload)
errors = []
if MODE == "diagnostic":
    errors.append({{"severity": "error", "message": "ParserError", "formattedMessage": "ParserError: bad"}})
names = sorted(request.get("sources", {{}}))
if MODE == "foreign":
    names.append("lib/Foreign.sol")
json.dump(
    {{
        "errors": errors,
        "sources": {{name: {{"id": index}} for index, name in enumerate(names)}},
        "contracts": {{name: {{"C": {{"abi": []}}}} for name in names}},
        "argv": args,
        "cwd": os.getcwd(),
        "language": request.get("language"),
        "settings": request.get("settings"),
    }},
    sys.stdout,
)
"""

FakeSolcFactory = Callable[..., Path]


def fake_solc_source(version: str, *, mode: str = "echo", delay: float = 0.0) -> str:
    """Return the script text of a fake compiler reporting ``version``."""

    return FAKE_SOLC_TEMPLATE.format(python=sys.executable, version=version, mode=mode, delay=delay)


def write_executable(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_solc(tmp_path: Path) -> FakeSolcFactory:
    """Return a factory writing fake compiler executables under ``tmp_path``."""

    def factory(version: str = "0.8.19+commit.7dd6d404.Linux.g++", *, mode: str = "echo", delay: float = 0.0) -> Path:
        name = f"solc-{version.split('+')[0]}-{mode}"
        return write_executable(tmp_path / "bin" / name, fake_solc_source(version, mode=mode, delay=delay))

    return factory


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    root = tmp_path / "svm"
    root.mkdir()
    return root


def install_fake(root: Path, version: str, *, mode: str = "echo") -> Path:
    """Place a fake compiler for ``version`` into the install layout under ``root``."""

    return write_executable(binary_path(root, Version(version)), fake_solc_source(version, mode=mode))


def release_list(entries: Iterable[tuple[str, bytes | None]]) -> str:
    """Return a ``list.json`` document for ``(version, binary contents)`` pairs."""

    builds = []
    releases = {}
    for version, content in entries:
        artifact = f"solc-linux-amd64-v{version}+commit.deadbeef"
        build = {"path": artifact, "version": version, "build": "commit.deadbeef", "longVersion": f"{version}+commit.deadbeef"}
        if content is not None:
            build["sha256"] = "0x" + hashlib.sha256(content).hexdigest()
        builds.append(build)
        releases[version] = artifact
    return json.dumps({"builds": builds, "releases": releases, "latestRelease": builds[-1]["version"] if builds else None})


def make_catalog(entries: Iterable[tuple[str, bytes | None]], *, platform: str = "linux-amd64") -> VersionCatalog:
    return VersionCatalog.from_json(release_list(entries), platform=platform)


@pytest.fixture
def settings(install_root: Path) -> SolcSettings:
    return SolcSettings(
        install_root=install_root,
        binaries_url="https://binaries.example.invalid",
        platform="linux-amd64",
        jobs=2,
        use_color=False,
        use_emoji=False,
    )


@pytest.fixture
def installed_compiler(install_root: Path) -> Callable[..., Path]:
    """Return a factory placing fake compilers into ``install_root``."""

    def factory(version: str, *, mode: str = "echo") -> Path:
        return install_fake(install_root, version, mode=mode)

    return factory


@pytest.fixture
def catalog_factory() -> Callable[..., VersionCatalog]:
    return make_catalog


@pytest.fixture
def release_list_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a ``list.json`` for ``(version, contents)`` pairs."""

    def factory(entries: Iterable[tuple[str, bytes | None]]) -> Path:
        path = tmp_path / "list.json"
        path.write_text(release_list(entries), encoding="utf-8")
        return path

    return factory
