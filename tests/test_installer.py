# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for compiler installation."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
import requests
from packaging.version import Version

from solcrun.config import SolcSettings
from solcrun.errors import ChecksumMismatchError, InstallError
from solcrun.install import installer as installer_module
from solcrun.install.installer import Installer
from solcrun.versions.catalog import VersionCatalog

BINARY = b"#!/bin/sh\necho fake compiler\n"


class EventRecorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []
        self._lock = threading.Lock()

    def on_install_start(self, version: Version) -> None:
        with self._lock:
            self.events.append(("start", str(version)))

    def on_install_success(self, version: Version) -> None:
        with self._lock:
            self.events.append(("success", str(version)))

    def on_install_error(self, version: Version, message: str) -> None:
        with self._lock:
            self.events.append(("error", str(version), message))


@pytest.fixture
def downloads(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    requested: list[str] = []
    lock = threading.Lock()

    def fake_fetch(url: str, *, timeout: float) -> bytes:
        with lock:
            requested.append(url)
        return BINARY

    monkeypatch.setattr(installer_module, "_fetch_artifact", fake_fetch)
    return requested


def test_install_downloads_verifies_and_marks_executable(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
) -> None:
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]), reporter=recorder)

    handle = installer.install(Version("0.8.19+commit.7dd6d404"))

    assert handle.path == settings.install_root / "0.8.19" / "solc-0.8.19"
    assert handle.short_version == Version("0.8.19")
    assert handle.path.read_bytes() == BINARY
    assert os.access(handle.path, os.X_OK)
    assert downloads == ["https://binaries.example.invalid/linux-amd64/solc-linux-amd64-v0.8.19+commit.deadbeef"]
    assert recorder.events == [("start", "0.8.19"), ("success", "0.8.19")]


def test_install_skips_present_version(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    installed_compiler: Callable[..., Path],
    downloads: list[str],
) -> None:
    installed_compiler("0.8.19")
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]), reporter=recorder)

    installer.install(Version("0.8.19"))

    assert downloads == []
    assert recorder.events == []


def test_force_reinstalls(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    installed_compiler: Callable[..., Path],
    downloads: list[str],
) -> None:
    installed_compiler("0.8.19")
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]))

    handle = installer.install(Version("0.8.19"), force=True)

    assert len(downloads) == 1
    assert handle.path.read_bytes() == BINARY


def test_checksum_mismatch_is_wrapped_and_leaves_nothing_behind(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
) -> None:
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", b"expected bytes")]), reporter=recorder)

    with pytest.raises(InstallError) as excinfo:
        installer.install(Version("0.8.19"))

    assert isinstance(excinfo.value.cause, ChecksumMismatchError)
    assert not (settings.install_root / "0.8.19" / "solc-0.8.19").exists()
    assert [event[0] for event in recorder.events] == ["start", "error"]


def test_unlisted_version_fails(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
) -> None:
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]), reporter=recorder)

    with pytest.raises(InstallError):
        installer.install(Version("0.5.0"))

    assert downloads == []
    assert [event[0] for event in recorder.events] == ["start", "error"]


def test_unusable_install_root_reports_start_and_error(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
    tmp_path: Path,
) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    recorder = EventRecorder()
    installer = Installer(
        settings.model_copy(update={"install_root": blocker}),
        catalog_factory([("0.8.19", BINARY)]),
        reporter=recorder,
    )

    with pytest.raises(InstallError) as excinfo:
        installer.install(Version("0.8.19"))

    assert isinstance(excinfo.value.cause, OSError)
    assert downloads == []
    assert [event[0] for event in recorder.events] == ["start", "error"]


def test_network_error_is_wrapped(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_fetch(url: str, *, timeout: float) -> bytes:
        raise requests.HTTPError("404 Client Error")

    monkeypatch.setattr(installer_module, "_fetch_artifact", broken_fetch)
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]), reporter=recorder)

    with pytest.raises(InstallError) as excinfo:
        installer.install(Version("0.8.19"))

    assert isinstance(excinfo.value.cause, requests.HTTPError)
    assert recorder.events[-1] == ("error", "0.8.19", "404 Client Error")


def test_concurrent_installs_of_same_version_download_once(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
) -> None:
    recorder = EventRecorder()
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY)]), reporter=recorder)

    with ThreadPoolExecutor(max_workers=8) as executor:
        handles = list(executor.map(lambda _: installer.install(Version("0.8.19")), range(8)))

    assert len(downloads) == 1
    assert len(set(handles)) == 1
    assert recorder.events == [("start", "0.8.19"), ("success", "0.8.19")]
    assert (settings.install_root / ".0.8.19.lock").exists()


def test_concurrent_installs_of_different_versions(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
) -> None:
    installer = Installer(settings, catalog_factory([("0.8.19", BINARY), ("0.7.6", BINARY)]))

    with ThreadPoolExecutor(max_workers=2) as executor:
        handles = list(executor.map(installer.install, [Version("0.8.19"), Version("0.7.6")]))

    assert sorted(handle.short_version for handle in handles) == [Version("0.7.6"), Version("0.8.19")]
    assert len(downloads) == 2


@pytest.mark.asyncio
async def test_install_async_produces_identical_artifact(
    settings: SolcSettings,
    catalog_factory: Callable[..., VersionCatalog],
    downloads: list[str],
    tmp_path: Path,
) -> None:
    catalog = catalog_factory([("0.8.19", BINARY)])
    blocking = Installer(settings, catalog).install(Version("0.8.19"))

    other_settings = settings.model_copy(update={"install_root": tmp_path / "other"})
    cooperative = await Installer(other_settings, catalog).install_async(Version("0.8.19"))

    assert blocking.path.read_bytes() == cooperative.path.read_bytes()
    assert blocking.path.relative_to(settings.install_root) == cooperative.path.relative_to(tmp_path / "other")
