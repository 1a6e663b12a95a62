# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for release-list loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests
from packaging.version import Version

from solcrun.versions import catalog as catalog_module
from solcrun.versions.catalog import VersionCatalog, load_catalog, release_list_url

RELEASE_LIST = {
    "builds": [
        {"path": "solc-linux-amd64-v0.8.1+commit.df193b15", "version": "0.8.1", "sha256": "0xABCDEF"},
        {"path": "solc-linux-amd64-v0.4.26+commit.4563c3fc", "version": "0.4.26", "sha256": "0x0123"},
        {"path": "solc-linux-amd64-v0.8.2-nightly", "version": "0.8.2", "prerelease": "nightly.2021.1.1"},
    ],
    "releases": {
        "0.8.1": "solc-linux-amd64-v0.8.1+commit.df193b15",
        "0.4.26": "solc-linux-amd64-v0.4.26+commit.4563c3fc",
    },
    "latestRelease": "0.8.1",
}


def test_catalog_is_sorted_and_skips_prereleases() -> None:
    catalog = VersionCatalog.from_json(json.dumps(RELEASE_LIST), platform="linux-amd64")

    assert catalog.usable
    assert catalog.versions == (Version("0.4.26"), Version("0.8.1"))
    assert catalog.latest == Version("0.8.1")
    assert Version("0.8.2") not in catalog


def test_checksums_are_lowercase_without_prefix() -> None:
    catalog = VersionCatalog.from_json(json.dumps(RELEASE_LIST), platform="linux-amd64")

    assert catalog.checksum(Version("0.8.1")) == "abcdef"
    assert catalog.checksum(Version("0.8.1+commit.df193b15")) == "abcdef"
    assert catalog.artifact(Version("0.4.26")) == "solc-linux-amd64-v0.4.26+commit.4563c3fc"
    assert catalog.checksum(Version("0.5.0")) is None


def test_load_catalog_from_file(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text(json.dumps(RELEASE_LIST), encoding="utf-8")

    catalog = load_catalog(path, platform="linux-amd64")

    assert catalog.usable
    assert catalog.platform == "linux-amd64"
    assert len(catalog.versions) == 2


def test_load_catalog_failure_yields_unusable_catalog(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    catalog = load_catalog(tmp_path / "missing.json", platform="linux-amd64")

    assert not catalog.usable
    assert catalog.versions == ()
    assert "failed to load compiler release list" in caplog.text


def test_load_catalog_rejects_malformed_document(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text('{"builds": "nope"}', encoding="utf-8")

    assert not load_catalog(path, platform="linux-amd64").usable


def test_load_catalog_fetches_platform_list(monkeypatch: pytest.MonkeyPatch) -> None:
    requested: list[str] = []

    def fake_fetch(url: str, *, timeout: float) -> bytes:
        requested.append(url)
        return json.dumps(RELEASE_LIST).encode("utf-8")

    monkeypatch.setattr(catalog_module, "_fetch_release_list", fake_fetch)

    catalog = load_catalog(platform="macosx-amd64", binaries_url="https://mirror.example/")

    assert requested == ["https://mirror.example/macosx-amd64/list.json"]
    assert catalog.platform == "macosx-amd64"
    assert catalog.usable


def test_load_catalog_network_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_fetch(url: str, *, timeout: float) -> bytes:
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(catalog_module, "_fetch_release_list", broken_fetch)

    catalog = load_catalog(platform="linux-amd64")

    assert not catalog.usable
    assert catalog.platform == "linux-amd64"


def test_release_list_url_strips_trailing_slash() -> None:
    assert release_list_url("https://a.example/", "linux-amd64") == "https://a.example/linux-amd64/list.json"


def test_unavailable_catalog_has_no_checksums() -> None:
    catalog = VersionCatalog.unavailable(platform="linux-amd64")

    assert not catalog.usable
    assert catalog.checksum(Version("0.8.1")) is None
    assert catalog.latest is None
