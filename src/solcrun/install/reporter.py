# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install lifecycle observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from packaging.version import Version

from ..logging import Messages


@runtime_checkable
class Reporter(Protocol):
    """Receive one start event and then exactly one outcome event per install."""

    def on_install_start(self, version: Version) -> None:
        """Called before the download begins."""

    def on_install_success(self, version: Version) -> None:
        """Called once the binary is installed and executable."""

    def on_install_error(self, version: Version, message: str) -> None:
        """Called when the install attempt fails."""


class NullReporter:
    """Reporter that ignores every event."""

    def on_install_start(self, version: Version) -> None:
        del version

    def on_install_success(self, version: Version) -> None:
        del version

    def on_install_error(self, version: Version, message: str) -> None:
        del version, message


@dataclass(slots=True)
class ConsoleReporter:
    """Reporter printing install progress as CLI status lines."""

    messages: Messages = field(default_factory=Messages)

    def on_install_start(self, version: Version) -> None:
        self.messages.info(f"Installing solc {version}")

    def on_install_success(self, version: Version) -> None:
        self.messages.ok(f"Installed solc {version}")

    def on_install_error(self, version: Version, message: str) -> None:
        self.messages.fail(f"Failed to install solc {version}: {message}")


__all__ = ["ConsoleReporter", "NullReporter", "Reporter"]
