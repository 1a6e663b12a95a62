# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal status lines for CLI commands and debug logging setup.

Library modules only log through :mod:`logging`. Commands print through a
:class:`Messages` channel derived from :class:`~solcrun.config.SolcSettings`,
so colour and emoji choices are made once per invocation.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from functools import cache

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from .config import SolcSettings

LOGGER_NAME = "solcrun"


class Status(Enum):
    """Kinds of status line with their emoji marker and colour."""

    INFO = ("ℹ️ ", "cyan")
    OK = ("✅ ", "green")
    WARN = ("⚠️ ", "yellow")
    FAIL = ("❌ ", "red")

    def __init__(self, marker: str, style: str) -> None:
        self.marker = marker
        self.style = style


def stdout_is_terminal() -> bool:
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def _console(color: bool, emoji: bool) -> Console:
    # No file is bound so output follows sys.stdout at print time.
    return Console(
        color_system="auto" if color else None,
        force_terminal=color,
        no_color=not color,
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
    )


@dataclass(frozen=True, slots=True)
class Messages:
    """Status-line printer for one CLI invocation.

    Colour is only used when requested and stdout is a terminal; emoji
    markers follow the setting unconditionally.
    """

    use_color: bool = False
    use_emoji: bool = False

    @classmethod
    def from_settings(cls, settings: SolcSettings) -> Messages:
        return cls(use_color=settings.use_color and stdout_is_terminal(), use_emoji=settings.use_emoji)

    @property
    def console(self) -> Console:
        return _console(self.use_color, self.use_emoji)

    def section(self, title: str) -> None:
        """Print a header separating blocks of command output."""

        if self.use_color:
            self.console.print()
            self.console.print(Rule(title))
        else:
            self.console.print(Text(f"\n--- {title} ---"))

    def emit(self, status: Status, message: str) -> None:
        """Print ``message`` marked and styled for ``status``."""

        text = Text(f"{status.marker}{message}" if self.use_emoji else message)
        if self.use_color:
            text.stylize(status.style)
        self.console.print(text)

    def info(self, message: str) -> None:
        self.emit(Status.INFO, message)

    def ok(self, message: str) -> None:
        self.emit(Status.OK, message)

    def warn(self, message: str) -> None:
        self.emit(Status.WARN, message)

    def fail(self, message: str) -> None:
        self.emit(Status.FAIL, message)


def configure_verbose_logging(logger_name: str = LOGGER_NAME) -> None:
    """Stream debug records of ``logger_name`` to stderr."""

    logger = logging.getLogger(logger_name)
    if getattr(logger, "_solcrun_verbose_configured", False):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    setattr(logger, "_solcrun_verbose_configured", True)


__all__ = ["LOGGER_NAME", "Messages", "Status", "configure_verbose_logging", "stdout_is_terminal"]
