"""Command to be supervised."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Command:
    """A fully built, shell-escaped command line plus optional niceness.

    The supervisor executes the string as-is through the shell; building
    and escaping the transcoder arguments is the caller's job.
    """

    shell: str
    priority: int | None = None

    def __post_init__(self) -> None:
        if not self.shell.strip():
            raise ValueError("command must not be empty")

    def render(self, posix: bool | None = None) -> str:
        """Return the string handed to the shell.

        Args:
            posix: Override host detection (for tests). ``nice`` only
                exists on POSIX hosts, so the priority is dropped elsewhere.
        """
        if posix is None:
            posix = os.name == "posix"
        if self.priority is None or not posix:
            return self.shell
        return f"nice -n {self.priority} {self.shell}"

    def __str__(self) -> str:
        return self.render()
