"""Run menu commands through the platform shell and capture their output."""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .config import current_platform

logger = logging.getLogger("menuworks.executor")


@dataclass
class CommandResult:
    """Captured outcome of one command run."""

    command: str
    output: str
    # None when the shell itself could not be started.
    returncode: int | None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def first_command_token(command: str) -> str:
    """Return the program part of a command line.

    A leading double-quoted token is returned without its quotes; otherwise
    everything up to the first whitespace.
    """
    trimmed = command.strip()
    if not trimmed:
        return ""

    if trimmed.startswith('"'):
        end = trimmed.find('"', 1)
        if end == -1:
            return ""
        return trimmed[1:end]

    return trimmed.split(None, 1)[0]


def resolve_workdir(command: str, workdir: str = "") -> str:
    """Pick the directory a command runs in.

    An explicit workdir wins. Otherwise, if the command starts with a path
    to an existing file, run it from that file's directory.
    """
    if workdir.strip():
        return workdir

    cmd_path = first_command_token(command)
    if not cmd_path:
        return ""

    if os.path.exists(cmd_path):
        return str(Path(cmd_path).parent)

    return ""


def shell_argv(command: str, platform: str | None = None) -> list[str]:
    if (platform or current_platform()) == "windows":
        return ["cmd", "/c", command]
    return ["sh", "-c", command]


def execute_and_capture(command: str, workdir: str = "") -> CommandResult:
    """Run `command` to completion and return its combined stdout/stderr.

    Blocks until the command exits; there is no timeout and no cancellation.
    """
    cwd = resolve_workdir(command, workdir) or None
    logger.info("running command: %s (cwd=%s)", command, cwd or ".")

    try:
        proc = subprocess.run(
            shell_argv(command),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        logger.error("failed to start command %r: %s", command, exc)
        return CommandResult(command=command, output=f"Failed to start command: {exc}", returncode=None)

    logger.info("command finished with exit status %s", proc.returncode)
    return CommandResult(command=command, output=(proc.stdout or "").strip(), returncode=proc.returncode)
