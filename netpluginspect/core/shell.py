"""Runtime command gateway — run one shell command line and collect its output."""

from __future__ import annotations

import subprocess
import sys
from typing import NamedTuple

from netpluginspect.core.logging import get_logger

logger = get_logger(__name__)

_POWERSHELL = [
    "powershell.exe",
    "-ExecutionPolicy",
    "Unrestricted",
    "-NoLogo",
    "-NoProfile",
    "-NonInteractive",
    "-Command",
]


class CommandResult(NamedTuple):
    output: str
    ok: bool


def shell_argv(command_line: str, platform: str | None = None) -> list[str]:
    """Return the argv that hands *command_line* to the host shell."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return [*_POWERSHELL, command_line]
    return ["/bin/bash", "-c", command_line]


def run_command(
    command_line: str,
    *,
    input: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run *command_line* through the host shell and wait for it to exit.

    stdout and stderr are combined and trimmed. ``ok`` is True only for a zero
    exit status; an empty command line, a missing shell or a timeout all
    produce ``ok=False`` with a description in ``output``.
    """
    command_line = command_line.strip()
    if not command_line:
        return CommandResult("you must specify a command!", False)

    logger.debug("Running command", command=command_line)
    try:
        proc = subprocess.run(
            shell_argv(command_line),
            input=input,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        partial = exc.output.decode(errors="replace") if isinstance(exc.output, bytes) else exc.output
        message = f"command timed out after {timeout:g}s"
        if partial and partial.strip():
            message = f"{message}: {partial.strip()}"
        return CommandResult(message, False)
    except OSError as exc:
        return CommandResult(str(exc), False)

    output = (proc.stdout or "").strip()
    logger.debug("Command finished", command=command_line, returncode=proc.returncode, output=output)
    if proc.returncode != 0 and not output:
        output = f"exit status {proc.returncode}"
    return CommandResult(output, proc.returncode == 0)
