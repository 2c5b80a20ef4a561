"""Container runtime commands issued through the command gateway."""

from __future__ import annotations

import shlex
from typing import Callable

from netpluginspect.core.shell import CommandResult, run_command

CommandRunner = Callable[..., CommandResult]


class DockerRuntime:
    """Thin command builder over a command runner.

    Every method issues exactly one command and returns the runner's
    ``CommandResult`` unchanged; interpreting failures is up to the caller.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        executable: str = "docker",
        timeout: float | None = None,
    ) -> None:
        self._run = runner
        self._docker = executable
        self._timeout = timeout

    def _cmd(self, *args: str, input: str | None = None) -> CommandResult:
        command_line = " ".join([self._docker, *args])
        if input is None:
            return self._run(command_line, timeout=self._timeout)
        return self._run(command_line, input=input, timeout=self._timeout)

    # System

    def version(self) -> CommandResult:
        return self._cmd("--version")

    def swarm_init(self) -> CommandResult:
        return self._cmd("swarm", "init")

    def login(self, username: str, password: str, server: str) -> CommandResult:
        # Password goes through stdin so it never shows up in a process listing.
        return self._cmd(
            "login",
            "--username",
            shlex.quote(username),
            "--password-stdin",
            shlex.quote(server),
            input=password,
        )

    # Plugins

    def plugin_inspect(self, plugin: str) -> CommandResult:
        return self._cmd("plugin", "inspect", "--format", "'{{ .Name }}'", shlex.quote(plugin))

    def plugin_install(self, plugin: str) -> CommandResult:
        return self._cmd("plugin", "install", "--grant-all-permissions", shlex.quote(plugin))

    def plugin_remove(self, plugin: str) -> CommandResult:
        return self._cmd("plugin", "remove", shlex.quote(plugin), "--force")

    # Networks

    def network_create(self, name: str, driver: str) -> CommandResult:
        return self._cmd("network", "create", f"--driver={shlex.quote(driver)}", shlex.quote(name))

    def network_remove(self, name: str) -> CommandResult:
        return self._cmd("network", "rm", shlex.quote(name))

    def network_inspect(self, name: str) -> CommandResult:
        return self._cmd("network", "inspect", "--format", "'{{ .Name }}'", shlex.quote(name))

    # Arbitrary

    def script(self, path: str, *args: str) -> CommandResult:
        """Run an external program (not a runtime subcommand)."""
        command_line = " ".join(shlex.quote(part) for part in (path, *args))
        return self._run(command_line, timeout=self._timeout)
