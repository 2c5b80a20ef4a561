"""Plugin lifecycle controller — install, exercise and remove one plugin.

States::

    NOT_INSTALLED -> INSTALLING -> INSTALLED -> TESTING -> REMOVING -> REMOVED
                          \\-> INSTALL_FAILED

Every install/remove attempt records exactly one finding on the report. A
failed install is terminal for the plugin: nothing is tested or removed.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from netpluginspect.core.docker import DockerRuntime
from netpluginspect.core.logging import get_logger
from netpluginspect.inspection.report import InspectionReport
from netpluginspect.schemas.reference import PluginReference

logger = get_logger(__name__)

PluginTest = Callable[[str], bool]


class PluginState(str, Enum):
    NOT_INSTALLED = "not_installed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    TESTING = "testing"
    REMOVING = "removing"
    REMOVED = "removed"
    INSTALL_FAILED = "install_failed"


def failure_text(message: str, output: str) -> str:
    return f"{message}, {output}" if output else message


class PluginLifecycle:
    def __init__(
        self,
        runtime: DockerRuntime,
        report: InspectionReport,
        ref: PluginReference,
    ) -> None:
        self._runtime = runtime
        self._report = report
        self.plugin = str(ref)
        self.state = PluginState.NOT_INSTALLED

    def _transition(self, state: PluginState) -> None:
        logger.debug("Plugin state change", plugin=self.plugin, old=self.state.value, new=state.value)
        self.state = state

    def is_installed(self) -> bool:
        return self._runtime.plugin_inspect(self.plugin).ok

    def ensure_clean(self) -> None:
        """Remove a previously installed copy of the plugin, with a warning."""
        if not self.is_installed():
            return
        self._report.warning(
            f"The Docker networking plugin {self.plugin} is already installed and will be removed."
        )
        self._force_remove()
        self.state = PluginState.NOT_INSTALLED

    def install(self) -> bool:
        self._transition(PluginState.INSTALLING)
        result = self._runtime.plugin_install(self.plugin)
        if not result.ok:
            self._report.error(
                failure_text("Unable to install the Docker networking plugin!", result.output)
            )
            self._transition(PluginState.INSTALL_FAILED)
            return False

        self._report.success(
            f"Docker networking plugin {self.plugin} has been installed successfully."
        )
        self._transition(PluginState.INSTALLED)
        return True

    def remove(self) -> bool:
        if self.state is PluginState.INSTALL_FAILED:
            logger.debug("Skipping removal of a plugin that never installed", plugin=self.plugin)
            return False
        self._transition(PluginState.REMOVING)
        removed = self._force_remove()
        self._transition(PluginState.REMOVED)
        return removed

    def _force_remove(self) -> bool:
        result = self._runtime.plugin_remove(self.plugin)
        if not result.ok:
            self._report.error(
                failure_text(
                    f"Unable to remove the Docker networking plugin {self.plugin}!", result.output
                )
            )
            return False
        self._report.success(f"Docker networking plugin {self.plugin} was removed.")
        return True

    def run(self, tests: list[PluginTest]) -> bool:
        """Full cycle: clean up, install, run *tests* in order, remove.

        Returns True when the plugin installed, every test passed and it was
        removed again.
        """
        self._report.step(f"Installing the Docker networking plugin {self.plugin} ...")
        self.ensure_clean()
        if not self.install():
            return False

        self._transition(PluginState.TESTING)
        passed = True
        for test in tests:
            passed = test(self.plugin) and passed

        self._report.step("Removing the Docker networking plugin")
        removed = self.remove()
        return passed and removed
