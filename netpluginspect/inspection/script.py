"""Runs a user-supplied test script against the installed plugin."""

from __future__ import annotations

from pathlib import Path

from netpluginspect.core.docker import DockerRuntime
from netpluginspect.inspection.lifecycle import failure_text
from netpluginspect.inspection.report import InspectionReport


class ScriptTest:
    """Invoke ``<script> <plugin>``; exit status zero means the plugin passed."""

    def __init__(self, runtime: DockerRuntime, report: InspectionReport, script: str | Path) -> None:
        self._runtime = runtime
        self._report = report
        # bash -c looks bare names up on PATH, not in the working directory
        self.script = str(Path(script).resolve())

    def __call__(self, plugin: str) -> bool:
        self._report.step(f"Running the test script {self.script} against plugin: {plugin} ...")
        result = self._runtime.script(self.script, plugin)
        if not result.ok:
            self._report.error(
                failure_text(f"The test script {self.script} failed for plugin {plugin}!", result.output)
            )
            return False
        self._report.success(f"The test script {self.script} passed for plugin {plugin}.")
        return True
