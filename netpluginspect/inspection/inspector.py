"""Inspection workflow: registry metadata first, then the plugin lifecycle."""

from __future__ import annotations

from pathlib import Path

from netpluginspect.core.config import Settings
from netpluginspect.core.docker import DockerRuntime
from netpluginspect.core.errors import RuntimeCommandError
from netpluginspect.core.logging import get_logger
from netpluginspect.core.registry import RegistryClient
from netpluginspect.inspection.lifecycle import PluginLifecycle, PluginTest
from netpluginspect.inspection.network import NetworkLifecycleTest
from netpluginspect.inspection.report import InspectionReport
from netpluginspect.inspection.script import ScriptTest
from netpluginspect.inspection.system import probe_system
from netpluginspect.schemas.reference import Credentials, PluginReference

logger = get_logger(__name__)


class Inspector:
    """Drives one inspection run.

    ``prepare`` and ``fetch_metadata`` raise ``InspectionError`` subclasses on
    fatal failures; ``verify`` never raises for lifecycle problems and only
    records findings.
    """

    def __init__(
        self,
        report: InspectionReport,
        credentials: Credentials,
        settings: Settings,
        runtime: DockerRuntime | None = None,
        registry: RegistryClient | None = None,
        test_script: str | Path | None = None,
    ) -> None:
        if report.reference is None:
            raise ValueError("InspectionReport has no plugin reference")
        self.report = report
        self.ref: PluginReference = report.reference
        self.credentials = credentials
        self.settings = settings
        self.runtime = runtime or DockerRuntime(timeout=settings.command_timeout)
        self._registry = registry
        self.test_script = test_script

    def prepare(self) -> None:
        self.report.system = probe_system(self.runtime)
        logger.info("Host probed", docker_version=self.report.system.docker_version)

        if self.settings.docker_login:
            result = self.runtime.login(
                self.credentials.username,
                self.credentials.password.get_secret_value(),
                self.credentials.api_endpoint,
            )
            if not result.ok:
                raise RuntimeCommandError("Unable to log in to the Docker registry!", result.output)

    def fetch_metadata(self) -> None:
        self.report.step(f"Inspecting the Docker networking plugin: {self.ref} ...")

        registry = self._registry or RegistryClient(
            self.credentials,
            service=self.settings.docker_registry_service,
            timeout=self.settings.registry_timeout,
        )
        try:
            digest = registry.fetch_digest(self.ref, "plugin")
            manifest = registry.fetch_manifest(self.ref, "plugin")
            config = registry.fetch_config_blob(self.ref)
        finally:
            if self._registry is None:
                registry.close()

        self.report.digest = digest
        self.report.base_layer_digest = manifest.base_layer_digest
        self.report.config = config
        self.report.success(f"Docker networking plugin image {self.ref} has been inspected.")

    def tests(self) -> list[PluginTest]:
        tests: list[PluginTest] = [
            NetworkLifecycleTest(
                self.runtime,
                self.report,
                network_name=self.settings.test_network_name,
                ready_timeout=self.settings.network_ready_timeout,
                poll_interval=self.settings.network_poll_interval,
            )
        ]
        if self.test_script:
            tests.append(ScriptTest(self.runtime, self.report, self.test_script))
        return tests

    def verify(self) -> bool:
        if self.settings.swarm_init:
            # Already being a swarm manager is fine.
            self.runtime.swarm_init()

        lifecycle = PluginLifecycle(self.runtime, self.report, self.ref)
        return lifecycle.run(self.tests())
