"""Network functional test — create and delete a network driven by the plugin."""

from __future__ import annotations

import time
from typing import Callable

from netpluginspect.core.docker import DockerRuntime
from netpluginspect.core.errors import ReadinessTimeoutError
from netpluginspect.core.logging import get_logger
from netpluginspect.core.polling import poll_until
from netpluginspect.inspection.lifecycle import failure_text
from netpluginspect.inspection.report import InspectionReport

logger = get_logger(__name__)


class NetworkLifecycleTest:
    """Checks that an installed plugin can back a network.

    The caller guarantees the plugin is installed. Creation and deletion are
    reported as two separate findings; instead of fixed settle delays the
    test polls ``network inspect`` until the runtime reflects each change.
    """

    def __init__(
        self,
        runtime: DockerRuntime,
        report: InspectionReport,
        network_name: str = "test_network",
        ready_timeout: float = 30.0,
        poll_interval: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._runtime = runtime
        self._report = report
        self.network_name = network_name
        self._timeout = ready_timeout
        self._interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def __call__(self, plugin: str) -> bool:
        return self.run(plugin)

    def run(self, plugin: str) -> bool:
        self._cleanup()

        self._report.step(f"Testing the Docker network creation using plugin: {plugin} ...")
        created = self.create(plugin)

        self._report.step(f"Testing the Docker network deletion using plugin: {plugin} ...")
        deleted = self.delete(plugin)

        return created and deleted

    def _exists(self) -> bool:
        return self._runtime.network_inspect(self.network_name).ok

    def _wait(self, predicate: Callable[[], bool], what: str) -> None:
        poll_until(
            predicate,
            what=what,
            timeout=self._timeout,
            interval=self._interval,
            sleep=self._sleep,
            clock=self._clock,
        )

    def _cleanup(self) -> None:
        # Stale network from an earlier run; failures here do not matter.
        result = self._runtime.network_remove(self.network_name)
        if result.ok:
            logger.info("Removed stale test network", network=self.network_name)

    def create(self, plugin: str) -> bool:
        result = self._runtime.network_create(self.network_name, plugin)
        if not result.ok:
            self._report.error(
                failure_text(f"Unable to create a Docker network using plugin {plugin}!", result.output)
            )
            return False

        try:
            self._wait(self._exists, f"network {self.network_name} to become ready")
        except ReadinessTimeoutError as exc:
            self._report.error(f"Unable to create a Docker network using plugin {plugin}! {exc}")
            return False

        self._report.success(f"Docker network was created using plugin {plugin}")
        return True

    def delete(self, plugin: str) -> bool:
        result = self._runtime.network_remove(self.network_name)
        if not result.ok:
            self._report.error(
                failure_text(
                    f"Unable to remove the Docker test network using plugin {plugin}!", result.output
                )
            )
            return False

        try:
            self._wait(lambda: not self._exists(), f"network {self.network_name} to be removed")
        except ReadinessTimeoutError as exc:
            self._report.error(
                f"Unable to remove the Docker test network using plugin {plugin}! {exc}"
            )
            return False

        self._report.success(f"Docker network was removed using plugin {plugin}")
        return True
