"""Inspection report aggregator.

One ``InspectionReport`` is created per run and handed to every component
that produces a finding. Findings are append-only and keep insertion order,
which is the order every output format renders them in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from netpluginspect.schemas.reference import PluginReference
from netpluginspect.schemas.registry import PluginConfigBlob
from netpluginspect.schemas.report import Finding, JsonOutput, JsonResult, Severity, split_status

VULNERABILITY_SCAN_PREFIX = "dockerstorestaging/"
VULNERABILITY_SCAN_URL = (
    "https://cloud.docker.com/app/dockerstorestaging/repository/docker/{repository}/tags/{tag}"
)

FindingListener = Callable[[Finding], None]
StepListener = Callable[[int, str], None]


@dataclass
class SystemInfo:
    operating_system: str = ""
    architecture: str = ""
    docker_version: str = ""


@dataclass(frozen=True)
class ReportSummary:
    error_count: int
    warning_count: int
    findings: tuple[Finding, ...]


@dataclass
class InspectionReport:
    plugin: str
    reference: PluginReference | None = None
    inspection_date: datetime = field(default_factory=datetime.now)
    system: SystemInfo = field(default_factory=SystemInfo)
    digest: str = ""
    base_layer_digest: str = ""
    config: PluginConfigBlob = field(default_factory=PluginConfigBlob)
    report_file: str = ""
    on_finding: FindingListener | None = None
    on_step: StepListener | None = None
    _findings: list[Finding] = field(default_factory=list, init=False, repr=False)
    _step: int = field(default=0, init=False, repr=False)

    # Findings

    def record(self, severity: Severity, text: str) -> Finding:
        finding = Finding(severity=Severity(severity), text=text.strip("\n"))
        self._findings.append(finding)
        if self.on_finding is not None:
            self.on_finding(finding)
        return finding

    def success(self, text: str) -> Finding:
        return self.record(Severity.SUCCESS, text)

    def warning(self, text: str) -> Finding:
        return self.record(Severity.WARNING, text)

    def error(self, text: str) -> Finding:
        return self.record(Severity.ERROR, text)

    def step(self, title: str) -> int:
        """Announce the next numbered step; steps are not findings."""
        self._step += 1
        if self.on_step is not None:
            self.on_step(self._step, title)
        return self._step

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(self._findings)

    @property
    def error_count(self) -> int:
        return sum(1 for f in self._findings if f.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self._findings if f.severity is Severity.WARNING)

    def summary(self) -> ReportSummary:
        return ReportSummary(
            error_count=self.error_count,
            warning_count=self.warning_count,
            findings=self.findings,
        )

    @property
    def exit_code(self) -> int:
        return 1 if self.error_count > 0 else 0

    # Derived fields

    @property
    def date_display(self) -> str:
        return self.inspection_date.strftime("%a %b %d %H:%M:%S %Y")

    @property
    def vulnerability_scan_url(self) -> str:
        ref = self.reference
        if ref is None or not ref.repository.startswith(VULNERABILITY_SCAN_PREFIX):
            return ""
        return VULNERABILITY_SCAN_URL.format(repository=ref.repository, tag=ref.tag)

    @property
    def users_display(self) -> str:
        return " ".join(self.config.users)

    @property
    def interface_types_display(self) -> str:
        return ", ".join(self.config.interface.types)

    def report_file_path(self, report_dir: str | Path) -> Path:
        """``<dir>/<repo>-<tag>_inspection_report_<timestamp>.html``"""
        if self.reference is not None:
            stem = f"{self.reference.repository.replace('/', '-')}-{self.reference.tag}"
        else:
            stem = self.plugin.replace("/", "-").replace(":", "-") or "plugin"
        stamp = self.inspection_date.strftime("%Y-%m-%d_%H-%M-%S")
        return Path(report_dir) / f"{stem}_inspection_report_{stamp}.html"

    def to_json_output(self) -> JsonOutput:
        results = []
        for finding in self._findings:
            status, message = split_status(finding.line)
            results.append(JsonResult(status=status, message=message))

        return JsonOutput(
            date=self.date_display,
            system_operating_system=self.system.operating_system,
            system_architecture=self.system.architecture,
            system_docker_version=self.system.docker_version,
            docker_networking_plugin=self.plugin,
            description=self.config.description,
            documentation=self.config.documentation,
            digest=self.digest,
            base_layer_digest=self.base_layer_digest,
            docker_version=self.config.docker_version or None,
            entrypoint=self.config.entrypoint_display,
            interface_socket=self.config.interface.socket,
            interface_socket_types=self.interface_types_display,
            workdir=self.config.workdir,
            user=self.users_display,
            ipc_host=self.config.ipc_host,
            pid_host=self.config.pid_host,
            errors=self.error_count,
            warnings=self.warning_count,
            html_report_file=self.report_file,
            vulnerabilities_scan_url=self.vulnerability_scan_url,
            results=results,
        )
