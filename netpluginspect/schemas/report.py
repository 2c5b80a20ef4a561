"""Schemas for inspection findings and the JSON output document."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def label(self) -> str:
        return {
            Severity.SUCCESS: "Passed",
            Severity.WARNING: "Warning",
            Severity.ERROR: "Error",
        }[self]


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    text: str

    @property
    def line(self) -> str:
        """The finding as printed: ``<Label>: <text>``."""
        return f"{self.severity.label}: {self.text}"


def split_status(message: str) -> tuple[str, str]:
    """Split *message* at its first colon into ``(status, rest)``.

    Without a colon the status is empty and the message is returned whole.
    """
    status, sep, rest = message.partition(":")
    if not sep:
        return "", message
    return status, rest.strip()


class JsonResult(BaseModel):
    status: str = Field(serialization_alias="Status")
    message: str = Field(serialization_alias="Message")


class JsonOutput(BaseModel):
    """Structured ``--json`` document, one per run."""

    date: str = Field(serialization_alias="Date")
    system_operating_system: str = Field(serialization_alias="SystemOperatingSystem")
    system_architecture: str = Field(serialization_alias="SystemArchitecture")
    system_docker_version: str = Field(serialization_alias="SystemDockerVersion")
    docker_networking_plugin: str = Field(serialization_alias="DockerNetworkingPlugin")
    description: str = Field(serialization_alias="Description")
    documentation: str = Field(serialization_alias="Documentation")
    digest: str = Field(serialization_alias="DockerNetworkingPluginDigest")
    base_layer_digest: str = Field(serialization_alias="BaseLayerImageDigest")
    docker_version: str | None = Field(default=None, serialization_alias="DockerVersion")
    entrypoint: str = Field(serialization_alias="Entrypoint")
    interface_socket: str = Field(serialization_alias="InterfaceSocket")
    interface_socket_types: str = Field(serialization_alias="InterfaceSocketTypes")
    workdir: str = Field(serialization_alias="WorkDir")
    user: str = Field(serialization_alias="User")
    ipc_host: bool = Field(serialization_alias="IpcHost")
    pid_host: bool = Field(serialization_alias="PidHost")
    errors: int = Field(serialization_alias="Errors")
    warnings: int = Field(serialization_alias="Warnings")
    html_report_file: str = Field(default="", serialization_alias="HTMLReportFile")
    vulnerabilities_scan_url: str = Field(default="", serialization_alias="VulnerabilitiesScanURL")
    results: list[JsonResult] = Field(default_factory=list, serialization_alias="Results")

    def render(self) -> str:
        # DockerVersion is only present when the plugin embeds one.
        exclude = {"docker_version"} if not self.docker_version else None
        return self.model_dump_json(by_alias=True, exclude=exclude)
