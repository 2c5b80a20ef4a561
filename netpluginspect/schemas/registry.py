"""Schemas for registry manifests and plugin configuration blobs."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Descriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    media_type: str = Field(default="", alias="mediaType")
    size: int = 0
    digest: str


class Manifest(BaseModel):
    """Schema 2 manifest as served for images and plugins."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_version: int = Field(default=2, alias="schemaVersion")
    media_type: str = Field(default="", alias="mediaType")
    config: Descriptor
    layers: list[Descriptor] = Field(default_factory=list)
    digest: str = Field(default="", description="Content digest of the manifest itself")

    @property
    def base_layer_digest(self) -> str:
        """Digest of the first layer.

        Assumes the registry lists layers base-first.
        """
        return self.layers[0].digest if self.layers else ""


class PluginInterface(BaseModel):
    model_config = ConfigDict(extra="ignore")

    socket: str = Field(default="", validation_alias=AliasChoices("socket", "Socket"))
    types: list[str] = Field(default_factory=list, validation_alias=AliasChoices("types", "Types"))

    @field_validator("types", mode="before")
    @classmethod
    def _types_as_strings(cls, value: Any) -> Any:
        # Older configs carry {"prefix": ..., "capability": ..., "version": ...}
        if isinstance(value, list):
            out = []
            for item in value:
                if isinstance(item, dict):
                    prefix = item.get("prefix", "docker")
                    item = f"{prefix}.{item.get('capability', '')}/{item.get('version', '')}"
                out.append(str(item))
            return out
        return value


class PluginConfigBlob(BaseModel):
    """Configuration blob of a managed plugin (``application/vnd.docker.plugin.v1+json``)."""

    model_config = ConfigDict(extra="ignore")

    description: str = Field(default="", validation_alias=AliasChoices("description", "Description"))
    documentation: str = Field(
        default="", validation_alias=AliasChoices("documentation", "Documentation")
    )
    interface: PluginInterface = Field(
        default_factory=PluginInterface, validation_alias=AliasChoices("interface", "Interface")
    )
    entrypoint: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("entrypoint", "Entrypoint")
    )
    workdir: str = Field(default="", validation_alias=AliasChoices("workdir", "WorkDir", "Workdir"))
    user: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("user", "User"))
    ipc_host: bool = Field(default=False, validation_alias=AliasChoices("ipchost", "IpcHost"))
    pid_host: bool = Field(default=False, validation_alias=AliasChoices("pidhost", "PidHost"))
    docker_version: str = Field(
        default="", validation_alias=AliasChoices("DockerVersion", "dockerVersion", "docker_version")
    )

    @field_validator("entrypoint", mode="before")
    @classmethod
    def _entrypoint_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("user", mode="before")
    @classmethod
    def _user_mapping(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value

    @property
    def entrypoint_display(self) -> str:
        return " ".join(self.entrypoint)

    @property
    def users(self) -> list[str]:
        return list(self.user)
