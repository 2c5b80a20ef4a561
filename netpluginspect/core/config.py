"""Application configuration via Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Registry credentials (overridden by --docker-user / --docker-password)
    docker_user: str = Field(default="")
    docker_password: SecretStr = Field(default=SecretStr(""))

    # Registry endpoints
    docker_registry_auth_endpoint: str = Field(
        default="https://auth.docker.io",
        description="Token service issuing scoped bearer tokens",
    )
    docker_registry_api_endpoint: str = Field(
        default="https://registry-1.docker.io",
        description="Registry HTTP API v2 base URL",
    )
    docker_registry_service: str = Field(
        default="registry.docker.io",
        description="Service name requested from the token endpoint",
    )
    registry_timeout: float = Field(default=30.0, description="Registry HTTP timeout in seconds")

    # Container runtime
    command_timeout: float = Field(default=300.0, description="Per-command timeout in seconds")
    swarm_init: bool = Field(default=True, description="Run 'docker swarm init' before installing")
    docker_login: bool = Field(default=True, description="Log the runtime in to the registry")

    # Network functional test
    test_network_name: str = Field(default="test_network")
    network_ready_timeout: float = Field(default=30.0)
    network_poll_interval: float = Field(default=0.5)

    # Reports
    report_dir: str = Field(default="html", description="Directory for HTML report artifacts")

    # Application
    app_debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING"
    )

    @field_validator("docker_registry_auth_endpoint", "docker_registry_api_endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("network_poll_interval")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("network_poll_interval must be greater than zero")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
