"""pytest fixtures shared across all tests."""

from __future__ import annotations

import base64
import hashlib
import json
import shlex

import httpx
import pytest
from pydantic import SecretStr

from netpluginspect.core.config import Settings, get_settings
from netpluginspect.core.docker import DockerRuntime
from netpluginspect.core.registry import MANIFEST_V2, PLUGIN_CONFIG
from netpluginspect.core.shell import CommandResult
from netpluginspect.inspection.report import InspectionReport
from netpluginspect.schemas.reference import Credentials, PluginReference

AUTH_HOST = "auth.example.test"
API_HOST = "registry.example.test"
TOKEN = "tok-123"
BASE_LAYER = "sha256:" + "ab" * 32

SAMPLE_CONFIG = {
    "description": "Acme overlay networking plugin",
    "documentation": "https://docs.acme.test/netplug",
    "entrypoint": ["/usr/bin/netplug", "--log-level", "info"],
    "workdir": "/run/netplug",
    "user": {"uid": 0, "gid": 0},
    "interface": {"socket": "netplug.sock", "types": ["docker.networkdriver/1.0"]},
    "ipchost": False,
    "pidhost": True,
    "network": {"type": "host"},
    "DockerVersion": "17.06.0-ce",
}

_ENV_VARS = [
    "DOCKER_USER",
    "DOCKER_PASSWORD",
    "DOCKER_REGISTRY_AUTH_ENDPOINT",
    "DOCKER_REGISTRY_API_ENDPOINT",
    "DOCKER_REGISTRY_SERVICE",
    "LOG_LEVEL",
    "APP_DEBUG",
    "REPORT_DIR",
    "SWARM_INIT",
    "DOCKER_LOGIN",
    "NETWORK_READY_TIMEOUT",
    "NETWORK_POLL_INTERVAL",
    "TEST_NETWORK_NAME",
    "COMMAND_TIMEOUT",
    "REGISTRY_TIMEOUT",
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Run every test in an empty directory with no registry env vars."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeDocker:
    """In-memory container runtime driven through the command runner interface.

    Tracks installed plugins and networks so inspect/remove behave like the
    real thing. ``fail(fragment)`` makes every command containing *fragment*
    fail with the given output.
    """

    VERSION = "Docker version 24.0.7, build afdd53b"

    def __init__(self) -> None:
        self.plugins: set[str] = set()
        self.networks: set[str] = set()
        self.calls: list[str] = []
        self.inputs: list[str | None] = []
        self._failures: list[tuple[str, str]] = []

    def fail(self, fragment: str, output: str = "") -> "FakeDocker":
        self._failures.append((fragment, output))
        return self

    def ran(self, fragment: str) -> bool:
        return any(fragment in call for call in self.calls)

    def __call__(self, command_line: str, *, input: str | None = None, timeout: float | None = None) -> CommandResult:
        self.calls.append(command_line)
        self.inputs.append(input)

        for fragment, output in self._failures:
            if fragment in command_line:
                return CommandResult(output, False)

        words = shlex.split(command_line)
        if not words or words[0] != "docker":
            return CommandResult("", True)
        if "--version" in words:
            return CommandResult(self.VERSION, True)

        args = [w for w in words[1:] if not w.startswith("-")]
        verb = tuple(args[:2])
        name = args[-1] if args else ""

        if verb == ("plugin", "inspect"):
            if name in self.plugins:
                return CommandResult(name, True)
            return CommandResult(f"Error: No such plugin: {name}", False)
        if verb == ("plugin", "install"):
            self.plugins.add(name)
            return CommandResult(f"Installed plugin {name}", True)
        if verb == ("plugin", "remove"):
            if name not in self.plugins:
                return CommandResult(f"Error: plugin {name} not found", False)
            self.plugins.discard(name)
            return CommandResult(name, True)
        if verb == ("network", "create"):
            if name in self.networks:
                return CommandResult(f"network with name {name} already exists", False)
            self.networks.add(name)
            return CommandResult("3f1c2d9e", True)
        if verb == ("network", "rm"):
            if name not in self.networks:
                return CommandResult(f"Error: No such network: {name}", False)
            self.networks.discard(name)
            return CommandResult(name, True)
        if verb == ("network", "inspect"):
            if name in self.networks:
                return CommandResult(name, True)
            return CommandResult(f"Error: No such network: {name}", False)
        if args[:1] == ["login"]:
            return CommandResult("Login Succeeded", True)
        return CommandResult("", True)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _digest(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


class FakeRegistry:
    """Token service plus registry API v2 for one repository, as an httpx transport."""

    def __init__(
        self,
        repository: str = "acme/netplug",
        tag: str = "1.0",
        config: dict | None = None,
        username: str = "bob",
        password: str = "s3cret",
    ) -> None:
        self.repository = repository
        self.tag = tag
        self.config_bytes = json.dumps(SAMPLE_CONFIG if config is None else config).encode()
        self.config_digest = _digest(self.config_bytes)
        self.manifest = {
            "schemaVersion": 2,
            "mediaType": MANIFEST_V2,
            "config": {
                "mediaType": PLUGIN_CONFIG,
                "size": len(self.config_bytes),
                "digest": self.config_digest,
            },
            "layers": [
                {
                    "mediaType": "application/vnd.docker.image.rootfs.diff.tar.gzip",
                    "size": 4096,
                    "digest": BASE_LAYER,
                },
                {
                    "mediaType": "application/vnd.docker.image.rootfs.diff.tar.gzip",
                    "size": 512,
                    "digest": "sha256:" + "cd" * 32,
                },
            ],
        }
        self.manifest_bytes = json.dumps(self.manifest).encode()
        self.manifest_digest = _digest(self.manifest_bytes)
        self._basic = "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()
        self.requests: list[httpx.Request] = []
        # path -> (status, body) served instead of the normal answer
        self.overrides: dict[str, tuple[int, bytes]] = {}
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if path in self.overrides:
            status, body = self.overrides[path]
            return httpx.Response(status, content=body)

        if request.url.host == AUTH_HOST and path == "/token":
            if request.headers.get("Authorization") != self._basic:
                return httpx.Response(401, json={"details": "incorrect username or password"})
            return httpx.Response(200, json={"token": TOKEN, "expires_in": 300})

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"errors": [{"code": "UNAUTHORIZED"}]})

        if path == f"/v2/{self.repository}/manifests/{self.tag}":
            return httpx.Response(
                200,
                content=self.manifest_bytes,
                headers={"Content-Type": MANIFEST_V2, "Docker-Content-Digest": self.manifest_digest},
            )
        if path == f"/v2/{self.repository}/blobs/{self.config_digest}":
            return httpx.Response(200, content=self.config_bytes)
        return httpx.Response(404, json={"errors": [{"code": "MANIFEST_UNKNOWN"}]})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def fake_docker() -> FakeDocker:
    return FakeDocker()


@pytest.fixture
def runtime(fake_docker) -> DockerRuntime:
    return DockerRuntime(fake_docker)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        username="bob",
        password=SecretStr("s3cret"),
        auth_endpoint=f"https://{AUTH_HOST}",
        api_endpoint=f"https://{API_HOST}",
    )


@pytest.fixture
def ref() -> PluginReference:
    return PluginReference.parse("acme/netplug:1.0")


@pytest.fixture
def report(ref) -> InspectionReport:
    return InspectionReport(plugin=str(ref), reference=ref)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        docker_user="bob",
        docker_password="s3cret",
        docker_registry_auth_endpoint=f"https://{AUTH_HOST}",
        docker_registry_api_endpoint=f"https://{API_HOST}",
        network_ready_timeout=2.0,
        network_poll_interval=0.5,
    )
