"""Host system probe: OS name, CPU architecture, runtime version."""

from __future__ import annotations

import platform
import sys

from netpluginspect.core.docker import DockerRuntime
from netpluginspect.core.errors import RuntimeCommandError
from netpluginspect.inspection.report import SystemInfo

# platform.machine() spellings → runtime architecture names
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


def operating_system() -> str:
    """Human-readable description of the host operating system."""
    if sys.platform.startswith("linux"):
        try:
            release = platform.freedesktop_os_release()
        except OSError:
            release = {}
        name = release.get("PRETTY_NAME") or f"Linux {platform.release()}"
        return name
    if sys.platform == "darwin":
        version = platform.mac_ver()[0]
        return f"MacOS darwin Version: {version}" if version else "MacOS darwin"
    if sys.platform.startswith("win"):
        release, version, _, _ = platform.win32_ver()
        return f"Microsoft Windows {release} {version}".strip()
    return "Operating System is unknown!"


def architecture() -> str:
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine or "unknown")


def probe_system(runtime: DockerRuntime) -> SystemInfo:
    """Collect host details; a runtime that cannot report its version is fatal."""
    result = runtime.version()
    if not result.ok:
        raise RuntimeCommandError("Unable to determine the Docker version!", result.output)
    return SystemInfo(
        operating_system=operating_system(),
        architecture=architecture(),
        docker_version=result.output,
    )
