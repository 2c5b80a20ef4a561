"""Exception taxonomy shared by the inspection components."""


class InspectionError(Exception):
    """Base class for errors that abort an inspection run."""


class ReferenceFormatError(InspectionError, ValueError):
    """The plugin reference is not of the form ``namespace/name:tag``."""


class CredentialsError(InspectionError):
    """No registry credentials could be obtained."""


class RuntimeCommandError(InspectionError):
    """A container runtime command the run depends on has failed."""

    def __init__(self, message: str, output: str = "") -> None:
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)
        self.output = output


class RegistryError(InspectionError):
    """Generic registry API failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistryAuthError(RegistryError):
    """The registry or its token service rejected the credentials."""


class RegistryNotFoundError(RegistryError):
    """Repository, tag or blob does not exist."""


class RegistryTransportError(RegistryError):
    """The registry could not be reached."""


class RegistryResponseError(RegistryError):
    """The registry answered with a body that cannot be used."""


class ReadinessTimeoutError(InspectionError):
    """A bounded wait for runtime state ran out of time."""

    def __init__(self, what: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s waiting for {what}")
        self.what = what
        self.timeout = timeout
