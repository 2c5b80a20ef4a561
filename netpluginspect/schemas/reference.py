"""Schemas for plugin references and registry credentials."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from netpluginspect.core.errors import ReferenceFormatError

# Anything from the first shell separator onward is dropped.
_UNSAFE_SUFFIX = re.compile(r"^(.*?)[;|&].*$", re.DOTALL)


def sanitize_reference(raw: str) -> str:
    """Strip a trailing ``;``, ``|`` or ``&`` command suffix from *raw*."""
    match = _UNSAFE_SUFFIX.match(raw)
    if match:
        raw = match.group(1)
    return raw.strip()


class PluginReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., description="namespace/name")
    tag: str

    @classmethod
    def parse(cls, raw: str) -> "PluginReference":
        """Parse a ``namespace/name:tag`` token.

        The token is sanitized first; a missing namespace or a missing or
        empty tag raises ``ReferenceFormatError``.
        """
        value = sanitize_reference(raw)

        if "/" not in value:
            raise ReferenceFormatError(
                "you did not prefix the Docker networking plugin with a user name "
                "(username/, library/ or dockerstorestaging/)!"
            )

        repository, sep, tag = value.rpartition(":")
        if not sep or not tag or "/" in tag:
            raise ReferenceFormatError("the Docker networking plugin does not contain a tag!")
        if "/" not in repository:
            raise ReferenceFormatError(
                "you did not prefix the Docker networking plugin with a user name "
                "(username/, library/ or dockerstorestaging/)!"
            )

        return cls(repository=repository, tag=tag)

    @property
    def namespace(self) -> str:
        return self.repository.split("/", 1)[0]

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"


class Credentials(BaseModel):
    """Process-scoped registry credentials; never written anywhere."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr
    auth_endpoint: str = "https://auth.docker.io"
    api_endpoint: str = "https://registry-1.docker.io"
