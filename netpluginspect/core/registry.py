"""Registry metadata client — token auth plus manifest and blob retrieval.

Talks to a Docker Registry HTTP API v2 endpoint. Every call first obtains a
bearer token scoped to ``repository:<repo>:pull`` from the token service and
then queries the API with it. Failures are classified into the
``RegistryError`` subclasses and never retried.
"""

from __future__ import annotations

import hashlib
from typing import Any

import httpx

from netpluginspect.core.errors import (
    RegistryAuthError,
    RegistryError,
    RegistryNotFoundError,
    RegistryResponseError,
    RegistryTransportError,
)
from netpluginspect.core.logging import get_logger
from netpluginspect.schemas.reference import Credentials, PluginReference
from netpluginspect.schemas.registry import Manifest, PluginConfigBlob

logger = get_logger(__name__)

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
PLUGIN_CONFIG = "application/vnd.docker.plugin.v1+json"

_ACCEPT = {
    "plugin": [MANIFEST_V2],
    "image": [MANIFEST_V2, OCI_MANIFEST],
}


class RegistryClient:
    """Synchronous client for one set of credentials.

    Usage:
        with RegistryClient(credentials) as registry:
            digest = registry.fetch_digest(ref, "plugin")
            manifest = registry.fetch_manifest(ref, "plugin")
            config = registry.fetch_config_blob(ref)
    """

    def __init__(
        self,
        credentials: Credentials,
        service: str = "registry.docker.io",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._service = service
        self._http = httpx.Client(timeout=timeout, follow_redirects=True, transport=transport)
        self._tokens: dict[str, str] = {}

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Public API

    def fetch_digest(self, ref: PluginReference, kind: str = "plugin") -> str:
        """Content digest of the manifest ``ref`` points to."""
        response = self._get_manifest(ref, kind)
        digest = response.headers.get("Docker-Content-Digest")
        if not digest:
            digest = "sha256:" + hashlib.sha256(response.content).hexdigest()
        logger.debug("Fetched digest", reference=str(ref), digest=digest)
        return digest

    def fetch_manifest(self, ref: PluginReference, kind: str = "plugin") -> Manifest:
        response = self._get_manifest(ref, kind)
        data = self._json(response, f"manifest for {ref}")
        try:
            manifest = Manifest.model_validate(data)
        except ValueError as exc:
            raise RegistryResponseError(f"Malformed manifest for {ref}: {exc}") from exc

        if not manifest.layers:
            raise RegistryResponseError(f"The manifest for {ref} does not list any layers!")

        digest = response.headers.get("Docker-Content-Digest")
        manifest.digest = digest or "sha256:" + hashlib.sha256(response.content).hexdigest()
        logger.debug("Fetched manifest", reference=str(ref), layers=len(manifest.layers))
        return manifest

    def fetch_config_blob(self, ref: PluginReference) -> PluginConfigBlob:
        manifest = self.fetch_manifest(ref, "plugin")
        digest = manifest.config.digest
        if manifest.config.media_type and manifest.config.media_type != PLUGIN_CONFIG:
            logger.info(
                "Configuration is not a plugin config",
                reference=str(ref),
                media_type=manifest.config.media_type,
            )
        url = f"{self._credentials.api_endpoint}/v2/{ref.repository}/blobs/{digest}"
        response = self._get(
            url,
            what=f"configuration blob {digest} of {ref}",
            headers={"Authorization": f"Bearer {self._token(ref)}"},
        )

        algorithm, _, expected = digest.partition(":")
        if algorithm == "sha256" and hashlib.sha256(response.content).hexdigest() != expected:
            raise RegistryResponseError(
                f"The configuration blob of {ref} does not match its digest {digest}!"
            )

        data = self._json(response, f"configuration blob of {ref}")
        try:
            return PluginConfigBlob.model_validate(data)
        except ValueError as exc:
            raise RegistryResponseError(f"Malformed configuration blob for {ref}: {exc}") from exc

    # Internals

    def _token(self, ref: PluginReference) -> str:
        if ref.repository in self._tokens:
            return self._tokens[ref.repository]

        creds = self._credentials
        response = self._get(
            f"{creds.auth_endpoint}/token",
            what=f"a registry token for {ref.repository}",
            params={"service": self._service, "scope": f"repository:{ref.repository}:pull"},
            auth=(creds.username, creds.password.get_secret_value()),
        )
        data = self._json(response, "token response")
        token = (data.get("token") or data.get("access_token")) if isinstance(data, dict) else None
        if not token:
            raise RegistryResponseError("The registry token response does not contain a token!")

        self._tokens[ref.repository] = token
        return token

    def _get_manifest(self, ref: PluginReference, kind: str) -> httpx.Response:
        if kind not in _ACCEPT:
            raise ValueError(f"Unknown manifest kind: {kind!r}")
        url = f"{self._credentials.api_endpoint}/v2/{ref.repository}/manifests/{ref.tag}"
        return self._get(
            url,
            what=f"the {kind} manifest for {ref}",
            headers={
                "Accept": ", ".join(_ACCEPT[kind]),
                "Authorization": f"Bearer {self._token(ref)}",
            },
        )

    def _get(self, url: str, *, what: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.get(url, **kwargs)
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            raise RegistryTransportError(f"Unable to retrieve {what}: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            raise RegistryAuthError(
                f"Unable to retrieve {what}: access denied (HTTP {status}). "
                "Check your Docker ID and password.",
                status_code=status,
            )
        if status == 404:
            raise RegistryNotFoundError(
                f"Unable to retrieve {what}: not found (HTTP 404).", status_code=status
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RegistryError(
                f"Unable to retrieve {what}: HTTP {status} {response.text[:200]}",
                status_code=status,
            ) from exc
        return response

    @staticmethod
    def _json(response: httpx.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RegistryResponseError(f"The {what} is not valid JSON: {exc}") from exc
