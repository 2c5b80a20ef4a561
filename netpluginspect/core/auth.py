"""Registry credential resolution.

Each value is taken from the first source that provides it:
    1. command-line flag (--docker-user / --docker-password)
    2. environment / .env (DOCKER_USER / DOCKER_PASSWORD)
    3. interactive prompt; the password prompt does not echo

Credentials live only in memory for the duration of the run.
"""

from __future__ import annotations

from typing import Callable

import click
from pydantic import SecretStr

from netpluginspect.core.config import Settings
from netpluginspect.core.errors import CredentialsError
from netpluginspect.schemas.reference import Credentials

Prompt = Callable[..., str]


# ── Prompt helpers ────────────────────────────────────────────────────────────

def _ask(prompt: Prompt, text: str, hide_input: bool = False) -> str:
    try:
        value = prompt(text, hide_input=hide_input, err=True)
    except click.Abort as exc:
        raise CredentialsError(f"No value was supplied for: {text}") from exc
    return str(value).strip()


# ── Resolution ────────────────────────────────────────────────────────────────

def resolve_credentials(
    settings: Settings,
    username: str | None = None,
    password: str | None = None,
    auth_endpoint: str | None = None,
    api_endpoint: str | None = None,
    prompt: Prompt = click.prompt,
) -> Credentials:
    user = username or settings.docker_user
    while not user:
        user = _ask(prompt, "Enter your Docker User ID")

    secret = password or settings.docker_password.get_secret_value()
    while not secret:
        secret = _ask(prompt, "Enter your Docker Password", hide_input=True)

    return Credentials(
        username=user,
        password=SecretStr(secret),
        auth_endpoint=(auth_endpoint or settings.docker_registry_auth_endpoint).rstrip("/"),
        api_endpoint=(api_endpoint or settings.docker_registry_api_endpoint).rstrip("/"),
    )
