#!/usr/bin/env python3
"""
Credential providers for Pinterest Login
"""

import getpass
import os
from typing import Callable, Mapping, Optional, Protocol

from pydantic import ValidationError

from config import LOGGER
from errors import CredentialError
from models import Credentials

EMAIL_ENV_VAR = "PINTEREST_EMAIL"
PASSWORD_ENV_VAR = "PINTEREST_PASSWORD"


class CredentialProvider(Protocol):
    """Supplies the identifier and secret for one login attempt.

    May block on human input. The login flow calls it off the event loop, where
    a blocking prompt cannot be interrupted, so interactive front ends should
    resolve credentials before starting the loop (see ``main.collect_credentials``).
    """

    def get_credentials(self) -> Credentials: ...


def _build_credentials(identifier: str, secret: str) -> Credentials:
    try:
        return Credentials(identifier=identifier, secret=secret)
    except ValidationError as e:
        raise CredentialError(f"Invalid credentials: {e.errors()[0]['msg']}") from e


class StaticCredentialProvider:
    def __init__(self, identifier: str, secret: str):
        self._credentials = _build_credentials(identifier, secret)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StaticCredentialProvider":
        env = os.environ if environ is None else environ
        identifier = env.get(EMAIL_ENV_VAR)
        secret = env.get(PASSWORD_ENV_VAR)
        if not identifier or secret is None:
            raise CredentialError(f"{EMAIL_ENV_VAR} and {PASSWORD_ENV_VAR} must both be set")
        return cls(identifier, secret)

    def get_credentials(self) -> Credentials:
        return self._credentials


class InteractiveCredentialProvider:
    """Prompts a human for the identifier (unless preset) and a masked secret."""

    def __init__(
        self,
        identifier: Optional[str] = None,
        prompt: Callable[[str], str] = input,
        secret_prompt: Callable[[str], str] = getpass.getpass
    ):
        self.identifier = identifier
        self._prompt = prompt
        self._secret_prompt = secret_prompt

    def get_credentials(self) -> Credentials:
        try:
            identifier = self.identifier
            if identifier is None:
                identifier = self._prompt("Pinterest email/username: ").strip()
            secret = self._secret_prompt("Account password: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise CredentialError("Credential prompt aborted") from e
        return _build_credentials(identifier, secret)


def default_credential_provider(environ: Optional[Mapping[str, str]] = None) -> CredentialProvider:
    env = os.environ if environ is None else environ
    identifier = env.get(EMAIL_ENV_VAR)
    if identifier and env.get(PASSWORD_ENV_VAR) is not None:
        LOGGER.info("Using credentials from the environment")
        return StaticCredentialProvider.from_env(env)
    if identifier:
        LOGGER.info(f"{PASSWORD_ENV_VAR} not set, prompting for the password")
        return InteractiveCredentialProvider(identifier=identifier)
    LOGGER.info("No credentials in the environment, prompting")
    return InteractiveCredentialProvider()
