#!/usr/bin/env python3
"""
Configuration management for Pinterest Login
"""

import math
import os
import logging
from typing import Optional, Tuple
from pathlib import Path
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from errors import ConfigError

# Playwright's own default for actions and navigations
DEFAULT_ENGINE_TIMEOUT_MS = 30_000

PINTEREST_LOGIN_URL = "https://pinterest.com/login"

LOGGER = logging.getLogger("pinterest_login")


def _to_ms(seconds: float) -> int:
    # Playwright reads 0 as "no timeout"
    return max(1, math.ceil(seconds * 1000))


class BrowserConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    headless: bool = True
    request_timeout_seconds: Optional[float] = None
    launch_timeout_seconds: Optional[float] = None
    executable_path: Optional[Path] = None
    launch_args: Tuple[str, ...] = ()

    @field_validator("request_timeout_seconds", "launch_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and (not math.isfinite(value) or value <= 0):
            raise ConfigError(f"Timeout must be a finite positive duration, got {value}")
        return value

    @field_validator("executable_path")
    @classmethod
    def _executable_exists(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return value
        if not value.is_file() or not os.access(value, os.X_OK):
            raise ConfigError(f"Browser executable not found or not executable: {value}")
        return value

    @classmethod
    def builder(cls) -> "BrowserConfigBuilder":
        return BrowserConfigBuilder()

    @property
    def timeout_ms(self) -> int:
        if self.request_timeout_seconds is None:
            return DEFAULT_ENGINE_TIMEOUT_MS
        return _to_ms(self.request_timeout_seconds)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def launch_timeout_ms(self) -> Optional[int]:
        if self.launch_timeout_seconds is None:
            return None
        return _to_ms(self.launch_timeout_seconds)


class BrowserConfigBuilder:
    """Chainable construction of an immutable :class:`BrowserConfig`.

    Every setter returns the builder; ``build()`` validates once and raises
    :class:`ConfigError` for anything the model rejects.
    """

    def __init__(self):
        self._options = {}

    def headless(self, headless: bool = True) -> "BrowserConfigBuilder":
        self._options["headless"] = headless
        return self

    def with_head(self) -> "BrowserConfigBuilder":
        return self.headless(False)

    def request_timeout(self, seconds: Optional[float]) -> "BrowserConfigBuilder":
        self._options["request_timeout_seconds"] = seconds
        return self

    def launch_timeout(self, seconds: Optional[float]) -> "BrowserConfigBuilder":
        self._options["launch_timeout_seconds"] = seconds
        return self

    def executable_path(self, path: Optional[os.PathLike]) -> "BrowserConfigBuilder":
        self._options["executable_path"] = Path(path) if path is not None else None
        return self

    def launch_args(self, *args: str) -> "BrowserConfigBuilder":
        self._options["launch_args"] = tuple(self._options.get("launch_args", ())) + args
        return self

    def build(self) -> BrowserConfig:
        LOGGER.debug(f"Building browser config from options: {sorted(self._options)}")
        try:
            config = BrowserConfig(**self._options)
        except ValidationError as e:
            raise ConfigError(f"Invalid browser configuration: {e}") from e
        LOGGER.debug(
            f"Built browser config: headless={config.headless} "
            f"timeout_ms={config.timeout_ms} launch_args={list(config.launch_args)}"
        )
        return config


class Marker(BaseModel):
    """A detectable page element or text pattern classifying a page state."""

    model_config = ConfigDict(frozen=True)

    selectors: Tuple[str, ...] = ()
    text_patterns: Tuple[str, ...] = ()

    @property
    def css(self) -> str:
        return ", ".join(self.selectors)


class LoginSite(BaseModel):
    """Service specific selectors and markers.

    The target service changes its markup without notice, so these live apart
    from the state machine and can be swapped per call.
    """

    model_config = ConfigDict(frozen=True)

    login_url: str = PINTEREST_LOGIN_URL
    identifier_selector: str = "input#email"
    secret_selector: str = "input#password"
    submit_selector: str = "button[type='submit']"
    cookie_domain: str = "pinterest.com"
    authenticated: Marker = Marker(
        selectors=(
            "[data-test-id='homefeed-feed']",
            "[data-test-id='header-profile']",
            "div[data-test-id='header-avatar']",
        )
    )
    rejected: Marker = Marker(
        selectors=(
            "#email-error",
            "#password-error",
            "[data-test-id='login-error']",
        ),
        text_patterns=(
            "The password you entered is incorrect",
            "isn't connected to an account",
        ),
    )
    challenge: Marker = Marker(
        selectors=(
            "input[name='code']",
            "input[autocomplete='one-time-code']",
            "[data-test-id='verification-code']",
        ),
        text_patterns=("Check your email for a code",),
    )
    poll_interval_seconds: float = 0.25


DEFAULT_SITE = LoginSite()


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
