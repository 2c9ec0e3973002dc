"""Tests for browser configuration and site markers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from config import DEFAULT_ENGINE_TIMEOUT_MS, DEFAULT_SITE, BrowserConfig, Marker, PINTEREST_LOGIN_URL
from errors import ConfigError


def test_defaults_use_engine_timeout():
    config = BrowserConfig.builder().build()

    assert config.headless is True
    assert config.request_timeout_seconds is None
    assert config.timeout_ms == DEFAULT_ENGINE_TIMEOUT_MS
    assert config.launch_timeout_ms is None
    assert config.executable_path is None
    assert config.launch_args == ()


def test_builder_chains_options():
    config = (
        BrowserConfig.builder()
        .with_head()
        .request_timeout(2)
        .launch_timeout(10)
        .launch_args("--lang=en-US")
        .launch_args("--mute-audio")
        .build()
    )

    assert config.headless is False
    assert config.timeout_ms == 2000
    assert config.timeout_seconds == 2.0
    assert config.launch_timeout_ms == 10000
    assert config.launch_args == ("--lang=en-US", "--mute-audio")


@pytest.mark.parametrize("seconds", [0, -1.5])
def test_non_positive_timeout_is_rejected(seconds):
    with pytest.raises(ConfigError):
        BrowserConfig.builder().request_timeout(seconds).build()


@pytest.mark.parametrize("seconds", [float("nan"), float("inf")])
def test_non_finite_timeout_is_rejected(seconds):
    with pytest.raises(ConfigError, match="finite"):
        BrowserConfig.builder().request_timeout(seconds).build()


def test_sub_millisecond_timeout_rounds_up():
    config = BrowserConfig.builder().request_timeout(0.0004).launch_timeout(0.0001).build()

    assert config.timeout_ms == 1
    assert config.launch_timeout_ms == 1


def test_missing_executable_is_rejected(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        BrowserConfig.builder().executable_path(tmp_path / "chromium").build()


def test_non_executable_file_is_rejected(tmp_path):
    binary = tmp_path / "chromium"
    binary.write_text("")
    binary.chmod(0o644)

    with pytest.raises(ConfigError):
        BrowserConfig.builder().executable_path(binary).build()


def test_executable_path_is_accepted(tmp_path):
    binary = tmp_path / "chromium"
    binary.write_text("#!/bin/sh\n")
    binary.chmod(0o755)

    config = BrowserConfig.builder().executable_path(str(binary)).build()

    assert config.executable_path == binary


def test_invalid_option_type_becomes_config_error():
    with pytest.raises(ConfigError):
        BrowserConfig.builder().headless("sometimes").build()


def test_config_is_immutable():
    config = BrowserConfig.builder().build()

    with pytest.raises(ValidationError):
        config.headless = False


def test_default_site_targets_pinterest():
    assert DEFAULT_SITE.login_url == PINTEREST_LOGIN_URL
    assert DEFAULT_SITE.identifier_selector == "input#email"
    assert DEFAULT_SITE.secret_selector == "input#password"
    assert DEFAULT_SITE.submit_selector == "button[type='submit']"
    assert DEFAULT_SITE.cookie_domain == "pinterest.com"


def test_marker_css_joins_selectors():
    marker = Marker(selectors=("#a", ".b"))

    assert marker.css == "#a, .b"
    assert Marker().css == ""
