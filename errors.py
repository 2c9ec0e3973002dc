#!/usr/bin/env python3
"""
Error taxonomy for Pinterest Login
"""


class LoginError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(LoginError):
    """Invalid browser configuration, detected before any browser interaction."""


class CredentialError(LoginError):
    """The credential provider could not supply an identifier/secret pair."""


class AutomationError(LoginError):
    """Unexpected engine or protocol failure while driving the browser.

    Carries a human readable ``detail`` that ends up in the login outcome.
    """

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class LaunchError(AutomationError):
    """The browser process failed to start."""


class WaitTimeoutError(AutomationError):
    """A bounded wait exceeded its deadline."""


class NavigationError(AutomationError):
    pass


class InteractionError(AutomationError):
    pass
