"""Shared fakes for the login workflow tests."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import pytest

from config import DEFAULT_SITE
from errors import AutomationError, WaitTimeoutError

LOGIN_FORM = (
    DEFAULT_SITE.identifier_selector,
    DEFAULT_SITE.secret_selector,
    DEFAULT_SITE.submit_selector,
)

SESSION_COOKIE = {
    "name": "_pinterest_sess",
    "value": "TWc9PSZ",
    "domain": ".pinterest.com",
    "path": "/",
    "expires": 1767225600.0,
    "httpOnly": True,
    "secure": True,
    "sameSite": "None",
}

CSRF_COOKIE = {
    "name": "csrftoken",
    "value": "f00dbabe",
    "domain": "www.pinterest.com",
    "path": "/",
    "expires": -1,
    "httpOnly": False,
    "secure": True,
    "sameSite": "Lax",
}

TRACKING_COOKIE = {
    "name": "_ga",
    "value": "GA1.2.3",
    "domain": ".google-analytics.com",
    "path": "/",
    "expires": -1,
    "httpOnly": False,
    "secure": False,
}


class FakeElement:
    def __init__(self, selector: str):
        self.selector = selector


class FakeSession:
    """In-memory stand-in for a browser page.

    ``present`` holds the selectors on the page before the submit click and
    ``after_submit`` the ones that appear once the submit control is clicked.
    """

    def __init__(
        self,
        *,
        present: Iterable[str] = LOGIN_FORM,
        after_submit: Iterable[str] = (),
        after_submit_html: str = "<html><body></body></html>",
        cookies: Iterable[dict] = (),
        hang_navigation: bool = False,
        type_error: AutomationError | None = None,
        query_error: AutomationError | None = None,
        cookie_error: AutomationError | None = None,
    ):
        self.present = set(present)
        self.after_submit = set(after_submit)
        self.after_submit_html = after_submit_html
        self.html = "<html><body><form></form></body></html>"
        self.cookies = list(cookies)
        self.hang_navigation = hang_navigation
        self.type_error = type_error
        self.query_error = query_error
        self.cookie_error = cookie_error
        self.url = "about:blank"
        self.typed: dict[str, str] = {}
        self.clicked: list[str] = []
        self.close_calls = 0

    @property
    def current_url(self) -> str:
        return self.url

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def _find(self, selector: str) -> FakeElement | None:
        for part in selector.split(", "):
            if part in self.present:
                return FakeElement(part)
        return None

    async def navigate(self, url: str, timeout_ms: int) -> None:
        if self.hang_navigation:
            await asyncio.sleep(timeout_ms / 1000)
            raise WaitTimeoutError(f"Navigation to {url} timed out after {timeout_ms} ms")
        self.url = url

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> Any:
        element = self._find(selector)
        if element is not None:
            return element
        await asyncio.sleep(timeout_ms / 1000)
        raise WaitTimeoutError(f"Selector {selector!r} not found within {timeout_ms} ms")

    async def query_selector(self, selector: str) -> Any:
        if self.query_error is not None:
            raise self.query_error
        return self._find(selector)

    async def type_into(self, element: FakeElement, text: str, timeout_ms: int) -> None:
        if self.type_error is not None:
            raise self.type_error
        self.typed[element.selector] = text

    async def click(self, element: FakeElement, timeout_ms: int) -> None:
        self.clicked.append(element.selector)
        if element.selector == DEFAULT_SITE.submit_selector:
            self.present |= self.after_submit
            self.html = self.after_submit_html
            self.url = "https://www.pinterest.com/"

    async def wait_for_navigation(self, timeout_ms: int) -> None:
        return None

    async def content(self) -> str:
        return self.html

    async def read_cookies(self) -> list[dict]:
        if self.cookie_error is not None:
            raise self.cookie_error
        return list(self.cookies)

    async def close(self) -> None:
        self.close_calls += 1


def factory_for(session: FakeSession):
    async def factory(config):
        factory.config = config
        return session

    factory.config = None
    return factory


@pytest.fixture
def session_cookies() -> list[dict]:
    return [SESSION_COOKIE, CSRF_COOKIE, TRACKING_COOKIE]
