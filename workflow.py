#!/usr/bin/env python3
"""
LangGraph login workflow for Pinterest Login
"""

import asyncio
from typing import Dict, Optional

from bs4 import BeautifulSoup
from langgraph.graph import StateGraph, END

from browser import SessionFactory, SessionHandle, open_session
from config import DEFAULT_SITE, BrowserConfig, LoginSite, Marker, LOGGER
from cookie_extractor import extract_cookies
from credentials import CredentialProvider
from errors import AutomationError, LaunchError, WaitTimeoutError
from models import LoginGraphState, LoginOutcome, LoginState, create_initial_state

# Most specific signal first
DETECTION_PRIORITY = (
    LoginState.CREDENTIALS_REJECTED,
    LoginState.CHALLENGE_PENDING,
    LoginState.AUTHENTICATED,
)


def visible_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(" ", strip=True)


async def marker_present(session: SessionHandle, marker: Marker) -> bool:
    """One non-blocking check of ``marker`` against the current page."""
    if marker.selectors and await session.query_selector(marker.css) is not None:
        return True
    if marker.text_patterns:
        text = visible_text(await session.content()).lower()
        return any(pattern.lower() in text for pattern in marker.text_patterns)
    return False


async def wait_for_marker(
    session: SessionHandle,
    marker: Marker,
    timeout_ms: int,
    poll_interval: float
) -> None:
    """Resolve once ``marker`` is on the page, raise WaitTimeoutError otherwise."""
    if marker.selectors and not marker.text_patterns:
        await session.wait_for_selector(marker.css, timeout_ms)
        return

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    while True:
        if await marker_present(session, marker):
            return
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise WaitTimeoutError(f"Marker not present within {timeout_ms} ms")
        await asyncio.sleep(min(poll_interval, remaining))


class LoginOrchestrator:
    def __init__(
        self,
        config: BrowserConfig,
        site: LoginSite = DEFAULT_SITE,
        session_factory: Optional[SessionFactory] = None
    ):
        self.config = config
        self.site = site
        self.session_factory = session_factory
        self.graph = create_login_graph(self)

    async def run(self, credential_provider: CredentialProvider) -> LoginOutcome:
        credentials = await asyncio.to_thread(credential_provider.get_credentials)

        try:
            async with open_session(self.config, self.session_factory) as session:
                final_state = await self.graph.ainvoke(create_initial_state(credentials, session))
        except LaunchError as e:
            LOGGER.error(f"Browser launch failed: {e.detail}")
            return LoginOutcome.automation_failure(e.detail)

        outcome = final_state['outcome']
        if outcome is None:
            outcome = LoginOutcome.automation_failure(
                f"Login flow stopped in state {final_state['current_state'].value} without an outcome"
            )
        LOGGER.info(f"Login finished: {outcome.kind.value}")
        return outcome

    def _fail(self, state: LoginGraphState, error: AutomationError) -> LoginGraphState:
        state['current_state'] = LoginState.FAILED
        if isinstance(error, WaitTimeoutError):
            LOGGER.error(f"Login timed out: {error.detail}")
            state['outcome'] = LoginOutcome.timeout(error.detail)
        else:
            LOGGER.error(f"Login automation failed: {error.detail}")
            state['outcome'] = LoginOutcome.automation_failure(error.detail)
        return state

    async def load_login_page_node(self, state: LoginGraphState) -> LoginGraphState:
        session = state['session']
        timeout_ms = self.config.timeout_ms
        try:
            LOGGER.info("Loading login page")
            await session.navigate(self.site.login_url, timeout_ms)
            await session.wait_for_navigation(timeout_ms)
            await session.wait_for_selector(self.site.identifier_selector, timeout_ms)
        except AutomationError as e:
            return self._fail(state, e)

        LOGGER.info("The login page has been loaded")
        state['current_state'] = LoginState.LOADED_LOGIN_PAGE
        return state

    async def submit_credentials_node(self, state: LoginGraphState) -> LoginGraphState:
        session = state['session']
        credentials = state['credentials']
        timeout_ms = self.config.timeout_ms
        try:
            LOGGER.info("Filling the login form")
            identifier_field = await session.wait_for_selector(self.site.identifier_selector, timeout_ms)
            await session.type_into(identifier_field, credentials.identifier, timeout_ms)

            secret_field = await session.wait_for_selector(self.site.secret_selector, timeout_ms)
            await session.type_into(secret_field, credentials.secret.get_secret_value(), timeout_ms)

            LOGGER.info("Submitting the login form")
            submit_button = await session.wait_for_selector(self.site.submit_selector, timeout_ms)
            await session.click(submit_button, timeout_ms)
        except AutomationError as e:
            return self._fail(state, e)

        state['current_state'] = LoginState.CREDENTIALS_SUBMITTED
        return state

    async def detect_outcome_node(self, state: LoginGraphState) -> LoginGraphState:
        try:
            LOGGER.info("Waiting for the login to complete")
            detected = await self.race_detectors(state['session'])
        except AutomationError as e:
            return self._fail(state, e)

        LOGGER.info(f"Detected page state: {detected.value}")
        state['current_state'] = detected
        if detected == LoginState.CREDENTIALS_REJECTED:
            state['outcome'] = LoginOutcome.invalid_credentials("The email or password you entered is incorrect")
        elif detected == LoginState.CHALLENGE_PENDING:
            state['outcome'] = LoginOutcome.challenge_required("The account requires secondary verification")
        return state

    async def extract_cookies_node(self, state: LoginGraphState) -> LoginGraphState:
        try:
            LOGGER.info("The login was successful, getting the cookies")
            cookies = await extract_cookies(state['session'], self.site.cookie_domain)
        except AutomationError as e:
            return self._fail(state, e)

        if not cookies:
            LOGGER.warning(f"Authenticated but no cookies matched {self.site.cookie_domain}")
        state['outcome'] = LoginOutcome.success(cookies)
        return state

    def _markers(self) -> Dict[LoginState, Marker]:
        return {
            LoginState.CREDENTIALS_REJECTED: self.site.rejected,
            LoginState.CHALLENGE_PENDING: self.site.challenge,
            LoginState.AUTHENTICATED: self.site.authenticated,
        }

    async def race_detectors(self, session: SessionHandle) -> LoginState:
        """Race one detector per marker; the first to resolve decides the state."""
        timeout_ms = self.config.timeout_ms
        markers = self._markers()
        tasks = {
            asyncio.create_task(
                wait_for_marker(session, marker, timeout_ms, self.site.poll_interval_seconds)
            ): detected_state
            for detected_state, marker in markers.items()
        }
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                resolved = []
                for task in done:
                    error = task.exception()
                    if error is None:
                        resolved.append(tasks[task])
                    elif isinstance(error, WaitTimeoutError):
                        LOGGER.debug(f"Detector for {tasks[task].value} gave up: {error.detail}")
                    else:
                        raise error

                if resolved:
                    winner = min(resolved, key=DETECTION_PRIORITY.index)
                    return await self._prefer_specific(session, winner, markers)
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        raise WaitTimeoutError(f"No login outcome marker appeared within {timeout_ms} ms")

    async def _prefer_specific(
        self,
        session: SessionHandle,
        winner: LoginState,
        markers: Dict[LoginState, Marker]
    ) -> LoginState:
        for candidate in DETECTION_PRIORITY[:DETECTION_PRIORITY.index(winner)]:
            if await marker_present(session, markers[candidate]):
                LOGGER.warning(f"Both {winner.value} and {candidate.value} markers present, using {candidate.value}")
                return candidate
        return winner

    def route_after_load(self, state: LoginGraphState) -> str:
        return "submit_credentials" if state['current_state'] == LoginState.LOADED_LOGIN_PAGE else "end"

    def route_after_submit(self, state: LoginGraphState) -> str:
        return "detect_outcome" if state['current_state'] == LoginState.CREDENTIALS_SUBMITTED else "end"

    def route_after_detection(self, state: LoginGraphState) -> str:
        return "extract_cookies" if state['current_state'] == LoginState.AUTHENTICATED else "end"


def create_login_graph(orchestrator: LoginOrchestrator):
    LOGGER.debug("Creating LangGraph login workflow")

    workflow = StateGraph(LoginGraphState)

    # Add nodes
    workflow.add_node("load_login_page", orchestrator.load_login_page_node)
    workflow.add_node("submit_credentials", orchestrator.submit_credentials_node)
    workflow.add_node("detect_outcome", orchestrator.detect_outcome_node)
    workflow.add_node("extract_cookies", orchestrator.extract_cookies_node)

    # Set entry point
    workflow.set_entry_point("load_login_page")

    # Add edges
    workflow.add_conditional_edges(
        "load_login_page",
        orchestrator.route_after_load,
        {"submit_credentials": "submit_credentials", "end": END}
    )

    workflow.add_conditional_edges(
        "submit_credentials",
        orchestrator.route_after_submit,
        {"detect_outcome": "detect_outcome", "end": END}
    )

    workflow.add_conditional_edges(
        "detect_outcome",
        orchestrator.route_after_detection,
        {"extract_cookies": "extract_cookies", "end": END}
    )

    workflow.add_edge("extract_cookies", END)

    return workflow.compile()


async def login(
    credential_provider: CredentialProvider,
    config: Optional[BrowserConfig] = None,
    *,
    site: Optional[LoginSite] = None,
    session_factory: Optional[SessionFactory] = None
) -> LoginOutcome:
    """Log in through a fresh browser and return the terminal outcome.

    Opens, drives and closes its own session. On success the outcome carries
    the cookies scoped to ``site.cookie_domain``.
    """
    orchestrator = LoginOrchestrator(config or BrowserConfig(), site or DEFAULT_SITE, session_factory)
    return await orchestrator.run(credential_provider)
