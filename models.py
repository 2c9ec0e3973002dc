#!/usr/bin/env python3
"""
Data models for Pinterest Login
"""

from typing import Any, Optional, Tuple, TypedDict
from pydantic import BaseModel, ConfigDict, SecretStr, field_validator
from enum import Enum


class SameSite(Enum):
    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


class LoginState(Enum):
    START = "start"
    LOADED_LOGIN_PAGE = "loaded_login_page"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AUTHENTICATED = "authenticated"
    CREDENTIALS_REJECTED = "credentials_rejected"
    CHALLENGE_PENDING = "challenge_pending"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    LoginState.AUTHENTICATED,
    LoginState.CREDENTIALS_REJECTED,
    LoginState.CHALLENGE_PENDING,
    LoginState.FAILED,
})


class OutcomeKind(Enum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    CHALLENGE_REQUIRED = "challenge_required"
    TIMEOUT = "timeout"
    AUTOMATION_FAILURE = "automation_failure"


_STATE_BY_KIND = {
    OutcomeKind.SUCCESS: LoginState.AUTHENTICATED,
    OutcomeKind.INVALID_CREDENTIALS: LoginState.CREDENTIALS_REJECTED,
    OutcomeKind.CHALLENGE_REQUIRED: LoginState.CHALLENGE_PENDING,
    OutcomeKind.TIMEOUT: LoginState.FAILED,
    OutcomeKind.AUTOMATION_FAILURE: LoginState.FAILED,
}


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    secret: SecretStr

    @field_validator("identifier")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("identifier must not be empty")
        return value


class Cookie(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[float] = None
    secure: bool = False
    http_only: bool = False
    same_site: Optional[SameSite] = None


class LoginOutcome(BaseModel):
    """Terminal result of exactly one login attempt."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    cookies: Tuple[Cookie, ...] = ()
    detail: Optional[str] = None

    @classmethod
    def success(cls, cookies) -> "LoginOutcome":
        return cls(kind=OutcomeKind.SUCCESS, cookies=tuple(cookies))

    @classmethod
    def invalid_credentials(cls, detail: Optional[str] = None) -> "LoginOutcome":
        return cls(kind=OutcomeKind.INVALID_CREDENTIALS, detail=detail)

    @classmethod
    def challenge_required(cls, detail: Optional[str] = None) -> "LoginOutcome":
        return cls(kind=OutcomeKind.CHALLENGE_REQUIRED, detail=detail)

    @classmethod
    def timeout(cls, detail: str) -> "LoginOutcome":
        return cls(kind=OutcomeKind.TIMEOUT, detail=detail)

    @classmethod
    def automation_failure(cls, detail: str) -> "LoginOutcome":
        return cls(kind=OutcomeKind.AUTOMATION_FAILURE, detail=detail)

    @property
    def state(self) -> LoginState:
        return _STATE_BY_KIND[self.kind]

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def is_actionable(self) -> bool:
        """True when the user, not the automation, has to act (bad password, verification)."""
        return self.kind in (OutcomeKind.INVALID_CREDENTIALS, OutcomeKind.CHALLENGE_REQUIRED)


class LoginGraphState(TypedDict):
    current_state: LoginState
    credentials: Credentials
    session: Any
    outcome: Optional[LoginOutcome]


def create_initial_state(credentials: Credentials, session: Any) -> LoginGraphState:
    return LoginGraphState(
        current_state=LoginState.START,
        credentials=credentials,
        session=session,
        outcome=None
    )
