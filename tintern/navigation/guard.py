"""
Route Guard.

Decides per navigation whether a page may render, must wait, or must be
redirected, based on session state.

States:
- UNKNOWN: session not read yet; render a neutral loading state, never
  redirect (no flash of the login page)
- AUTHENTICATED: session read produced a token
- UNAUTHENTICATED: no token, explicit logout, or a 401 from the gateway

Transitions:
- UNKNOWN -> AUTHENTICATED / UNAUTHENTICATED on load()
- AUTHENTICATED -> UNAUTHENTICATED on logout or auth failure
- any -> AUTHENTICATED on a successful login
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple
from urllib.parse import urlencode

from tintern.common.config import ClientSettings, get_settings
from tintern.common.logger import get_logger
from tintern.session.store import SessionStore

logger = get_logger(__name__, scope="guard")

BYPASS_PREFIXES: Tuple[str, ...] = ("/static/", "/_next/", "/api/auth/")
BYPASS_FILES = re.compile(r"\.(jpg|png|ico|svg|webp)$", re.IGNORECASE)


class AuthState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class GuardAction(str, Enum):
    LOADING = "loading"
    PROCEED = "proceed"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.action == GuardAction.REDIRECT


LOADING = GuardDecision(GuardAction.LOADING)
PROCEED = GuardDecision(GuardAction.PROCEED)


def is_bypassed(path: str) -> bool:
    """Static assets and auth API routes are never guarded."""
    return path.startswith(BYPASS_PREFIXES) or path == "/favicon.ico" or bool(BYPASS_FILES.search(path))


def is_safe_callback(path: Optional[str]) -> bool:
    """Only same-site relative paths may be used as a post-login target."""
    return bool(path) and path.startswith("/") and not path.startswith("//")


class RouteGuard:
    """Session-driven access decisions for page routes."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        public_paths: Optional[Iterable[str]] = None,
    ):
        self.settings = settings or get_settings()
        self.public_paths = frozenset(public_paths or self.settings.public_paths_list)
        self.state = AuthState.UNKNOWN

    def load(self, session_store: SessionStore) -> AuthState:
        """Read the session once and leave UNKNOWN."""
        session = session_store.read()
        self.state = AuthState.AUTHENTICATED if session.is_authenticated else AuthState.UNAUTHENTICATED
        logger.debug(f"Session loaded: {self.state.value}")
        return self.state

    def mark_authenticated(self) -> None:
        self.state = AuthState.AUTHENTICATED

    def mark_unauthenticated(self) -> None:
        if self.state != AuthState.UNAUTHENTICATED:
            logger.info(f"{self.state.value} -> unauthenticated")
        self.state = AuthState.UNAUTHENTICATED

    def login_redirect(self, requested_path: str) -> str:
        """Login URL carrying the originally requested path."""
        query = urlencode({self.settings.callback_param: requested_path})
        return f"{self.settings.login_path}?{query}"

    def is_public(self, path: str) -> bool:
        return path in self.public_paths

    def decide(self, path: str) -> GuardDecision:
        """Decision for a navigation to `path` (path only, no query)."""
        if is_bypassed(path):
            return PROCEED

        if self.state == AuthState.UNKNOWN:
            return LOADING

        if self.state == AuthState.UNAUTHENTICATED:
            if self.is_public(path):
                return PROCEED
            return GuardDecision(GuardAction.REDIRECT, self.login_redirect(path))

        if path in (self.settings.login_path, self.settings.signup_path):
            return GuardDecision(GuardAction.REDIRECT, self.settings.landing_path)
        return PROCEED
