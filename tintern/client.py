"""
Client context.

Explicit container for everything that shares session state: the Session
Store, the gateway, the route guard, the auth and jobs services and the
three profile managers. Pass it to whatever needs them instead of reaching
for globals.

Lifecycle: construct, `init()` (reads the session and leaves the guard's
UNKNOWN state), use, `aclose()`. `async with ClientContext(...)` does both.

The context is the one place that reacts to a 401: the gateway clears the
session and reports an AuthFailure; handle_auth_failure() moves the guard
to UNAUTHENTICATED and navigates to the login route.
"""

from typing import Optional

import httpx

from tintern.common.config import ClientSettings, get_settings
from tintern.common.logger import get_logger
from tintern.gateway.client import ApiGateway
from tintern.gateway.results import AuthFailure
from tintern.jobs.service import JobsService
from tintern.jobs.swipe import SwipeDeck
from tintern.navigation.guard import AuthState, GuardDecision, RouteGuard
from tintern.navigation.navigator import HistoryNavigator, Navigator
from tintern.resources.applications import ApplicationsManager
from tintern.resources.education import EducationManager
from tintern.resources.experience import ExperienceManager
from tintern.session.auth import AuthService
from tintern.session.storage import FileStorage, StorageBackend
from tintern.session.store import SessionStore

logger = get_logger(__name__, scope="client")


class ClientContext:
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        storage: Optional[StorageBackend] = None,
        navigator: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.navigator = navigator or HistoryNavigator()
        self.session_store = SessionStore(
            storage or FileStorage(self.settings.session_file),
            token_key=self.settings.token_cookie_name,
            user_key=self.settings.user_cookie_name,
            ttl_days=self.settings.session_ttl_days,
        )
        self.guard = RouteGuard(self.settings)
        self.gateway = ApiGateway(
            self.session_store,
            self.settings,
            transport=transport,
            auth_failure_handler=self.handle_auth_failure,
        )
        self.auth = AuthService(self.gateway, self.session_store, self.guard, self.navigator)
        self.jobs = JobsService(self.gateway)
        self.education = EducationManager(self.gateway, self.settings)
        self.experience = ExperienceManager(self.gateway, self.settings)
        self.applications = ApplicationsManager(self.gateway, self.settings)

    def init(self) -> AuthState:
        return self.guard.load(self.session_store)

    async def aclose(self) -> None:
        await self.gateway.aclose()

    async def __aenter__(self) -> "ClientContext":
        self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def handle_auth_failure(self, failure: AuthFailure) -> None:
        """Single top-level reaction to a 401 reported by the gateway."""
        if self.guard.state == AuthState.UNAUTHENTICATED:
            # concurrent calls failing together redirect once
            logger.debug(f"Ignoring further auth failure: {failure.message}")
            return
        logger.warning(f"Session expired or rejected: {failure.message}")
        self.guard.mark_unauthenticated()
        self.navigator.navigate(self.settings.login_path)

    def visit(self, path: str) -> GuardDecision:
        """Ask the guard about `path` and follow a redirect if it says so."""
        decision = self.guard.decide(path)
        if decision.is_redirect:
            self.navigator.navigate(decision.location)
        return decision

    def swipe_deck(self, jobs) -> SwipeDeck:
        """Swipe deck whose right swipes save through the jobs service."""
        return SwipeDeck(
            jobs,
            on_save=lambda job: self.jobs.save_job(job.get("_id") or job.get("id")),
            stall_after=self.settings.stall_timeout_seconds,
        )
