"""
Authentication flows: login, signup, logout, profile refresh and resume upload.

These are the only writers of the Session Store besides the gateway's 401
handling. Failures are returned as AuthOutcome values for inline display;
the session is left untouched when a login fails.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from tintern.common.errors import TinternError, TransportError
from tintern.common.logger import ClientLogger, get_logger
from tintern.gateway.client import ApiGateway
from tintern.gateway.results import Success
from tintern.navigation.guard import RouteGuard, is_safe_callback
from tintern.navigation.navigator import Navigator
from tintern.session.models import SessionUser
from tintern.session.store import SessionStore

logger = get_logger(__name__, scope="auth")


@dataclass
class AuthOutcome:
    success: bool
    user: Optional[SessionUser] = None
    message: Optional[str] = None
    redirect_to: Optional[str] = None


def _error_message(error: TinternError, fallback: str) -> str:
    return getattr(error, "message", None) or str(error) or fallback


class AuthService:
    """Login/logout and profile flows bound to one client context."""

    def __init__(
        self,
        gateway: ApiGateway,
        session_store: SessionStore,
        guard: RouteGuard,
        navigator: Navigator,
    ):
        self.gateway = gateway
        self.session_store = session_store
        self.guard = guard
        self.navigator = navigator

    @property
    def user(self) -> Optional[SessionUser]:
        return self.session_store.read().user

    @property
    def logger(self) -> ClientLogger:
        user = self.user
        return logger.for_user(user.id if user else None)

    async def login(self, email: str, password: str, callback_url: Optional[str] = None) -> AuthOutcome:
        """
        Exchange credentials for a session.

        On success the session is written, the guard becomes AUTHENTICATED
        and the navigator moves to `callback_url` (same-site paths only) or
        the landing route.
        """
        try:
            result = await self.gateway.call(
                "/auth/login",
                method="POST",
                body={"email": email, "password": password},
                authenticated=False,
            )
        except TransportError as e:
            logger.error(f"Login failed: {e}")
            return AuthOutcome(success=False, message=e.message)

        if not isinstance(result, Success):
            message = getattr(result, "message", None) or "Login failed"
            logger.warning(f"Login rejected: {message}")
            return AuthOutcome(success=False, message=message)

        data = result.data if isinstance(result.data, dict) else {}
        token = data.get("accessToken") or data.get("token")
        if not token:
            logger.error("Login response carried no access token")
            return AuthOutcome(success=False, message="Invalid response from server")

        user_data = dict(data.get("user") or {})
        user_data.setdefault("email", email)
        session = self.session_store.write(token, user_data)
        self.guard.mark_authenticated()

        target = callback_url if is_safe_callback(callback_url) else self.guard.settings.landing_path
        self.logger.info(f"Logged in as {session.user.email or session.user.id}")
        self.navigator.navigate(target)
        return AuthOutcome(success=True, user=session.user, redirect_to=target)

    async def signup(self, data: Dict[str, Any]) -> AuthOutcome:
        """Register a new account, then send the user to the login page."""
        try:
            result = await self.gateway.call("/auth/register", method="POST", body=data, authenticated=False)
        except TransportError as e:
            logger.error(f"Registration failed: {e}")
            return AuthOutcome(success=False, message=e.message)

        if not isinstance(result, Success):
            message = getattr(result, "message", None) or "Registration failed"
            logger.warning(f"Registration rejected: {message}")
            return AuthOutcome(success=False, message=message)

        login_path = self.guard.settings.login_path
        self.navigator.navigate(login_path)
        return AuthOutcome(success=True, message="Registration successful! Please login.", redirect_to=login_path)

    async def logout(self) -> AuthOutcome:
        """Tell the backend (best effort), then always drop the local session."""
        try:
            await self.gateway.call("/auth/logout", method="POST", authenticated=False)
        except TransportError as e:
            logger.warning(f"Backend logout failed, clearing local session anyway: {e}")
        finally:
            self.session_store.clear()
            self.guard.mark_unauthenticated()
        self.navigator.navigate("/")
        return AuthOutcome(success=True, redirect_to="/")

    def _merge_user(self, updates: Any) -> Optional[SessionUser]:
        session = self.session_store.read()
        if session.user is None or not session.token:
            return None
        if not isinstance(updates, dict):
            updates = {}
        updates = updates.get("user") if isinstance(updates.get("user"), dict) else updates
        merged = session.user.merged(updates)
        self.session_store.update_user(merged)
        return merged

    async def update_profile(self, data: Dict[str, Any]) -> AuthOutcome:
        """Save profile fields and refresh the cached user from the echo."""
        try:
            echoed = await self.gateway.request("/users/my-profile", method="PUT", body=data)
        except TinternError as e:
            message = _error_message(e, "Failed to update profile")
            self.logger.warning(f"Profile update failed: {message}")
            return AuthOutcome(success=False, message=message)

        user = self._merge_user({**data, **(echoed if isinstance(echoed, dict) else {})})
        return AuthOutcome(success=True, user=user, message="Profile updated successfully!")

    async def refresh_profile(self) -> Optional[SessionUser]:
        """Re-read the profile into the cache. Failures are only logged."""
        current = self.user
        if current is None or not current.id:
            return None
        try:
            profile = await self.gateway.request("/users/my-profile")
        except TinternError as e:
            self.logger.warning(f"Failed to refresh user profile: {e}")
            return current
        return self._merge_user(profile)

    async def upload_resume(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/pdf",
    ) -> AuthOutcome:
        """Upload a CV as multipart form data; marks hasCV on success."""
        if not content:
            return AuthOutcome(success=False, message="No file provided or invalid file")
        try:
            await self.gateway.request(
                "/users/resume",
                files={"file": (filename, content, content_type)},
            )
        except TinternError as e:
            message = _error_message(e, "Failed to upload resume")
            self.logger.warning(f"Resume upload failed: {message}")
            return AuthOutcome(success=False, message=message)

        user = self._merge_user({"hasCV": True})
        self.logger.info(f"Resume uploaded ({len(content)} bytes)")
        return AuthOutcome(success=True, user=user, message="Resume uploaded")
