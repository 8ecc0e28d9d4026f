"""
Session Store.

Single source of truth for "is the caller authenticated, and as whom".
Pure local state: no network calls originate here.

Writers are limited to the auth flows (login, logout, profile refresh) and
the gateway's 401 handling. Everything else only reads.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from tintern.common.logger import get_logger
from tintern.session.models import EMPTY_SESSION, Session, SessionUser
from tintern.session.storage import StorageBackend

logger = get_logger(__name__, scope="session")

SECONDS_PER_DAY = 24 * 60 * 60


class SessionStore:
    """Reads and writes the token/user pair on a storage backend."""

    def __init__(
        self,
        storage: StorageBackend,
        token_key: str = "token",
        user_key: str = "user",
        ttl_days: int = 7,
    ):
        self.storage = storage
        self.token_key = token_key
        self.user_key = user_key
        self.ttl_days = ttl_days

    def read(self) -> Session:
        """
        Return the persisted session, or an empty one.

        Corrupt user data is treated as "no session": both values are
        removed and an empty session returned, never an exception.
        """
        token = self.storage.get(self.token_key)
        raw_user = self.storage.get(self.user_key)

        if not token:
            if raw_user is not None:
                logger.debug("Dropping cached user without a token")
                self.clear()
            return EMPTY_SESSION

        if raw_user is None:
            return Session(token=token, user=None)

        try:
            user = SessionUser.model_validate(json.loads(raw_user))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Clearing corrupt session user data: {type(e).__name__}")
            self.clear()
            return EMPTY_SESSION

        return Session(token=token, user=user)

    def write(
        self,
        token: str,
        user: Union[SessionUser, Dict[str, Any]],
        ttl_days: Optional[int] = None,
    ) -> Session:
        """Persist token and user together with the same expiry window."""
        if not token:
            raise ValueError("token is required")
        if not isinstance(user, SessionUser):
            user = SessionUser.model_validate(user)
        days = ttl_days if ttl_days is not None else self.ttl_days
        self.storage.set_many(
            {self.token_key: token, self.user_key: user.to_storage()},
            max_age_seconds=days * SECONDS_PER_DAY,
        )
        logger.debug(f"Session written for user {user.id or '?'} ({days}d)")
        return Session(token=token, user=user)

    def update_user(self, user: Union[SessionUser, Dict[str, Any]]) -> Session:
        """Overwrite the cached user, keeping the current token."""
        current = self.read()
        if not current.token:
            raise ValueError("Cannot update the user of an empty session")
        return self.write(current.token, user)

    def clear(self) -> None:
        """Remove token and user in one step."""
        self.storage.delete_many([self.token_key, self.user_key])
        logger.debug("Session cleared")

    @property
    def token(self) -> Optional[str]:
        return self.read().token
