"""
Cookie-backed session storage for the web frontend.

Values are read from the incoming request; writes and deletes are queued on
`flask.g` and applied to the outgoing response by apply_cookie_ops(), so a
read later in the same request already sees them. Both session cookies are
set or deleted in the same response.
"""

from typing import Dict, Iterable, Optional

from flask import Response, g, request

from tintern.common.config import ClientSettings
from tintern.session.storage import StorageBackend

_DELETED = object()


def _overlay() -> Dict[str, object]:
    if "cookie_overlay" not in g:
        g.cookie_overlay = {}
        g.cookie_max_age = None
    return g.cookie_overlay


class CookieStorage(StorageBackend):
    """Path-scoped, expiring browser cookies."""

    def __init__(self, settings: ClientSettings):
        self.settings = settings

    def get(self, name: str) -> Optional[str]:
        pending = _overlay().get(name)
        if pending is _DELETED:
            return None
        if pending is not None:
            return pending
        return request.cookies.get(name)

    def set_many(self, values: Dict[str, str], max_age_seconds: int) -> None:
        overlay = _overlay()
        overlay.update(values)
        g.cookie_max_age = max_age_seconds

    def delete_many(self, names: Iterable[str]) -> None:
        overlay = _overlay()
        for name in names:
            overlay[name] = _DELETED


def apply_cookie_ops(response: Response, settings: ClientSettings) -> Response:
    """Write queued cookie changes onto `response`."""
    overlay = g.get("cookie_overlay")
    if not overlay:
        return response
    for name, value in overlay.items():
        if value is _DELETED:
            response.delete_cookie(name, path=settings.cookie_path)
        else:
            response.set_cookie(
                name,
                value,
                max_age=g.cookie_max_age,
                path=settings.cookie_path,
                httponly=True,
                secure=settings.is_production,
                samesite="Strict",
            )
    return response
