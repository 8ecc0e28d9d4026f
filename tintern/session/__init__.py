"""
Session handling: persisted token/user pair and the auth flows that write it.

Public API:
- SessionStore: read/write/clear the persisted session
- Session, SessionUser: session snapshot types
- StorageBackend, MemoryStorage, FileStorage: storage backends
"""

from .models import EMPTY_SESSION, Session, SessionUser
from .storage import FileStorage, MemoryStorage, StorageBackend
from .store import SessionStore

__all__ = [
    "EMPTY_SESSION",
    "Session",
    "SessionUser",
    "SessionStore",
    "StorageBackend",
    "MemoryStorage",
    "FileStorage",
]

# AuthService lives in tintern.session.auth: it imports the gateway, which
# imports this package.
