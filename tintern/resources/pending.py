"""
In-flight bookkeeping.

PendingMutationTracker holds the identities of items with a remote mutation
in flight; an identity is present at most once. BusyFlag is a coarse
"something is in progress" flag that resets itself once it looks stalled.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Set

from tintern.common.errors import MutationInProgressError
from tintern.common.logger import get_logger

logger = get_logger(__name__, scope="pending")


class PendingMutationTracker:
    """Set of item identities with a mutation in flight."""

    def __init__(self):
        self._keys: Set[str] = set()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, key: str) -> None:
        if key in self._keys:
            raise MutationInProgressError(key)
        self._keys.add(key)

    def discard(self, key: str) -> None:
        self._keys.discard(key)

    @contextmanager
    def track(self, key: str) -> Iterator[None]:
        """Hold `key` for the duration of the block, whatever the outcome."""
        self.add(key)
        try:
            yield
        finally:
            self.discard(key)


class BusyFlag:
    """
    Interaction-level progress flag.

    Not a cancellation mechanism: a flag set longer than `stall_after`
    seconds ago is reported as idle again so the UI cannot stay locked.
    """

    def __init__(self, stall_after: float, clock: Callable[[], float] = time.monotonic, name: str = "busy"):
        self.stall_after = stall_after
        self.name = name
        self._clock = clock
        self._since: Optional[float] = None

    @property
    def active(self) -> bool:
        if self._since is None:
            return False
        if self._clock() - self._since > self.stall_after:
            logger.warning(f"{self.name} flag stalled for more than {self.stall_after}s, resetting")
            self._since = None
            return False
        return True

    def start(self) -> bool:
        """Set the flag; False if it was already active."""
        if self.active:
            return False
        self._since = self._clock()
        return True

    def stop(self) -> None:
        self._since = None
