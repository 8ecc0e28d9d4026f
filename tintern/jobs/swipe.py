"""
Swipe deck for browsing jobs one card at a time.

A drag further than SWIPE_THRESHOLD pixels swipes the card; right saves it
to favorites (deduplicated by job id), left skips it. While a transition
runs, further swipes are ignored; a transition that never finishes is
reset by the busy flag's stall timeout.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from tintern.common.errors import TinternError
from tintern.common.logger import get_logger
from tintern.resources.pending import BusyFlag

logger = get_logger(__name__, scope="swipe")

SWIPE_THRESHOLD = 50  # pixels
LEFT = "left"
RIGHT = "right"

SaveCallback = Callable[[Dict[str, Any]], Awaitable[Any]]


def _job_id(job: Dict[str, Any]) -> Optional[str]:
    job_id = job.get("_id") or job.get("id")
    return str(job_id) if job_id is not None else None


def swipe_direction(offset_x: float, threshold: float = SWIPE_THRESHOLD) -> Optional[str]:
    """Direction of a finished drag, or None if it should snap back."""
    if abs(offset_x) <= threshold:
        return None
    return RIGHT if offset_x > 0 else LEFT


class SwipeDeck:
    def __init__(self, jobs: List[Dict[str, Any]], on_save: SaveCallback, stall_after: float = 10.0):
        self.jobs = list(jobs)
        self.on_save = on_save
        self.index = 0
        self.favorites: List[Dict[str, Any]] = []
        self.transition = BusyFlag(stall_after, name="swipe transition")
        self.last_error: Optional[str] = None

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        if self.index < len(self.jobs):
            return self.jobs[self.index]
        return None

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.jobs)

    def _add_favorite(self, job: Dict[str, Any]) -> None:
        job_id = _job_id(job)
        if any(_job_id(f) == job_id for f in self.favorites):
            return
        self.favorites.append(job)

    async def drag_end(self, offset_x: float) -> Optional[str]:
        """Handle the end of a drag; returns the swipe direction if any."""
        direction = swipe_direction(offset_x)
        if direction is None:
            return None
        swiped = await self.swipe(direction)
        return direction if swiped else None

    async def swipe(self, direction: str) -> bool:
        """Swipe the current card. False if ignored (busy or no cards left)."""
        if self.exhausted or not self.transition.start():
            return False
        try:
            job = self.jobs[self.index]
            if direction == RIGHT:
                try:
                    await self.on_save(job)
                except TinternError as e:
                    self.last_error = getattr(e, "message", None) or str(e)
                    logger.warning(f"Saving job {_job_id(job)} failed: {self.last_error}")
                else:
                    self._add_favorite(job)
                    self.last_error = None
            self.index = min(self.index + 1, len(self.jobs))
            return True
        finally:
            self.transition.stop()
