"""Job listing, saved jobs, applying, ATS scores and the swipe deck."""

from .service import JobsService, filter_jobs, normalize_job, score_band
from .swipe import SwipeDeck, swipe_direction

__all__ = ["JobsService", "filter_jobs", "normalize_job", "score_band", "SwipeDeck", "swipe_direction"]
