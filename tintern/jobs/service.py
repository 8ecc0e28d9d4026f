"""
Jobs Service

Job listing, search and filtering, saved jobs, applying, and ATS scores.
All calls go through the gateway; list responses may be bare arrays or
enveloped, like the profile collections.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from tintern.common.envelope import normalize_list, unwrap_item
from tintern.common.errors import AlreadyAppliedError, ApiError
from tintern.common.logger import get_logger
from tintern.gateway.client import ApiGateway

logger = get_logger(__name__, scope="jobs")

ATS_HIGH = 70
ATS_MEDIUM = 30

_REQUIREMENT_SPLIT = re.compile(r"[,;]")


def normalize_job(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a backend job document for display.

    - `id` and `_id` both present (whichever the backend sent)
    - `location` built from city/country when not given
    - `requirements` always a list
    """
    job = dict(raw)
    job_id = job.get("id") or job.get("_id")
    if job_id is not None:
        job["id"] = job["_id"] = str(job_id)

    if not job.get("location"):
        parts = [str(p).strip() for p in (job.get("city"), job.get("country")) if p and str(p).strip()]
        job["location"] = ", ".join(parts)

    requirements = job.get("requirements")
    if isinstance(requirements, str):
        job["requirements"] = [r.strip() for r in _REQUIREMENT_SPLIT.split(requirements) if r.strip()]
    elif not isinstance(requirements, list):
        job["requirements"] = []
    return job


def filter_jobs(
    jobs: Iterable[Dict[str, Any]],
    keyword: Optional[str] = None,
    location: Optional[str] = None,
    industry: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Case-insensitive substring filtering; order is preserved."""
    keyword = (keyword or "").strip().lower()
    location = (location or "").strip().lower()
    industry = (industry or "").strip().lower()

    results = []
    for job in jobs:
        if keyword:
            haystack = " ".join(
                str(job.get(field) or "") for field in ("title", "company", "role", "description")
            ).lower()
            haystack += " " + " ".join(str(r) for r in job.get("requirements") or []).lower()
            if keyword not in haystack:
                continue
        if location and location not in str(job.get("location") or "").lower():
            continue
        if industry and industry not in str(job.get("industry") or "").lower():
            continue
        results.append(job)
    return results


def score_band(score: float) -> str:
    """ATS score band: high (>=70), medium (30-69), low (<30)."""
    if score >= ATS_HIGH:
        return "high"
    if score >= ATS_MEDIUM:
        return "medium"
    return "low"


def _parse_timestamp(value: Any) -> datetime:
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JobsService:
    """Backend job endpoints."""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    async def _list(self, endpoint: str, keys=("jobs", "data"), **kwargs) -> List[Dict[str, Any]]:
        data = await self.gateway.request(endpoint, **kwargs)
        envelope = normalize_list(data, keys)
        return [normalize_job(job) for job in envelope.items if isinstance(job, dict)]

    async def list_jobs(self) -> List[Dict[str, Any]]:
        return await self._list("/jobs")

    async def get_job(self, job_id: str) -> Dict[str, Any]:
        data = await self.gateway.request(f"/jobs/{job_id}")
        return normalize_job(unwrap_item(data, ("data", "job")))

    async def search(self, keyword: str) -> List[Dict[str, Any]]:
        """Server-side keyword search."""
        logger.debug(f"Searching jobs for {keyword!r}")
        return await self._list("/jobs/filter", method="POST", body={"keyword": keyword})

    # ===== Saved jobs =====

    async def saved_jobs(self) -> List[Dict[str, Any]]:
        return await self._list("/jobs/saved", keys=("savedJobs", "jobs", "data"))

    async def save_job(self, job_id: str) -> Any:
        return await self.gateway.request(f"/jobs/save/{job_id}", method="POST")

    async def unsave_job(self, job_id: str) -> Any:
        return await self.gateway.request(f"/jobs/save/delete/{job_id}", method="DELETE")

    # ===== Applying =====

    async def apply(self, job_id: str) -> Any:
        """
        Apply to a job.

        Raises:
            AlreadyAppliedError: the backend reports a duplicate application
            ApiError: any other rejection
        """
        try:
            return await self.gateway.request("/application", method="POST", body={"jobId": job_id})
        except AlreadyAppliedError:
            raise
        except ApiError as e:
            if e.is_already_applied:
                raise AlreadyAppliedError.from_api_error(e) from e
            raise

    # ===== ATS scores =====

    async def ats_scores(self) -> List[Dict[str, Any]]:
        """The user's ATS scores, newest first."""
        data = await self.gateway.request("/ats-scores/my-scores")
        scores = [s for s in normalize_list(data, ("scores", "atsScores", "data")).items if isinstance(s, dict)]
        return sorted(scores, key=lambda s: _parse_timestamp(s.get("scoredAt")), reverse=True)

    async def recalculate_ats(self, job_id: str) -> Dict[str, Any]:
        data = await self.gateway.request(f"/jobs/ats/{job_id}", method="POST")
        return data if isinstance(data, dict) else {}
