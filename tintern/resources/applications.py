"""
Job applications of the current user.

Creating an application is "apply to job". Each listed application is
joined to its job (title, company) with one request per item, all issued
concurrently; a failed join only affects that item.
"""

from typing import Union

from tintern.common.envelope import unwrap_item
from tintern.common.errors import AlreadyAppliedError, ApiError, TinternError
from tintern.resources.manager import MutationResult, OptimisticCollection
from tintern.resources.models import ApplicationRecord, ApplicationStatus

UNAVAILABLE_TITLE = "Job details unavailable"
UNAVAILABLE_COMPANY = "N/A"


class ApplicationsManager(OptimisticCollection[ApplicationRecord]):
    model = ApplicationRecord
    resource_path = "/application"
    envelope_keys = ("applications", "data")
    item_keys = ("application", "data")
    scope = "applications"

    async def enrich(self, item: ApplicationRecord) -> ApplicationRecord:
        if not item.job_id:
            return self.placeholder(item)
        data = await self.gateway.request(f"/jobs/{item.job_id}")
        job = unwrap_item(data, ("data", "job"))
        return item.model_copy(update={
            "job_title": job.get("title") or "Unknown Job",
            "company": job.get("company") or "Unknown Company",
        })

    def placeholder(self, item: ApplicationRecord) -> ApplicationRecord:
        return item.model_copy(update={"job_title": UNAVAILABLE_TITLE, "company": UNAVAILABLE_COMPANY})

    def classify_error(self, error: TinternError, method: str) -> TinternError:
        if method == "POST" and isinstance(error, ApiError) and error.is_already_applied:
            return AlreadyAppliedError.from_api_error(error)
        return error

    async def apply(self, job_id: str) -> MutationResult:
        """Submit an application for `job_id`."""
        return await self.create({"jobId": job_id})

    async def update_status(self, index: int, status: Union[ApplicationStatus, str]) -> MutationResult:
        """Status-only edit; display spellings like "Under Review" are accepted."""
        return await self.update(index, {"status": status})
