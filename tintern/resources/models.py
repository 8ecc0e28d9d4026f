"""
Item models for the profile sub-resources.

Field names are snake_case in Python and camelCase on the wire. Dates are
held at month precision (`YYYY-MM`) and expanded to the first of the month
when sent.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tintern.common.dates import to_api_date, to_display_month


class ResourceItem(BaseModel):
    """Common base: optional server id, required-field labels, payload shaping."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))

    # (field name, label) pairs that must be non-empty before saving
    required_fields: ClassVar[Tuple[Tuple[str, str], ...]] = ()
    date_fields: ClassVar[FrozenSet[str]] = frozenset()
    # shown in the UI but never sent back to the backend
    display_only_fields: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @property
    def is_saved(self) -> bool:
        return self.id is not None

    def missing_fields(self) -> List[str]:
        return [label for name, label in self.required_fields if not getattr(self, name)]

    def to_payload(self) -> Dict[str, Any]:
        """Request body: camelCase, no id, dates as YYYY-MM-DD."""
        exclude = {"id"} | set(self.display_only_fields)
        payload = self.model_dump(by_alias=True, exclude=exclude, exclude_none=True, mode="json")
        for name in self.date_fields:
            alias = type(self).model_fields[name].alias or name
            if alias in payload:
                payload[alias] = to_api_date(payload[alias])
        return payload

    def to_record(self) -> Dict[str, Any]:
        """Wire-shaped dict including the id, for merging and display."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EducationLevel(str, Enum):
    HIGHSCHOOL = "highschool"
    UNDERGRAD = "undergrad"
    POSTGRAD = "postgrad"
    PHD = "phd"


class EducationEntry(ResourceItem):
    degree: str = ""
    education_level: EducationLevel = Field(default=EducationLevel.HIGHSCHOOL, alias="educationLevel")
    university: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")

    required_fields: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("degree", "Degree"),
        ("university", "University"),
        ("start_date", "Start Date"),
    )
    date_fields: ClassVar[FrozenSet[str]] = frozenset({"start_date", "end_date"})

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v: Any) -> str:
        return to_display_month(v)


class ExperienceEntry(ResourceItem):
    job_title: str = Field(default="", alias="jobTitle")
    company: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    description: str = ""

    required_fields: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("job_title", "Job Title"),
        ("company", "Company"),
        ("start_date", "Start Date"),
    )
    date_fields: ClassVar[FrozenSet[str]] = frozenset({"start_date", "end_date"})

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v: Any) -> str:
        return to_display_month(v)


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationRecord(ResourceItem):
    job_id: str = Field(default="", alias="jobId")
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    created_at: str = Field(default="", alias="createdAt")
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    company: Optional[str] = None

    required_fields: ClassVar[Tuple[Tuple[str, str], ...]] = (("job_id", "Job"),)
    display_only_fields: ClassVar[FrozenSet[str]] = frozenset({"created_at", "job_title", "company"})

    @field_validator("job_id", mode="before")
    @classmethod
    def coerce_job_id(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Accept "Under Review", "under-review" and similar spellings."""
        if isinstance(v, str):
            return v.strip().lower().replace("-", "_").replace(" ", "_")
        return v
