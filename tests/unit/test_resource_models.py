"""Tests for the profile item models and their wire format."""

from tintern.resources.models import (
    ApplicationRecord,
    ApplicationStatus,
    EducationEntry,
    EducationLevel,
    ExperienceEntry,
)


class TestEducationEntry:
    def test_parses_backend_document(self):
        entry = EducationEntry.model_validate({
            "_id": "e1",
            "degree": "BSc",
            "educationLevel": "undergrad",
            "university": "X",
            "startDate": "2020-01-01T00:00:00.000Z",
            "endDate": None,
            "__v": 0,
        })
        assert entry.id == "e1"
        assert entry.education_level == EducationLevel.UNDERGRAD
        assert entry.start_date == "2020-01"
        assert entry.end_date == ""
        assert entry.is_saved

    def test_payload_expands_dates_and_omits_id(self):
        entry = EducationEntry(id="e1", degree="BSc", university="X", start_date="2020-01", end_date="2023-06")
        assert entry.to_payload() == {
            "degree": "BSc",
            "educationLevel": "highschool",
            "university": "X",
            "startDate": "2020-01-01",
            "endDate": "2023-06-01",
        }

    def test_record_keeps_id_and_month_precision(self):
        record = EducationEntry(id="e1", degree="BSc", university="X", start_date="2020-01").to_record()
        assert record["id"] == "e1"
        assert record["startDate"] == "2020-01"

    def test_missing_fields_use_labels(self):
        assert EducationEntry(degree="BSc").missing_fields() == ["University", "Start Date"]

    def test_numeric_id_is_stringified(self):
        assert EducationEntry.model_validate({"id": 42}).id == "42"

    def test_empty_id_means_unsaved(self):
        assert not EducationEntry.model_validate({"id": ""}).is_saved


class TestExperienceEntry:
    def test_camel_case_round_trip(self):
        entry = ExperienceEntry.model_validate({
            "jobTitle": "Intern",
            "company": "Acme",
            "startDate": "2022-05",
            "description": "Built things",
        })
        payload = entry.to_payload()
        assert payload["jobTitle"] == "Intern"
        assert payload["startDate"] == "2022-05-01"
        assert payload["endDate"] == ""

    def test_missing_fields(self):
        assert ExperienceEntry().missing_fields() == ["Job Title", "Company", "Start Date"]


class TestApplicationRecord:
    def test_status_spellings(self):
        assert ApplicationRecord.model_validate({"status": "Under Review"}).status == ApplicationStatus.UNDER_REVIEW
        assert ApplicationRecord.model_validate({"status": "under-review"}).status == ApplicationStatus.UNDER_REVIEW

    def test_display_fields_are_not_sent(self):
        record = ApplicationRecord(
            job_id="j1",
            created_at="2024-01-01T00:00:00Z",
            job_title="Engineer",
            company="Acme",
        )
        assert record.to_payload() == {"jobId": "j1", "status": "submitted"}

    def test_job_id_from_object_id(self):
        assert ApplicationRecord.model_validate({"jobId": 7}).job_id == "7"
