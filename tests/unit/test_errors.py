"""Tests for the error taxonomy."""

import httpx

from tintern.common.errors import (
    AlreadyAppliedError,
    ApiError,
    AuthenticationError,
    MutationInProgressError,
    PreconditionError,
    TinternError,
    TransportError,
)


class TestApiErrorFromResponse:
    def test_message_field(self):
        error = ApiError.from_response(400, {"message": "Degree is required"})
        assert error.status == 400
        assert error.message == "Degree is required"
        assert error.data == {"message": "Degree is required"}

    def test_error_field(self):
        assert ApiError.from_response(500, {"error": "Backend down"}).message == "Backend down"

    def test_unparsable_body_gets_generic_message(self):
        error = ApiError.from_response(502, None)
        assert error.message == "Request failed with status 502"
        assert error.data == {}

    def test_str_includes_status(self):
        assert str(ApiError(404, "Not found")) == "HTTP 404: Not found"


class TestAlreadyApplied:
    def test_conflict_status(self):
        assert ApiError(409, "Conflict").is_already_applied

    def test_message_match_is_case_insensitive(self):
        assert ApiError(400, "You have ALREADY  applied to this job").is_already_applied

    def test_other_errors(self):
        assert not ApiError(400, "Job is closed").is_already_applied

    def test_from_api_error_keeps_details(self):
        original = ApiError(409, "Already applied", {"message": "Already applied"})
        error = AlreadyAppliedError.from_api_error(original)
        assert isinstance(error, ApiError)
        assert error.status == 409
        assert error.data == original.data

    def test_default_message_when_backend_sent_none(self):
        error = AlreadyAppliedError.from_api_error(ApiError(409, ""))
        assert error.message == AlreadyAppliedError.DEFAULT_MESSAGE


class TestHierarchy:
    def test_everything_is_a_tintern_error(self):
        for error in (
            ApiError(400, "x"),
            AuthenticationError(),
            TransportError("GET", "/jobs", httpx.ConnectError("down")),
            MutationInProgressError("k"),
        ):
            assert isinstance(error, TinternError)

    def test_mutation_in_progress_is_a_precondition_error(self):
        assert issubclass(MutationInProgressError, PreconditionError)

    def test_transport_error_message_hides_internals(self):
        error = TransportError("GET", "/jobs", httpx.ConnectError("[Errno 111] refused"))
        assert "Errno" not in error.message
        assert "Errno" in str(error)
        assert error.method == "GET"
        assert error.endpoint == "/jobs"
