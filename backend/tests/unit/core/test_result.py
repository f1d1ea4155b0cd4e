"""
Unit Tests for Result values
Tests for: success/failure construction, map, unwrap -> PortalError mapping
"""
import pytest

from prefect_portal.core.exceptions import (
    AuthorizationError,
    BackendError,
    ConflictError,
    RequestTimeoutError,
    ResourceNotFoundError,
    ValidationError,
)
from prefect_portal.core.result import ErrorKind, Result, kind_for_status


class TestResultConstruction:
    def test_success_is_ok(self):
        result = Result.success([1, 2])

        assert result.ok
        assert result.value == [1, 2]
        assert result.error is None

    def test_empty_list_is_success(self):
        assert Result.success([]).ok

    def test_invalid_carries_field(self):
        result = Result.invalid("Complaint subject is required", field="subject")

        assert not result.ok
        assert result.error == ErrorKind.VALIDATION
        assert result.field == "subject"

    def test_not_found_message_names_resource(self):
        result = Result.not_found("Complaint", "abc")

        assert result.error == ErrorKind.NOT_FOUND
        assert "Complaint" in result.message
        assert "abc" in result.message


class TestResultMap:
    def test_map_transforms_value(self):
        assert Result.success(2).map(lambda v: v * 10).value == 20

    def test_map_passes_failure_through(self):
        failure = Result.forbidden("nope")
        mapped = failure.map(lambda v: v * 10)

        assert mapped is failure


class TestUnwrap:
    def test_unwrap_returns_value(self):
        assert Result.success("x").unwrap() == "x"

    @pytest.mark.parametrize("kind, exc_type, status", [
        (ErrorKind.VALIDATION, ValidationError, 422),
        (ErrorKind.NOT_FOUND, ResourceNotFoundError, 404),
        (ErrorKind.CONFLICT, ConflictError, 409),
        (ErrorKind.FORBIDDEN, AuthorizationError, 403),
        (ErrorKind.TIMEOUT, RequestTimeoutError, 504),
        (ErrorKind.BACKEND, BackendError, 500),
    ])
    def test_unwrap_raises_matching_error(self, kind, exc_type, status):
        with pytest.raises(exc_type) as info:
            Result.failure(kind, "boom").unwrap()

        assert info.value.status_code == status
        assert info.value.message == "boom"

    def test_validation_error_keeps_field(self):
        with pytest.raises(ValidationError) as info:
            Result.invalid("Date is required", field="date").unwrap()

        assert info.value.field == "date"


class TestKindForStatus:
    @pytest.mark.parametrize("status, kind", [
        (422, ErrorKind.VALIDATION),
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.FORBIDDEN),
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.NOT_FOUND),
        (409, ErrorKind.CONFLICT),
        (504, ErrorKind.TIMEOUT),
        (500, ErrorKind.BACKEND),
        (502, ErrorKind.BACKEND),
    ])
    def test_status_mapping(self, status, kind):
        assert kind_for_status(status) == kind
