"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
import pytest
from app.core.errors import (
    ActivityFullError,
    CompletionFailureError,
    ContextUnavailableError,
    InputError,
    MalformedResultError,
    PersistenceFailureError,
    StaleWriteError,
    StatusNotFoundError,
    StatusProcessingError,
    StorageError,
    TemplateNotFoundError,
)
from app.schemas.common import ErrorDetail, ErrorResponse


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_input_error(self):
        err = InputError("Status text must not be empty.", field="status_text")
        assert err.http_status == 422
        assert err.code == "INVALID_INPUT"
        assert err.to_dict() == {
            "code": "INVALID_INPUT",
            "message": "Status text must not be empty.",
            "details": {"field": "status_text"},
        }

    @pytest.mark.parametrize("kind", list(MalformedResultError.REASONS))
    def test_malformed_result_kinds(self, kind):
        err = MalformedResultError(kind)
        assert err.kind == kind
        assert err.message == MalformedResultError.REASONS[kind]
        assert err.details == {"kind": kind}

    def test_storage_hierarchy(self):
        assert issubclass(ContextUnavailableError, StorageError)
        assert issubclass(PersistenceFailureError, StorageError)
        assert issubclass(StaleWriteError, PersistenceFailureError)
        assert ContextUnavailableError("x").code == "CONTEXT_UNAVAILABLE"
        assert PersistenceFailureError("x").code == "PERSISTENCE_FAILURE"

    def test_stale_write_error(self):
        err = StaleWriteError("u1", expected=2, actual=3)
        assert err.http_status == 409
        assert "2" in err.message and "3" in err.message
        assert err.to_dict()["details"] == {"user_id": "u1", "expected": 2, "actual": 3}

    def test_completion_failure(self):
        err = CompletionFailureError("openai API error: 401", details={"provider": "openai"})
        assert err.http_status == 502
        assert err.code == "COMPLETION_FAILURE"

    def test_not_found_errors(self):
        assert StatusNotFoundError("u1").http_status == 404
        assert TemplateNotFoundError("gym").details == {"name": "gym"}

    def test_activity_full(self):
        err = ActivityFullError("act_1_abcde", 4)
        assert err.http_status == 409
        assert "4" in err.message

    def test_processing_error_without_user(self):
        d = StatusProcessingError("boom").to_dict()
        assert d == {"code": "STATUS_PROCESSING_ERROR", "message": "boom"}
        # details should not be in dict when empty
        assert "details" not in d


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_empty_status_text_returns_validation_error(self, client, user_id):
        r = client.post("/status", json={"user_id": user_id, "status_text": ""})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "errors" in body["details"]
        assert isinstance(body["details"]["errors"], list)

    def test_field_name_reported(self, client, user_id):
        r = client.post("/status", json={"user_id": user_id, "status_text": "   \t\n  "})
        assert r.status_code == 422
        fields = [e["field"] for e in r.json()["details"]["errors"]]
        assert "status_text" in fields

    def test_non_json_body(self, client):
        r = client.post("/status", content="not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestAppErrors:
    def test_not_found_envelope(self, client, user_id):
        r = client.get(f"/status/{user_id}/latest")
        assert r.status_code == 404
        body = r.json()
        assert set(body) == {"code", "message", "details"}
        assert body["details"] == {"user_id": user_id}

    def test_envelope_matches_schema(self, client, user_id):
        body = client.get(f"/status/{user_id}/latest").json()
        assert ErrorResponse.model_validate(body).code == "STATUS_NOT_FOUND"

        r = client.post("/status", json={"user_id": user_id, "status_text": ""})
        for error in r.json()["details"]["errors"]:
            ErrorDetail.model_validate(error)

    def test_openapi_documents_envelope(self, client):
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        assert "ErrorResponse" in schemas
