"""Tests for the query failure taxonomy."""

from gp_translation_updater.query_state import FailureReason, QueryFailure, preview_body


def test_failure_values_are_stable() -> None:
    """Failure codes are plain strings usable in logs."""
    assert QueryFailure.UNEXPECTED_STATUS == "unexpected_status"
    assert {failure.value for failure in QueryFailure} == {
        "malformed_input",
        "invalid_service_uri",
        "local_destination",
        "transport_failure",
        "unexpected_status",
        "empty_response",
    }


def test_failure_reason_str_includes_context() -> None:
    """The string form carries the URL, status and body when present."""
    reason = FailureReason(QueryFailure.UNEXPECTED_STATUS, "Unexpected response status", url="https://example.com/api", status=500, body="boom")

    assert str(reason) == "unexpected_status: Unexpected response status url=https://example.com/api status=500 body='boom'"


def test_failure_reason_str_minimal() -> None:
    """Absent context is omitted."""
    assert str(FailureReason(QueryFailure.INVALID_SERVICE_URI, "bad")) == "invalid_service_uri: bad"


def test_preview_body_truncates() -> None:
    """Long bodies are trimmed for logging."""
    assert preview_body(None) is None
    assert preview_body("short") == "short"
    preview = preview_body("x" * 2000)
    assert preview is not None
    assert len(preview) == 503
    assert preview.endswith("...")
