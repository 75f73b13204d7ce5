"""
Failure taxonomy for translation update queries.

Every way an item can drop out of an update-check cycle is named here, so
the collector, the client and the engine log and report the same codes.

Architecture:
    QueryFailure (Enum) → WHAT went wrong for an item
    FailureReason (Dataclass) → the diagnostic context (URL, status, body)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Response bodies are truncated to this many characters in diagnostics.
_BODY_PREVIEW_LENGTH = 500


class QueryFailure(str, Enum):
    """
    Represents why no translation update was offered for an item this cycle.

    None of these are raised into the host's update-check flow; each one
    degrades to "no update offered" for the affected item only.
    """

    MALFORMED_INPUT = "malformed_input"
    """The outbound batch or one of its fields could not be decoded."""

    INVALID_SERVICE_URI = "invalid_service_uri"
    """The declared service URI (or the filtered API URL) is not an absolute URL."""

    LOCAL_DESTINATION = "local_destination"
    """The API URL points at a local host and development mode does not allow it."""

    TRANSPORT_FAILURE = "transport_failure"
    """The POST failed before an HTTP status was received (DNS, TLS, timeout)."""

    UNEXPECTED_STATUS = "unexpected_status"
    """The translation server answered with a status other than 200."""

    EMPTY_RESPONSE = "empty_response"
    """The body did not decode to a non-empty list of language packages."""


@dataclass(frozen=True)
class FailureReason:
    """
    Structured diagnostic for a failed item query.

    Attributes:
        failure: The taxonomy entry.
        message: A human-readable explanation.
        url: The URL that was (or would have been) queried.
        status: The HTTP status code, when a response was received.
        body: A truncated preview of the response body, when one was received.

    """

    failure: QueryFailure
    message: str
    url: str | None = None
    status: int | None = None
    body: str | None = None

    def __str__(self) -> str:
        """Return a one-line representation suitable for log messages."""
        parts = [f"{self.failure.value}: {self.message}"]
        if self.url:
            parts.append(f"url={self.url}")
        if self.status is not None:
            parts.append(f"status={self.status}")
        if self.body:
            parts.append(f"body={self.body!r}")
        return " ".join(parts)


def preview_body(body: str | None) -> str | None:
    """Trim a response body for inclusion in a log line."""
    if body is None:
        return None
    if len(body) <= _BODY_PREVIEW_LENGTH:
        return body
    return body[:_BODY_PREVIEW_LENGTH] + "..."
