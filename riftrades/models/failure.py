"""
Outcome Envelope.

The codec never raises to its callers: encode and decode problems come back
as None, a DecodeFailure, or a ReconciliationMiss. The HTTP layer turns
those into an ApiResponse so the share page always gets a classified
answer it can show:

- success: the link was built or read
- known_failure: the link is broken, or the catalog is missing
- unknown_failure: anything else; only the exception type is reported

Responses are checked by `finalize_response()` before they leave the API.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Why a trade request failed."""

    # Share link could not be produced or read back
    ENCODING_FAILED = "encoding_failed"
    DECODING_FAILED = "decoding_failed"

    # Price guide not loaded
    CATALOG_UNAVAILABLE = "catalog_unavailable"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """What went wrong with a trade request, in terms the share page can show."""

    kind: FailureKind = Field(..., description="Failure classification")
    message: str = Field(..., description="Short explanation for the user")
    detail: str | None = Field(default=None, description="Technical detail, if any")
    suggestion: str | None = Field(default=None, description="What the user can do next")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every trade endpoint."""

    outcome: OutcomeType = Field(..., description="Overall result")
    data: T | None = Field(default=None, description="Payload, set only on success")
    failure: FailureDetail | None = Field(
        default=None,
        description="Set only when the outcome is a failure",
    )


class KnownError(Exception):
    """
    A failure the API can explain, e.g. an unreadable trade link.

    Raised by route handlers and dependencies only; the exception handler
    in ``riftrades.main`` renders it with ``status_code``.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        failure = FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )
        return finalize_response(ApiResponse(outcome=OutcomeType.KNOWN_FAILURE, failure=failure))


STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "The trade request could not be completed.",
    OutcomeType.UNKNOWN_FAILURE: "Something went wrong while handling the trade.",
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the trade link or card list and try again.",
    OutcomeType.UNKNOWN_FAILURE: "Try again; if it keeps happening, report the link you used.",
}


# ids of responses that passed finalize_response()
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Check an envelope's shape and mark it as finalized.

    Raises:
        ValueError: If a success carries failure details, or a failure lacks them
    """
    has_failure = response.failure is not None
    if response.outcome == OutcomeType.SUCCESS and has_failure:
        raise ValueError("Success response must not have failure details")
    if response.outcome != OutcomeType.SUCCESS and not has_failure:
        raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))
    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    return id(response) in _finalized_responses


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """Wrap an unexpected exception; its message is never exposed."""
    failure = FailureDetail(
        kind=FailureKind.UNKNOWN,
        message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
        detail=type(exception).__name__,
        suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
    )
    return finalize_response(ApiResponse(outcome=OutcomeType.UNKNOWN_FAILURE, failure=failure))


def create_known_failure(kind: FailureKind, reason: str) -> ApiResponse[Any]:
    """Known failure with the standard message; ``reason`` goes in the detail."""
    failure = FailureDetail(
        kind=kind,
        message=STANDARD_MESSAGES[OutcomeType.KNOWN_FAILURE],
        detail=reason,
        suggestion=STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE],
    )
    return finalize_response(ApiResponse(outcome=OutcomeType.KNOWN_FAILURE, failure=failure))


def create_success(data: T) -> ApiResponse[T]:
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
