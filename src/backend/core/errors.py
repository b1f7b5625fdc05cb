"""
Application error taxonomy.

Every error raised across a service boundary is a LiveVoteError. The
subclasses fall into three families that the API surfaces differently:

- validation errors: bad input, rejected before any store access
- integrity errors: duplicate votes, unknown groups, groups with votes
- store errors: the document store failed; the caller may try again

The HTTP layer maps each class to a status code via ``status_code`` and tells
clients whether retrying makes sense via ``retryable``.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_SCORE = "INVALID_SCORE"
    DEVICE_ID_ERROR = "DEVICE_ID_ERROR"
    DUPLICATE_VOTE = "DUPLICATE_VOTE"
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    GROUP_HAS_VOTES = "GROUP_HAS_VOTES"
    VOTING_DISABLED = "VOTING_DISABLED"
    RESULTS_HIDDEN = "RESULTS_HIDDEN"
    STORE_ERROR = "STORE_ERROR"
    AGGREGATION_ERROR = "AGGREGATION_ERROR"
    LOCAL_STORAGE_ERROR = "LOCAL_STORAGE_ERROR"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Invalid input",
    ErrorCode.INVALID_SCORE: "Score must be an integer between 1 and 5",
    ErrorCode.DEVICE_ID_ERROR: "Invalid device ID",
    ErrorCode.DUPLICATE_VOTE: "You have already voted for this group",
    ErrorCode.GROUP_NOT_FOUND: "Group not found",
    ErrorCode.GROUP_HAS_VOTES: "Groups with votes cannot be deleted",
    ErrorCode.VOTING_DISABLED: "Voting is currently closed",
    ErrorCode.RESULTS_HIDDEN: "Results are not available yet",
    ErrorCode.STORE_ERROR: "A storage error occurred. Please try again.",
    ErrorCode.AGGREGATION_ERROR: "Aggregation failed",
    ErrorCode.LOCAL_STORAGE_ERROR: "Local storage is unavailable",
}


class LiveVoteError(Exception):
    """Base class for all application errors."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        self.message = message or ERROR_MESSAGES[self.code]
        self.errors = errors or [self.message]
        super().__init__(self.message)


# ============================================================================
# Validation errors
# ============================================================================


class InputValidationError(LiveVoteError):
    """Input failed validation. ``errors`` carries every failed check."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


# ============================================================================
# Integrity errors
# ============================================================================


class DuplicateVoteError(LiveVoteError):
    code = ErrorCode.DUPLICATE_VOTE
    status_code = 409


class GroupNotFoundError(LiveVoteError):
    code = ErrorCode.GROUP_NOT_FOUND
    status_code = 404


class GroupHasVotesError(LiveVoteError):
    code = ErrorCode.GROUP_HAS_VOTES
    status_code = 409


class VotingDisabledError(LiveVoteError):
    code = ErrorCode.VOTING_DISABLED
    status_code = 403


class ResultsHiddenError(LiveVoteError):
    code = ErrorCode.RESULTS_HIDDEN
    status_code = 403


# ============================================================================
# Store errors
# ============================================================================


class StoreError(LiveVoteError):
    """
    The document store failed.

    Raised with a domain message ("Failed to fetch group list"); the
    underlying exception is logged and chained but never shown to callers.
    """

    code = ErrorCode.STORE_ERROR
    status_code = 503
    retryable = True


class AggregationError(StoreError):
    code = ErrorCode.AGGREGATION_ERROR


class LocalStorageError(LiveVoteError):
    """Client-side persistent storage could not be read or written."""

    code = ErrorCode.LOCAL_STORAGE_ERROR
    status_code = 500
    retryable = True


ERRORS_BY_CODE: dict[str, type[LiveVoteError]] = {
    cls.code.value: cls
    for cls in (
        InputValidationError,
        DuplicateVoteError,
        GroupNotFoundError,
        GroupHasVotesError,
        VotingDisabledError,
        ResultsHiddenError,
        StoreError,
        AggregationError,
        LocalStorageError,
    )
}
