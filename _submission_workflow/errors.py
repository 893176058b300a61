"""
Error types for the submission workflow scripts.

Every failure a script reports to the operator is one of these. GitHub API
failures are deliberately absent: the collaborator returns a result dict
instead of raising, so cleanup can keep going after a remote error.
"""


class SubmissionToolError(Exception):
    """Base class for all expected, operator-facing failures."""


class SubmissionNotFoundError(SubmissionToolError):
    def __init__(self, submission_id: str, detail: str = ""):
        self.submission_id = submission_id
        message = f"Submission {submission_id} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidSubmissionIdError(SubmissionToolError):
    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Invalid submission ID format: {submission_id}")


class SlotsFullError(SubmissionToolError):
    def __init__(self, submission_id: str, total: int):
        self.submission_id = submission_id
        self.total = total
        super().__init__(f"All review slots are filled ({total}/{total})")


class AlreadyClaimedError(SubmissionToolError):
    def __init__(self, submission_id: str, user_id: str):
        self.submission_id = submission_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} already claimed a slot for submission {submission_id}"
        )


class MalformedRecordError(SubmissionToolError):
    """A metadata file could not be parsed as JSON. Always fatal."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Malformed metadata record {path}: {cause}")


class UserCancelledError(SubmissionToolError):
    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)
