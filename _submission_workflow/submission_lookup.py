"""
Submission Lookup — Submission Workflow

PURPOSE:
    Find submission records by scanning the whole metadata tree. Used by the
    claim, timeout and active-check scripts, which identify a submission by
    the "id" field inside the record rather than by its filename.

DESIGN DECISIONS:
    - The scan is exhaustive and linear. There are a few hundred submissions
      at most, so a secondary index would cost more in consistency bugs than
      it saves in time.
    - The id already encodes the partition, so a caller that trusts the
      filename convention can use MetadataStore.load_submission() instead and
      read a single file. Admin cleanup does exactly that.
    - One malformed file aborts the scan (MalformedRecordError propagates).
"""

from _submission_workflow.errors import SubmissionNotFoundError
from _submission_workflow.metadata_store import MetadataStore


def list_all_submissions(store: MetadataStore) -> list:
    """Return [(path, submission), ...] for every record in the store."""
    return store.list_submissions()


def find_submission_by_id(store: MetadataStore, submission_id: str) -> tuple:
    """
    Scan every partition for the record whose "id" equals submission_id.

    Returns:
        (path, submission) for the first match in partition order.

    Raises:
        SubmissionNotFoundError: no record matched after a full scan.
    """
    for path, submission in store.list_submissions():
        if submission.get("id") == submission_id:
            return path, submission
    raise SubmissionNotFoundError(submission_id)
