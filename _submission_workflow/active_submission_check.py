"""
Active Submission Check — Submission Workflow

PURPOSE:
    Enforce the one-active-submission-per-author rule. The submission PR
    workflow runs this before accepting a new manuscript: if the author
    already has a submission under review or awaiting revision, the new one
    is turned away.

DEPENDS ON:
    - metadata/indexes/user_submissions.json:
        {"index": {"<username>": {"activeSubmissionId": "sub_..."}}}
    - the submission records themselves, for the current status

DESIGN DECISIONS:
    The index can be stale (it is rebuilt by the site tooling, not by these
    scripts), so the referenced submission's own status decides. A pointer
    to an accepted, rejected or deleted submission means "no active
    submission".
"""

import logging
from typing import Optional

from _submission_workflow.config import ACTIVE_STATUSES
from _submission_workflow.errors import SubmissionNotFoundError
from _submission_workflow.metadata_store import MetadataStore
from _submission_workflow.submission_lookup import find_submission_by_id

logger = logging.getLogger(__name__)


def get_active_submission(store: MetadataStore, github_username: str) -> Optional[dict]:
    """
    Return the user's active submission, or None if they have none.
    """
    index_data = store.load_user_index()
    if index_data is None:
        logger.info("No user submissions index; %s has no active submission", github_username)
        return None

    entry = (index_data.get("index") or {}).get(github_username)
    if not entry or not entry.get("activeSubmissionId"):
        return None

    active_id = entry["activeSubmissionId"]
    try:
        _, submission = find_submission_by_id(store, active_id)
    except SubmissionNotFoundError:
        logger.warning(
            "Index points %s at %s, which no longer exists", github_username, active_id
        )
        return None

    if submission.get("status") in ACTIVE_STATUSES:
        return submission
    return None
