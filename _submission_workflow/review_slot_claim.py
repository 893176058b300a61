"""
Review Slot Claim — Submission Workflow

PURPOSE:
    Let a reviewer take one of the fixed review slots on a submission. The
    slot count (reviewSlots.total) is set when the submission is created and
    never changes here; this script only fills slots.

    Preconditions, checked in order (the first failure wins):
      1. The submission exists                  -> SubmissionNotFoundError
      2. reviewSlots.filled < reviewSlots.total  -> SlotsFullError
      3. The user holds no slot, in any status   -> AlreadyClaimedError

    A reviewer whose slot expired keeps their entry in the reviewers list,
    so they cannot claim the same submission again.

CALLED BY:
    cli.claim_main (submission-claim-slot), usually triggered from the
    "/claim" comment workflow in the data repository.

AUDIT TRAIL:
    Each successful claim appends exactly one reviewSlots.history entry and
    one timelines event. Both are append-only.
"""

import logging
from datetime import datetime
from typing import Optional

from _submission_workflow.errors import AlreadyClaimedError, SlotsFullError
from _submission_workflow.metadata_store import MetadataStore, format_timestamp, utc_now
from _submission_workflow.submission_lookup import find_submission_by_id

logger = logging.getLogger(__name__)


def claim_review_slot(
    store: MetadataStore,
    submission_id: str,
    github_username: str,
    now: Optional[datetime] = None,
) -> dict:
    """
    Claim an open review slot on a submission for a GitHub user.

    Args:
        store: Metadata store holding the submission.
        submission_id: The "id" field of the submission (e.g. "sub_2025_12_XXN").
        github_username: The reviewer's GitHub login, stored as userId.
        now: Claim time. Defaults to the current UTC time.

    Returns:
        The updated submission dict, already written back to its file.
    """
    path, submission = find_submission_by_id(store, submission_id)
    slots = submission["reviewSlots"]

    if slots["filled"] >= slots["total"]:
        raise SlotsFullError(submission_id, slots["total"])

    if any(r.get("userId") == github_username for r in slots.get("reviewers", [])):
        raise AlreadyClaimedError(submission_id, github_username)

    timestamp = format_timestamp(now or utc_now())

    slots.setdefault("reviewers", []).append({
        "userId": github_username,
        "claimedAt": timestamp,
        "status": "claimed",
    })
    slots["filled"] += 1

    slots.setdefault("history", []).append({
        "userId": github_username,
        "action": "claim",
        "timestamp": timestamp,
    })

    submission.setdefault("timelines", []).append({
        "event": "review_slot_claimed",
        "timestamp": timestamp,
        "actor": github_username,
        "details": {"slotNumber": slots["filled"]},
    })

    submission["updatedAt"] = timestamp

    store.save_submission(submission, path)
    logger.info(
        "%s claimed review slot %d/%d on %s",
        github_username, slots["filled"], slots["total"], submission_id,
    )
    return submission
