"""
Review Slot Timeouts — Submission Workflow

PURPOSE:
    Release review slots whose reviewer claimed them and then went quiet.
    Runs from a scheduled GitHub Actions workflow (daily), but is safe to run
    by hand at any time.

    For every submission still in the review pipeline (status "under-review"
    or "pending-revision"), each reviewer that is neither "submitted" nor
    "expired" is checked. If more than the timeout has passed since
    claimedAt, the reviewer is marked "expired", the slot is given back
    (reviewSlots.filled - 1), and the release is recorded in both
    reviewSlots.history and timelines.

DESIGN DECISIONS:
    - Strictly greater than: a claim exactly timeout_days old is kept.
    - Expired reviewers stay in the list. That keeps the history readable
      and stops the same user from re-claiming the submission.
    - Submitted reviews occupy a slot but are never timed out.
    - Each modified submission is written once per sweep, after all of its
      reviewers have been checked.
    - Re-running the sweep releases nothing new for reviewers already
      expired, because the status check skips them.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from _submission_workflow.config import ACTIVE_STATUSES, REVIEW_TIMEOUT_DAYS
from _submission_workflow.metadata_store import (
    MetadataStore,
    format_timestamp,
    parse_timestamp,
    utc_now,
)
from _submission_workflow.submission_lookup import list_all_submissions

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_DAYS = REVIEW_TIMEOUT_DAYS

# Reviewers in these states no longer wait on anything.
TERMINAL_REVIEWER_STATUSES = ("submitted", "expired")


def release_timed_out_slots(
    store: MetadataStore,
    timeout_days: float = DEFAULT_TIMEOUT_DAYS,
    now: Optional[datetime] = None,
) -> dict:
    """
    Expire every review slot claimed longer ago than the timeout.

    Args:
        store: Metadata store to sweep.
        timeout_days: How long a claim may stay unsubmitted. Fractional
                      days are allowed.
        now: Reference time for the sweep. Defaults to the current UTC time.

    Returns:
        dict with keys:
            - 'released_count' (int): number of reviewers expired in this pass
            - 'released_slots' (list[dict]): one entry per release with
              'submission_id', 'submission' (title), 'reviewer', 'pr_number'
    """
    now = now or utc_now()
    timeout = timedelta(days=timeout_days)
    timestamp = format_timestamp(now)

    released_slots = []

    for path, submission in list_all_submissions(store):
        if submission.get("status") not in ACTIVE_STATUSES:
            continue

        slots = submission.get("reviewSlots") or {}
        modified = False

        for reviewer in slots.get("reviewers", []):
            if reviewer.get("status") in TERMINAL_REVIEWER_STATUSES:
                continue

            try:
                claimed_at = parse_timestamp(reviewer.get("claimedAt"))
            except ValueError:
                logger.warning(
                    "Skipping reviewer %s on %s: unreadable claimedAt %r",
                    reviewer.get("userId"), submission.get("id"), reviewer.get("claimedAt"),
                )
                continue

            elapsed = now - claimed_at
            if elapsed <= timeout:
                continue

            reviewer["status"] = "expired"
            reviewer["expiredAt"] = timestamp
            slots["filled"] = max(0, slots.get("filled", 0) - 1)

            slots.setdefault("history", []).append({
                "userId": reviewer.get("userId"),
                "action": "timeout_release",
                "timestamp": timestamp,
            })
            submission.setdefault("timelines", []).append({
                "event": "review_slot_timeout",
                "timestamp": timestamp,
                "actor": "system",
                "details": {
                    "reviewer": reviewer.get("userId"),
                    "claimedAt": reviewer.get("claimedAt"),
                    "daysElapsed": elapsed // timedelta(days=1),
                },
            })

            modified = True
            released_slots.append({
                "submission_id": submission.get("id"),
                "submission": submission.get("title"),
                "reviewer": reviewer.get("userId"),
                "pr_number": submission.get("prNumber"),
            })
            logger.info(
                "Released slot of %s on %s after %d days",
                reviewer.get("userId"), submission.get("id"), elapsed.days,
            )

        if modified:
            submission["updatedAt"] = timestamp
            store.save_submission(submission, path)

    return {
        "released_count": len(released_slots),
        "released_slots": released_slots,
    }
