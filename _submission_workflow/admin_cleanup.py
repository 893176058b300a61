"""
Admin Cleanup — Submission Workflow

PURPOSE:
    Remove a submission completely: its metadata file, the author's pointer
    to it, and (with a token) its pull request and branch on GitHub. Used by
    maintainers to clear test submissions and spam.

    Steps:
      1. Derive the metadata path from the id and load the submission
      2. Load the author's user record (missing is only a warning)
      3. Work out the planned actions
      4. Dry run: report the plan and stop
      5. Without force: ask for confirmation, abort on anything but "yes"
      6. Delete the submission file
      7. If the author's activeSubmissionId points at this submission, clear
         it and decrement submissionCount (never below zero)
      8. Close the PR and delete the branch, best effort

CALLED BY:
    cli.admin_cleanup_main (submission-admin-cleanup)

DESIGN DECISIONS:
    - Not transactional. Local deletion (step 6) is authoritative; a GitHub
      failure in step 8 is logged and reported but nothing is rolled back.
    - The path comes straight from the id instead of a tree scan, so a typo
      in the id fails fast with InvalidSubmissionIdError.
    - Confirmation is a callable so the CLI can prompt on stdin while tests
      answer programmatically.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from _submission_workflow.config import GITHUB_REPOSITORY
from _submission_workflow.errors import UserCancelledError
from _submission_workflow.github_collaborator import GitHubAPI, close_pr_and_delete_branch
from _submission_workflow.metadata_store import MetadataStore, format_timestamp, utc_now

logger = logging.getLogger(__name__)


def cleanup_submission(
    store: MetadataStore,
    submission_id: str,
    dry_run: bool = False,
    force: bool = False,
    github_token: Optional[str] = None,
    confirm: Optional[Callable[[list], bool]] = None,
    github: Optional[GitHubAPI] = None,
    repository: str = GITHUB_REPOSITORY,
    now: Optional[datetime] = None,
) -> dict:
    """
    Delete a submission and everything that points at it.

    Args:
        store: Metadata store holding the submission and the author.
        submission_id: Id of the form sub_<YYYY>_<MM>_<token>.
        dry_run: Only report the planned actions.
        force: Skip the confirmation step.
        github_token: Token for the PR/branch calls. None means local-only.
        confirm: Called with the planned actions when confirmation is
                 required; must return True to proceed. Required unless
                 force or dry_run is set.
        github: Pre-built GitHub client, mainly for tests. Counts as
                having credentials.
        repository: "owner/repo" of the data repository.
        now: Timestamp for the user record update.

    Returns:
        dict with keys:
            - 'submission_id', 'submission_path', 'title'
            - 'dry_run' (bool)
            - 'planned_actions' (list[str])
            - 'deleted' (bool): the submission file was removed
            - 'user_updated' (bool): the author record was changed
            - 'github' (dict or None): result of close_pr_and_delete_branch,
              None when no remote call was made (dry run)

    Raises:
        InvalidSubmissionIdError, SubmissionNotFoundError, UserCancelledError
    """

    # -----------------------------------------------------------------------
    # STEP 1-2: Load the submission and its author
    # -----------------------------------------------------------------------

    submission_path = store.submission_path(submission_id)
    submission = store.load_submission(submission_id)
    logger.info(
        'Found submission "%s" by %s (@%s), PR #%s, branch %s, status %s',
        submission.get("title"),
        submission.get("authorDisplayName"),
        submission.get("authorGithubUsername"),
        submission.get("prNumber"),
        submission.get("branchName"),
        submission.get("status"),
    )

    author_id = submission.get("authorId")
    user = store.load_user(author_id) if author_id else None
    if user is None:
        logger.warning("User record for author %s does not exist", author_id)
    else:
        logger.info(
            "Found user %s, activeSubmissionId=%s",
            author_id, user.get("activeSubmissionId"),
        )

    clears_active = user is not None and user.get("activeSubmissionId") == submission_id
    has_credentials = github is not None or bool(github_token)

    # -----------------------------------------------------------------------
    # STEP 3: Plan
    # -----------------------------------------------------------------------

    planned_actions = [f"Delete submission metadata {submission_path}"]
    if clears_active:
        planned_actions.append(
            f"Update user {author_id} (set activeSubmissionId = null)"
        )
    if has_credentials:
        planned_actions.append(f"Close PR #{submission.get('prNumber')}")
        planned_actions.append(f"Delete branch {submission.get('branchName')}")
    else:
        planned_actions.append("Skip PR and branch cleanup (no GITHUB_TOKEN)")

    report = {
        "submission_id": submission_id,
        "submission_path": submission_path,
        "title": submission.get("title"),
        "dry_run": dry_run,
        "planned_actions": planned_actions,
        "deleted": False,
        "user_updated": False,
        "github": None,
    }

    # -----------------------------------------------------------------------
    # STEP 4-5: Dry run and confirmation
    # -----------------------------------------------------------------------

    if dry_run:
        logger.info("Dry run: no changes made to %s", submission_id)
        return report

    if not force:
        if confirm is None:
            raise UserCancelledError(
                "Confirmation required: pass --force or answer the prompt"
            )
        if not confirm(planned_actions):
            raise UserCancelledError()

    # -----------------------------------------------------------------------
    # STEP 6-7: Local metadata
    # -----------------------------------------------------------------------

    store.delete_submission(submission_id)
    report["deleted"] = True
    logger.info("Deleted submission metadata %s", submission_path)

    if clears_active:
        user["activeSubmissionId"] = None
        if (user.get("submissionCount") or 0) > 0:
            user["submissionCount"] -= 1
        user["updatedAt"] = format_timestamp(now or utc_now())
        store.save_user(author_id, user)
        report["user_updated"] = True
        logger.info("Cleared activeSubmissionId of user %s", author_id)

    # -----------------------------------------------------------------------
    # STEP 8: Remote PR and branch
    # -----------------------------------------------------------------------

    report["github"] = close_pr_and_delete_branch(
        pr_number=submission.get("prNumber"),
        branch_name=submission.get("branchName"),
        github_token=github_token,
        repository=repository,
        github=github,
    )

    return report
