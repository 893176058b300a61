"""
Command-line entry points — Submission Workflow

Each script is an independent console entry point declared in
pyproject.toml. Every main() takes an optional argv list and returns the
process exit code: 0 on success, 1 on any failure.

Results go to stdout, failures to stderr, and log records to stderr
through the logging configuration in config.py.
"""

import argparse
import sys
from typing import Optional

from _submission_workflow import config
from _submission_workflow.active_submission_check import get_active_submission
from _submission_workflow.admin_cleanup import cleanup_submission
from _submission_workflow.errors import SubmissionToolError, UserCancelledError
from _submission_workflow.image_validator import validate_markdown_images
from _submission_workflow.metadata_store import FileMetadataStore
from _submission_workflow.review_slot_claim import claim_review_slot
from _submission_workflow.review_slot_timeouts import release_timed_out_slots


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit 1 like every other failure, not argparse's 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_metadata_root(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--metadata-root",
        default=config.METADATA_ROOT,
        help="Directory containing submissions/, users/ and indexes/ "
             "(default: $METADATA_ROOT or ./metadata)",
    )


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


# ---------------------------------------------------------------------------
# submission-admin-cleanup
# ---------------------------------------------------------------------------


def _prompt_confirmation(planned_actions: list) -> bool:
    print("\nThe following actions will be performed:")
    for number, action in enumerate(planned_actions, start=1):
        print(f"  {number}. {action}")
    print("\nType 'yes' to confirm, or press Ctrl+C to cancel:")
    try:
        answer = input("> ")
    except EOFError:
        return False
    return answer.strip().lower() == "yes"


def admin_cleanup_main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(
        description="Delete a submission, clear its author's active pointer, "
                    "and close its PR and branch",
        epilog="Set GITHUB_TOKEN to close the PR and delete the branch automatically.",
    )
    parser.add_argument("submission_id", help="Submission id, e.g. sub_2025_12_XXN")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done")
    parser.add_argument("--force", action="store_true", help="Do not ask for confirmation")
    _add_metadata_root(parser)
    args = parser.parse_args(argv)
    config.configure_logging()

    store = FileMetadataStore(args.metadata_root)
    try:
        report = cleanup_submission(
            store,
            args.submission_id,
            dry_run=args.dry_run,
            force=args.force,
            github_token=config.GITHUB_TOKEN,
            confirm=_prompt_confirmation,
        )
    except UserCancelledError as e:
        print(f"Cancelled: {e}", file=sys.stderr)
        return 1
    except (SubmissionToolError, OSError) as e:
        return _fail(str(e))

    if report["dry_run"]:
        print(f"[dry run] Planned actions for {report['submission_id']}:")
        for number, action in enumerate(report["planned_actions"], start=1):
            print(f"  {number}. {action}")
        print("[dry run] Run again without --dry-run to apply.")
        return 0

    print(f"Cleaned up {report['submission_id']} ({report['title']})")
    github = report["github"] or {}
    if github.get("skipped"):
        print("PR and branch were not touched; set GITHUB_TOKEN or clean them up manually.")
    for error in github.get("errors", []):
        print(f"  warning: {error}", file=sys.stderr)
    print("Remember to commit and push the metadata change:")
    print(
        f'  git add -A && git commit -m "cleanup: remove submission '
        f'{report["submission_id"]}" && git push'
    )
    return 0


# ---------------------------------------------------------------------------
# submission-check-active
# ---------------------------------------------------------------------------


def check_active_main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(
        description="Exit 1 if a GitHub user already has an active submission"
    )
    parser.add_argument("github_username")
    _add_metadata_root(parser)
    args = parser.parse_args(argv)
    config.configure_logging()

    store = FileMetadataStore(args.metadata_root)
    try:
        submission = get_active_submission(store, args.github_username)
    except (SubmissionToolError, OSError) as e:
        return _fail(f"could not check active submission: {e}")

    if submission:
        print(
            f"Error: User {args.github_username} already has an active submission:",
            file=sys.stderr,
        )
        print(f"  Title: {submission.get('title')}", file=sys.stderr)
        print(f"  Status: {submission.get('status')}", file=sys.stderr)
        print(f"  PR: #{submission.get('prNumber')}", file=sys.stderr)
        return 1

    print(f"User {args.github_username} has no active submissions")
    return 0


# ---------------------------------------------------------------------------
# submission-check-timeouts
# ---------------------------------------------------------------------------


def check_timeouts_main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(description="Release timed-out review slots")
    parser.add_argument(
        "--timeout-days",
        type=int,
        default=config.REVIEW_TIMEOUT_DAYS,
        help="Days a claimed slot may stay unsubmitted (default: %(default)s)",
    )
    _add_metadata_root(parser)
    args = parser.parse_args(argv)
    config.configure_logging()

    print(f"Checking for review slots timed out after {args.timeout_days} days...")
    store = FileMetadataStore(args.metadata_root)
    try:
        result = release_timed_out_slots(store, timeout_days=args.timeout_days)
    except (SubmissionToolError, OSError) as e:
        return _fail(str(e))

    if result["released_count"] == 0:
        print("No timed-out review slots found")
        return 0

    print(f"Released {result['released_count']} timed-out review slot(s):\n")
    for slot in result["released_slots"]:
        print(f"  PR #{slot['pr_number']}: {slot['submission']}")
        print(f"    Reviewer: {slot['reviewer']}\n")
    return 0


# ---------------------------------------------------------------------------
# submission-claim-slot
# ---------------------------------------------------------------------------


def claim_main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(description="Claim a review slot for a submission")
    parser.add_argument("submission_id")
    parser.add_argument("github_username")
    _add_metadata_root(parser)
    args = parser.parse_args(argv)
    config.configure_logging()

    store = FileMetadataStore(args.metadata_root)
    try:
        submission = claim_review_slot(store, args.submission_id, args.github_username)
    except (SubmissionToolError, OSError) as e:
        return _fail(str(e))

    slots = submission["reviewSlots"]
    print("Review slot claimed successfully")
    print(f"  Submission: {submission.get('title')}")
    print(f"  Reviewer: {args.github_username}")
    print(f"  Slots filled: {slots['filled']}/{slots['total']}")
    return 0


# ---------------------------------------------------------------------------
# submission-validate-images
# ---------------------------------------------------------------------------


def validate_images_main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(description="Validate image URLs in a markdown file")
    parser.add_argument("markdown_file")
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.IMAGE_CHECK_TIMEOUT_SECONDS,
        help="Per-image timeout in seconds (default: %(default)s)",
    )
    args = parser.parse_args(argv)
    config.configure_logging()

    try:
        with open(args.markdown_file, "r", encoding="utf-8", errors="replace") as f:
            markdown = f.read()
    except OSError as e:
        return _fail(str(e))

    result = validate_markdown_images(markdown, timeout=args.timeout)
    if result["image_count"] == 0:
        print("No images found in the document")
        return 0

    print(f"Found {result['image_count']} image(s), validated")
    if result["invalid"]:
        print(f"\n{len(result['invalid'])} invalid image(s) found:\n", file=sys.stderr)
        for r in result["invalid"]:
            print(f"  {r['url']}", file=sys.stderr)
            print(f"    Error: {r['error']}\n", file=sys.stderr)
        return 1

    print(f"All {result['image_count']} image(s) are valid")
    return 0
