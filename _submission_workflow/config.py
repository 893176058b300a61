"""
Configuration — Submission Workflow

All settings come from environment variables so the same scripts run
unchanged on a maintainer's laptop and inside GitHub Actions, where the
workflow file exports GITHUB_TOKEN and GITHUB_REPOSITORY.
"""

import logging
import os

# -----------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------
# METADATA_ROOT: directory holding submissions/, users/ and indexes/
# GITHUB_TOKEN: bearer token used only to close PRs and delete branches
# GITHUB_REPOSITORY: "owner/repo" of the journal data repository
# REVIEW_TIMEOUT_DAYS: days a claimed review slot may stay unsubmitted
# IMAGE_CHECK_TIMEOUT_SECONDS: per-URL timeout for image validation
# LOG_LEVEL: standard logging level name
# -----------------------------------------------------------------------

METADATA_ROOT = os.environ.get(
    "METADATA_ROOT", os.path.join(os.getcwd(), "metadata")
)
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN") or None
GITHUB_REPOSITORY = os.environ.get(
    "GITHUB_REPOSITORY", "Journal-of-Nothing/journal-data-test"
)
REVIEW_TIMEOUT_DAYS = int(os.environ.get("REVIEW_TIMEOUT_DAYS", "14"))
IMAGE_CHECK_TIMEOUT_SECONDS = float(os.environ.get("IMAGE_CHECK_TIMEOUT_SECONDS", "3"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Only these two statuses keep a submission in the review pipeline.
ACTIVE_STATUSES = ("under-review", "pending-revision")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send log records to stderr so stdout stays free for script results."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
