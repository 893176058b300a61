# Journal of Nothing - Submission Workflow Package
#
# This package contains the operational scripts that keep the metadata
# tree of the journal-data repository consistent. Each operation lives in
# its own file following the one-operation-per-file pattern, and each has
# a thin command-line entry point in cli.py.
#
# The scripts run either by hand (admin cleanup, slot claims) or inside a
# GitHub Actions runner (active-submission check on new PRs, the nightly
# timeout sweep, image validation on changed manuscripts). They read and
# write JSON files under metadata/ and, for cleanup only, call the GitHub
# REST API to close the submission PR and delete its branch.
#
# Operation map:
#   admin_cleanup            -> submission-admin-cleanup
#   active_submission_check  -> submission-check-active
#   review_slot_timeouts     -> submission-check-timeouts
#   review_slot_claim        -> submission-claim-slot
#   image_validator          -> submission-validate-images
