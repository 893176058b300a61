"""
GitHub Collaborator — Submission Workflow

PURPOSE:
    Close the pull request of a submission and delete its branch in the
    journal data repository. Only admin cleanup calls this.

DEPENDS ON:
    - GitHub REST API (via requests library)
    - A token with pull-requests:write and contents:write on the data repo,
      passed in from the GITHUB_TOKEN environment variable

DESIGN DECISIONS:
    - Best effort. close_pr_and_delete_branch() never raises: it returns a
      result dict and logs what failed. By the time it runs, cleanup has
      already deleted the local metadata, which is the authoritative state;
      a leftover PR or branch is fixed by hand.
    - Both sub-calls are attempted even if the first one fails.
    - Deleting a branch that is already gone returns 422 from the refs API.
      That is the state we wanted, so it counts as success.
"""

import logging
from typing import Optional

import requests

from _submission_workflow.config import GITHUB_REPOSITORY

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


class GitHubAPI:
    """
    Thin wrapper around the GitHub REST API for the two calls cleanup needs.
    """

    def __init__(self, owner: str, repo: str, token: str):
        self.owner = owner
        self.repo = repo
        self.base_url = f"https://api.github.com/repos/{owner}/{repo}"
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @classmethod
    def for_repository(cls, repository: str, token: str) -> "GitHubAPI":
        """Build a client from an "owner/repo" string."""
        owner, _, repo = repository.partition("/")
        return cls(owner, repo, token)

    def close_pull_request(self, pr_number: int) -> dict:
        """Set a pull request's state to closed."""
        url = f"{self.base_url}/pulls/{pr_number}"
        resp = requests.patch(
            url, headers=self.headers, json={"state": "closed"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        return resp.json()

    def delete_branch(self, branch_name: str) -> bool:
        """
        Delete refs/heads/<branch_name>.

        Returns True when the branch was deleted, False when GitHub reports it
        no longer exists (422). Any other error status raises HTTPError.
        """
        url = f"{self.base_url}/git/refs/heads/{branch_name}"
        resp = requests.delete(url, headers=self.headers, timeout=REQUEST_TIMEOUT_SECONDS)
        if resp.status_code == 422:
            return False
        resp.raise_for_status()
        return True


def close_pr_and_delete_branch(
    pr_number: Optional[int],
    branch_name: Optional[str],
    github_token: Optional[str],
    repository: str = GITHUB_REPOSITORY,
    github: Optional[GitHubAPI] = None,
) -> dict:
    """
    Close a submission's PR and delete its branch, logging every failure.

    Args:
        pr_number: PR to close. None skips the PR call.
        branch_name: Branch to delete. None skips the branch call.
        github_token: Bearer token. Without it nothing is called and the
                      result is marked skipped.
        repository: "owner/repo" of the data repository.
        github: Pre-built client, mainly for tests.

    Returns:
        dict with keys:
            - 'success' (bool): both requested calls succeeded
            - 'skipped' (bool): no token, nothing was attempted
            - 'pr_closed' (bool)
            - 'branch_deleted' (bool): also True when the branch was already gone
            - 'errors' (list[str])
    """
    result = {
        "success": False,
        "skipped": False,
        "pr_closed": False,
        "branch_deleted": False,
        "errors": [],
    }

    if github is None and not github_token:
        owner, _, repo = repository.partition("/")
        result["skipped"] = True
        logger.warning("No GITHUB_TOKEN provided; skipping PR close and branch deletion")
        if pr_number is not None:
            logger.warning(
                "Close the PR manually: https://github.com/%s/%s/pull/%s",
                owner, repo, pr_number,
            )
        if branch_name:
            logger.warning("Delete the branch manually: %s", branch_name)
        return result

    gh = github or GitHubAPI.for_repository(repository, github_token)

    if pr_number is not None:
        try:
            gh.close_pull_request(pr_number)
            result["pr_closed"] = True
            logger.info("Closed PR #%s", pr_number)
        except requests.RequestException as e:
            message = f"Failed to close PR #{pr_number}: {_describe_error(e)}"
            result["errors"].append(message)
            logger.error(message)
    else:
        result["pr_closed"] = True

    if branch_name:
        try:
            if gh.delete_branch(branch_name):
                logger.info("Deleted branch %s", branch_name)
            else:
                logger.info("Branch %s was already deleted", branch_name)
            result["branch_deleted"] = True
        except requests.RequestException as e:
            message = f"Failed to delete branch {branch_name}: {_describe_error(e)}"
            result["errors"].append(message)
            logger.error(message)
    else:
        result["branch_deleted"] = True

    result["success"] = not result["errors"]
    return result


def _describe_error(error: requests.RequestException) -> str:
    """Prefer GitHub's own error message over the generic HTTPError text."""
    response = getattr(error, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        if message:
            return f"{message} (HTTP {response.status_code})"
        return f"HTTP {response.status_code}"
    return str(error)
