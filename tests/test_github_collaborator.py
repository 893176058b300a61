"""Tests for the GitHub PR/branch collaborator."""

import pytest
import requests

from _submission_workflow.github_collaborator import GitHubAPI, close_pr_and_delete_branch
from tests.helpers import FakeResponse


@pytest.fixture
def http(monkeypatch):
    """Route requests.patch/delete to canned responses and record calls."""
    calls = []
    responses = {"patch": FakeResponse(200, {"state": "closed"}), "delete": FakeResponse(204)}

    def fake_patch(url, headers=None, json=None, timeout=None):
        calls.append(("PATCH", url, json, headers, timeout))
        response = responses["patch"]
        if isinstance(response, Exception):
            raise response
        return response

    def fake_delete(url, headers=None, timeout=None):
        calls.append(("DELETE", url, None, headers, timeout))
        response = responses["delete"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "patch", fake_patch)
    monkeypatch.setattr(requests, "delete", fake_delete)
    return calls, responses


def test_closes_pr_and_deletes_branch(http):
    calls, _ = http
    result = close_pr_and_delete_branch(7, "submission/sub_2025_12_A", "tok", repository="org/data")

    assert result == {
        "success": True,
        "skipped": False,
        "pr_closed": True,
        "branch_deleted": True,
        "errors": [],
    }
    patch, delete = calls
    assert patch[0] == "PATCH"
    assert patch[1] == "https://api.github.com/repos/org/data/pulls/7"
    assert patch[2] == {"state": "closed"}
    assert patch[3]["Authorization"] == "Bearer tok"
    assert patch[4] == 30
    assert delete[1] == "https://api.github.com/repos/org/data/git/refs/heads/submission/sub_2025_12_A"


def test_branch_already_gone_counts_as_success(http):
    _, responses = http
    responses["delete"] = FakeResponse(422, {"message": "Reference does not exist"})

    result = close_pr_and_delete_branch(7, "b", "tok", repository="org/data")
    assert result["success"] is True
    assert result["branch_deleted"] is True


def test_pr_failure_still_attempts_branch(http):
    calls, responses = http
    responses["patch"] = FakeResponse(404, {"message": "Not Found"})

    result = close_pr_and_delete_branch(7, "b", "tok", repository="org/data")

    assert [c[0] for c in calls] == ["PATCH", "DELETE"]
    assert result["success"] is False
    assert result["pr_closed"] is False
    assert result["branch_deleted"] is True
    assert result["errors"] == ["Failed to close PR #7: Not Found (HTTP 404)"]


def test_branch_server_error_is_reported(http):
    _, responses = http
    responses["delete"] = FakeResponse(500)

    result = close_pr_and_delete_branch(7, "b", "tok", repository="org/data")
    assert result["success"] is False
    assert result["errors"] == ["Failed to delete branch b: HTTP 500"]


def test_network_errors_are_caught(http):
    _, responses = http
    responses["patch"] = requests.ConnectionError("connection refused")
    responses["delete"] = requests.Timeout("timed out")

    result = close_pr_and_delete_branch(7, "b", "tok", repository="org/data")
    assert result["success"] is False
    assert len(result["errors"]) == 2


def test_missing_token_skips_all_calls(http):
    calls, _ = http
    result = close_pr_and_delete_branch(7, "b", None, repository="org/data")
    assert result["skipped"] is True
    assert result["success"] is False
    assert calls == []


def test_for_repository_splits_owner_and_repo():
    gh = GitHubAPI.for_repository("Journal-of-Nothing/journal-data-test", "tok")
    assert gh.owner == "Journal-of-Nothing"
    assert gh.repo == "journal-data-test"
    assert gh.base_url == "https://api.github.com/repos/Journal-of-Nothing/journal-data-test"
