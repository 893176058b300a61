"""Record builders and HTTP fakes shared by the test modules."""

from datetime import datetime, timezone

import requests

NOW = datetime(2025, 12, 20, 12, 0, 0, tzinfo=timezone.utc)


def build_submission(submission_id="sub_2025_12_ABC", **overrides):
    submission = {
        "id": submission_id,
        "title": "On the Measurement of Nothing",
        "authorId": "carol",
        "authorDisplayName": "Carol Example",
        "authorGithubUsername": "carol",
        "status": "under-review",
        "prNumber": 42,
        "branchName": f"submission/{submission_id}",
        "reviewSlots": {
            "total": 3,
            "filled": 0,
            "reviewers": [],
            "history": [],
        },
        "timelines": [],
        "createdAt": "2025-12-01T09:00:00.000Z",
        "updatedAt": "2025-12-01T09:00:00.000Z",
    }
    submission.update(overrides)
    return submission


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, headers=None):
        self.status_code = status_code
        self._json_data = json_data
        self.headers = headers or {}

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON body")
        return self._json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)
