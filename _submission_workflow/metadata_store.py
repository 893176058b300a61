"""
Metadata Store — Submission Workflow

PURPOSE:
    Data access for the JSON metadata tree of the journal-data repository.
    No business rules live here: the store only knows where records are
    kept, how they are serialized, and how to find them again.

    Layout on disk:
        metadata/submissions/<YYYY>-<MM>/<submission-id>.json
        metadata/users/<user-id>.json
        metadata/indexes/user_submissions.json

    The submission id carries its own partition: "sub_2025_12_XXN" lives in
    submissions/2025-12/. That mapping is exposed as submission_path() so
    callers that already know the id can read one file, while list_submissions()
    remains the exhaustive scan used by lookups that match on the record body.

CALLED BY:
    Every operation module. Tests use InMemoryMetadataStore, which exposes
    the same methods over plain dicts.

DESIGN DECISIONS:
    - Records are plain dicts, exactly as they are stored. The scripts only
      touch a handful of fields and must preserve everything else untouched.
    - Files are rewritten whole with indent=2 on every mutation, which keeps
      git diffs on the data repository stable and readable.
    - A file that is not valid JSON aborts the whole operation with
      MalformedRecordError. Skipping it would let a sweep silently ignore
      submissions, which is worse than failing loudly.
    - There is no locking. Two scripts writing the same file at once can lose
      an update; the workflow is low-volume and human-triggered, so this is
      accepted.
"""

import copy
import json
import logging
import os
import re
from datetime import datetime, timezone
from typing import Optional

from _submission_workflow.errors import (
    InvalidSubmissionIdError,
    MalformedRecordError,
    SubmissionNotFoundError,
)

logger = logging.getLogger(__name__)

SUBMISSION_ID_PATTERN = re.compile(r"^sub_(\d{4})_(\d{2})_\w+$")

SUBMISSIONS_DIR = "submissions"
USERS_DIR = "users"
INDEXES_DIR = "indexes"
USER_INDEX_FILE = "user_submissions.json"


# ---------------------------------------------------------------------------
# TIMESTAMPS
# ---------------------------------------------------------------------------
# Records are shared with the Node-based site tooling, which writes
# "2025-12-01T10:00:00.000Z". We write the same shape and accept any
# ISO-8601 string on the way in.
# ---------------------------------------------------------------------------


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Serialize a datetime as UTC ISO-8601 with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Raises ValueError for anything that is not a timestamp. Naive values are
    taken to be UTC.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not a timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# SUBMISSION IDS
# ---------------------------------------------------------------------------


def parse_submission_id(submission_id: str) -> Optional[dict]:
    """
    Split a submission id into its storage partition.

    Returns {"year": "2025", "month": "12"} for "sub_2025_12_XXN", or None
    when the id does not follow the sub_<YYYY>_<MM>_<token> convention.
    """
    match = SUBMISSION_ID_PATTERN.match(submission_id or "")
    if not match:
        return None
    return {"year": match.group(1), "month": match.group(2)}


def is_submission_filename(filename: str) -> bool:
    return filename.startswith("sub_") and filename.endswith(".json")


# ---------------------------------------------------------------------------
# STORE INTERFACE
# ---------------------------------------------------------------------------


class MetadataStore:
    """
    Keyed access to submission records, user records and the user index.

    Submission records are addressed two ways: by id (deterministic path
    from the id's partition) and by the storage path returned from
    list_submissions(). Writes always go to an explicit path so a record is
    rewritten where it was found.
    """

    def submission_path(self, submission_id: str) -> str:
        parsed = parse_submission_id(submission_id)
        if not parsed:
            raise InvalidSubmissionIdError(submission_id)
        return os.path.join(
            self._submissions_root(),
            f"{parsed['year']}-{parsed['month']}",
            f"{submission_id}.json",
        )

    def user_path(self, user_id: str) -> str:
        return os.path.join(self._users_root(), f"{user_id}.json")

    def load_submission(self, submission_id: str) -> dict:
        """Read one submission through its derived path."""
        path = self.submission_path(submission_id)
        record = self._read(path)
        if record is None:
            raise SubmissionNotFoundError(submission_id, f"file does not exist: {path}")
        return record

    def save_submission(self, submission: dict, path: Optional[str] = None) -> str:
        if path is None:
            path = self.submission_path(submission["id"])
        self._write(path, submission)
        return path

    def delete_submission(self, submission_id: str) -> str:
        path = self.submission_path(submission_id)
        self._delete(path)
        return path

    def list_submissions(self) -> list:
        """
        Return [(path, submission), ...] for every submission file.

        Walks every year-month partition in sorted order and skips files that
        do not match sub_*.json. A missing submissions root is an empty store.
        """
        raise NotImplementedError

    def load_user(self, user_id: str) -> Optional[dict]:
        return self._read(self.user_path(user_id))

    def save_user(self, user_id: str, user: dict) -> str:
        path = self.user_path(user_id)
        self._write(path, user)
        return path

    def load_user_index(self) -> Optional[dict]:
        return self._read(os.path.join(self._indexes_root(), USER_INDEX_FILE))

    # Storage primitives implemented by subclasses.

    def _submissions_root(self) -> str:
        raise NotImplementedError

    def _users_root(self) -> str:
        raise NotImplementedError

    def _indexes_root(self) -> str:
        raise NotImplementedError

    def _read(self, path: str) -> Optional[dict]:
        raise NotImplementedError

    def _write(self, path: str, record: dict) -> None:
        raise NotImplementedError

    def _delete(self, path: str) -> None:
        raise NotImplementedError


class FileMetadataStore(MetadataStore):
    """The metadata tree as JSON files on the local filesystem."""

    def __init__(self, root: str):
        self.root = root

    def _submissions_root(self) -> str:
        return os.path.join(self.root, SUBMISSIONS_DIR)

    def _users_root(self) -> str:
        return os.path.join(self.root, USERS_DIR)

    def _indexes_root(self) -> str:
        return os.path.join(self.root, INDEXES_DIR)

    def list_submissions(self) -> list:
        submissions_root = self._submissions_root()
        if not os.path.isdir(submissions_root):
            logger.info("No submissions directory at %s", submissions_root)
            return []

        records = []
        for year_month in sorted(os.listdir(submissions_root)):
            partition = os.path.join(submissions_root, year_month)
            if not os.path.isdir(partition):
                continue
            for filename in sorted(os.listdir(partition)):
                if not is_submission_filename(filename):
                    continue
                path = os.path.join(partition, filename)
                records.append((path, self._read(path)))
        return records

    def _read(self, path: str) -> Optional[dict]:
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            try:
                record = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedRecordError(path, e) from e
        # Every metadata file is a JSON object.
        if not isinstance(record, dict):
            raise MalformedRecordError(
                path, ValueError(f"expected a JSON object, got {type(record).__name__}")
            )
        return record

    def _write(self, path: str, record: dict) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2, ensure_ascii=False)

    def _delete(self, path: str) -> None:
        os.remove(path)


class InMemoryMetadataStore(MetadataStore):
    """
    Same contract as FileMetadataStore, backed by a dict of path -> record.

    Records are deep-copied on the way in and out so a caller mutating a
    loaded dict does not change the store until it saves.
    """

    def __init__(self, root: str = "metadata"):
        self.root = root
        self.files = {}

    def _submissions_root(self) -> str:
        return os.path.join(self.root, SUBMISSIONS_DIR)

    def _users_root(self) -> str:
        return os.path.join(self.root, USERS_DIR)

    def _indexes_root(self) -> str:
        return os.path.join(self.root, INDEXES_DIR)

    def put_user_index(self, index: dict) -> None:
        self._write(os.path.join(self._indexes_root(), USER_INDEX_FILE), index)

    def list_submissions(self) -> list:
        prefix = self._submissions_root() + os.sep
        records = []
        for path in sorted(self.files):
            if not path.startswith(prefix):
                continue
            if not is_submission_filename(os.path.basename(path)):
                continue
            records.append((path, self._read(path)))
        return records

    def _read(self, path: str) -> Optional[dict]:
        if path not in self.files:
            return None
        return copy.deepcopy(self.files[path])

    def _write(self, path: str, record: dict) -> None:
        self.files[path] = copy.deepcopy(record)

    def _delete(self, path: str) -> None:
        if path not in self.files:
            raise FileNotFoundError(path)
        del self.files[path]
