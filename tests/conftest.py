"""Shared fixtures: a metadata tree on disk and the stores over it."""

import json

import pytest

from _submission_workflow.metadata_store import FileMetadataStore, InMemoryMetadataStore


@pytest.fixture
def metadata_root(tmp_path):
    root = tmp_path / "metadata"
    (root / "submissions").mkdir(parents=True)
    (root / "users").mkdir()
    (root / "indexes").mkdir()
    return root


@pytest.fixture
def store(metadata_root):
    return FileMetadataStore(str(metadata_root))


@pytest.fixture
def memory_store():
    return InMemoryMetadataStore()


@pytest.fixture
def write_json():
    def _write(path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_json():
    def _read(path):
        return json.loads(path.read_text(encoding="utf-8"))

    return _read
