"""Exit codes and output of the console entry points."""

import builtins
from datetime import datetime, timedelta, timezone

import pytest
import requests

from _submission_workflow import cli, config
from tests.helpers import FakeResponse, build_submission


@pytest.fixture(autouse=True)
def no_token(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", None)


def _root(metadata_root):
    return ["--metadata-root", str(metadata_root)]


def test_claim_success_prints_fill_count(store, metadata_root, capsys):
    store.save_submission(build_submission())
    code = cli.claim_main(["sub_2025_12_ABC", "bob", *_root(metadata_root)])
    assert code == 0
    assert "Slots filled: 1/3" in capsys.readouterr().out


def test_claim_failure_exits_1(store, metadata_root, capsys):
    code = cli.claim_main(["sub_2025_12_NOPE", "bob", *_root(metadata_root)])
    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_check_active_exits_1_when_active(store, metadata_root, write_json, capsys):
    store.save_submission(build_submission())
    write_json(
        metadata_root / "indexes" / "user_submissions.json",
        {"index": {"carol": {"activeSubmissionId": "sub_2025_12_ABC"}}},
    )
    assert cli.check_active_main(["carol", *_root(metadata_root)]) == 1
    err = capsys.readouterr().err
    assert "already has an active submission" in err
    assert "PR: #42" in err


def test_check_active_exits_0_when_none(metadata_root, capsys):
    assert cli.check_active_main(["carol", *_root(metadata_root)]) == 0
    assert "has no active submissions" in capsys.readouterr().out


def test_check_timeouts_reports_releases(store, metadata_root, capsys):
    submission = build_submission()
    claimed = datetime.now(timezone.utc) - timedelta(days=30)
    submission["reviewSlots"]["reviewers"] = [
        {"userId": "alice", "claimedAt": claimed.isoformat(), "status": "claimed"}
    ]
    submission["reviewSlots"]["filled"] = 1
    store.save_submission(submission)

    assert cli.check_timeouts_main(["--timeout-days=14", *_root(metadata_root)]) == 0
    out = capsys.readouterr().out
    assert "Released 1 timed-out review slot(s)" in out
    assert "Reviewer: alice" in out


def test_check_timeouts_with_nothing_to_do(metadata_root, capsys):
    assert cli.check_timeouts_main(_root(metadata_root)) == 0
    assert "No timed-out review slots found" in capsys.readouterr().out


def test_check_timeouts_malformed_record_exits_1(metadata_root):
    bad = metadata_root / "submissions" / "2025-12" / "sub_2025_12_BAD.json"
    bad.parent.mkdir(parents=True)
    bad.write_text("{")
    assert cli.check_timeouts_main(_root(metadata_root)) == 1


def test_cleanup_dry_run(store, metadata_root, capsys):
    store.save_submission(build_submission())
    assert cli.admin_cleanup_main(["sub_2025_12_ABC", "--dry-run", *_root(metadata_root)]) == 0
    assert "[dry run]" in capsys.readouterr().out
    assert (metadata_root / "submissions" / "2025-12" / "sub_2025_12_ABC.json").exists()


def test_cleanup_prompt_requires_yes(store, metadata_root, monkeypatch):
    store.save_submission(build_submission())
    monkeypatch.setattr(builtins, "input", lambda prompt="": "no")
    assert cli.admin_cleanup_main(["sub_2025_12_ABC", *_root(metadata_root)]) == 1
    assert (metadata_root / "submissions" / "2025-12" / "sub_2025_12_ABC.json").exists()


def test_cleanup_prompt_yes_deletes(store, metadata_root, monkeypatch, capsys):
    store.save_submission(build_submission())
    monkeypatch.setattr(builtins, "input", lambda prompt="": "yes")
    assert cli.admin_cleanup_main(["sub_2025_12_ABC", *_root(metadata_root)]) == 0
    assert not (metadata_root / "submissions" / "2025-12" / "sub_2025_12_ABC.json").exists()
    assert "set GITHUB_TOKEN" in capsys.readouterr().out


def test_cleanup_invalid_id_exits_1(metadata_root, capsys):
    assert cli.admin_cleanup_main(["bogus", "--force", *_root(metadata_root)]) == 1
    assert "Invalid submission ID format" in capsys.readouterr().err


def test_validate_images_exit_codes(tmp_path, monkeypatch, capsys):
    doc = tmp_path / "article.md"
    doc.write_text("![a](https://a.example/1.png)\n![b](https://spam.io/2.png)\n")
    monkeypatch.setattr(
        requests, "head",
        lambda url, timeout=None, allow_redirects=False: FakeResponse(200, headers={"content-type": "image/png"}),
    )

    assert cli.validate_images_main([str(doc)]) == 1
    assert "Domain is blacklisted" in capsys.readouterr().err

    doc.write_text("![a](https://a.example/1.png)\n")
    assert cli.validate_images_main([str(doc)]) == 0
    assert "All 1 image(s) are valid" in capsys.readouterr().out


def test_validate_images_missing_file(tmp_path):
    assert cli.validate_images_main([str(tmp_path / "missing.md")]) == 1


def test_check_timeouts_invalid_utf8_record_exits_1(metadata_root, capsys):
    bad = metadata_root / "submissions" / "2025-12" / "sub_2025_12_BAD.json"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b'{"title": "\xff"}')

    assert cli.check_timeouts_main(_root(metadata_root)) == 1
    assert "Malformed metadata record" in capsys.readouterr().err


def test_claim_on_non_object_record_exits_1(metadata_root, capsys):
    bad = metadata_root / "submissions" / "2025-12" / "sub_2025_12_ABC.json"
    bad.parent.mkdir(parents=True)
    bad.write_text("[]")

    assert cli.claim_main(["sub_2025_12_ABC", "bob", *_root(metadata_root)]) == 1
    assert "Malformed metadata record" in capsys.readouterr().err


def test_validate_images_tolerates_stray_bytes(tmp_path, capsys):
    doc = tmp_path / "article.md"
    doc.write_bytes(b"no images \xff here\n")
    assert cli.validate_images_main([str(doc)]) == 0
    assert "No images found" in capsys.readouterr().out


@pytest.mark.parametrize("main", [
    cli.admin_cleanup_main,
    cli.check_active_main,
    cli.claim_main,
    cli.validate_images_main,
])
def test_missing_arguments_exit_1(main, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "error:" in capsys.readouterr().err


def test_bad_timeout_value_exits_1(metadata_root):
    with pytest.raises(SystemExit) as exc_info:
        cli.check_timeouts_main(["--timeout-days=soon", *_root(metadata_root)])
    assert exc_info.value.code == 1
