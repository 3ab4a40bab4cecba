"""
Tests for git history access.
"""

from unittest.mock import patch

import pytest

from utils import git_history
from utils.changelog_models import Commit
from utils.git_history import CmdResult, GitError


def _record(sha, parents, author, subject, body=""):
    return "\x1f".join([sha, parents, author, subject, body]) + "\x1e"


def test_parse_log_reads_records_in_order():
    output = "\n".join([
        _record("c3", "c2 f1", "Kari", "Merge pull request #9 from org/feature"),
        _record("c2", "c1", "dependabot[bot]", "Bump lib from 1 to 2", "Bumps lib.\n\nUpdates `lib` from 1 to 2\n"),
        _record("c1", "", "Ola", "Initial commit"),
    ])

    commits = git_history.parse_log(output)

    assert [c.hash for c in commits] == ["c3", "c2", "c1"]
    assert commits[0].parents == ["c2", "f1"]
    assert commits[1].body == "Bumps lib.\n\nUpdates `lib` from 1 to 2"
    assert commits[2].parents == []


def test_parse_log_skips_malformed_records():
    assert git_history.parse_log("garbage\x1e") == []


def test_list_commits_uses_range():
    with patch.object(git_history, "run", return_value=CmdResult(0, _record("c2", "c1", "Kari", "Fix"), "")) as run:
        commits = git_history.list_commits("/repo", "v1.0")

    assert commits == [Commit(hash="c2", parents=["c1"], author="Kari", subject="Fix", body="")]
    args = run.call_args[0][0]
    assert args[:2] == ["git", "log"]
    assert args[-1] == "v1.0..HEAD"


def test_run_git_raises_on_failure():
    with patch.object(git_history, "run", return_value=CmdResult(128, "", "fatal: bad")):
        with pytest.raises(GitError, match="fatal: bad"):
            git_history.run_git(["fetch"])


def test_latest_tag_without_tags():
    with patch.object(git_history, "run", return_value=CmdResult(128, "", "fatal: No names found")):
        with pytest.raises(GitError) as excinfo:
            git_history.latest_tag("/repo")
    assert excinfo.value.code == "NO_TAGS"


def test_resolve_tag_rejects_non_tags():
    with patch.object(git_history, "run", return_value=CmdResult(1, "", "")):
        with pytest.raises(GitError, match="is not a tag"):
            git_history.resolve_tag("/repo", "main")


def test_has_local_changes():
    with patch.object(git_history, "run", side_effect=[CmdResult(0, "", ""), CmdResult(1, "", "")]):
        assert git_history.has_local_changes("/repo")
    with patch.object(git_history, "run", side_effect=[CmdResult(0, "", ""), CmdResult(0, "", "")]):
        assert not git_history.has_local_changes("/repo")


def test_merge_pr_hints_maps_second_parent_commits():
    commits = [
        Commit(hash="m2", parents=["m1", "b2"], author="Kari", subject="Merge pull request #20 from org/b"),
        Commit(hash="b2", parents=["b1"], author="Kari", subject="Work"),
        Commit(hash="m1", parents=["c0", "a1"], author="Kari", subject="Merge branch 'x'"),
        Commit(hash="c0", parents=["c"], author="Kari", subject="Plain"),
    ]

    with patch.object(git_history, "run", return_value=CmdResult(0, "b2\nb1", "")) as run:
        hints = git_history.merge_pr_hints("/repo", commits)

    assert hints == {"b2": 20, "b1": 20}
    run.assert_called_once_with(["git", "rev-list", "m1..b2"], cwd="/repo")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("git@github.com:octo/hello-world.git", ("octo", "hello-world")),
        ("https://github.com/octo/hello-world.git", ("octo", "hello-world")),
        ("https://github.com/octo/hello-world", ("octo", "hello-world")),
        ("https://gitlab.com/octo/hello-world.git", ("", "")),
        ("", ("", "")),
    ],
)
def test_parse_github_remote(url, expected):
    assert git_history.parse_github_remote(url) == expected
