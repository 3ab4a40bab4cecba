#!/usr/bin/env python3
"""Git history access through the git CLI.

Lists the commits since the last release, prepares the main branch, and
derives the GitHub owner/repository from the remote URL.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from utils.changelog_models import Commit

logger = logging.getLogger(__name__)

# ASCII unit/record separators never appear in commit messages
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%H%x1f%P%x1f%an%x1f%s%x1f%b%x1e"

_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/([^/.]+)(\.git)?")
_MERGE_PR_RE = re.compile(r"Merge pull request #([0-9]+)")


class GitError(Exception):
	"""Raised when a git command fails, with a typed code for friendly handling."""
	def __init__(self, message: str, code: str = "GIT_FAILED") -> None:
		super().__init__(message)
		self.code = code


@dataclass(frozen=True)
class CmdResult:
	code: int
	stdout: str
	stderr: str


def run(cmd: List[str], cwd: Optional[str] = None) -> CmdResult:
	logger.debug(f"Running: {' '.join(cmd)}")
	proc = subprocess.run(
		cmd,
		cwd=cwd,
		text=True,
		encoding="utf-8",
		errors="replace",
		capture_output=True,
		check=False,
	)
	return CmdResult(proc.returncode, proc.stdout.strip(), proc.stderr.strip())


def run_git(args: Sequence[str], cwd: Optional[str] = None) -> str:
	res = run(["git", *args], cwd=cwd)
	if res.code != 0:
		raise GitError(f"Git command failed: git {' '.join(args)}\nStderr: {res.stderr}")
	return res.stdout


def ensure_git_available() -> None:
	if shutil.which("git") is None:
		raise GitError("git is not installed or not in PATH", code="NO_GIT")


def discover_repo_root(path: str = ".") -> str:
	res = run(["git", "rev-parse", "--show-toplevel"], cwd=path)
	if res.code != 0:
		raise GitError("Failed to discover git repository", code="NOT_A_REPO")
	return res.stdout


def has_local_changes(repo_root: str) -> bool:
	unstaged = run(["git", "diff", "--quiet"], cwd=repo_root)
	staged = run(["git", "diff", "--cached", "--quiet"], cwd=repo_root)
	return unstaged.code != 0 or staged.code != 0


def fetch_tags(repo_root: str, remote: str = "origin") -> None:
	run_git(["fetch", remote, "--tags"], cwd=repo_root)


def current_branch(repo_root: str) -> str:
	return run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_root)


def checkout(repo_root: str, ref: str) -> None:
	run_git(["checkout", ref], cwd=repo_root)


def pull_ff_only(repo_root: str, remote: str, branch: str) -> None:
	run_git(["pull", "--ff-only", remote, branch], cwd=repo_root)


def latest_tag(repo_root: str) -> str:
	res = run(["git", "describe", "--tags", "--abbrev=0"], cwd=repo_root)
	if res.code != 0 or not res.stdout:
		raise GitError("No tags found in repository", code="NO_TAGS")
	return res.stdout


def resolve_tag(repo_root: str, tag: str) -> str:
	"""Return the commit a tag points to; the name must be a tag, not a branch."""
	res = run(["git", "rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}"], cwd=repo_root)
	if res.code != 0 or not res.stdout:
		raise GitError(f"'{tag}' exists but is not a tag", code="BAD_REF")
	return res.stdout


def resolve_commit(repo_root: str, ref: str) -> str:
	res = run(["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=repo_root)
	if res.code != 0 or not res.stdout:
		raise GitError(f"'{ref}' is not a valid commit", code="BAD_REF")
	return res.stdout


def parse_log(output: str) -> List[Commit]:
	commits: List[Commit] = []
	for record in output.split(_RECORD_SEP):
		record = record.strip("\n")
		if not record:
			continue
		parts = record.split(_FIELD_SEP, 4)
		if len(parts) < 4:
			logger.warning(f"Skipping malformed git log record: {record[:80]!r}")
			continue
		sha, parents, author, subject = parts[:4]
		body = parts[4] if len(parts) > 4 else ""
		commits.append(Commit(
			hash=sha.strip(),
			parents=parents.split(),
			author=author,
			subject=subject,
			body=body.strip(),
		))
	return commits


def list_commits(repo_root: str, since: str, head: str = "HEAD") -> List[Commit]:
	"""List commits reachable from head but not from since, newest first."""
	output = run_git(["log", f"--format={_LOG_FORMAT}", f"{since}..{head}"], cwd=repo_root)
	commits = parse_log(output)
	logger.debug(f"Found {len(commits)} commits between {since} and {head}")
	return commits


def merge_pr_hints(repo_root: str, commits: Sequence[Commit]) -> Dict[str, int]:
	"""Map commits merged through 'Merge pull request #N' merges to N.

	The commits brought in by a merge are those reachable from its second parent
	but not its first. A commit keeps the hint of the newest merge that brought it
	in.
	"""
	hints: Dict[str, int] = {}
	for commit in commits:
		if len(commit.parents) < 2:
			continue
		m = _MERGE_PR_RE.search(commit.subject)
		if not m:
			continue
		pr_number = int(m.group(1))
		first, second = commit.parents[0], commit.parents[1]
		res = run(["git", "rev-list", f"{first}..{second}"], cwd=repo_root)
		if res.code != 0:
			logger.debug(f"rev-list failed for merge {commit.hash[:12]}: {res.stderr}")
			continue
		for sha in res.stdout.split():
			hints.setdefault(sha, pr_number)
	return hints


def remote_url(repo_root: str, remote: str = "origin") -> str:
	res = run(["git", "remote", "get-url", remote], cwd=repo_root)
	return res.stdout if res.code == 0 else ""


def parse_github_remote(url: str) -> Tuple[str, str]:
	"""Extract (owner, repo) from a GitHub remote URL; ('', '') for other hosts."""
	m = _GITHUB_REMOTE_RE.search(url or "")
	if not m:
		return "", ""
	return m.group(1), m.group(2)
