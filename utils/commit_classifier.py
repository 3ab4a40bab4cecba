#!/usr/bin/env python3
"""Commit classification for release notes.

Each commit becomes exactly one of:

- ``Skip``: release housekeeping commits ("Setting new snapshot version ...");
- ``DependencyUpdate``: one or more raw dependency lines, taken from the
  commit body, the pull request description or, failing both, the subject;
- ``GenericChange``: a single ``- subject (author)`` line.

The PR number is resolved from the caller's hint, the subject, or a GitHub
search by SHA. Network lookups are best-effort: when they fail the commit is
classified from what is available locally.
"""

import logging
import re
from typing import List, Optional

from utils.changelog_models import (
    ClassificationOutcome, Commit, DependencyUpdate, GenericChange, Skip
)
from utils.pr_lookup import PRLookup

# Set up logging
logger = logging.getLogger(__name__)

SNAPSHOT_MARKER = "setting new snapshot version"
DEPENDENCY_AUTHOR_MARKER = "dependabot"
UPDATE_LINE_PREFIX = "updates `"

MERGE_PR_RE = re.compile(r"Merge pull request #([0-9]+)")
GROUP_BUMP_PR_RE = re.compile(r"Bump the.*\(#([0-9]+)\) \(")
SUBJECT_PR_RE = re.compile(r"\(#([0-9]+)\)")
PR_SUFFIX_RE = re.compile(r" \(#[0-9]+\)")

# tried in order on the subject
_SUBJECT_PR_PATTERNS = (MERGE_PR_RE, GROUP_BUMP_PR_RE, SUBJECT_PR_RE)


def _mentions_pr(text: str, pr_number: int) -> bool:
    return re.search(rf"#{pr_number}(?![0-9])", text) is not None


def _with_pr_suffix(line: str, pr_number: Optional[int], include_pr_numbers: bool) -> str:
    if include_pr_numbers and pr_number is not None and not _mentions_pr(line, pr_number):
        return f"{line} (#{pr_number})"
    return line


def pr_number_from_subject(subject: str) -> Optional[int]:
    for pattern in _SUBJECT_PR_PATTERNS:
        m = pattern.search(subject)
        if m:
            return int(m.group(1))
    return None


def resolve_pr_number(
    commit: Commit,
    pr_hint: Optional[int] = None,
    pr_lookup: Optional[PRLookup] = None,
    owner: str = "",
    repo: str = "",
) -> Optional[int]:
    """Resolve the pull request a commit belongs to.

    Args:
        commit: Commit being classified
        pr_hint: PR number already known to the caller (e.g. from a merge commit)
        pr_lookup: Optional GitHub lookup used to search by SHA
        owner: Repository owner, required for the SHA search
        repo: Repository name, required for the SHA search

    Returns:
        The PR number, or None when nothing could be resolved
    """
    if pr_hint is not None:
        return pr_hint

    pr_number = pr_number_from_subject(commit.subject)
    if pr_number is not None:
        return pr_number

    if pr_lookup is not None and owner and repo:
        ref = pr_lookup.search_by_sha(owner, repo, commit.hash)
        if ref is not None and ref.is_pull_request:
            logger.debug(f"✓ Resolved {commit.hash[:12]} to PR #{ref.number} via search")
            return ref.number
    return None


def _lines(text: Optional[str]) -> List[str]:
    # Split on \n only; form feeds and other separators stay inside a line
    return [line[:-1] if line.endswith("\r") else line for line in (text or "").split("\n")]


def update_lines_from_body(body: str, pr_number: Optional[int], include_pr_numbers: bool) -> List[str]:
    """Collect 'Updates `pkg` from X to Y' lines from a dependabot commit body."""
    lines = []
    for raw in _lines(body):
        clean = raw.strip()
        if clean.lower().startswith(UPDATE_LINE_PREFIX):
            lines.append(_with_pr_suffix(f"- {clean}", pr_number, include_pr_numbers))
    return lines


def _is_table_noise(line: str) -> bool:
    return line.startswith("|") or "|---" in line or "Bumps the" in line


def update_lines_from_pr_body(body: str, pr_number: int, include_pr_numbers: bool) -> List[str]:
    """Collect update lines from a PR description, skipping markdown tables.

    Grouped dependabot PRs list every package in a table and repeat the
    'Updates `pkg`' sentences below it; only the sentences are used.
    """
    lines = []
    for raw in _lines(body):
        if _is_table_noise(raw):
            continue
        if raw.lstrip().lower().startswith(UPDATE_LINE_PREFIX):
            lines.append(_with_pr_suffix(f"- {raw.strip()}", pr_number, include_pr_numbers))
    return lines


def clean_subject(subject: str, pr_number: Optional[int], include_pr_numbers: bool) -> str:
    if not include_pr_numbers:
        return PR_SUFFIX_RE.sub("", subject)
    if pr_number is not None and not _mentions_pr(subject, pr_number):
        return f"{subject.strip()} (#{pr_number})"
    return subject


def classify_commit(
    commit: Commit,
    include_pr_numbers: bool,
    pr_hint: Optional[int] = None,
    pr_lookup: Optional[PRLookup] = None,
    owner: str = "",
    repo: str = "",
) -> ClassificationOutcome:
    """Decide which changelog entry, if any, a commit produces.

    Args:
        commit: Commit to classify
        include_pr_numbers: Whether PR numbers are kept and added to output lines
        pr_hint: PR number already known to the caller
        pr_lookup: Optional GitHub lookup for SHA search and PR descriptions
        owner: Repository owner for lookups
        repo: Repository name for lookups

    Returns:
        Skip, DependencyUpdate or GenericChange
    """
    if SNAPSHOT_MARKER in commit.subject.lower():
        return Skip()

    is_dependency = DEPENDENCY_AUTHOR_MARKER in commit.author.lower()
    pr_number = resolve_pr_number(commit, pr_hint, pr_lookup, owner, repo)

    if is_dependency:
        # The body is enough for plain dependabot commits; no PR fetch needed
        lines = update_lines_from_body(commit.body, pr_number, include_pr_numbers)
        if lines:
            return DependencyUpdate(lines=lines)

    if pr_number is not None and pr_lookup is not None and owner and repo:
        body = pr_lookup.fetch_body(owner, repo, pr_number)
        lines = update_lines_from_pr_body(body or "", pr_number, include_pr_numbers)
        if lines:
            logger.debug(f"✓ Found {len(lines)} update lines in PR #{pr_number}")
            return DependencyUpdate(lines=lines)

    cleaned = clean_subject(commit.subject, pr_number, include_pr_numbers)
    if is_dependency:
        return DependencyUpdate(lines=[f"- {cleaned}"])
    return GenericChange(line=f"- {cleaned} ({commit.author})")
