#!/usr/bin/env python3
"""Pull request lookup capability used by the commit classifier.

The classifier only needs two questions answered: which pull request contains a
commit, and what that pull request's description says. Both are best-effort;
any failure is logged and reported as "nothing found".
"""

import logging
from typing import Optional, Protocol

from clients.github_client import GithubClient, GithubAuthError, GithubApiError
from utils.changelog_models import PullRequestRef

# Set up logging
logger = logging.getLogger(__name__)


class PRLookupError(Exception):
    """Raised when a PR lookup fails with a typed code for friendly handling."""
    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        super().__init__(message)
        self.code = code


class PRLookup(Protocol):
    def search_by_sha(self, owner: str, repo: str, sha: str) -> Optional[PullRequestRef]:
        ...

    def fetch_body(self, owner: str, repo: str, number: int) -> Optional[str]:
        ...


class NullPRLookup:
    """Lookup used when no GitHub credentials are configured."""

    def search_by_sha(self, owner: str, repo: str, sha: str) -> Optional[PullRequestRef]:
        return None

    def fetch_body(self, owner: str, repo: str, number: int) -> Optional[str]:
        return None


class GithubPRLookup:
    """Resolves pull requests through the GitHub REST API."""

    def __init__(self, client: GithubClient):
        self.client = client

    def find_pull_request(self, owner: str, repo: str, sha: str) -> Optional[PullRequestRef]:
        """Search for the pull request whose history contains a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            sha: Commit SHA

        Returns:
            The first search hit when it is a pull request, otherwise None

        Raises:
            PRLookupError: If the search request fails
        """
        query = f"repo:{owner}/{repo} sha:{sha}"
        try:
            data = self.client.search_issues(query)
        except (GithubAuthError, GithubApiError) as e:
            raise self._wrap(e, f"Failed to search pull requests for {sha[:12]}") from e

        items = data.get("items") or []
        if not items:
            return None
        first = items[0]
        # Plain issues come back from the same endpoint without a pull_request field
        ref = PullRequestRef(number=first.get("number", 0), is_pull_request="pull_request" in first)
        return ref if ref.is_pull_request else None

    def get_body(self, owner: str, repo: str, number: int) -> Optional[str]:
        """Fetch a pull request's description.

        Raises:
            PRLookupError: If fetching fails or the PR does not exist
        """
        try:
            data = self.client.get_pull_request(owner, repo, number)
        except (GithubAuthError, GithubApiError) as e:
            raise self._wrap(e, f"Failed to fetch PR {owner}/{repo}#{number}") from e
        return data.get("body")

    def search_by_sha(self, owner: str, repo: str, sha: str) -> Optional[PullRequestRef]:
        try:
            return self.find_pull_request(owner, repo, sha)
        except PRLookupError as e:
            # Rate limits and unindexed commits are expected here
            logger.debug(f"PR search for {sha[:12]} failed ({e.code}): {e}")
            return None

    def fetch_body(self, owner: str, repo: str, number: int) -> Optional[str]:
        try:
            return self.get_body(owner, repo, number)
        except PRLookupError as e:
            logger.debug(f"PR body fetch for #{number} failed ({e.code}): {e}")
            return None

    def close(self) -> None:
        self.client.close()

    def _wrap(self, exc: Exception, context: str) -> PRLookupError:
        code = self._map_error_to_code(exc)
        message = self._friendly_message_from_code(code, fallback=f"{context}: {exc}")
        return PRLookupError(message, code=code)

    def _map_error_to_code(self, exc: Exception) -> str:
        if isinstance(exc, GithubAuthError):
            return "UNAUTHORIZED"
        status = getattr(exc, "status_code", None)
        if status == 404:
            return "NOT_FOUND"
        if status in (403, 429):
            return "RATE_LIMIT"
        m = str(exc).lower()
        if "timeout" in m:
            return "TIMEOUT"
        if "network" in m or "connection" in m:
            return "NETWORK"
        return "UNKNOWN"

    def _friendly_message_from_code(self, code: str, *, fallback: str) -> str:
        mapping = {
            "TIMEOUT": "Timeout while contacting GitHub. Please retry or increase HTTP_TIMEOUT_S.",
            "NOT_FOUND": "Pull request not found. Please check the repository name.",
            "UNAUTHORIZED": "Access denied. Please check your GitHub token and its scopes.",
            "RATE_LIMIT": "Rate limit exceeded. Please wait a few minutes and retry.",
            "NETWORK": "Network error while contacting GitHub. Please retry.",
        }
        return mapping.get(code, fallback)


def build_pr_lookup(token: Optional[str] = None) -> Optional[GithubPRLookup]:
    """Create a GitHub-backed lookup when a token is available, else None."""
    try:
        client = GithubClient(token=token)
    except GithubAuthError:
        logger.info("No GitHub token configured; PR lookups disabled")
        return None
    return GithubPRLookup(client)
