#!/usr/bin/env python3
"""GitHub REST API client used to resolve pull requests for commits.

Only the two calls the release notes need are implemented: searching issues
and pull requests by commit SHA, and fetching a single pull request.
"""

import logging
from typing import Dict, Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from configs.config import Config

# Set up logging
logger = logging.getLogger(__name__)


class GithubAuthError(Exception):
    """Raised when GitHub API authentication fails."""
    pass


class GithubApiError(Exception):
    """Raised when GitHub API operations fail."""
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GithubClient:
    """Thin GitHub REST client with token auth and configurable retries."""

    def __init__(self, token: Optional[str] = None, timeout_s: Optional[int] = None,
                 base_url: Optional[str] = None, retries: Optional[int] = None):
        """Initialize GitHub client.

        Args:
            token: GitHub Personal Access Token (defaults to Config.GITHUB_TOKEN)
            timeout_s: Request timeout in seconds (defaults to Config.HTTP_TIMEOUT_S)
            base_url: API root (defaults to Config.GITHUB_API_URL)
            retries: urllib3 retry budget (defaults to Config.GITHUB_HTTP_RETRIES)

        Raises:
            GithubAuthError: If no valid token is provided
        """
        github_config = Config.get_github_config()
        self.token = token or github_config["token"]
        self.timeout_s = timeout_s or github_config["timeout_s"]
        self.base_url = (base_url or github_config["base_url"]).rstrip("/")
        max_retries = github_config["retries"] if retries is None else retries

        if not self.token:
            raise GithubAuthError("GitHub token is required (GITHUB_TOKEN or GITHUB_PAT env var)")

        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': github_config["user_agent"],
        })

        retry_strategy = Retry(
            total=max_retries,
            status_forcelist=[500, 502, 503, 504],
            backoff_factor=1,
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        logger.info("GitHub client initialized")

    def _get(self, path: str, *, what: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout_s)
        except requests.Timeout as e:
            raise GithubApiError(f"Timeout while fetching {what}: {e}")
        except requests.RequestException as e:
            raise GithubApiError(f"Network error while fetching {what}: {e}")

        if response.status_code == 401:
            raise GithubAuthError("Invalid GitHub token or insufficient permissions")
        elif response.status_code == 404:
            raise GithubApiError(f"{what} not found", status_code=404)
        elif response.status_code in (403, 429):
            raise GithubApiError(f"GitHub API rate limit or access denied: HTTP {response.status_code}",
                                 status_code=response.status_code)
        elif response.status_code != 200:
            raise GithubApiError(f"GitHub API error: HTTP {response.status_code}",
                                 status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise GithubApiError(f"Invalid JSON in response for {what}: {e}", status_code=response.status_code)
        if not isinstance(data, dict):
            raise GithubApiError(f"Unexpected response for {what}: expected an object", status_code=response.status_code)
        return data

    def search_issues(self, query: str) -> Dict[str, Any]:
        """Search issues and pull requests.

        Args:
            query: GitHub search query, e.g. 'repo:owner/name sha:abc123'

        Returns:
            Search result dictionary with an 'items' list

        Raises:
            GithubAuthError: If the token is rejected
            GithubApiError: If the API request fails
        """
        logger.debug(f"Searching issues: {query}")
        data = self._get("/search/issues", what=f"search '{query}'", params={"q": query})
        logger.debug(f"✓ Search returned {len(data.get('items') or [])} items")
        return data

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        """Fetch pull request metadata.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            Pull request metadata dictionary

        Raises:
            GithubAuthError: If the token is rejected
            GithubApiError: If the API request fails
        """
        logger.debug(f"Fetching PR metadata: {owner}/{repo}#{number}")
        data = self._get(f"/repos/{owner}/{repo}/pulls/{number}",
                         what=f"Pull request {owner}/{repo}#{number}")
        logger.debug(f"✓ Retrieved PR: #{data.get('number')} - {(data.get('title') or '')[:50]}...")
        return data

    def close(self) -> None:
        """Close the GitHub client session."""
        if self.session:
            self.session.close()
            logger.debug("GitHub client session closed")
