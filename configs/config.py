import os
from typing import Dict, Any

class Config:
	"""Configuration for the release notes generator."""

	# GitHub REST Configuration
	GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip('/')
	GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("GITHUB_PAT")
	HTTP_TIMEOUT_S = int(os.getenv("HTTP_TIMEOUT_S", "30"))
	# Lookups are single-attempt; raise to let urllib3 retry transient statuses
	GITHUB_HTTP_RETRIES = int(os.getenv("GITHUB_HTTP_RETRIES", "0"))
	USER_AGENT = os.getenv("GITHUB_USER_AGENT", "git-releasenotes/1.0")

	# Classification
	PR_LOOKUP_WORKERS = int(os.getenv("PR_LOOKUP_WORKERS", "8"))

	# Repository preparation
	RELEASE_MAIN_BRANCH = os.getenv("RELEASE_MAIN_BRANCH", "main")
	GIT_REMOTE = os.getenv("GIT_REMOTE", "origin")

	@classmethod
	def get_github_config(cls) -> Dict[str, Any]:
		"""Get GitHub configuration for the REST client."""
		return {
			"base_url": cls.GITHUB_API_URL,
			"token": cls.GITHUB_TOKEN,
			"timeout_s": cls.HTTP_TIMEOUT_S,
			"retries": cls.GITHUB_HTTP_RETRIES,
			"user_agent": cls.USER_AGENT,
		}

	@classmethod
	def get_git_config(cls) -> Dict[str, Any]:
		return {
			"main_branch": cls.RELEASE_MAIN_BRANCH,
			"remote": cls.GIT_REMOTE,
		}
