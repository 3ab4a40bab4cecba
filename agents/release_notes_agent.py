#!/usr/bin/env python3
"""Release notes agent for generating changelogs from git history.

This agent walks the commits since the last release, classifies each one
(optionally resolving pull requests through GitHub), and renders a
deduplicated changelog with consolidated dependency updates.
"""

import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Config reads the environment at import time
load_dotenv()

from configs.config import Config  # noqa: E402
from utils import git_history  # noqa: E402
from utils.changelog_models import ClassificationOutcome, Commit, DependencyUpdate, GenericChange
from utils.commit_classifier import classify_commit
from utils.pr_lookup import PRLookup
from utils.release_notes_renderer import generate_release_notes

# Set up logging
logger = logging.getLogger(__name__)


class ReleaseNotesResult(BaseModel):
	"""Classified lines and the rendered changelog for one run."""

	dependency_lines: List[str] = Field(default_factory=list)
	other_lines: List[str] = Field(default_factory=list)
	text: str = ""


class ReleaseNotesAgent:
	"""Agent for classifying commits and rendering release notes."""

	def __init__(
		self,
		pr_lookup: Optional[PRLookup] = None,
		*,
		include_pr_numbers: bool = False,
		owner: str = "",
		repo: str = "",
		max_workers: Optional[int] = None,
	):
		"""Initialize the release notes agent.

		Args:
			pr_lookup: Optional GitHub lookup; None keeps classification offline
			include_pr_numbers: Keep and add PR numbers in output lines
			owner: GitHub repository owner used for lookups
			repo: GitHub repository name used for lookups
			max_workers: Concurrent classifications (defaults to Config.PR_LOOKUP_WORKERS)
		"""
		self.pr_lookup = pr_lookup
		self.include_pr_numbers = include_pr_numbers
		self.owner = owner
		self.repo = repo
		self.max_workers = max(1, max_workers or Config.PR_LOOKUP_WORKERS)
		logger.info("Release notes agent initialized")

	def classify(self, commit: Commit, pr_hint: Optional[int] = None) -> ClassificationOutcome:
		return classify_commit(
			commit,
			self.include_pr_numbers,
			pr_hint=pr_hint,
			pr_lookup=self.pr_lookup,
			owner=self.owner,
			repo=self.repo,
		)

	def classify_all(
		self, commits: Sequence[Commit], pr_hints: Optional[Mapping[str, int]] = None
	) -> List[ClassificationOutcome]:
		"""Classify commits, returning outcomes in the same order as the input.

		Lookups for different commits are independent, so they run on a thread
		pool when a PR lookup is configured. Consolidation depends on history
		order, so results are returned in input order, not completion order.
		"""
		hints = pr_hints or {}
		if self.pr_lookup is None or self.max_workers == 1 or len(commits) < 2:
			return [self.classify(c, hints.get(c.hash)) for c in commits]

		with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
			return list(executor.map(lambda c: self.classify(c, hints.get(c.hash)), commits))

	def build(
		self, commits: Sequence[Commit], pr_hints: Optional[Mapping[str, int]] = None
	) -> ReleaseNotesResult:
		"""Classify commits and render the release notes.

		Args:
			commits: Commits in history traversal order
			pr_hints: Optional mapping of commit SHA to an already known PR number

		Returns:
			ReleaseNotesResult with the raw lines and the rendered text
		"""
		dependency_lines: List[str] = []
		other_lines: List[str] = []
		for outcome in self.classify_all(commits, pr_hints):
			if isinstance(outcome, DependencyUpdate):
				dependency_lines.extend(outcome.lines)
			elif isinstance(outcome, GenericChange):
				other_lines.append(outcome.line)

		logger.info(f"✓ Classified {len(commits)} commits: "
				   f"{len(dependency_lines)} dependency lines, {len(other_lines)} other changes")
		return ReleaseNotesResult(
			dependency_lines=dependency_lines,
			other_lines=other_lines,
			text=generate_release_notes(dependency_lines, other_lines),
		)

	def close(self) -> None:
		"""Close the agent and cleanup resources."""
		close = getattr(self.pr_lookup, "close", None)
		if close:
			close()
		logger.info("Release notes agent closed")


def _prepare_repository(repo_root: str, *, terse: bool) -> None:
	"""Fetch tags and fast-forward the main branch; failures are tolerated in terse mode."""
	git = Config.get_git_config()

	def _step(fn, *args):
		try:
			return fn(*args)
		except git_history.GitError as e:
			if not terse:
				raise
			logger.debug(f"Ignoring git failure in terse mode: {e}")
			return None

	_step(git_history.fetch_tags, repo_root, git["remote"])
	if _step(git_history.current_branch, repo_root) != git["main_branch"]:
		_step(git_history.checkout, repo_root, git["main_branch"])
	_step(git_history.pull_ff_only, repo_root, git["remote"], git["main_branch"])


def _resolve_start(repo_root: str, *, tag: Optional[str], commit: Optional[str]):
	"""Return (sha, display name) of the ref the release notes start from."""
	if commit:
		return git_history.resolve_commit(repo_root, commit), commit
	if tag:
		return git_history.resolve_tag(repo_root, tag), tag
	name = git_history.latest_tag(repo_root)
	return git_history.resolve_tag(repo_root, name), name


def main():
	"""CLI entry point for the release notes agent."""
	import argparse

	from utils.clipboard import copy_to_clipboard
	from utils.pr_lookup import build_pr_lookup

	parser = argparse.ArgumentParser(
		prog="git-releasenotes",
		description="Generate release notes from the commits since the last release tag",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  git-releasenotes
  git-releasenotes -p -c
  git-releasenotes -T -t v1.4.0
  git-releasenotes -C 1a2b3c4 -x
		"""
	)
	parser.add_argument("-c", dest="clipboard", action="store_true", help="Copy output to clipboard")
	parser.add_argument("-p", dest="include_pr_numbers", action="store_true", help="Include PR numbers in output")
	parser.add_argument("-x", dest="show_raw_commits", action="store_true",
						help="List raw commits that form the basis of the output")
	parser.add_argument("-X", dest="debug_mode", action="store_true", help="Enable debug logging")
	parser.add_argument("-T", "--terse", action="store_true",
						help="Output only the release notes, no headers or other text")
	start = parser.add_mutually_exclusive_group()
	start.add_argument("-t", dest="tag", help="Specify a tag to use instead of latest")
	start.add_argument("-C", dest="commit", help="Specify a commit hash to use instead of tag")

	args = parser.parse_args()

	# Set up logging
	logging.basicConfig(
		level=logging.DEBUG if args.debug_mode else logging.INFO,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
		stream=sys.stderr,
	)

	# Keep stdout for the notes unless debugging
	if not args.debug_mode:
		for name in ("agents", "utils", "clients", "urllib3"):
			logging.getLogger(name).setLevel(logging.WARNING)
		logging.getLogger(__name__).setLevel(logging.WARNING)

	agent = None
	try:
		git_history.ensure_git_available()
		repo_root = git_history.discover_repo_root(".")

		if not args.terse and git_history.has_local_changes(repo_root):
			print("You have local changes. Commit or stash them before running.", file=sys.stderr)
			sys.exit(1)

		_prepare_repository(repo_root, terse=args.terse)
		since_sha, display_ref = _resolve_start(repo_root, tag=args.tag, commit=args.commit)

		commits = git_history.list_commits(repo_root, since_sha)
		if not commits:
			logger.warning(f"No commits found since {display_ref}")

		if args.show_raw_commits:
			for c in commits:
				print(f"{c.hash} {c.subject} ({c.author})")
			sys.exit(0)

		if not args.terse:
			print()
			print(f"Latest release: {display_ref}")
			print()
			print(f"Commits since {display_ref}:")
			print("----------------------------------------")

		remote = Config.get_git_config()["remote"]
		owner, repo = git_history.parse_github_remote(git_history.remote_url(repo_root, remote))
		pr_lookup = build_pr_lookup(Config.get_github_config()["token"])

		agent = ReleaseNotesAgent(
			pr_lookup,
			include_pr_numbers=args.include_pr_numbers,
			owner=owner,
			repo=repo,
		)
		pr_hints: Dict[str, int] = git_history.merge_pr_hints(repo_root, commits)
		result = agent.build(commits, pr_hints)

		if result.text:
			print(result.text)

		if args.clipboard and not copy_to_clipboard(result.text):
			print("Failed to copy to clipboard: no clipboard tool found (pbcopy, xclip, xsel, clip)",
				  file=sys.stderr)
		sys.exit(0)

	except git_history.GitError as e:
		print(f"Error: {e}", file=sys.stderr)
		if args.debug_mode:
			logger.exception("Detailed error information:")
		sys.exit(1)

	except KeyboardInterrupt:
		print("\nOperation cancelled by user", file=sys.stderr)
		sys.exit(1)

	except Exception as e:
		# Unexpected error
		print(f"Unexpected error: {e}", file=sys.stderr)
		if args.debug_mode:
			logger.exception("Detailed error information:")
		else:
			print("Use -X for more details", file=sys.stderr)
		sys.exit(1)

	finally:
		if agent:
			agent.close()


if __name__ == "__main__":
	main()
