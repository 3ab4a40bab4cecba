#!/usr/bin/env python3
"""Pydantic models for commits, parsed updates and classification outcomes.

This module defines the data passed between the classifier, the consolidation
engine and the release notes renderer.
"""

from typing import List, Literal, Optional, Set, Union
from pydantic import BaseModel, Field


class Commit(BaseModel):
    """Read-only snapshot of a single commit from the history source."""

    hash: str = Field(..., description="Full commit SHA")
    subject: str = Field(..., description="First line of the commit message")
    body: str = Field("", description="Commit message body without the subject")
    author: str = Field(..., description="Author name")
    parents: List[str] = Field(default_factory=list, description="Parent commit SHAs")

    model_config = {"extra": "ignore", "frozen": True}


class ParsedUpdate(BaseModel):
    """A 'package upgraded from X to Y' fact extracted from one line."""

    package: str = Field(..., description="Package name")
    from_version: str = Field(..., description="Version before the update")
    to_version: str = Field(..., description="Version after the update")
    pr_number: Optional[int] = Field(None, description="Pull request the update came from")

    model_config = {"frozen": True}


class ConsolidatedEntry(BaseModel):
    """Merged version range for one package across every update of a run."""

    package: str
    from_version: str
    to_version: str
    pr_numbers: Set[int] = Field(default_factory=set)

    def render(self) -> str:
        """Render the entry as a changelog bullet, newest PR first."""
        line = f"- Updates `{self.package}` from {self.from_version} to {self.to_version}"
        if self.pr_numbers:
            prs = ", ".join(f"#{n}" for n in sorted(self.pr_numbers, reverse=True))
            line += f"  ({prs})"
        return line


class Skip(BaseModel):
    """Commit produces no changelog output."""

    kind: Literal["skip"] = "skip"


class DependencyUpdate(BaseModel):
    """Commit produced one or more raw dependency update lines."""

    kind: Literal["dependency"] = "dependency"
    lines: List[str] = Field(default_factory=list)


class GenericChange(BaseModel):
    """Commit produced a single '- subject (author)' line."""

    kind: Literal["generic"] = "generic"
    line: str


ClassificationOutcome = Union[Skip, DependencyUpdate, GenericChange]


class PullRequestRef(BaseModel):
    """Search hit for a commit SHA; only pull requests carry a PR number we use."""

    number: int
    is_pull_request: bool = False

    model_config = {"extra": "ignore"}
