#!/usr/bin/env python3
"""Parser for dependency update lines.

Recognises the phrasings dependabot uses in commit subjects, commit bodies and
pull request descriptions:

    Updates `package` from 1.0 to 1.1 (#12)
    Bumps [package](https://...) from 1.0 to 1.1
    Bump package from 1.0 to 1.1 in /dir (#12)
"""

from __future__ import annotations

import re
from typing import Optional

from utils.changelog_models import ParsedUpdate

UPDATES_RE = re.compile(r"Updates `([^`]+)` from ([^ ]+) to ([^ ]+)(?: \(#([0-9]+)\))?")
BUMP_LINK_RE = re.compile(r"Bumps? \[([^\]]+)\]\([^)]+\) from ([^ ]+) to ([^ ]+)(?: \(#([0-9]+)\))?")
BUMP_SIMPLE_RE = re.compile(r"Bumps? ([^ ]+) from ([^ ]+) to ([^ ]+)(?: \(#([0-9]+)\))?")

PR_REF_RE = re.compile(r"\(#([0-9]+)\)")

# first match wins
_PATTERNS = (UPDATES_RE, BUMP_LINK_RE, BUMP_SIMPLE_RE)


def extract_pr_number(text: str) -> Optional[int]:
	"""Return the first '(#123)' reference in text, if any."""
	m = PR_REF_RE.search(text or "")
	return int(m.group(1)) if m else None


def parse_update_line(line: str) -> Optional[ParsedUpdate]:
	if not line:
		return None
	for pattern in _PATTERNS:
		m = pattern.search(line)
		if m:
			package, from_version, to_version, pr = m.groups()
			pr_number = int(pr) if pr else extract_pr_number(line)
			return ParsedUpdate(
				package=package,
				from_version=from_version,
				to_version=to_version,
				pr_number=pr_number,
			)
	return None
