#!/usr/bin/env python3
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from utils.consolidation import consolidate_updates

DEPENDENCIES_HEADER = "## Dependencies updated by dependabot:"
OTHER_CHANGES_HEADER = "## Other changes:"
MAJOR_WARNING_PREFIX = "⚠ WARNING: Major version changes detected: "

_UPDATE_RE = re.compile(r"Updates `([^`]+)` from ([^ ]+) to ([^ ]+)")
_MAJOR_RE = re.compile(r"[0-9]+")
MAX_MAJOR = 2**32 - 1


def _major(version: str) -> Optional[int]:
	head = version.split(".", 1)[0]
	if not _MAJOR_RE.fullmatch(head):
		return None
	major = int(head)
	# majors beyond 32 bits are treated as non-numeric
	return major if major <= MAX_MAJOR else None


def major_version_changes(lines: Sequence[str]) -> List[str]:
	"""Return sorted 'pkg: from → to' records for updates that raise the major version."""
	changes: List[str] = []
	for line in lines:
		m = _UPDATE_RE.search(line)
		if not m:
			continue
		pkg, from_version, to_version = m.groups()
		from_major = _major(from_version)
		to_major = _major(to_version)
		# non-numeric majors skip the check
		if from_major is None or to_major is None:
			continue
		if to_major > from_major:
			changes.append(f"{pkg}: {from_version} → {to_version}")
	return sorted(changes)


def generate_release_notes(dependency_lines: Sequence[str], other_lines: Sequence[str]) -> str:
	out_lines: List[str] = []

	if dependency_lines:
		consolidated = consolidate_updates(dependency_lines)
		majors = major_version_changes(consolidated)
		if majors:
			out_lines.append(MAJOR_WARNING_PREFIX + ", ".join(majors))
			out_lines.append("")
		out_lines.append(DEPENDENCIES_HEADER)
		out_lines.append("")
		out_lines.extend(sorted(consolidated))
		out_lines.append("")

	if other_lines:
		out_lines.append(OTHER_CHANGES_HEADER)
		out_lines.extend(sorted(dict.fromkeys(other_lines)))

	return "\n".join(out_lines)
