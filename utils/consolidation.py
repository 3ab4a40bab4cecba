#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from utils.changelog_models import ConsolidatedEntry
from utils.update_parser import parse_update_line

logger = logging.getLogger(__name__)


def _merge_into(entry: ConsolidatedEntry, from_version: str, to_version: str) -> None:
	if to_version == entry.from_version:
		# precedes the known range
		entry.from_version = from_version
	elif from_version == entry.to_version:
		# follows the known range
		entry.to_version = to_version
	else:
		# Disjoint range: only the PR number is kept
		logger.debug(
			f"Unchained update for {entry.package}: {from_version} -> {to_version} "
			f"does not touch {entry.from_version} -> {entry.to_version}"
		)


def consolidate_updates(lines: Iterable[str]) -> List[str]:
	"""Merge raw dependency lines into one line per package.

	Lines are processed in the order given; a new fact only extends the range
	accumulated so far when one of its versions equals the current boundary.
	Lines that do not parse as an update are appended verbatim after the package
	lines.
	"""
	entries: Dict[str, ConsolidatedEntry] = {}
	passthrough: List[str] = []

	for line in lines:
		parsed = parse_update_line(line)
		if parsed is None:
			passthrough.append(line)
			continue

		entry = entries.get(parsed.package)
		if entry is None:
			entries[parsed.package] = ConsolidatedEntry(
				package=parsed.package,
				from_version=parsed.from_version,
				to_version=parsed.to_version,
				pr_numbers={parsed.pr_number} if parsed.pr_number is not None else set(),
			)
			continue

		_merge_into(entry, parsed.from_version, parsed.to_version)
		if parsed.pr_number is not None:
			entry.pr_numbers.add(parsed.pr_number)

	return [entry.render() for entry in entries.values()] + passthrough
