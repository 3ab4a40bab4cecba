#!/usr/bin/env python3
"""Copy text to the system clipboard using whichever tool is installed."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import List, Sequence

logger = logging.getLogger(__name__)

_CANDIDATES: Sequence[List[str]] = (
	["pbcopy"],
	["xclip", "-selection", "clipboard"],
	["xsel", "--clipboard", "--input"],
	["clip"],
)


def copy_to_clipboard(text: str) -> bool:
	"""Copy text to clipboard. Returns True on success."""
	for cmd in _CANDIDATES:
		if shutil.which(cmd[0]) is None:
			continue
		try:
			proc = subprocess.run(cmd, input=text.encode("utf-8"), capture_output=True, check=False)
		except OSError as e:
			logger.debug(f"{cmd[0]} failed: {e}")
			continue
		if proc.returncode == 0:
			return True
		logger.debug(f"{cmd[0]} exited with {proc.returncode}")
	return False
