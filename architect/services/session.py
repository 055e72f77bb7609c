"""Saved browser session (Playwright storage state).

The artifact is produced out of band by ``architect login``: a visible
browser is opened, the user signs in by hand, and the resulting cookies and
storage are written to disk. The scrape path only checks that the file
exists and hands its path to new browser contexts.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class SessionArtifact:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def storage_state(self) -> str | None:
        """Path to pass as ``storage_state``, or None when no usable session is saved.

        A present but corrupt file is ignored (with a warning) rather than
        letting the browser context fail to start.
        """
        return str(self.path) if self.is_valid() else None

    def is_valid(self) -> bool:
        """True if the artifact parses as a storage state snapshot."""
        if not self.exists():
            return False
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Session file {self.path} is unreadable: {e}")
            return False
        return isinstance(data, dict) and "cookies" in data

    def clear(self) -> bool:
        """Delete the artifact. Returns False if there was nothing to delete."""
        if not self.exists():
            return False
        self.path.unlink()
        logger.info(f"Session artifact removed: {self.path}")
        return True
