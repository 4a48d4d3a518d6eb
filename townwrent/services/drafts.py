"""
Persistence for the in-progress listing form.

Drafts are JSON files keyed by an opaque per-browser draft id, so a landlord
who is sent to sign in halfway through the wizard finds the form as they left it.
Failures are logged and reported as "not saved" / "no draft" rather than raised.
"""

from pathlib import Path
from typing import Any, Dict, Optional
import aiofiles
import aiofiles.os
import json
import logging
import re

from townwrent.config import settings

logger = logging.getLogger(__name__)

_DRAFT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def is_valid_draft_id(draft_id: Optional[str]) -> bool:
    return bool(draft_id) and bool(_DRAFT_ID_PATTERN.match(draft_id))


class DraftStore:
    def __init__(self, directory: Optional[str] = None, key: Optional[str] = None):
        self.directory = Path(directory or settings.draft_dir)
        self.key = key or settings.draft_key

    def _path(self, draft_id: str) -> Path:
        if not is_valid_draft_id(draft_id):
            raise ValueError(f"Invalid draft id: {draft_id!r}")
        return self.directory / draft_id / f"{self.key}.json"

    async def save(self, draft_id: str, data: Dict[str, Any]) -> bool:
        """
        Store the draft, replacing any previous one.

        Returns:
            True when the draft was written
        """
        try:
            path = self._path(draft_id)
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, default=str))
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving form data for draft {draft_id}: {e}")
            return False

    async def load(self, draft_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored draft, or None when there is none or it cannot be read."""
        try:
            path = self._path(draft_id)
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Error loading form data for draft {draft_id}: {e}")
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Error loading form data for draft {draft_id}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed draft {draft_id}: expected an object")
            return None
        return data

    async def clear(self, draft_id: str) -> bool:
        """
        Returns:
            True if a draft was removed
        """
        try:
            await aiofiles.os.remove(self._path(draft_id))
            return True
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Error clearing form data for draft {draft_id}: {e}")
            return False
