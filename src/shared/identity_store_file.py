import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from src.specs.models.post import IdentityLink

# Default state location, outside the app directory.
_DEFAULT_STATE_BASE = Path(tempfile.gettempdir()) / "notion-posts-runtime"


class FileIdentityLinkStore:
    """JSON-file identity links for local development."""

    def __init__(self, state_dir: Optional[Path] = None):
        self._state_dir = Path(state_dir or os.getenv("IDENTITY_STATE_DIR", str(_DEFAULT_STATE_BASE)))
        self._state_file = self._state_dir / "identity_links.json"

    def _read_all(self) -> Dict[str, dict]:
        if not self._state_file.exists():
            return {}
        try:
            return json.loads(self._state_file.read_text())
        except ValueError:
            return {}

    def _write_all(self, data: Dict[str, dict]) -> None:
        self._state_dir.mkdir(parents=True, exist_ok=True)
        self._state_file.write_text(json.dumps(data))

    async def get(self, local_user_id: str) -> Optional[IdentityLink]:
        entry = self._read_all().get(local_user_id)
        if not entry:
            return None
        return IdentityLink(
            localUserId=local_user_id,
            remoteUserId=entry.get("notionUserId"),
            lastSyncedAt=entry.get("lastSyncedAt"),
        )

    async def set(self, link: IdentityLink, merge: bool = True) -> None:
        data = self._read_all()
        entry = data.get(link.localUserId, {}) if merge else {}
        entry.update(
            {
                "localUserId": link.localUserId,
                "notionUserId": link.remoteUserId,
                "lastSyncedAt": link.lastSyncedAt.isoformat() if link.lastSyncedAt else None,
            }
        )
        data[link.localUserId] = entry
        self._write_all(data)
