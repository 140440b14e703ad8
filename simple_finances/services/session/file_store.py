"""
File-backed Session Store

Stores the access URL as a small JSON document in the user's home
directory, readable only by the owner.

    {"simplefin_access_url": "...", "created_at": "2024-01-01T00:00:00"}
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from simple_finances.services.session.interface import (
    Session,
    SessionStore,
    SessionStoreError,
)


ACCESS_URL_KEY = "simplefin_access_url"
CREATED_AT_KEY = "created_at"


class FileSessionStore(SessionStore):
    """Session store backed by a JSON file."""

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Session]:
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SessionStoreError(f"Could not read session file {self._path}: {e}")

        if not isinstance(data, dict) or not data.get(ACCESS_URL_KEY):
            return None

        try:
            return Session(
                access_url=data[ACCESS_URL_KEY],
                created_at=data.get(CREATED_AT_KEY) or datetime.utcnow(),
            )
        except ValidationError as e:
            raise SessionStoreError(f"Session file {self._path} is invalid: {e}")

    def save(self, session: Session) -> None:
        payload = {
            ACCESS_URL_KEY: session.access_url,
            CREATED_AT_KEY: session.created_at.isoformat(),
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload), encoding="utf-8")
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise SessionStoreError(f"Could not write session file {self._path}: {e}")

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise SessionStoreError(f"Could not remove session file {self._path}: {e}")
