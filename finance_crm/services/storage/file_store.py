"""
Persisted Session Store

DESIGN DECISION: The persisted variant keeps the session in a small JSON
file, the same role browser-local storage plays for a web client. The
file is replaced atomically (write to a temp file in the same directory,
then os.replace) so a reader never sees a half-written session.

The token is stored as-is; protect the file with filesystem permissions.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from finance_crm.models.session import Session
from finance_crm.services.storage.interface import (
    SessionStoreError,
    SessionStoreInterface,
)


class FileSessionStore(SessionStoreInterface):
    """
    Session persisted to a JSON file.

    A missing file means "no session". A corrupt file is treated the same
    way; the next successful login overwrites it.
    """

    def __init__(self, path: str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def set_session(self, session: Session) -> None:
        """Write the session atomically."""
        content = session.model_dump_json()
        directory = self._path.parent if str(self._path.parent) else Path(".")
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=self._path.name + ".",
                suffix=".tmp",
                dir=str(directory),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
            tmp_path = None
        except OSError as e:
            raise SessionStoreError(f"Failed to persist session to {self._path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    async def get_session(self) -> Optional[Session]:
        """Read the persisted session, if any."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SessionStoreError(f"Failed to read session from {self._path}: {e}") from e

        try:
            return Session.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            return None

    async def clear(self) -> None:
        """Remove the persisted session."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise SessionStoreError(f"Failed to remove session file {self._path}: {e}") from e
