"""FileBackend: MemoryBackend persisted to a JSON snapshot file.

The snapshot holds the world state and every key's revision log. Each
commit writes the prospective snapshot to a temp file and renames it
over the old one before the write set becomes visible, so a failed
write leaves both the file and the in-memory state untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from ledgerstore.backends.memory import MemoryBackend, apply_modifications
from ledgerstore.errors import InfrastructureError
from ledgerstore.state_backend import KeyModification

logger = logging.getLogger(__name__)

_SNAPSHOT_VERSION = 1


class FileBackend(MemoryBackend):
    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self._path = Path(path)
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No ledger snapshot at %s; starting empty.", self._path)
            return
        except OSError as e:
            raise InfrastructureError(f"Failed to read ledger snapshot {self._path}: {e}") from e

        try:
            doc = json.loads(text)
            state = {str(k): str(v) for k, v in doc["state"].items()}
            history = {
                str(k): [KeyModification.from_dict(m) for m in mods]
                for k, mods in doc["history"].items()
            }
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise InfrastructureError(f"Ledger snapshot {self._path} is corrupt: {e}") from e

        self._state = state
        self._history = history
        logger.info("Loaded %d live key(s) from %s.", len(state), self._path)

    async def _persist(self, mods: dict[str, KeyModification]) -> None:
        state = dict(self._state)
        history = {k: list(v) for k, v in self._history.items()}
        apply_modifications(state, history, mods)
        text = json.dumps({
            "v": _SNAPSHOT_VERSION,
            "state": state,
            "history": {
                key: [m.to_dict() for m in entries]
                for key, entries in history.items()
            },
        }, indent=2)
        await asyncio.to_thread(self._write, text)

    def _write(self, text: str) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise InfrastructureError(f"Failed to write ledger snapshot {self._path}: {e}") from e
