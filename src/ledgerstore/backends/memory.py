"""In-process StateBackend: world state and per-key history held in dicts.

Stands in for the ledger's own serialization when the store runs
outside a peer: per-key asyncio locks give one in-flight mutation per
key, and a commit lock applies each transaction's write set as a unit.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Iterable

from ledgerstore.errors import InfrastructureError, InvalidArgumentError
from ledgerstore.state_backend import KeyModification, KeyValue, ScanIterator, new_tx_id

logger = logging.getLogger(__name__)


def apply_modifications(
    state: dict[str, str],
    history: dict[str, list[KeyModification]],
    mods: dict[str, KeyModification],
) -> None:
    """Apply a committed write set to ``state`` and append it to ``history``."""
    for key, mod in mods.items():
        if mod.is_delete or mod.value is None:
            state.pop(key, None)
        else:
            state[key] = mod.value
        history.setdefault(key, []).append(mod)


class MemoryTransaction:
    """Buffered write set with read-your-writes semantics."""

    def __init__(self, backend: MemoryBackend, tx_id: str) -> None:
        self.tx_id = tx_id
        self._backend = backend
        self.writes: dict[str, str | None] = {}

    async def get_state(self, key: str) -> str | None:
        if key in self.writes:
            return self.writes[key]
        return await self._backend.get_state(key)

    async def put_state(self, key: str, value: str) -> None:
        if not key:
            raise InvalidArgumentError("key must be a non-empty string")
        self.writes[key] = value

    async def del_state(self, key: str) -> None:
        if not key:
            raise InvalidArgumentError("key must be a non-empty string")
        self.writes[key] = None


class MemoryBackend:
    """Process-local world state with per-key revision history.

    - ``transaction(keys)`` acquires the per-key locks in sorted order,
      so concurrent multi-key transactions cannot deadlock.
    - Commits run under a single commit lock; a scan never sees a
      partially applied write set.
    - ``open_scans`` counts scans not yet released.
    """

    def __init__(self) -> None:
        self._state: dict[str, str] = {}
        self._history: dict[str, list[KeyModification]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._commit_lock = asyncio.Lock()
        self._open_scans = 0
        self._total_commits = 0
        self._closed = False

    def _get_lock(self, key: str) -> asyncio.Lock:
        """Get or create a per-key lock."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _check_open(self) -> None:
        if self._closed:
            raise InfrastructureError("State backend is closed.")

    # -- transactions ---------------------------------------------------------

    @asynccontextmanager
    async def transaction(self, keys: Iterable[str] = ()) -> AsyncIterator[MemoryTransaction]:
        self._check_open()
        ordered = sorted(set(keys))
        for key in ordered:
            self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with AsyncExitStack() as stack:
                for key in ordered:
                    await stack.enter_async_context(self._get_lock(key))
                tx = MemoryTransaction(self, new_tx_id())
                yield tx
                await self._commit(tx)
        finally:
            self._drop_locks(ordered)

    def _drop_locks(self, keys: list[str]) -> None:
        # A lock is forgotten once no transaction holds or awaits it.
        for key in keys:
            users = self._lock_users[key] - 1
            if users:
                self._lock_users[key] = users
            else:
                del self._lock_users[key]
                self._locks.pop(key, None)

    async def _commit(self, tx: MemoryTransaction) -> None:
        if not tx.writes:
            return
        timestamp = datetime.now(timezone.utc).isoformat()
        mods = {
            key: KeyModification(
                tx_id=tx.tx_id,
                timestamp=timestamp,
                value=value,
                is_delete=value is None,
            )
            for key, value in tx.writes.items()
        }
        async with self._commit_lock:
            self._check_open()
            await self._persist(mods)
            apply_modifications(self._state, self._history, mods)
            self._total_commits += 1
        logger.debug("Committed tx %s (%d key(s)).", tx.tx_id, len(mods))

    async def _persist(self, mods: dict[str, KeyModification]) -> None:
        """Durability hook, called before a write set is applied."""

    # -- reads ----------------------------------------------------------------

    async def get_state(self, key: str) -> str | None:
        self._check_open()
        return self._state.get(key)

    def scan_range(self, start: str = "", end: str = "") -> ScanIterator[KeyValue]:
        """Live entries with ``start <= key < end``; empty bounds are open."""
        self._check_open()
        items = [
            KeyValue(key, value)
            for key, value in sorted(self._state.items())
            if key >= start and (not end or key < end)
        ]
        return self._open_scan(items)

    def scan_history(self, key: str) -> ScanIterator[KeyModification]:
        self._check_open()
        return self._open_scan(list(self._history.get(key, ())))

    def _open_scan(self, items: list) -> ScanIterator:
        self._open_scans += 1
        return ScanIterator(items, on_close=self._release_scan)

    def _release_scan(self) -> None:
        self._open_scans -= 1

    # -- lifecycle ------------------------------------------------------------

    async def close(self) -> None:
        if self._open_scans:
            logger.warning("Closing state backend with %d open scan(s).", self._open_scans)
        self._closed = True

    @property
    def size(self) -> int:
        """Number of live keys."""
        return len(self._state)

    @property
    def open_scans(self) -> int:
        return self._open_scans

    def health(self) -> dict[str, object]:
        return {
            "live_keys": self.size,
            "tracked_keys": len(self._history),
            "held_locks": len(self._locks),
            "open_scans": self._open_scans,
            "total_commits": self._total_commits,
            "closed": self._closed,
        }
