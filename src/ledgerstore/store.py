"""Generic versioned record store over a StateBackend.

Every mutation runs in one backend transaction that holds the key's
lock, so the existence check and the write it guards are atomic, and a
failure anywhere in the operation (including a caller's mutator) leaves
both the live value and the key's history untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

from ledgerstore.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from ledgerstore.records import R
from ledgerstore.state_backend import KeyModification, KeyValue, ScanIterator, StateBackend

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# HistoryEntry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HistoryEntry(Generic[R]):
    """One revision of a key: a value snapshot or a deletion marker."""

    tx_id: str
    timestamp: str
    record: R | None
    is_delete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "txId": self.tx_id,
            "timestamp": self.timestamp,
            "isDelete": self.is_delete,
            "value": self.record.to_dict() if self.record is not None else None,
        }

    def describe(self) -> str:
        if self.is_delete or self.record is None:
            return f"Deleted at TxID: {self.tx_id}"
        return f"TxID: {self.tx_id}, Data: {self.record.to_json()}"


# ---------------------------------------------------------------------------
# RecordScan
# ---------------------------------------------------------------------------


class RecordScan(Generic[S, T]):
    """Lazy, single-pass sequence decoding items of a backend scan.

    The backend scan opens on the first ``__anext__``, so a scan that is
    never iterated holds nothing. Once iteration has started, leaving it
    early needs ``async with store.list_all() as scan: async for r in scan``
    (or ``aclose()``); the scan is released on exhaustion, on a decode
    error, and on any exit from the ``async with`` block.
    """

    def __init__(
        self,
        open_source: Callable[[], ScanIterator[S]],
        decode: Callable[[S], T],
    ) -> None:
        self._open_source = open_source
        self._decode = decode
        self._source: ScanIterator[S] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed or (self._source is not None and self._source.closed)

    async def aclose(self) -> None:
        self._closed = True
        if self._source is not None:
            await self._source.aclose()

    def __aiter__(self) -> RecordScan[S, T]:
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if self._source is None:
            self._source = self._open_source()
        item = await self._source.__anext__()
        try:
            return self._decode(item)
        except Exception:
            await self.aclose()
            raise

    async def __aenter__(self) -> RecordScan[S, T]:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def to_list(self) -> list[T]:
        """Drain the scan into a list, releasing it afterwards."""
        async with self:
            return [item async for item in self]


# ---------------------------------------------------------------------------
# RecordStore
# ---------------------------------------------------------------------------


class RecordStore(Generic[R]):
    """Existence-checked CRUD plus range and history scans for one schema.

    The backend is injected and shared; the store holds no state of its own.
    """

    def __init__(self, backend: StateBackend, record_type: type[R]) -> None:
        self._backend = backend
        self._record_type = record_type
        self._label = record_type.__name__

    @property
    def backend(self) -> StateBackend:
        return self._backend

    @property
    def record_type(self) -> type[R]:
        return self._record_type

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError("key must be a non-empty string")

    def _decode(self, value: str) -> R:
        return self._record_type.from_json(value)

    def _not_found(self, key: str) -> NotFoundError:
        return NotFoundError(f"the {self._label} {key} does not exist", key=key)

    # -- single-key operations ------------------------------------------------

    async def exists(self, key: str) -> bool:
        self._check_key(key)
        return await self._backend.get_state(key) is not None

    async def create(self, key: str, record: R) -> str:
        """Write ``record`` at a key with no live value. Returns the tx id."""
        self._check_key(key)
        value = record.to_json()
        async with self._backend.transaction([key]) as tx:
            if await tx.get_state(key) is not None:
                raise AlreadyExistsError(f"the {self._label} {key} already exists", key=key)
            await tx.put_state(key, value)
        logger.info("Created %s %s (tx %s).", self._label, key, tx.tx_id)
        return tx.tx_id

    async def read(self, key: str) -> R:
        self._check_key(key)
        value = await self._backend.get_state(key)
        if value is None:
            raise self._not_found(key)
        return self._decode(value)

    async def update(self, key: str, mutator: Callable[[R], R | None]) -> R:
        """Apply ``mutator`` to the live record and overwrite it.

        The mutator may return a new record or mutate its argument and
        return None. Not an upsert: a missing key raises NotFoundError.
        """
        self._check_key(key)
        async with self._backend.transaction([key]) as tx:
            value = await tx.get_state(key)
            if value is None:
                raise self._not_found(key)
            current = self._decode(value)
            updated = mutator(current)
            if updated is None:
                updated = current
            if updated.key != key:
                raise InvalidArgumentError(
                    f"cannot move {self._label} {key} to key {updated.key!r}", key=key
                )
            await tx.put_state(key, updated.to_json())
        logger.info("Updated %s %s (tx %s).", self._label, key, tx.tx_id)
        return updated

    async def replace(self, key: str, record: R) -> R:
        """Swap the whole live value for ``record``; fields are not merged."""
        return await self.update(key, lambda _current: record)

    async def delete(self, key: str) -> str:
        """Clear the live value, leaving a tombstone revision. Returns the tx id."""
        self._check_key(key)
        async with self._backend.transaction([key]) as tx:
            if await tx.get_state(key) is None:
                raise self._not_found(key)
            await tx.del_state(key)
        logger.info("Deleted %s %s (tx %s).", self._label, key, tx.tx_id)
        return tx.tx_id

    # -- batch / enumeration --------------------------------------------------

    async def seed(self, records: Iterable[R]) -> str:
        """Write a fixed record set in one atomic transaction, overwriting."""
        records = list(records)
        keys = [r.key for r in records]
        for key in keys:
            self._check_key(key)
        async with self._backend.transaction(keys) as tx:
            for record in records:
                await tx.put_state(record.key, record.to_json())
        logger.info("Seeded %d %s record(s) (tx %s).", len(records), self._label, tx.tx_id)
        return tx.tx_id

    def list_all(self) -> RecordScan[KeyValue, R]:
        """Live records in lexicographic key order."""
        return RecordScan(
            lambda: self._backend.scan_range("", ""),
            lambda kv: self._decode(kv.value),
        )

    def history(self, key: str) -> RecordScan[KeyModification, HistoryEntry[R]]:
        """Revisions of ``key``, earliest first."""
        self._check_key(key)
        return RecordScan(lambda: self._backend.scan_history(key), self._decode_modification)

    def _decode_modification(self, mod: KeyModification) -> HistoryEntry[R]:
        record = None if mod.is_delete or mod.value is None else self._decode(mod.value)
        return HistoryEntry(
            tx_id=mod.tx_id,
            timestamp=mod.timestamp,
            record=record,
            is_delete=mod.is_delete,
        )
