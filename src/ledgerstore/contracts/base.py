"""Shared transaction functions for every contract."""

from __future__ import annotations

from typing import ClassVar, Generic

from ledgerstore.records import R
from ledgerstore.state_backend import StateBackend
from ledgerstore.store import HistoryEntry, RecordStore


class Contract(Generic[R]):
    """A record schema bound to its own RecordStore.

    Subclasses set ``name`` (the REST prefix), ``record_type`` and
    ``initial_records()`` (the InitLedger seed set).
    """

    name: ClassVar[str]
    record_type: type[R]

    def __init__(self, backend: StateBackend) -> None:
        self.store: RecordStore[R] = RecordStore(backend, self.record_type)

    def initial_records(self) -> list[R]:
        return []

    async def ping(self) -> str:
        return "Pong"

    async def init_ledger(self) -> str:
        """Populate the seed set. Returns the tx id."""
        return await self.store.seed(self.initial_records())

    async def exists(self, key: str) -> bool:
        return await self.store.exists(key)

    async def read(self, key: str) -> R:
        return await self.store.read(key)

    async def delete(self, key: str) -> str:
        return await self.store.delete(key)

    async def get_all(self) -> list[R]:
        return await self.store.list_all().to_list()

    async def get_history(self, key: str) -> list[HistoryEntry[R]]:
        return await self.store.history(key).to_list()
