"""Abstract persistence interface for world state and key history.

Defines the StateBackend Protocol that RecordStore depends on, plus the
value types and the scan iterator every backend hands out. Concrete
implementations live in ``ledgerstore.backends``.
"""

from __future__ import annotations

import secrets
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Protocol, TypeVar, runtime_checkable

from ledgerstore.constants import TX_ID_BYTES

T = TypeVar("T")


def new_tx_id() -> str:
    """Opaque transaction identifier (64 hex chars)."""
    return secrets.token_hex(TX_ID_BYTES)


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


@dataclass(frozen=True)
class KeyModification:
    """One entry of a key's revision log. ``value`` is None for a tombstone."""

    tx_id: str
    timestamp: str
    value: str | None
    is_delete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "tx_id": self.tx_id,
            "timestamp": self.timestamp,
            "value": self.value,
            "is_delete": self.is_delete,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeyModification:
        return cls(
            tx_id=str(data["tx_id"]),
            timestamp=str(data.get("timestamp", "")),
            value=data.get("value"),
            is_delete=bool(data.get("is_delete", False)),
        )


# ---------------------------------------------------------------------------
# ScanIterator
# ---------------------------------------------------------------------------


class ScanIterator(Generic[T]):
    """Single-pass async iterator over a backend scan.

    The scan resource is released exactly once: on exhaustion, on
    ``aclose()``, or when an ``async with`` block exits for any reason.
    A closed iterator yields nothing further.
    """

    def __init__(
        self,
        items: Iterable[T],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._items = iter(items)
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __aiter__(self) -> ScanIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        try:
            return next(self._items)
        except StopIteration:
            await self.aclose()
            raise StopAsyncIteration from None

    async def __aenter__(self) -> ScanIterator[T]:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class Transaction(Protocol):
    """Write set of one logical operation; committed or discarded as a unit."""

    tx_id: str

    async def get_state(self, key: str) -> str | None: ...

    async def put_state(self, key: str, value: str) -> None: ...

    async def del_state(self, key: str) -> None: ...


@runtime_checkable
class StateBackend(Protocol):
    """Async persistence backend for the world state.

    ``transaction(keys)`` locks the declared keys for its lifetime,
    commits every write atomically on clean exit and discards them if
    the block raises. Scans must be closed by the caller (``async with``).
    """

    def transaction(
        self, keys: Iterable[str] = ()
    ) -> AbstractAsyncContextManager[Transaction]: ...

    async def get_state(self, key: str) -> str | None: ...

    def scan_range(self, start: str = "", end: str = "") -> ScanIterator[KeyValue]: ...

    def scan_history(self, key: str) -> ScanIterator[KeyModification]: ...

    def health(self) -> dict[str, object]: ...

    async def close(self) -> None: ...
