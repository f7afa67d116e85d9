"""Tests for MemoryBackend: transactions, key locks, scans."""

import asyncio

import pytest

from ledgerstore.backends import MemoryBackend
from ledgerstore.errors import InfrastructureError, InvalidArgumentError
from ledgerstore.state_backend import KeyValue, StateBackend


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TestTransactions:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryBackend(), StateBackend)

    @pytest.mark.asyncio
    async def test_commit_on_clean_exit(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a"]) as tx:
            await tx.put_state("a", "1")
        assert await backend.get_state("a") == "1"

    @pytest.mark.asyncio
    async def test_writes_invisible_until_commit(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a"]) as tx:
            await tx.put_state("a", "1")
            assert await backend.get_state("a") is None
            assert await tx.get_state("a") == "1"  # read-your-writes

    @pytest.mark.asyncio
    async def test_exception_discards_all_writes(self) -> None:
        backend = MemoryBackend()
        with pytest.raises(RuntimeError):
            async with backend.transaction(["a", "b"]) as tx:
                await tx.put_state("a", "1")
                await tx.put_state("b", "2")
                raise RuntimeError("boom")
        assert await backend.get_state("a") is None
        assert await backend.get_state("b") is None
        assert backend.health()["total_commits"] == 0

    @pytest.mark.asyncio
    async def test_multi_key_commit_shares_tx_id(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a", "b"]) as tx:
            await tx.put_state("a", "1")
            await tx.put_state("b", "2")
        hist_a = [m async for m in backend.scan_history("a")]
        hist_b = [m async for m in backend.scan_history("b")]
        assert hist_a[0].tx_id == hist_b[0].tx_id == tx.tx_id
        assert len(tx.tx_id) == 64

    @pytest.mark.asyncio
    async def test_delete_records_tombstone(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a"]) as tx:
            await tx.put_state("a", "1")
        async with backend.transaction(["a"]) as tx:
            await tx.del_state("a")
            assert await tx.get_state("a") is None
        assert await backend.get_state("a") is None
        history = [m async for m in backend.scan_history("a")]
        assert [m.is_delete for m in history] == [False, True]
        assert history[1].value is None

    @pytest.mark.asyncio
    async def test_empty_key_rejected(self) -> None:
        backend = MemoryBackend()
        with pytest.raises(InvalidArgumentError):
            async with backend.transaction() as tx:
                await tx.put_state("", "x")

    @pytest.mark.asyncio
    async def test_read_only_transaction_commits_nothing(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a"]) as tx:
            await tx.get_state("a")
        assert backend.health()["total_commits"] == 0


# ---------------------------------------------------------------------------
# Key locks
# ---------------------------------------------------------------------------


class TestKeyLocks:
    @pytest.mark.asyncio
    async def test_same_key_transactions_serialize(self) -> None:
        backend = MemoryBackend()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with backend.transaction(["k"]) as tx:
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                await tx.put_state("k", name)
                order.append(f"{name}-end")

        await asyncio.gather(worker("one"), worker("two"))
        assert order in (
            ["one-start", "one-end", "two-start", "two-end"],
            ["two-start", "two-end", "one-start", "one-end"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self) -> None:
        backend = MemoryBackend()
        inside = 0
        peak = 0

        async def worker(key: str) -> None:
            nonlocal inside, peak
            async with backend.transaction([key]) as tx:
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                await tx.put_state(key, "v")
                inside -= 1

        await asyncio.gather(worker("a"), worker("b"))
        assert peak == 2

    @pytest.mark.asyncio
    async def test_overlapping_key_sets_do_not_deadlock(self) -> None:
        backend = MemoryBackend()

        async def worker(keys: list[str]) -> None:
            async with backend.transaction(keys) as tx:
                await asyncio.sleep(0.005)
                for key in keys:
                    await tx.put_state(key, "v")

        await asyncio.wait_for(
            asyncio.gather(worker(["a", "b"]), worker(["b", "a"])), timeout=2.0
        )
        assert backend.size == 2

    @pytest.mark.asyncio
    async def test_locks_forgotten_after_release(self) -> None:
        backend = MemoryBackend()
        async with backend.transaction(["a", "b"]) as tx:
            await tx.put_state("a", "1")
            assert backend.health()["held_locks"] == 2
        assert backend.health()["held_locks"] == 0

        with pytest.raises(RuntimeError):
            async with backend.transaction(["c"]):
                raise RuntimeError("boom")
        assert backend.health()["held_locks"] == 0

    @pytest.mark.asyncio
    async def test_waiter_keeps_lock_alive(self) -> None:
        backend = MemoryBackend()
        inside = 0
        peak = 0

        async def worker(value: str) -> None:
            nonlocal inside, peak
            async with backend.transaction(["k"]) as tx:
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                await tx.put_state("k", value)
                inside -= 1

        await asyncio.gather(*(worker(str(i)) for i in range(4)))
        assert peak == 1
        assert backend.health()["held_locks"] == 0
        assert backend.health()["total_commits"] == 4


# ---------------------------------------------------------------------------
# Scans
# ---------------------------------------------------------------------------


async def _seeded(*keys: str) -> MemoryBackend:
    backend = MemoryBackend()
    async with backend.transaction(keys) as tx:
        for key in keys:
            await tx.put_state(key, f"v-{key}")
    return backend


class TestScans:
    @pytest.mark.asyncio
    async def test_range_is_lexicographic(self) -> None:
        backend = await _seeded("c", "a", "b")
        async with backend.scan_range() as scan:
            keys = [kv.key async for kv in scan]
        assert keys == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_range_bounds(self) -> None:
        backend = await _seeded("a", "b", "c", "d")
        async with backend.scan_range("b", "d") as scan:
            items = [kv async for kv in scan]
        assert items == [KeyValue("b", "v-b"), KeyValue("c", "v-c")]

    @pytest.mark.asyncio
    async def test_exhaustion_releases_scan(self) -> None:
        backend = await _seeded("a")
        scan = backend.scan_range()
        assert backend.open_scans == 1
        _ = [kv async for kv in scan]
        assert scan.closed
        assert backend.open_scans == 0

    @pytest.mark.asyncio
    async def test_early_exit_releases_scan(self) -> None:
        backend = await _seeded("a", "b", "c")
        async with backend.scan_range() as scan:
            async for kv in scan:
                break
        assert backend.open_scans == 0

    @pytest.mark.asyncio
    async def test_error_releases_scan(self) -> None:
        backend = await _seeded("a", "b")
        with pytest.raises(ValueError):
            async with backend.scan_range() as scan:
                async for kv in scan:
                    raise ValueError(kv.key)
        assert backend.open_scans == 0

    @pytest.mark.asyncio
    async def test_closed_scan_is_not_restartable(self) -> None:
        backend = await _seeded("a", "b")
        scan = backend.scan_range()
        await scan.aclose()
        assert [kv async for kv in scan] == []
        await scan.aclose()  # idempotent
        assert backend.open_scans == 0

    @pytest.mark.asyncio
    async def test_scan_unaffected_by_later_commit(self) -> None:
        backend = await _seeded("a", "b")
        async with backend.scan_range() as scan:
            first = await scan.__anext__()
            async with backend.transaction(["b"]) as tx:
                await tx.put_state("b", "changed")
            rest = [kv async for kv in scan]
        assert first.key == "a"
        assert rest == [KeyValue("b", "v-b")]

    @pytest.mark.asyncio
    async def test_history_of_unknown_key_is_empty(self) -> None:
        backend = MemoryBackend()
        async with backend.scan_history("ghost") as scan:
            assert [m async for m in scan] == []


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_closed_backend_raises_infrastructure_error(self) -> None:
        backend = MemoryBackend()
        await backend.close()
        with pytest.raises(InfrastructureError):
            await backend.get_state("a")
        with pytest.raises(InfrastructureError):
            backend.scan_range()

    @pytest.mark.asyncio
    async def test_health(self) -> None:
        backend = await _seeded("a", "b")
        health = backend.health()
        assert health["live_keys"] == 2
        assert health["total_commits"] == 1
        assert health["open_scans"] == 0
        assert health["closed"] is False
