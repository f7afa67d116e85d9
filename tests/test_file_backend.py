"""Tests for FileBackend snapshot persistence."""

import json
from unittest.mock import patch

import pytest

from ledgerstore.backends import FileBackend
from ledgerstore.errors import InfrastructureError
from ledgerstore.records import LoanApplication
from ledgerstore.store import RecordStore


class TestFileBackend:
    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, tmp_path) -> None:
        backend = FileBackend(tmp_path / "ledger.json")
        assert backend.size == 0
        assert not backend.path.exists()

    @pytest.mark.asyncio
    async def test_commit_writes_snapshot(self, tmp_path) -> None:
        path = tmp_path / "nested" / "ledger.json"
        backend = FileBackend(path)
        async with backend.transaction(["a"]) as tx:
            await tx.put_state("a", '{"id":"a"}')
        doc = json.loads(path.read_text())
        assert doc["v"] == 1
        assert doc["state"] == {"a": '{"id":"a"}'}
        assert doc["history"]["a"][0]["tx_id"] == tx.tx_id
        assert not (tmp_path / "nested" / "ledger.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_state_and_history_survive_reopen(self, tmp_path) -> None:
        path = tmp_path / "loans.json"
        store = RecordStore(FileBackend(path), LoanApplication)
        loan = LoanApplication(id="loan1", applicant="Afraz", amount=10000, term=12,
                               interest_rate=5.5, status="Pending")
        await store.create("loan1", loan)
        await store.create("loan2", LoanApplication(id="loan2"))
        await store.delete("loan2")

        reopened = RecordStore(FileBackend(path), LoanApplication)
        assert await reopened.read("loan1") == loan
        assert not await reopened.exists("loan2")
        history = await reopened.history("loan2").to_list()
        assert [e.is_delete for e in history] == [False, True]

    @pytest.mark.asyncio
    async def test_write_failure_leaves_state_untouched(self, tmp_path) -> None:
        backend = FileBackend(tmp_path / "ledger.json")
        with patch.object(FileBackend, "_write", side_effect=InfrastructureError("disk full")):
            with pytest.raises(InfrastructureError, match="disk full"):
                async with backend.transaction(["a"]) as tx:
                    await tx.put_state("a", "1")
        assert await backend.get_state("a") is None
        assert [m async for m in backend.scan_history("a")] == []

    def test_corrupt_snapshot_raises(self, tmp_path) -> None:
        path = tmp_path / "ledger.json"
        path.write_text("{broken")
        with pytest.raises(InfrastructureError, match="corrupt"):
            FileBackend(path)

    def test_snapshot_missing_sections_raises(self, tmp_path) -> None:
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"v": 1, "state": {}}))
        with pytest.raises(InfrastructureError):
            FileBackend(path)

    def test_unreadable_path_raises(self, tmp_path) -> None:
        # A directory where the snapshot file should be.
        path = tmp_path / "ledger.json"
        path.mkdir()
        with pytest.raises(InfrastructureError, match="Failed to read"):
            FileBackend(path)
