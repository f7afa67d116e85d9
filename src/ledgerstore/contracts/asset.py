"""Basic asset transfer contract."""

from __future__ import annotations

import logging

from ledgerstore.contracts.base import Contract
from ledgerstore.records import Asset

logger = logging.getLogger(__name__)


class AssetContract(Contract[Asset]):
    name = "assets"
    record_type = Asset

    def initial_records(self) -> list[Asset]:
        return [
            Asset(id="asset1", color="blue", size=5, owner="Tomoko", appraised_value=300),
            Asset(id="asset2", color="red", size=5, owner="Brad", appraised_value=400),
            Asset(id="asset3", color="green", size=10, owner="Jin Soo", appraised_value=500),
            Asset(id="asset4", color="yellow", size=10, owner="Max", appraised_value=600),
            Asset(id="asset5", color="black", size=15, owner="Adriana", appraised_value=700),
            Asset(id="asset6", color="white", size=15, owner="Michel", appraised_value=800),
        ]

    async def create_asset(
        self, id: str, color: str, size: int, owner: str, appraised_value: int,
    ) -> Asset:
        asset = Asset(id=id, color=color, size=size, owner=owner, appraised_value=appraised_value)
        await self.store.create(id, asset)
        return asset

    async def read_asset(self, id: str) -> Asset:
        return await self.store.read(id)

    async def update_asset(
        self, id: str, color: str, size: int, owner: str, appraised_value: int,
    ) -> Asset:
        """Overwrite every attribute of an existing asset."""
        asset = Asset(id=id, color=color, size=size, owner=owner, appraised_value=appraised_value)
        return await self.store.replace(id, asset)

    async def delete_asset(self, id: str) -> str:
        return await self.store.delete(id)

    async def asset_exists(self, id: str) -> bool:
        return await self.store.exists(id)

    async def transfer_asset(self, id: str, new_owner: str) -> str:
        """Change the owner. Returns the previous owner."""
        previous: list[str] = []

        def _transfer(asset: Asset) -> None:
            previous.append(asset.owner)
            asset.owner = new_owner

        await self.store.update(id, _transfer)
        logger.info("Transferred asset %s from %s to %s.", id, previous[0], new_owner)
        return previous[0]

    async def get_all_assets(self) -> list[Asset]:
        return await self.get_all()
