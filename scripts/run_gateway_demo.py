#!/usr/bin/env python3
"""Walk a running ledgerstore gateway through the basic asset flow.

Seeds the ledger, lists assets, creates one, transfers it, reads it
back, and finally updates an asset that does not exist (which must
fail). Point it at a gateway with GATEWAY_URL (default
http://localhost:3000):

  ledgerstore-gateway &
  python scripts/run_gateway_demo.py
"""

from __future__ import annotations

import asyncio
import json
import sys
import time

from ledgerstore import GatewayClient, LedgerConfig, NotFoundError


async def main() -> int:
    config = LedgerConfig.from_env()
    asset_id = f"asset{int(time.time() * 1000)}"

    async with GatewayClient.from_config(config) as client:
        info = await client.info()
        print(f"channelName:   {info['channelName']}")
        print(f"chaincodeName: {info['chaincodeName']}")
        print(f"mspId:         {info['mspId']}")
        print(f"gateway:       {config.gateway_url}")

        print("\n--> Submit: InitLedger")
        await client.init_ledger()
        print("*** Transaction committed successfully")

        print("\n--> Evaluate: GetAllAssets")
        print(json.dumps(await client.list_all("assets"), indent=2))

        print(f"\n--> Submit: CreateAsset {asset_id}")
        await client.create("assets", {
            "id": asset_id, "color": "blue", "size": 5,
            "owner": "Tomoko", "appraisedValue": 300,
        })
        print("*** Transaction committed successfully")

        print("\n--> Submit: TransferAsset")
        old_owner = await client.transfer_asset(asset_id, "Saptha")
        print(f"*** Transferred ownership from {old_owner} to Saptha")

        print("\n--> Evaluate: ReadAsset")
        print(json.dumps(await client.read("assets", asset_id), indent=2))

        print("\n--> Submit: UpdateAsset asset70 (does not exist)")
        try:
            await client.update("assets", "asset70", {
                "color": "blue", "size": 5, "owner": "Tomoko", "appraisedValue": 300,
            })
        except NotFoundError as e:
            print(f"*** Successfully caught the error: {e}")
        else:
            print("******** FAILED to return an error", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
