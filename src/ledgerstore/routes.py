"""REST routes mapping HTTP requests onto contract transactions.

Each route validates its body, invokes exactly one contract operation
and returns the record as it is stored on the ledger. Errors are turned
into responses by the handlers registered in ``ledgerstore.server``.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ledgerstore.contracts import (
    AssetContract,
    Contract,
    IdentityContract,
    LoanContract,
    PokemonContract,
)


def _non_empty() -> Any:
    return Field(..., min_length=1)


def contract_dependency(name: str) -> Callable[[Request], Contract]:
    """FastAPI dependency returning the app's contract registered as ``name``."""

    def _get(request: Request) -> Contract:
        return request.app.state.contracts[name]

    return _get


def _add_common_routes(router: APIRouter, name: str) -> None:
    """List, read, delete and history routes shared by every contract."""
    dep = Depends(contract_dependency(name))

    @router.get("", summary=f"List all {name}")
    async def list_records(contract: Contract = dep) -> list[dict[str, Any]]:
        return [record.to_dict() for record in await contract.get_all()]

    @router.get("/{record_id}", summary="Read one record")
    async def read_record(record_id: str, contract: Contract = dep) -> dict[str, Any]:
        record = await contract.read(record_id)
        return record.to_dict()

    @router.delete("/{record_id}", summary="Delete one record")
    async def delete_record(record_id: str, contract: Contract = dep) -> dict[str, Any]:
        tx_id = await contract.delete(record_id)
        return {"message": f"{record_id} deleted successfully", "id": record_id, "txId": tx_id}

    @router.get("/{record_id}/history", summary="Revision history of one record")
    async def record_history(record_id: str, contract: Contract = dep) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in await contract.get_history(record_id)]


# ---------------------------------------------------------------------------
# Service routes
# ---------------------------------------------------------------------------

service_router = APIRouter(tags=["service"])


@service_router.get("/")
async def root(request: Request) -> dict[str, Any]:
    """Connection parameters of this gateway."""
    config = request.app.state.config
    return {
        "channelName": config.channel_name,
        "chaincodeName": config.chaincode_name,
        "mspId": config.msp_id,
        "contracts": sorted(request.app.state.contracts),
    }


@service_router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    return {
        "status": "healthy",
        "backends": {
            name: backend.health() for name, backend in request.app.state.backends.items()
        },
    }


@service_router.get("/ping")
async def ping(request: Request) -> dict[str, str]:
    contract = next(iter(request.app.state.contracts.values()))
    return {"message": await contract.ping()}


@service_router.post("/initLedger")
async def init_ledger(request: Request) -> dict[str, Any]:
    """Seed every contract with its initial record set."""
    tx_ids = {
        name: await contract.init_ledger()
        for name, contract in request.app.state.contracts.items()
    }
    return {"message": "Ledger initialized successfully", "txIds": tx_ids}


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class AssetBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    color: str = _non_empty()
    size: int
    owner: str = _non_empty()
    appraised_value: int = Field(..., alias="appraisedValue")


class AssetCreate(AssetBody):
    id: str | None = Field(None, min_length=1)


class TransferRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_owner: str = Field(..., alias="newOwner", min_length=1)


assets_router = APIRouter(prefix="/assets", tags=["assets"])
_asset_dep = Depends(contract_dependency(AssetContract.name))


@assets_router.post("", status_code=status.HTTP_201_CREATED)
async def create_asset(body: AssetCreate, contract: AssetContract = _asset_dep) -> dict[str, Any]:
    # Without an explicit id, name the asset after the current time in ms.
    asset_id = body.id or f"asset{int(time.time() * 1000)}"
    asset = await contract.create_asset(
        asset_id, body.color, body.size, body.owner, body.appraised_value
    )
    return asset.to_dict()


@assets_router.put("/{record_id}")
async def update_asset(
    record_id: str, body: AssetBody, contract: AssetContract = _asset_dep,
) -> dict[str, Any]:
    asset = await contract.update_asset(
        record_id, body.color, body.size, body.owner, body.appraised_value
    )
    return asset.to_dict()


@assets_router.post("/{record_id}/transfer")
async def transfer_asset(
    record_id: str, body: TransferRequest, contract: AssetContract = _asset_dep,
) -> dict[str, Any]:
    old_owner = await contract.transfer_asset(record_id, body.new_owner)
    return {
        "message": "Asset transferred successfully",
        "oldOwner": old_owner,
        "newOwner": body.new_owner,
    }


_add_common_routes(assets_router, AssetContract.name)


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------


class LoanCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = _non_empty()
    applicant: str = _non_empty()
    amount: int
    term: int
    interest_rate: float = Field(..., alias="interestRate")


class LoanStatusUpdate(BaseModel):
    status: str = _non_empty()


loans_router = APIRouter(prefix="/loans", tags=["loans"])
_loan_dep = Depends(contract_dependency(LoanContract.name))


@loans_router.post("", status_code=status.HTTP_201_CREATED)
async def create_loan(body: LoanCreate, contract: LoanContract = _loan_dep) -> dict[str, Any]:
    loan = await contract.create_loan_application(
        body.id, body.applicant, body.amount, body.term, body.interest_rate
    )
    return loan.to_dict()


@loans_router.put("/{record_id}")
async def update_loan_status(
    record_id: str, body: LoanStatusUpdate, contract: LoanContract = _loan_dep,
) -> dict[str, Any]:
    loan = await contract.update_loan_status(record_id, body.status)
    return loan.to_dict()


_add_common_routes(loans_router, LoanContract.name)


# ---------------------------------------------------------------------------
# Pokemon
# ---------------------------------------------------------------------------


class PokemonCreate(BaseModel):
    id: str = _non_empty()
    name: str = _non_empty()
    type: str = _non_empty()
    trainer: str = _non_empty()
    location: str = ""
    power: int


class PokemonUpdate(BaseModel):
    trainer: str = _non_empty()
    power: int


pokemon_router = APIRouter(prefix="/pokemon", tags=["pokemon"])
_pokemon_dep = Depends(contract_dependency(PokemonContract.name))


@pokemon_router.post("", status_code=status.HTTP_201_CREATED)
async def create_pokemon(
    body: PokemonCreate, contract: PokemonContract = _pokemon_dep,
) -> dict[str, Any]:
    pokemon = await contract.create_pokemon(
        body.id, body.name, body.type, body.trainer, body.location, body.power
    )
    return pokemon.to_dict()


@pokemon_router.put("/{record_id}")
async def update_pokemon(
    record_id: str, body: PokemonUpdate, contract: PokemonContract = _pokemon_dep,
) -> dict[str, Any]:
    pokemon = await contract.update_pokemon(record_id, body.trainer, body.power)
    return pokemon.to_dict()


@pokemon_router.post("/{record_id}/evolve")
async def evolve_pokemon(
    record_id: str, contract: PokemonContract = _pokemon_dep,
) -> dict[str, Any]:
    pokemon = await contract.evolve_pokemon(record_id)
    return pokemon.to_dict()


_add_common_routes(pokemon_router, PokemonContract.name)


# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------


class IdentityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = _non_empty()
    title: str = ""
    first_name: str = Field(..., alias="firstName", min_length=1)
    middle_name: str = Field("", alias="middleName")
    last_name: str = Field(..., alias="lastName", min_length=1)
    cnic: str = _non_empty()
    dob: str = _non_empty()
    gender: str = _non_empty()
    mobile: str = _non_empty()
    address: str = ""


class IdentityUpdate(BaseModel):
    mobile: str | None = None
    address: str | None = None


identities_router = APIRouter(prefix="/identities", tags=["identities"])
_identity_dep = Depends(contract_dependency(IdentityContract.name))


@identities_router.post("", status_code=status.HTTP_201_CREATED)
async def create_identity(
    body: IdentityCreate, contract: IdentityContract = _identity_dep,
) -> dict[str, Any]:
    details = {"middle_name": body.middle_name, "address": body.address}
    identity = await contract.create_identity(
        body.id, body.title, body.first_name, body.last_name,
        body.cnic, body.dob, body.gender, body.mobile,
        **{k: v for k, v in details.items() if v},
    )
    return identity.to_dict()


@identities_router.put("/{record_id}")
async def update_identity(
    record_id: str, body: IdentityUpdate, contract: IdentityContract = _identity_dep,
) -> dict[str, Any]:
    identity = await contract.update_identity(record_id, body.mobile, body.address)
    return identity.to_dict()


_add_common_routes(identities_router, IdentityContract.name)


ROUTERS: tuple[APIRouter, ...] = (
    service_router,
    assets_router,
    loans_router,
    pokemon_router,
    identities_router,
)
