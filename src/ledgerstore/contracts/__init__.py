from ledgerstore.contracts.asset import AssetContract
from ledgerstore.contracts.base import Contract
from ledgerstore.contracts.identity import IdentityContract
from ledgerstore.contracts.loan import LoanContract
from ledgerstore.contracts.pokemon import PokemonContract

CONTRACT_TYPES: tuple[type[Contract], ...] = (
    AssetContract,
    LoanContract,
    PokemonContract,
    IdentityContract,
)

__all__ = [
    "AssetContract",
    "CONTRACT_TYPES",
    "Contract",
    "IdentityContract",
    "LoanContract",
    "PokemonContract",
]
