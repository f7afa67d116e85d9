"""ledgerstore: versioned record store for ledger contracts.

Existence-checked CRUD, range scans and per-key history over a
pluggable world-state backend, plus a REST gateway and its client.
"""

__version__ = "0.1.0"

from ledgerstore.backends import FileBackend, MemoryBackend
from ledgerstore.config import LedgerConfig
from ledgerstore.contracts import (
    AssetContract,
    Contract,
    IdentityContract,
    LoanContract,
    PokemonContract,
)
from ledgerstore.errors import (
    AlreadyExistsError,
    AlreadyInTargetStateError,
    DeserializationError,
    InfrastructureError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
)
from ledgerstore.gateway_client import GatewayClient
from ledgerstore.records import Asset, Identity, LoanApplication, Pokemon, Record
from ledgerstore.state_backend import StateBackend
from ledgerstore.store import HistoryEntry, RecordScan, RecordStore

__all__ = [
    "AlreadyExistsError",
    "AlreadyInTargetStateError",
    "Asset",
    "AssetContract",
    "Contract",
    "DeserializationError",
    "FileBackend",
    "GatewayClient",
    "HistoryEntry",
    "Identity",
    "IdentityContract",
    "InfrastructureError",
    "InvalidArgumentError",
    "LedgerConfig",
    "LedgerError",
    "LoanApplication",
    "LoanContract",
    "MemoryBackend",
    "NotFoundError",
    "Pokemon",
    "PokemonContract",
    "Record",
    "RecordScan",
    "RecordStore",
    "StateBackend",
]
