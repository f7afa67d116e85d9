"""Constants shared by the contracts and the REST façade."""

from enum import Enum


EVOLUTION_POWER_BONUS = 30  # added to power when a Pokemon evolves

TX_ID_BYTES = 32  # 64 hex chars, same width as a sha256 digest


class LoanStatus(str, Enum):
    """Lifecycle states of a loan application."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
