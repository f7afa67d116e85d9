"""Error kinds raised by the record store, contracts and gateway client."""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------


class LedgerError(Exception):
    """Base exception for ledger operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.status_code = status_code

    @property
    def kind(self) -> str:
        return type(self).__name__


class AlreadyExistsError(LedgerError):
    """create() on a key that already has a live value."""


class NotFoundError(LedgerError):
    """read/update/delete on a key with no live value."""


class DeserializationError(LedgerError):
    """Stored text does not parse into the expected record shape."""


class InvalidArgumentError(LedgerError):
    """Missing or malformed input (empty key, bad request field)."""


class InfrastructureError(LedgerError):
    """Backing storage unreachable or I/O fault."""


class AlreadyInTargetStateError(LedgerError):
    """Domain mutation would leave the record unchanged."""


ERROR_KINDS: dict[str, type[LedgerError]] = {
    cls.__name__: cls
    for cls in (
        AlreadyExistsError,
        NotFoundError,
        DeserializationError,
        InvalidArgumentError,
        InfrastructureError,
        AlreadyInTargetStateError,
    )
}
