"""Async HTTP client for the ledgerstore REST gateway."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from ledgerstore.config import LedgerConfig
from ledgerstore.errors import (
    ERROR_KINDS,
    InfrastructureError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
)

# ---------------------------------------------------------------------------
# Status code → exception mapping (when the body carries no error kind)
# ---------------------------------------------------------------------------

_STATUS_MAP: dict[int, type[LedgerError]] = {
    400: InvalidArgumentError,
    404: NotFoundError,
    422: InvalidArgumentError,
}


def _error_from_response(response: httpx.Response) -> LedgerError:
    message = response.text
    kind: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = str(body.get("error", message))
        kind = body.get("kind")

    exc_cls = ERROR_KINDS.get(kind or "") or _STATUS_MAP.get(response.status_code)
    if exc_cls is None:
        exc_cls = InfrastructureError if response.status_code >= 500 else LedgerError
    return exc_cls(message, status_code=response.status_code)


def _record_path(contract: str, record_id: str, *suffix: str) -> str:
    """Path of one record; the id is escaped as a single path segment."""
    return "/".join(("", contract, quote(record_id, safe=""), *suffix))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GatewayClient:
    """Async client for the REST gateway.

    Reads (evaluate) and writes (submit) get separate deadlines, as a
    gateway connection does. Error responses are re-raised as the same
    error kind the server raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        evaluate_timeout: float = 5.0,
        submit_timeout: float = 5.0,
        endorse_timeout: float = 15.0,
        commit_status_timeout: float = 60.0,
    ) -> None:
        self._evaluate_timeout = evaluate_timeout
        # A submit waits for endorsement, the submit itself and the commit.
        self._submit_timeout = submit_timeout + endorse_timeout + commit_status_timeout
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(connect=5.0, read=evaluate_timeout, write=10.0, pool=5.0),
        )

    @classmethod
    def from_config(cls, config: LedgerConfig) -> GatewayClient:
        return cls(
            config.gateway_url,
            evaluate_timeout=config.evaluate_timeout,
            submit_timeout=config.submit_timeout,
            endorse_timeout=config.endorse_timeout,
            commit_status_timeout=config.commit_status_timeout,
        )

    # -- internal request dispatcher -----------------------------------------

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        *,
        submit: bool = False,
    ) -> Any:
        """Send a request and map errors to the ledger exception hierarchy."""
        read_timeout = self._submit_timeout if submit else self._evaluate_timeout
        try:
            response = await self._client.request(
                method,
                endpoint,
                json=json_data,
                timeout=httpx.Timeout(connect=5.0, read=read_timeout, write=10.0, pool=5.0),
            )
        except httpx.ConnectError as exc:
            raise InfrastructureError(f"Gateway unreachable: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise InfrastructureError(f"Gateway deadline exceeded: {exc}") from exc

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response.json()

    async def _evaluate(self, endpoint: str) -> Any:
        return await self._request("GET", endpoint)

    async def _submit(
        self, method: str, endpoint: str, json_data: dict[str, Any] | None = None,
    ) -> Any:
        return await self._request(method, endpoint, json_data, submit=True)

    # -- service --------------------------------------------------------------

    async def info(self) -> dict[str, Any]:
        """GET /: channel, chaincode and MSP id of the gateway."""
        return await self._evaluate("/")

    async def health(self) -> dict[str, Any]:
        return await self._evaluate("/health")

    async def ping(self) -> str:
        result = await self._evaluate("/ping")
        return result["message"]

    async def init_ledger(self) -> dict[str, Any]:
        """POST /initLedger: seed every contract."""
        return await self._submit("POST", "/initLedger")

    # -- generic record operations -------------------------------------------

    async def create(self, contract: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._submit("POST", f"/{contract}", payload)

    async def read(self, contract: str, record_id: str) -> dict[str, Any]:
        return await self._evaluate(_record_path(contract, record_id))

    async def update(
        self, contract: str, record_id: str, payload: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._submit("PUT", _record_path(contract, record_id), payload)

    async def delete(self, contract: str, record_id: str) -> dict[str, Any]:
        return await self._submit("DELETE", _record_path(contract, record_id))

    async def list_all(self, contract: str) -> list[dict[str, Any]]:
        return await self._evaluate(f"/{contract}")

    async def history(self, contract: str, record_id: str) -> list[dict[str, Any]]:
        return await self._evaluate(_record_path(contract, record_id, "history"))

    # -- domain transactions --------------------------------------------------

    async def transfer_asset(self, asset_id: str, new_owner: str) -> str:
        """Returns the previous owner."""
        result = await self._submit(
            "POST", _record_path("assets", asset_id, "transfer"), {"newOwner": new_owner}
        )
        return result["oldOwner"]

    async def update_loan_status(self, loan_id: str, status: str) -> dict[str, Any]:
        return await self._submit("PUT", _record_path("loans", loan_id), {"status": status})

    async def evolve_pokemon(self, pokemon_id: str) -> dict[str, Any]:
        return await self._submit("POST", _record_path("pokemon", pokemon_id, "evolve"))

    # -- lifecycle ------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> GatewayClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
