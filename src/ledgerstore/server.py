"""FastAPI gateway exposing the contracts over REST.

``create_app()`` wires one state backend per contract, registers the
routers, and maps every ledger error kind to an HTTP status with the
body ``{"error": <message>, "kind": <error kind>}``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledgerstore import __version__
from ledgerstore.backends import FileBackend, MemoryBackend
from ledgerstore.config import LedgerConfig
from ledgerstore.contracts import CONTRACT_TYPES
from ledgerstore.errors import (
    AlreadyExistsError,
    AlreadyInTargetStateError,
    DeserializationError,
    InfrastructureError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
)
from ledgerstore.routes import ROUTERS
from ledgerstore.state_backend import StateBackend

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error kind → status code mapping
# ---------------------------------------------------------------------------

_STATUS_MAP: dict[type[LedgerError], int] = {
    InvalidArgumentError: 400,
    AlreadyExistsError: 400,
    AlreadyInTargetStateError: 400,
    NotFoundError: 404,
    DeserializationError: 500,
    InfrastructureError: 500,
}


def status_for(exc: LedgerError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


async def _ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s: %s", request.method, request.url.path, exc.kind, exc)
    else:
        logger.info("%s %s rejected: %s: %s", request.method, request.url.path, exc.kind, exc)
    return JSONResponse(status_code=status_code, content={"error": str(exc), "kind": exc.kind})


async def _validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    names = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = f"Missing or invalid fields: {', '.join(names)}" if names else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": message, "kind": InvalidArgumentError.__name__},
    )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def build_backends(config: LedgerConfig) -> dict[str, StateBackend]:
    """One backend per contract: JSON files under ``state_dir``, else memory."""
    backends: dict[str, StateBackend] = {}
    for contract_type in CONTRACT_TYPES:
        if config.state_dir:
            path = Path(config.state_dir) / f"{contract_type.name}.json"
            backends[contract_type.name] = FileBackend(path)
        else:
            backends[contract_type.name] = MemoryBackend()
    return backends


def create_app(
    config: LedgerConfig | None = None,
    backends: dict[str, StateBackend] | None = None,
) -> FastAPI:
    config = config or LedgerConfig()
    if backends is None:
        backends = build_backends(config)
    contracts = {
        contract_type.name: contract_type(backends[contract_type.name])
        for contract_type in CONTRACT_TYPES
    }

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Ledger gateway up: channel=%s chaincode=%s msp=%s state=%s",
            config.channel_name, config.chaincode_name, config.msp_id,
            config.state_dir or "memory",
        )
        yield
        for backend in backends.values():
            await backend.close()
        logger.info("Ledger gateway stopped.")

    app = FastAPI(
        title="ledgerstore",
        description="REST gateway for versioned ledger record contracts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.backends = backends
    app.state.contracts = contracts

    app.add_exception_handler(LedgerError, _ledger_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    for router in ROUTERS:
        app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    config = LedgerConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
