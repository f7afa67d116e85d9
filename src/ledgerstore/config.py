"""Ledger gateway configuration as a plain frozen dataclass.

The host application builds this directly, or calls ``from_env()`` to read
the same environment variables the sample gateway applications use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


def _env(environ: Mapping[str, str], key: str, default: str) -> str:
    # Empty values fall back to the default, like ``process.env[key] || default``.
    return environ.get(key) or default


@dataclass(frozen=True)
class LedgerConfig:
    channel_name: str = "mychannel"
    chaincode_name: str = "basic"
    msp_id: str = "Org1MSP"
    gateway_url: str = "http://localhost:3000"
    host: str = "0.0.0.0"
    port: int = 3000
    state_dir: str | None = None  # None keeps the world state in memory
    log_level: str = "INFO"
    evaluate_timeout: float = 5.0
    endorse_timeout: float = 15.0
    submit_timeout: float = 5.0
    commit_status_timeout: float = 60.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LedgerConfig:
        env = os.environ if environ is None else environ
        return cls(
            channel_name=_env(env, "CHANNEL_NAME", cls.channel_name),
            chaincode_name=_env(env, "CHAINCODE_NAME", cls.chaincode_name),
            msp_id=_env(env, "MSP_ID", cls.msp_id),
            gateway_url=_env(env, "GATEWAY_URL", cls.gateway_url),
            host=_env(env, "HOST", cls.host),
            port=int(_env(env, "PORT", str(cls.port))),
            state_dir=env.get("LEDGER_STATE_DIR") or None,
            log_level=_env(env, "LOG_LEVEL", cls.log_level).upper(),
            evaluate_timeout=float(_env(env, "EVALUATE_TIMEOUT", str(cls.evaluate_timeout))),
            endorse_timeout=float(_env(env, "ENDORSE_TIMEOUT", str(cls.endorse_timeout))),
            submit_timeout=float(_env(env, "SUBMIT_TIMEOUT", str(cls.submit_timeout))),
            commit_status_timeout=float(
                _env(env, "COMMIT_STATUS_TIMEOUT", str(cls.commit_status_timeout))
            ),
        )
