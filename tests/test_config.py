"""Tests for LedgerConfig."""

import dataclasses

import pytest

from ledgerstore.config import LedgerConfig


class TestLedgerConfig:
    def test_defaults(self) -> None:
        config = LedgerConfig()
        assert config.channel_name == "mychannel"
        assert config.chaincode_name == "basic"
        assert config.msp_id == "Org1MSP"
        assert config.state_dir is None
        assert (config.evaluate_timeout, config.endorse_timeout) == (5.0, 15.0)
        assert (config.submit_timeout, config.commit_status_timeout) == (5.0, 60.0)

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            LedgerConfig().port = 8080  # type: ignore[misc]

    def test_from_empty_env(self) -> None:
        assert LedgerConfig.from_env({}) == LedgerConfig()

    def test_from_env_overrides(self) -> None:
        config = LedgerConfig.from_env({
            "CHANNEL_NAME": "loanchannel",
            "CHAINCODE_NAME": "loan",
            "MSP_ID": "Org2MSP",
            "PORT": "8080",
            "LEDGER_STATE_DIR": "/var/lib/ledger",
            "LOG_LEVEL": "debug",
            "COMMIT_STATUS_TIMEOUT": "30",
        })
        assert config.channel_name == "loanchannel"
        assert config.chaincode_name == "loan"
        assert config.msp_id == "Org2MSP"
        assert config.port == 8080
        assert config.state_dir == "/var/lib/ledger"
        assert config.log_level == "DEBUG"
        assert config.commit_status_timeout == 30.0

    def test_empty_values_fall_back_to_defaults(self) -> None:
        config = LedgerConfig.from_env({"CHANNEL_NAME": "", "PORT": "", "LEDGER_STATE_DIR": ""})
        assert config.channel_name == "mychannel"
        assert config.port == 3000
        assert config.state_dir is None

    def test_reads_process_env(self, monkeypatch) -> None:
        monkeypatch.setenv("MSP_ID", "Org3MSP")
        assert LedgerConfig.from_env().msp_id == "Org3MSP"
