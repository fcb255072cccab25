"""
Unit tests for environment-driven settings.
"""

import pytest

from tokenvest.core.config import NetworkType, VestingSettings
from tokenvest.core.constants import DEFAULT_DEPLOYER_ACCOUNT
from tokenvest.core.vesting_exceptions import ConfigurationError

ENV_VARS = (
    "TOKENVEST_NETWORK",
    "TOKENVEST_DEPLOYER_ACCOUNT",
    "TOKENVEST_REQUIRE_FULL_ALLOCATION",
    "TOKENVEST_LOG_LEVEL",
    "TOKENVEST_LOG_FILE",
    "TOKENVEST_STATE_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_testnet_defaults():
    settings = VestingSettings.from_env()
    assert settings.network is NetworkType.TESTNET
    assert settings.deployer_account == DEFAULT_DEPLOYER_ACCOUNT
    assert settings.require_full_allocation is False
    assert settings.log_level == "INFO"
    assert settings.log_file == ""
    assert settings.state_dir.endswith("vesting")


def test_explicit_values(monkeypatch, tmp_path):
    monkeypatch.setenv("TOKENVEST_NETWORK", "MAINNET")
    monkeypatch.setenv("TOKENVEST_DEPLOYER_ACCOUNT", "factory.near")
    monkeypatch.setenv("TOKENVEST_REQUIRE_FULL_ALLOCATION", "yes")
    monkeypatch.setenv("TOKENVEST_LOG_LEVEL", "debug")
    monkeypatch.setenv("TOKENVEST_STATE_DIR", str(tmp_path))

    settings = VestingSettings.from_env()
    assert settings.network is NetworkType.MAINNET
    assert settings.deployer_account == "factory.near"
    assert settings.require_full_allocation is True
    assert settings.log_level == "DEBUG"
    assert settings.state_dir == str(tmp_path)


def test_mainnet_requires_deployer(monkeypatch):
    monkeypatch.setenv("TOKENVEST_NETWORK", "mainnet")
    with pytest.raises(ConfigurationError):
        VestingSettings.from_env()


@pytest.mark.parametrize(
    "name,value",
    [
        ("TOKENVEST_NETWORK", "devnet"),
        ("TOKENVEST_LOG_LEVEL", "loud"),
        ("TOKENVEST_REQUIRE_FULL_ALLOCATION", "maybe"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        VestingSettings.from_env()
