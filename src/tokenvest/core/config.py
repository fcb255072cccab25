"""
tokenvest Configuration

Environment-driven settings for a vesting deployment.

SECURITY NOTICE:
- The deployer account decides who may initialize a ledger
- Mainnet deployments must set TOKENVEST_DEPLOYER_ACCOUNT explicitly
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

from .constants import DEFAULT_DEPLOYER_ACCOUNT
from .vesting_exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


def _get_bool(env_var: str, default: bool = False) -> bool:
    value = os.getenv(env_var, "").strip().lower()
    if not value:
        return default
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{env_var} must be a boolean, got {value!r}")


def _get_deployer(network: str) -> str:
    """Get the deployer identity, with mainnet enforcement.

    On mainnet, a missing deployer raises ConfigurationError.
    On testnet, the default token factory account is used with a warning.
    """
    value = os.getenv("TOKENVEST_DEPLOYER_ACCOUNT", "").strip()
    if value:
        return value

    if network.lower() == NetworkType.MAINNET.value:
        raise ConfigurationError(
            "CRITICAL: TOKENVEST_DEPLOYER_ACCOUNT environment variable required for mainnet."
        )

    logger.warning(
        "TOKENVEST_DEPLOYER_ACCOUNT not set, using %s for testnet.",
        DEFAULT_DEPLOYER_ACCOUNT,
        extra={"event": "config.default_deployer"},
    )
    return DEFAULT_DEPLOYER_ACCOUNT


@dataclass(frozen=True)
class VestingSettings:
    """Resolved settings for one process."""

    network: NetworkType
    deployer_account: str
    require_full_allocation: bool
    log_level: str
    log_file: str
    state_dir: str

    @classmethod
    def from_env(cls) -> "VestingSettings":
        """
        Read settings from TOKENVEST_* environment variables.

        Raises:
            ConfigurationError: If a value is missing or invalid
        """
        network_name = os.getenv("TOKENVEST_NETWORK", NetworkType.TESTNET.value).strip().lower()
        try:
            network = NetworkType(network_name)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown network {network_name!r}") from exc

        log_level = os.getenv("TOKENVEST_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log level {log_level!r}")

        return cls(
            network=network,
            deployer_account=_get_deployer(network.value),
            require_full_allocation=_get_bool("TOKENVEST_REQUIRE_FULL_ALLOCATION", False),
            log_level=log_level,
            log_file=os.getenv("TOKENVEST_LOG_FILE", "").strip(),
            state_dir=os.getenv(
                "TOKENVEST_STATE_DIR", os.path.join(os.getcwd(), "data", "vesting")
            ),
        )
