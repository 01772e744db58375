"""
Configuration loading and validation for the cycle arbitrage engine.

Networks and paths are data, not code: adding a chain or a cycle is a
YAML change. Everything is validated once at startup; any problem raises
ConfigurationError before a single worker starts.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import yaml
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from .exceptions import ConfigurationError
from .types import DEFAULT_FEE_BPS, DEFAULT_MULTICALL_ADDRESS, Network, PathSpec, PoolReference

MIN_PATH_LENGTH = 2


class EngineConfig:
    """
    Parsed and validated engine configuration.

    Attributes:
        networks: All configured networks, enabled or not
        rpc_timeout_sec: HTTP timeout for each RPC request
        simulate_strikes: If True, preflight strikes with eth_call
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config

        Raises:
            ConfigurationError: If required fields missing or invalid
        """
        self.rpc_timeout_sec: float = float(config_dict.get("rpc_timeout_sec", 10))
        self.simulate_strikes: bool = bool(config_dict.get("simulate_strikes", True))

        networks_raw = config_dict.get("networks")
        if not isinstance(networks_raw, list) or not networks_raw:
            raise ConfigurationError("Config must define a non-empty 'networks' list")

        self.networks: List[Network] = []
        seen = set()
        for i, raw in enumerate(networks_raw):
            network = _parse_network(raw, i)
            if network.name in seen:
                raise ConfigurationError(f"Duplicate network name: {network.name}")
            seen.add(network.name)
            self.networks.append(network)

        if not self.enabled_networks:
            raise ConfigurationError("No enabled networks configured")

    @property
    def enabled_networks(self) -> List[Network]:
        return [n for n in self.networks if n.enabled]


def _parse_network(raw: Any, index: int) -> Network:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Network config {index} must be a dict")

    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ConfigurationError(f"Network config {index} missing 'name'")

    enabled = bool(raw.get("enabled", True))

    chain_id = raw.get("chain_id")
    if not isinstance(chain_id, int) or isinstance(chain_id, bool):
        raise ConfigurationError(f"Network '{name}' missing integer 'chain_id'")

    rpc_url = _resolve(raw, "rpc_url")
    executor_address = _resolve(raw, "executor_address")

    if not enabled:
        # Disabled networks are never started, so their endpoints may be unset
        return Network(
            name=name,
            chain_id=chain_id,
            rpc_url=rpc_url or "",
            enabled=False,
            executor_address=executor_address,
        )

    if not rpc_url:
        raise ConfigurationError(f"Network '{name}' has no RPC endpoint configured")
    if not rpc_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"Network '{name}' RPC URL must be http(s): {rpc_url}")
    if not executor_address:
        raise ConfigurationError(f"Network '{name}' has no executor address configured")

    poll_interval_sec = float(raw.get("poll_interval_sec", 2))
    if poll_interval_sec <= 0:
        raise ConfigurationError(f"Network '{name}' poll_interval_sec must be positive")

    gas_limit = int(raw.get("gas_limit", 500_000))
    if gas_limit <= 0:
        raise ConfigurationError(f"Network '{name}' gas_limit must be positive")

    paths_raw = raw.get("paths", [])
    if not isinstance(paths_raw, list) or not paths_raw:
        raise ConfigurationError(f"Network '{name}' must define at least one path")

    return Network(
        name=name,
        chain_id=chain_id,
        rpc_url=rpc_url,
        poll_interval_sec=poll_interval_sec,
        enabled=True,
        multicall_address=_checksum(
            raw.get("multicall_address", DEFAULT_MULTICALL_ADDRESS), f"{name}.multicall_address"
        ),
        executor_address=_checksum(executor_address, f"{name}.executor_address"),
        private_key_env=str(raw.get("private_key_env", "PRIVATE_KEY")),
        gas_limit=gas_limit,
        attach_value=bool(raw.get("attach_value", True)),
        paths=tuple(_parse_path(p, name, j) for j, p in enumerate(paths_raw)),
    )


def _parse_path(raw: Any, network: str, index: int) -> PathSpec:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Network '{network}' path {index} must be a dict")

    name = raw.get("name") or f"{network}-path-{index}"

    pools_raw = raw.get("pools", [])
    if not isinstance(pools_raw, list) or len(pools_raw) < MIN_PATH_LENGTH:
        raise ConfigurationError(
            f"Path '{name}' needs at least {MIN_PATH_LENGTH} pools to form a cycle"
        )

    amount_in = _parse_wei(raw, "amount_in", name, required=True)
    if amount_in <= 0:
        raise ConfigurationError(f"Path '{name}' amount_in must be positive")

    return PathSpec(
        name=name,
        pools=tuple(_parse_pool(p, name, k) for k, p in enumerate(pools_raw)),
        amount_in=amount_in,
        profit_threshold=_parse_wei(raw, "profit_threshold", name, required=False),
    )


def _parse_pool(raw: Any, path: str, position: int) -> PoolReference:
    if isinstance(raw, str):
        raw = {"address": raw}
    if not isinstance(raw, dict) or not raw.get("address"):
        raise ConfigurationError(f"Path '{path}' pool {position} missing 'address'")

    fee_bps = int(raw.get("fee_bps", DEFAULT_FEE_BPS))
    if not 0 <= fee_bps < 10_000:
        raise ConfigurationError(f"Path '{path}' pool {position} fee_bps out of range: {fee_bps}")

    return PoolReference(
        address=_checksum(raw["address"], f"{path}.pools[{position}]"),
        position=position,
        reverse=bool(raw.get("reverse", False)),
        fee_bps=fee_bps,
    )


def _parse_wei(raw: Dict[str, Any], key: str, path: str, required: bool) -> int:
    """
    Read an amount given either in wei (`key`) or in ether (`key_eth`).
    """
    if key in raw:
        value = raw[key]
        try:
            amount = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Path '{path}' {key} must be an integer (wei)") from e
    elif f"{key}_eth" in raw:
        try:
            amount = int(Web3.to_wei(Decimal(str(raw[f"{key}_eth"])), "ether"))
        except (InvalidOperation, ValueError) as e:
            raise ConfigurationError(f"Path '{path}' {key}_eth is not a valid amount") from e
    elif required:
        raise ConfigurationError(f"Path '{path}' missing '{key}' or '{key}_eth'")
    else:
        amount = 0

    if amount < 0:
        raise ConfigurationError(f"Path '{path}' {key} must be non-negative")
    return amount


def _resolve(raw: Dict[str, Any], key: str) -> Optional[str]:
    """Value of `key`, or of the environment variable named by `key_env`."""
    value = raw.get(key)
    if value:
        return str(value)
    env_name = raw.get(f"{key}_env")
    if env_name:
        return os.getenv(env_name) or None
    return None


def _checksum(address: Any, label: str) -> str:
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ConfigurationError(f"Invalid address for {label}: {address}")
    return Web3.to_checksum_address(address)


def load_signer(network: Network) -> LocalAccount:
    """
    Load the signer account for a network from its environment variable.

    Raises:
        ConfigurationError: If the variable is unset or holds an invalid key
    """
    private_key = os.getenv(network.private_key_env)
    if not private_key:
        raise ConfigurationError(
            f"Network '{network.name}' requires {network.private_key_env} for live strikes"
        )
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"{network.private_key_env} does not hold a valid private key"
        ) from e


def load_config(config_path: str) -> EngineConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("Config file must contain a YAML dictionary")

    return EngineConfig(config_dict)
