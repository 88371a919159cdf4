"""
Deploy Configuration
Loads config/network_config.json and the .env file into one validated object
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple
from loguru import logger
from dotenv import load_dotenv
from eth_account import Account

from .exceptions import ConfigError

load_dotenv()

DEFAULT_CONFIG_PATH = "config/network_config.json"
LOCAL_NETWORKS = ("localhost", "hardhat")
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class NetworkConfig:
    """Connection settings for the selected network"""
    name: str
    url: str
    chain_id: Optional[int] = None
    accounts: Tuple[str, ...] = ()
    block_confirmations: Optional[int] = None
    browser_url: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.name in LOCAL_NETWORKS

    def __repr__(self) -> str:
        # Never print private keys
        return (
            f"NetworkConfig(name={self.name!r}, url={self.url!r}, "
            f"chain_id={self.chain_id!r}, accounts=<{len(self.accounts)} keys>, "
            f"block_confirmations={self.block_confirmations!r})"
        )


@dataclass(frozen=True)
class EtherscanConfig:
    api_key: Optional[str]
    api_url: str
    poll_interval: float = 3.0
    max_status_checks: int = 20
    request_timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class GasReporterConfig:
    enabled: bool = False
    output_file: str = "gas-report.txt"
    show_time_spent: bool = True
    currency: str = DEFAULT_CURRENCY
    coinmarketcap_key: Optional[str] = None
    token: str = "ETH"


@dataclass(frozen=True)
class PathsConfig:
    artifacts: Path = Path("artifacts")
    deployments: Path = Path("deployments")
    deploy: Path = Path("deploy")


@dataclass(frozen=True)
class TransactionConfig:
    receipt_timeout: float = 300.0
    confirmation_timeout: float = 900.0
    poll_interval: float = 2.0
    default_gas_limit: int = 3_000_000
    gas_limit_buffer: float = 1.2


@dataclass(frozen=True)
class DeployConfig:
    """Everything the deploy workflow needs, validated once at startup"""
    solidity: str
    network: NetworkConfig
    etherscan: EtherscanConfig
    gas_reporter: GasReporterConfig = field(default_factory=GasReporterConfig)
    named_accounts: Dict = field(default_factory=dict)
    paths: PathsConfig = field(default_factory=PathsConfig)
    transactions: TransactionConfig = field(default_factory=TransactionConfig)


def load_config(
    network_name: Optional[str] = None,
    config_path: str = DEFAULT_CONFIG_PATH,
    environ: Optional[Mapping[str, str]] = None
) -> DeployConfig:
    """
    Build a DeployConfig for one network

    Args:
        network_name: Network to target (None = default_network from the file)
        config_path: Path to the JSON config file
        environ: Environment mapping (None = os.environ)

    Returns:
        Validated DeployConfig

    Raises:
        ConfigError: If the file is unreadable or required values are missing
    """
    env = os.environ if environ is None else environ

    try:
        with open(config_path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    network_name = network_name or raw.get('default_network', 'localhost')
    networks = raw.get('networks', {})

    if network_name not in networks:
        raise ConfigError(
            f"Unknown network '{network_name}' (configured: {', '.join(sorted(networks)) or 'none'})"
        )

    network = _build_network(network_name, networks[network_name], env)

    config = DeployConfig(
        solidity=str(raw.get('solidity', '')),
        network=network,
        etherscan=_build_etherscan(raw.get('etherscan', {}), env),
        gas_reporter=_build_gas_reporter(raw.get('gas_reporter', {}), env),
        named_accounts=raw.get('named_accounts', {}),
        paths=_build_paths(raw.get('paths', {})),
        transactions=_build_transactions(raw.get('transactions', {}))
    )

    logger.debug(f"Loaded config for network {network_name}: {network!r}")
    return config


def _build_network(name: str, raw: Dict, env: Mapping[str, str]) -> NetworkConfig:
    """Resolve URL and accounts for a network, failing fast on gaps"""
    missing = []

    url = raw.get('url')
    if not url and raw.get('url_env'):
        url = env.get(raw['url_env'])
        if not url:
            missing.append(raw['url_env'])
    if not url and not raw.get('url_env'):
        raise ConfigError(f"Network '{name}' has neither 'url' nor 'url_env'")

    keys = {}
    for var in raw.get('accounts_env', []):
        value = env.get(var)
        if value:
            keys[var] = value.strip()
        elif name not in LOCAL_NETWORKS:
            missing.append(var)

    if missing:
        raise ConfigError(
            f"Missing environment variables for network '{name}': {', '.join(missing)}"
        )

    for var, key in keys.items():
        _check_private_key(var, key)
    accounts = list(keys.values())

    chain_id = raw.get('chain_id')
    if chain_id is None and name not in LOCAL_NETWORKS:
        raise ConfigError(f"Network '{name}' needs a 'chain_id'")
    if chain_id is not None and (not isinstance(chain_id, int) or isinstance(chain_id, bool)):
        raise ConfigError(f"chain_id for '{name}' must be an integer, got {chain_id!r}")

    confirmations = raw.get('block_confirmations')
    if confirmations is not None:
        if not isinstance(confirmations, int) or isinstance(confirmations, bool) or confirmations < 1:
            raise ConfigError(
                f"block_confirmations for '{name}' must be an integer >= 1, got {confirmations!r}"
            )

    return NetworkConfig(
        name=name,
        url=url,
        chain_id=chain_id,
        accounts=tuple(accounts),
        block_confirmations=confirmations,
        browser_url=raw.get('browser_url')
    )


def _check_private_key(var: str, key: str):
    """Reject malformed keys without ever echoing them"""
    try:
        Account.from_key(key)
    except Exception:
        # The original error and its frames carry the key
        raise ConfigError(f"{var} is not a valid private key (expected 32 bytes of hex)") from None


def _build_etherscan(raw: Dict, env: Mapping[str, str]) -> EtherscanConfig:
    api_key = env.get(raw.get('api_key_env', 'ETHERSCAN_KEY')) or None

    return EtherscanConfig(
        api_key=api_key,
        api_url=raw.get('api_url', 'https://api.etherscan.io/v2/api'),
        poll_interval=float(raw.get('poll_interval_seconds', 3)),
        max_status_checks=int(raw.get('max_status_checks', 20)),
        request_timeout=float(raw.get('request_timeout_seconds', 30))
    )


def _build_gas_reporter(raw: Dict, env: Mapping[str, str]) -> GasReporterConfig:
    # Any non-empty value turns the report on
    enabled = bool(env.get(raw.get('enabled_env', 'REPORT_GAS')))

    return GasReporterConfig(
        enabled=enabled,
        output_file=raw.get('output_file', 'gas-report.txt'),
        show_time_spent=bool(raw.get('show_time_spent', True)),
        currency=env.get(raw.get('currency_env', 'CURRENCY')) or DEFAULT_CURRENCY,
        coinmarketcap_key=env.get(raw.get('coinmarketcap_env', 'COIN_MARKET_KEY')) or None,
        token=raw.get('token', 'ETH')
    )


def _build_paths(raw: Dict) -> PathsConfig:
    return PathsConfig(
        artifacts=Path(raw.get('artifacts', 'artifacts')),
        deployments=Path(raw.get('deployments', 'deployments')),
        deploy=Path(raw.get('deploy', 'deploy'))
    )


def _build_transactions(raw: Dict) -> TransactionConfig:
    return TransactionConfig(
        receipt_timeout=float(raw.get('receipt_timeout_seconds', 300)),
        confirmation_timeout=float(raw.get('confirmation_timeout_seconds', 900)),
        poll_interval=float(raw.get('poll_interval_seconds', 2)),
        default_gas_limit=int(raw.get('default_gas_limit', 3_000_000)),
        gas_limit_buffer=float(raw.get('gas_limit_buffer', 1.2))
    )
