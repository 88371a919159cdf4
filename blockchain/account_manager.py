"""
Account Manager
Resolves named accounts (deployer, ...) and signs transactions for them
"""

from typing import Dict, Optional, Sequence, Union
from decimal import Decimal
from web3 import Web3
from eth_account import Account
from loguru import logger

from utils.config import NetworkConfig
from utils.exceptions import ConfigError


class AccountManager:
    """
    Manages the accounts available to deploy scripts:
    - Local accounts built from configured private keys (signed here)
    - Node accounts on local dev networks (signed by the node)
    """

    def __init__(
        self,
        w3: Web3,
        network: NetworkConfig,
        named_accounts: Optional[Dict] = None,
        private_keys: Optional[Sequence[str]] = None
    ):
        """
        Initialize Account Manager

        Args:
            w3: Web3 instance
            network: Network the accounts belong to
            named_accounts: Name -> index/address entry, e.g. {"deployer": {"default": 0}}
            private_keys: Private keys (defaults to the network's configured keys)
        """
        self.w3 = w3
        self.network = network
        self.named_accounts = named_accounts or {}

        keys = network.accounts if private_keys is None else private_keys
        self.local_accounts = [Account.from_key(key) for key in keys]
        self._signers = {acct.address: acct for acct in self.local_accounts}

        logger.info(
            f"Account Manager initialized with {len(self.local_accounts)} local account(s) "
            f"on {network.name}"
        )

    def get_accounts(self) -> list:
        """Addresses in index order: local keys first, node accounts otherwise"""
        if self.local_accounts:
            return [acct.address for acct in self.local_accounts]
        return list(self.w3.eth.accounts)

    def get_named_accounts(self) -> Dict[str, str]:
        """
        Resolve every named account to an address

        Returns:
            Dict of name -> checksummed address
        """
        return {name: self.resolve(name) for name in self.named_accounts}

    def resolve(self, name: str) -> str:
        """
        Resolve one named account

        The entry for a name is an index, an address, or a dict keyed by
        network name / chain id with a "default" fallback.

        Raises:
            ConfigError: If the name is unknown or points past the available accounts
        """
        if name not in self.named_accounts:
            raise ConfigError(f"Unknown named account: {name}")

        entry = self._select_entry(self.named_accounts[name])

        if entry is None:
            raise ConfigError(f"Named account '{name}' has no entry for network {self.network.name}")

        if isinstance(entry, str):
            if not Web3.is_address(entry):
                raise ConfigError(f"Named account '{name}' is not a valid address: {entry}")
            return Web3.to_checksum_address(entry)

        accounts = self.get_accounts()

        if entry >= len(accounts):
            raise ConfigError(
                f"Named account '{name}' uses index {entry} but only {len(accounts)} account(s) are available"
            )

        return Web3.to_checksum_address(accounts[entry])

    def _select_entry(self, entry: Union[int, str, Dict]) -> Union[int, str, None]:
        if not isinstance(entry, dict):
            return entry

        for key in (self.network.name, str(self.network.chain_id)):
            if key in entry:
                return entry[key]

        return entry.get('default')

    def has_signer(self, address: str) -> bool:
        """True if the address is backed by a local private key"""
        return Web3.to_checksum_address(address) in self._signers

    def sign_transaction(self, transaction: Dict, address: str):
        """
        Sign a transaction with the local key for an address

        Args:
            transaction: Transaction dict
            address: Sender address

        Returns:
            Signed transaction
        """
        account = self._signers.get(Web3.to_checksum_address(address))

        if account is None:
            raise ValueError(f"No local private key for {address}")

        return account.sign_transaction(transaction)

    def get_balance(self, address: str) -> Decimal:
        """Native balance of an address in ether"""
        balance_wei = self.w3.eth.get_balance(Web3.to_checksum_address(address))
        return Decimal(str(self.w3.from_wei(balance_wei, 'ether')))
