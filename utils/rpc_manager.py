"""
RPC Manager
Opens and checks the Web3 connection for the selected network
"""

from typing import Optional
from web3 import Web3
from loguru import logger

from .config import NetworkConfig
from .exceptions import NetworkConnectionError


class RPCManager:
    """
    Single-endpoint RPC connection for one deploy run
    """

    def __init__(self, network: NetworkConfig, request_timeout: int = 60):
        """
        Initialize RPC Manager

        Args:
            network: Network configuration
            request_timeout: HTTP request timeout in seconds
        """
        self.network = network
        self.request_timeout = request_timeout
        self.w3: Optional[Web3] = None

    def connect(self) -> Web3:
        """
        Connect to the network and confirm the chain id

        Returns:
            Connected Web3 instance

        Raises:
            NetworkConnectionError: If the node is unreachable or reports another chain
        """
        if self.w3 is not None:
            return self.w3

        w3 = Web3(Web3.HTTPProvider(
            self.network.url,
            request_kwargs={"timeout": self.request_timeout}
        ))

        if not w3.is_connected():
            raise NetworkConnectionError(f"Failed to connect to {self.network.name}")

        chain_id = w3.eth.chain_id
        expected = self.network.chain_id

        if expected is not None and chain_id != expected:
            raise NetworkConnectionError(
                f"Network {self.network.name} expects chain id {expected}, node reports {chain_id}"
            )

        logger.success(f"Connected to {self.network.name} (chain id {chain_id}, block {w3.eth.block_number})")

        self.w3 = w3
        return w3

