"""
Gas Calculator
Gas limit estimation and fee parameters for deployment transactions
"""

from typing import Dict
from web3 import Web3
from loguru import logger

from .config import TransactionConfig

FALLBACK_PRIORITY_FEE_GWEI = 1


class GasCalculator:
    """
    Picks gas limit and fee fields for contract-creation transactions
    """

    def __init__(self, w3: Web3, tx_config: TransactionConfig):
        """
        Initialize Gas Calculator

        Args:
            w3: Web3 instance
            tx_config: Transaction settings (default limit, estimate buffer)
        """
        self.w3 = w3
        self.default_gas_limit = tx_config.default_gas_limit
        self.gas_limit_buffer = tx_config.gas_limit_buffer

    def estimate_gas_limit(self, constructor, sender: str) -> int:
        """
        Estimate gas for a constructor call with a safety buffer

        Args:
            constructor: web3 ContractConstructor
            sender: Sender address

        Returns:
            Gas limit
        """
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            gas_limit = int(gas_estimate * self.gas_limit_buffer)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            gas_limit = self.default_gas_limit

        logger.debug(f"Gas limit: {gas_limit}")
        return gas_limit

    def get_fee_params(self) -> Dict[str, int]:
        """
        Get fee fields for the next transaction

        EIP-1559 (maxFeePerGas, maxPriorityFeePerGas) when the latest block has
        a base fee, legacy gasPrice otherwise.

        Returns:
            Dict with fee fields in wei
        """
        latest_block = self.w3.eth.get_block('latest')
        base_fee_wei = latest_block.get('baseFeePerGas')

        if base_fee_wei is None:
            gas_price = self.w3.eth.gas_price
            logger.debug(f"Legacy gas price: {self.w3.from_wei(gas_price, 'gwei')} gwei")
            return {'gasPrice': int(gas_price)}

        try:
            priority_fee_wei = self.w3.eth.max_priority_fee
        except Exception as e:
            logger.warning(f"Priority fee lookup failed: {e}, using {FALLBACK_PRIORITY_FEE_GWEI} gwei")
            priority_fee_wei = self.w3.to_wei(FALLBACK_PRIORITY_FEE_GWEI, 'gwei')

        # Max fee = base fee * 2 + priority fee (buffer for fluctuations)
        max_fee_wei = (base_fee_wei * 2) + priority_fee_wei

        return {
            'maxFeePerGas': int(max_fee_wei),
            'maxPriorityFeePerGas': int(priority_fee_wei)
        }
