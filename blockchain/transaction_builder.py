"""
Transaction Builder
Constructs contract-creation transactions from compiled artifacts
"""

from typing import Any, Dict, Sequence
from web3 import Web3
from loguru import logger

from utils.gas_calculator import GasCalculator
from .artifact_loader import ContractArtifact


class TransactionBuilder:
    """
    Builds unsigned deployment transactions
    """

    def __init__(self, w3: Web3, gas_calculator: GasCalculator):
        """
        Initialize Transaction Builder

        Args:
            w3: Web3 instance
            gas_calculator: Gas limit and fee source
        """
        self.w3 = w3
        self.gas_calculator = gas_calculator

    def build_deployment_tx(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any],
        sender: str
    ) -> Dict:
        """
        Build a contract-creation transaction

        Args:
            artifact: Compiled contract
            constructor_args: Arguments already normalized against the ABI
            sender: Sender address

        Returns:
            Transaction dict
        """
        sender = Web3.to_checksum_address(sender)

        Contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        constructor = Contract.constructor(*constructor_args)

        gas_limit = self.gas_calculator.estimate_gas_limit(constructor, sender)

        tx_params = {
            'from': sender,
            'nonce': self.w3.eth.get_transaction_count(sender, 'pending'),
            'gas': gas_limit,
            'chainId': self.w3.eth.chain_id
        }
        tx_params.update(self.gas_calculator.get_fee_params())

        transaction = constructor.build_transaction(tx_params)

        logger.debug(
            f"Built deployment tx for {artifact.contract_name}: "
            f"nonce={tx_params['nonce']} gas={gas_limit}"
        )

        return transaction
