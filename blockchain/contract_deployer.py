"""
Contract Deployer
Submits contract-creation transactions and waits for confirmations
"""

import time
from typing import Callable, Optional
from web3 import Web3
from web3.exceptions import TimeExhausted
from loguru import logger

from utils.config import TransactionConfig
from utils.exceptions import DeploymentError
from .account_manager import AccountManager
from .artifact_loader import ArtifactLoader
from .deployment_store import DeploymentStore
from .models import DeploymentRequest, DeploymentResult
from .transaction_builder import TransactionBuilder


class ContractDeployer:
    """
    Deploy step: create a contract, block until it has enough confirmations

    Submission errors (insufficient funds, RPC failures) propagate unchanged.
    Nothing is retried.
    """

    def __init__(
        self,
        w3: Web3,
        account_manager: AccountManager,
        artifact_loader: ArtifactLoader,
        tx_builder: TransactionBuilder,
        tx_config: TransactionConfig,
        deployment_store: Optional[DeploymentStore] = None,
        on_deployed: Optional[Callable[[DeploymentResult, float], None]] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize Contract Deployer

        Args:
            w3: Web3 instance
            account_manager: Signs for the sender
            artifact_loader: Source of ABI and bytecode
            tx_builder: Builds the creation transaction
            tx_config: Timeouts and polling interval
            deployment_store: Where confirmed deployments are recorded
            on_deployed: Called with (result, elapsed seconds) after confirmation
            sleep: Sleep function used while polling for confirmations
        """
        self.w3 = w3
        self.account_manager = account_manager
        self.artifact_loader = artifact_loader
        self.tx_builder = tx_builder
        self.deployment_store = deployment_store
        self.on_deployed = on_deployed
        self.sleep = sleep

        self.receipt_timeout = tx_config.receipt_timeout
        self.confirmation_timeout = tx_config.confirmation_timeout
        self.poll_interval = tx_config.poll_interval

    def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Deploy a contract

        Args:
            request: What to deploy, from whom, and how many confirmations to wait for

        Returns:
            DeploymentResult with the checksummed contract address

        Raises:
            DeploymentError: If the transaction reverts or creates no contract
            TimeExhausted: If the receipt or confirmations do not arrive in time
        """
        started = time.monotonic()

        artifact = self.artifact_loader.load(request.contract_name)
        args = artifact.normalize_args(request.constructor_args)
        sender = Web3.to_checksum_address(request.sender)

        transaction = self.tx_builder.build_deployment_tx(artifact, args, sender)

        if self.account_manager.has_signer(sender):
            signed_tx = self.account_manager.sign_transaction(transaction, sender)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        else:
            tx_hash = self.w3.eth.send_transaction(transaction)

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f'deploying "{request.contract_name}" (tx: {tx_hash_hex})...')

        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash,
            timeout=self.receipt_timeout,
            poll_latency=self.poll_interval
        )

        if receipt['status'] != 1:
            raise DeploymentError(f"Deployment of {request.contract_name} reverted (tx: {tx_hash_hex})")

        if not receipt.get('contractAddress'):
            raise DeploymentError(f"No contract address in receipt for tx {tx_hash_hex}")

        confirmations = self.wait_for_confirmations(
            receipt['blockNumber'],
            request.required_confirmations
        )

        result = DeploymentResult(
            contract_name=request.contract_name,
            address=Web3.to_checksum_address(receipt['contractAddress']),
            transaction_hash=tx_hash_hex,
            constructor_args=request.constructor_args,
            block_number=receipt['blockNumber'],
            gas_used=receipt['gasUsed'],
            confirmations=confirmations,
            receipt=dict(receipt),
            effective_gas_price=receipt.get('effectiveGasPrice')
        )

        logger.success(
            f'deployed "{result.contract_name}" at {result.address} '
            f'with {result.gas_used} gas ({confirmations} confirmations)'
        )

        if self.deployment_store is not None:
            self.deployment_store.save(result, artifact)

        if self.on_deployed is not None:
            self.on_deployed(result, time.monotonic() - started)

        return result

    def wait_for_confirmations(self, block_number: int, required: int) -> int:
        """
        Block until the transaction's block has enough blocks on top of it

        The block holding the transaction counts as the first confirmation.

        Args:
            block_number: Block that included the transaction
            required: Confirmations to wait for

        Returns:
            Confirmations observed

        Raises:
            TimeExhausted: If the threshold is not reached within the confirmation timeout
        """
        deadline = time.monotonic() + self.confirmation_timeout

        while True:
            confirmations = count_confirmations(block_number, self.w3.eth.block_number)

            if confirmations >= required:
                return confirmations

            if time.monotonic() >= deadline:
                raise TimeExhausted(
                    f"Only {confirmations}/{required} confirmations after "
                    f"{self.confirmation_timeout} seconds"
                )

            logger.debug(f"Waiting for confirmations: {confirmations}/{required}")
            self.sleep(self.poll_interval)


def count_confirmations(tx_block: int, latest_block: int) -> int:
    """Confirmations of a transaction mined in tx_block, given the chain head"""
    return max(0, latest_block - tx_block + 1)
