"""
Deploy Engine - Core orchestration logic
Wires the network, accounts, deployer and verifier, then runs deploy scripts
"""

import inspect
import time
from typing import Dict, List, Optional, Sequence
from loguru import logger
from web3 import Web3

from blockchain.account_manager import AccountManager
from blockchain.artifact_loader import ArtifactLoader
from blockchain.contract_deployer import ContractDeployer
from blockchain.deployment_store import DeploymentStore
from blockchain.models import DeploymentResult
from blockchain.transaction_builder import TransactionBuilder

from utils.config import DeployConfig
from utils.gas_calculator import GasCalculator
from utils.gas_reporter import GasReporter
from utils.rpc_manager import RPCManager

from verification.verifier import ContractVerifier

from .environment import DeployEnvironment
from .script_manager import ScriptManager


class DeployEngine:
    """
    Main Deploy Engine
    Runs the selected deploy scripts sequentially against one network
    """

    def __init__(self, config: DeployConfig, w3: Optional[Web3] = None):
        """
        Initialize Deploy Engine

        Args:
            config: Validated deploy configuration
            w3: Connected Web3 instance (None = connect using the network config)
        """
        logger.info(f"Initializing Deploy Engine for network {config.network.name}...")

        self.config = config

        # Connect (fails fast on unreachable node or wrong chain)
        self.w3 = w3 if w3 is not None else RPCManager(config.network).connect()

        # Core components
        self.artifact_loader = ArtifactLoader(config.paths.artifacts)
        self.account_manager = AccountManager(self.w3, config.network, config.named_accounts)
        self.gas_calculator = GasCalculator(self.w3, config.transactions)
        self.tx_builder = TransactionBuilder(self.w3, self.gas_calculator)
        self.deployment_store = DeploymentStore(
            config.paths.deployments,
            config.network.name,
            config.network.chain_id
        )
        self.gas_reporter = GasReporter(config.gas_reporter)

        self.deployer = ContractDeployer(
            self.w3,
            self.account_manager,
            self.artifact_loader,
            self.tx_builder,
            config.transactions,
            deployment_store=self.deployment_store,
            on_deployed=self.gas_reporter.record
        )
        self.verifier = ContractVerifier(config.etherscan, config.network, self.artifact_loader)

        self.env = DeployEnvironment(
            config,
            self.w3,
            self.account_manager,
            self.deployer,
            self.verifier
        )
        self.script_manager = ScriptManager(config.paths.deploy)

        self.start_time = None

        logger.success("Deploy Engine initialized successfully")

    async def run(self, tags: Sequence[str] = ()) -> List[DeploymentResult]:
        """
        Run deploy scripts matching the tags

        Deploy errors propagate; verification errors never do.

        Args:
            tags: Script tags to run (empty = all scripts)

        Returns:
            Deployments made during this run
        """
        self.start_time = time.time()
        scripts = self.script_manager.select(tags)

        if not scripts:
            logger.warning(f"No deploy scripts match tags: {', '.join(tags) or '(none)'}")

        try:
            for script in scripts:
                if script.skip is not None and script.skip(self.env):
                    logger.info(f"Skipping {script.name}")
                    continue

                logger.info(f"Running {script.name}")

                outcome = script.main(self.env)
                if inspect.isawaitable(outcome):
                    await outcome
        finally:
            await self.gas_reporter.finalize()
            self._log_stats()

        return self.env.deployments

    def get_stats(self) -> Dict:
        """Get run statistics"""
        verifications = self.env.verifications

        return {
            'network': self.config.network.name,
            'deployments': len(self.env.deployments),
            'verified': sum(1 for v in verifications if v.succeeded),
            'verification_failures': sum(1 for v in verifications if not v.succeeded),
            'elapsed_seconds': time.time() - self.start_time if self.start_time else 0.0
        }

    def _log_stats(self):
        stats = self.get_stats()

        logger.info("📊 Deploy Summary:")
        logger.info(f"  Network: {stats['network']}")
        logger.info(f"  Deployments: {stats['deployments']}")
        logger.info(f"  Verified: {stats['verified']}")
        logger.info(f"  Verification failures: {stats['verification_failures']}")
        logger.info(f"  Elapsed: {stats['elapsed_seconds']:.1f}s")
