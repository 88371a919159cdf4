"""
Deploy Environment
What a deploy script sees: network, named accounts, deploy and verify
"""

from typing import Dict, List, Union
from web3 import Web3

from blockchain.account_manager import AccountManager
from blockchain.contract_deployer import ContractDeployer
from blockchain.models import DeploymentRequest, DeploymentResult
from utils.config import DeployConfig, NetworkConfig
from verification.models import VerificationRequest, VerificationResult
from verification.verifier import ContractVerifier


class DeployEnvironment:
    """
    Runtime environment handed to every deploy script's main(env)
    """

    def __init__(
        self,
        config: DeployConfig,
        w3: Web3,
        accounts: AccountManager,
        deployer: ContractDeployer,
        verifier: ContractVerifier
    ):
        self.config = config
        self.w3 = w3
        self.accounts = accounts
        self.deployer = deployer
        self.verifier = verifier

        self.deployments: List[DeploymentResult] = []
        self.verifications: List[VerificationResult] = []

    @property
    def network(self) -> NetworkConfig:
        return self.config.network

    def get_named_accounts(self) -> Dict[str, str]:
        return self.accounts.get_named_accounts()

    def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Run the deploy step; errors propagate

        Blocks until the confirmations arrive. Async scripts should call it
        through asyncio.to_thread so the event loop keeps running.
        """
        result = self.deployer.deploy(request)
        self.deployments.append(result)
        return result

    def should_verify(self) -> bool:
        """Verification only makes sense on public networks with an explorer key"""
        return not self.network.is_local and self.config.etherscan.enabled

    async def verify(self, target: Union[DeploymentResult, VerificationRequest]) -> VerificationResult:
        """Run the verify step; never raises"""
        if isinstance(target, DeploymentResult):
            target = VerificationRequest.from_deployment(target)

        result = await self.verifier.verify(target)
        self.verifications.append(result)
        return result
