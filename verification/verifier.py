"""
Contract Verifier
Best-effort source verification: never fails the deploy that preceded it
"""

from typing import Callable, Optional
from loguru import logger

from blockchain.artifact_loader import ArtifactLoader
from utils.config import EtherscanConfig, NetworkConfig
from utils.exceptions import AlreadyVerifiedError
from .explorer_client import EtherscanClient
from .models import VerificationRequest, VerificationResult, VerificationStatus


class ContractVerifier:
    """
    Verify step

    Outcomes:
    - VERIFIED: explorer accepted the source
    - ALREADY_VERIFIED: treated as success
    - FAILED: any other error, logged and returned (never raised)
    - SKIPPED: no explorer API key configured
    """

    def __init__(
        self,
        etherscan_config: EtherscanConfig,
        network: NetworkConfig,
        artifact_loader: ArtifactLoader,
        client_factory: Optional[Callable[[], EtherscanClient]] = None
    ):
        """
        Initialize Contract Verifier

        Args:
            etherscan_config: Explorer API settings
            network: Network the contract was deployed to
            artifact_loader: Source of build info and constructor ABI
            client_factory: Builds the explorer client (overridable in tests)
        """
        self.config = etherscan_config
        self.network = network
        self.artifact_loader = artifact_loader
        self.client_factory = client_factory or (
            lambda: EtherscanClient(etherscan_config, network.chain_id)
        )

    async def verify(self, request: VerificationRequest) -> VerificationResult:
        """
        Verify a deployed contract

        Args:
            request: Address and the constructor arguments used at deploy time

        Returns:
            VerificationResult (never raises)
        """
        logger.info("Contract verification in progress...")

        if not self.config.enabled:
            logger.warning("Explorer API key not set - skipping verification")
            return VerificationResult(VerificationStatus.SKIPPED, request.address, "no API key")

        try:
            result = await self._verify(request)
        except AlreadyVerifiedError as e:
            logger.info("Contract is already verified")
            return VerificationResult(
                VerificationStatus.ALREADY_VERIFIED,
                request.address,
                str(e),
                url=self.explorer_url(request.address)
            )
        except Exception as e:
            # Verification is best-effort
            logger.error(f"Contract verification failed: {e!r}")
            return VerificationResult(VerificationStatus.FAILED, request.address, str(e))

        if result.status is VerificationStatus.ALREADY_VERIFIED:
            logger.info("Contract is already verified")
        else:
            logger.success(f"Contract verified: {result.url or result.address}")

        return result

    async def _verify(self, request: VerificationRequest) -> VerificationResult:
        artifact = self.artifact_loader.load(request.contract_name)
        url = self.explorer_url(request.address)

        async with self.client_factory() as client:
            if await client.is_verified(request.address):
                raise AlreadyVerifiedError(f"{request.address} is already verified")

            build_info = self.artifact_loader.load_build_info(artifact)

            guid = await client.submit(
                address=request.address,
                source_input=build_info.input,
                contract_name=artifact.fully_qualified_name,
                compiler_version=build_info.compiler_version,
                constructor_args=artifact.encode_constructor_args(request.constructor_args)
            )

            status = await client.wait_for_verification(guid)

        return VerificationResult(status, request.address, guid=guid, url=url)

    def explorer_url(self, address: str) -> Optional[str]:
        if not self.network.browser_url:
            return None
        return f"{self.network.browser_url.rstrip('/')}/address/{address}#code"
