"""
Explorer Client
Etherscan-compatible contract verification API (v2, multichain)
"""

import asyncio
import json
from typing import Any, Dict, Optional
import aiohttp
from loguru import logger

from utils.config import EtherscanConfig
from utils.exceptions import AlreadyVerifiedError, VerificationError
from .models import VerificationStatus

PENDING_MESSAGE = "pending in queue"
ALREADY_VERIFIED_MESSAGE = "already verified"
PASS_MESSAGE = "pass - verified"


def classify_explorer_message(message: str) -> Optional[VerificationStatus]:
    """
    Map an explorer reply text to a verification status

    Returns:
        VERIFIED, ALREADY_VERIFIED, or None when the text is neither
    """
    text = (message or "").lower()

    if ALREADY_VERIFIED_MESSAGE in text:
        return VerificationStatus.ALREADY_VERIFIED

    if PASS_MESSAGE in text:
        return VerificationStatus.VERIFIED

    return None


class EtherscanClient:
    """
    Talks to the explorer API; use as an async context manager

    Explorer text replies are turned into VerificationStatus values or typed
    exceptions here, so callers never match on message strings.
    """

    def __init__(
        self,
        config: EtherscanConfig,
        chain_id: int,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize Explorer Client

        Args:
            config: Explorer API settings (URL, key, polling)
            chain_id: Chain the contract lives on
            session: Existing aiohttp session (None = open one per context)
        """
        self.config = config
        self.chain_id = chain_id
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "EtherscanClient":
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None

    async def is_verified(self, address: str) -> bool:
        """
        Check if an address already has published source

        Raises:
            VerificationError: If the explorer rejects the request
        """
        data = await self._get({
            'module': 'contract',
            'action': 'getsourcecode',
            'address': address
        })

        if str(data.get('status')) != '1':
            raise VerificationError(f"getsourcecode failed: {data.get('result') or data.get('message')}")

        result = data.get('result') or []
        return bool(result) and bool(result[0].get('SourceCode'))

    async def submit(
        self,
        address: str,
        source_input: Dict[str, Any],
        contract_name: str,
        compiler_version: str,
        constructor_args: str
    ) -> str:
        """
        Submit standard-json source for verification

        Args:
            address: Deployed contract address
            source_input: Solidity standard-json compiler input
            contract_name: Fully qualified name, e.g. contracts/Raffle.sol:Raffle
            compiler_version: e.g. v0.8.16+commit.07a7930e
            constructor_args: ABI-encoded arguments, hex without 0x

        Returns:
            GUID to poll with wait_for_verification

        Raises:
            AlreadyVerifiedError: If the explorer already has the source
            VerificationError: For any other rejection
        """
        form = {
            'module': 'contract',
            'action': 'verifysourcecode',
            'contractaddress': address,
            'sourceCode': json.dumps(source_input),
            'codeformat': 'solidity-standard-json-input',
            'contractname': contract_name,
            'compilerversion': compiler_version,
            # Explorer's own spelling
            'constructorArguements': constructor_args
        }

        data = await self._post(form)
        result = str(data.get('result', ''))

        if str(data.get('status')) == '1':
            logger.info(f"Verification submitted for {address} (guid: {result})")
            return result

        if classify_explorer_message(result) is VerificationStatus.ALREADY_VERIFIED:
            raise AlreadyVerifiedError(result)

        raise VerificationError(result or str(data.get('message')))

    async def wait_for_verification(self, guid: str) -> VerificationStatus:
        """
        Poll the verification status until the explorer decides

        Returns:
            VERIFIED or ALREADY_VERIFIED

        Raises:
            VerificationError: If verification fails or stays pending
        """
        for attempt in range(self.config.max_status_checks):
            data = await self._get({
                'module': 'contract',
                'action': 'checkverifystatus',
                'guid': guid
            })
            result = str(data.get('result', ''))

            if PENDING_MESSAGE in result.lower():
                logger.debug(f"Verification pending ({attempt + 1}/{self.config.max_status_checks})")
                await asyncio.sleep(self.config.poll_interval)
                continue

            status = classify_explorer_message(result)
            if status is not None:
                return status

            raise VerificationError(result or str(data.get('message')))

        raise VerificationError(
            f"Verification still pending after {self.config.max_status_checks} checks (guid: {guid})"
        )

    async def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        async with self.session.get(self.config.api_url, params=self._with_auth(params)) as response:
            return await self._read(response)

    async def _post(self, form: Dict[str, Any]) -> Dict[str, Any]:
        async with self.session.post(
            self.config.api_url,
            params={'chainid': str(self.chain_id)},
            data=self._with_auth(form)
        ) as response:
            return await self._read(response)

    def _with_auth(self, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(params)
        payload.setdefault('chainid', str(self.chain_id))
        payload['apikey'] = self.config.api_key
        return payload

    async def _read(self, response) -> Dict[str, Any]:
        if response.status != 200:
            raise VerificationError(f"Explorer request failed with HTTP {response.status}")

        return await response.json(content_type=None)
