"""
Raffle Deployment
Deploys Raffle(entranceFee, interval) and verifies it on public networks
"""

import asyncio

from web3 import Web3
from loguru import logger

from blockchain.models import DeploymentRequest, DEFAULT_CONFIRMATIONS

TAGS = ["all", "Raffle"]

ENTRANCE_FEE = Web3.to_wei("0.001", "ether")
INTERVAL_SECONDS = "60"


async def main(env):
    """Deploy the Raffle contract"""
    deployer = env.get_named_accounts()['deployer']

    request = DeploymentRequest(
        contract_name="Raffle",
        constructor_args=(ENTRANCE_FEE, INTERVAL_SECONDS),
        sender=deployer,
        required_confirmations=env.network.block_confirmations or DEFAULT_CONFIRMATIONS
    )

    result = await asyncio.to_thread(env.deploy, request)

    if env.should_verify():
        await env.verify(result)

    logger.info("---Deployment completed ---")
