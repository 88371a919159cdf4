"""
Shared pytest fixtures
"""

import json
from pathlib import Path
from typing import Dict, List
from unittest.mock import Mock, PropertyMock

import pytest

from utils.config import EtherscanConfig, NetworkConfig, TransactionConfig

# Hardhat's well-known first dev account
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

RAFFLE_INPUTS = [
    {"internalType": "uint256", "name": "entranceFee", "type": "uint256"},
    {"internalType": "uint256", "name": "interval", "type": "uint256"}
]


def write_artifact(artifacts_dir: Path, name: str, inputs: List[Dict], source: str = None) -> Path:
    """Write a Hardhat-style artifact, debug file and build info"""
    source = source or f"contracts/{name}.sol"
    contract_dir = artifacts_dir / source
    contract_dir.mkdir(parents=True, exist_ok=True)

    build_info_dir = artifacts_dir / "build-info"
    build_info_dir.mkdir(parents=True, exist_ok=True)

    artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": name,
        "sourceName": source,
        "abi": [
            {"inputs": inputs, "stateMutability": "nonpayable", "type": "constructor"},
            {"inputs": [], "name": "getEntranceFee", "outputs": [{"type": "uint256", "name": ""}],
             "stateMutability": "view", "type": "function"}
        ],
        "bytecode": "0x6080604052348015600f57600080fd5b50",
        "deployedBytecode": "0x60806040",
        "linkReferences": {},
        "deployedLinkReferences": {}
    }
    path = contract_dir / f"{name}.json"
    path.write_text(json.dumps(artifact))

    (contract_dir / f"{name}.dbg.json").write_text(json.dumps({
        "_format": "hh-sol-dbg-1",
        "buildInfo": "../../build-info/abc123.json"
    }))

    (build_info_dir / "abc123.json").write_text(json.dumps({
        "_format": "hh-sol-build-info-1",
        "id": "abc123",
        "solcVersion": "0.8.16",
        "solcLongVersion": "0.8.16+commit.07a7930e",
        "input": {
            "language": "Solidity",
            "sources": {source: {"content": "pragma solidity ^0.8.16;"}},
            "settings": {"optimizer": {"enabled": False, "runs": 200}}
        },
        "output": {}
    }))

    return path


@pytest.fixture
def artifacts_dir(tmp_path):
    """Artifacts directory holding Raffle(uint256 entranceFee, uint256 interval)"""
    path = tmp_path / "artifacts"
    write_artifact(path, "Raffle", RAFFLE_INPUTS)
    return path


@pytest.fixture
def local_network():
    return NetworkConfig(name="localhost", url="http://127.0.0.1:8545/", chain_id=31337)


@pytest.fixture
def sepolia_network():
    return NetworkConfig(
        name="sepolia",
        url="https://sepolia.example.com",
        chain_id=11155111,
        accounts=(DEV_PRIVATE_KEY,),
        block_confirmations=6,
        browser_url="https://sepolia.etherscan.io"
    )


@pytest.fixture
def etherscan_config():
    return EtherscanConfig(
        api_key="TESTKEY",
        api_url="https://api.etherscan.example/v2/api",
        poll_interval=0,
        max_status_checks=3
    )


@pytest.fixture
def tx_config():
    return TransactionConfig(
        receipt_timeout=5,
        confirmation_timeout=5,
        poll_interval=0,
        default_gas_limit=3_000_000,
        gas_limit_buffer=1.2
    )


@pytest.fixture
def receipt():
    return {
        'status': 1,
        'contractAddress': CONTRACT_ADDRESS.lower(),
        'blockNumber': 100,
        'gasUsed': 812345,
        'effectiveGasPrice': 2_000_000_000,
        'transactionHash': b'\x12' * 32,
        'from': DEV_ADDRESS
    }


@pytest.fixture
def mock_w3(receipt):
    """Mock Web3 instance for a chain whose head is the receipt's block"""
    w3 = Mock()
    w3.eth.chain_id = 31337
    w3.eth.accounts = [DEV_ADDRESS]
    w3.eth.get_transaction_count.return_value = 0
    w3.eth.get_block.return_value = {'baseFeePerGas': 1_000_000_000}
    w3.eth.max_priority_fee = 1_000_000_000
    w3.eth.send_raw_transaction.return_value = b'\x12' * 32
    w3.eth.send_transaction.return_value = b'\x12' * 32
    w3.eth.wait_for_transaction_receipt.return_value = receipt
    type(w3.eth).block_number = PropertyMock(return_value=receipt['blockNumber'])

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 1_000_000
    constructor.build_transaction.side_effect = lambda params: dict(params, data='0x6080')

    return w3


class FakeResponse:
    """Minimal aiohttp response used as an async context manager"""

    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Replays queued responses and records every request"""

    def __init__(self, get_responses=(), post_responses=()):
        self.get_responses = list(get_responses)
        self.post_responses = list(post_responses)
        self.requests = []
        self.closed = False

    def get(self, url, params=None, **kwargs):
        self.requests.append(('GET', url, params, kwargs))
        return self.get_responses.pop(0)

    def post(self, url, params=None, data=None, **kwargs):
        self.requests.append(('POST', url, params, data))
        return self.post_responses.pop(0)

    async def close(self):
        self.closed = True
