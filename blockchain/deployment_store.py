"""
Deployment Store
Persists deployment records under deployments/<network>/<ContractName>.json
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from loguru import logger

from utils.exceptions import DeploymentNotFoundError
from .artifact_loader import ContractArtifact
from .models import DeploymentResult

RECEIPT_FIELDS = (
    'from', 'to', 'contractAddress', 'transactionIndex', 'gasUsed',
    'blockHash', 'transactionHash', 'blockNumber', 'cumulativeGasUsed',
    'effectiveGasPrice', 'status'
)


class DeploymentStore:
    """
    Reads and writes one JSON record per deployed contract and network
    """

    def __init__(self, deployments_dir: Path, network_name: str, chain_id: Optional[int] = None):
        """
        Initialize Deployment Store

        Args:
            deployments_dir: Root deployments directory
            network_name: Network the records belong to
            chain_id: Chain id written to the .chainId marker
        """
        self.network_dir = Path(deployments_dir) / network_name
        self.network_name = network_name
        self.chain_id = chain_id

    def save(self, result: DeploymentResult, artifact: ContractArtifact) -> Path:
        """
        Write the record for a confirmed deployment

        Returns:
            Path of the record file
        """
        self.network_dir.mkdir(parents=True, exist_ok=True)

        if self.chain_id is not None:
            (self.network_dir / ".chainId").write_text(str(self.chain_id))

        path = self._record_path(result.contract_name)
        previous = self._read(path)

        record = {
            'address': result.address,
            'abi': artifact.abi,
            'transactionHash': result.transaction_hash,
            'receipt': _receipt_summary(result.receipt),
            'args': [_jsonable(arg) for arg in result.constructor_args],
            'numDeployments': (previous or {}).get('numDeployments', 0) + 1,
            'bytecode': artifact.bytecode,
            'deployedBytecode': artifact.deployed_bytecode
        }

        with open(path, 'w') as f:
            json.dump(record, f, indent=2)

        logger.debug(f"Saved deployment record {path}")
        return path

    def get(self, contract_name: str) -> Dict[str, Any]:
        """
        Load the record for a contract

        Raises:
            DeploymentNotFoundError: If the contract was never deployed on this network
        """
        record = self._read(self._record_path(contract_name))

        if record is None:
            raise DeploymentNotFoundError(
                f"No deployment of {contract_name} found for network {self.network_name}"
            )

        return record

    def _record_path(self, contract_name: str) -> Path:
        return self.network_dir / f"{contract_name}.json"

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except FileNotFoundError:
            return None


def _receipt_summary(receipt: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: _jsonable(receipt[key])
        for key in RECEIPT_FIELDS
        if key in receipt
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    # Large uint256 values would lose precision in JS tooling
    if isinstance(value, int) and not isinstance(value, bool) and value > 2**53:
        return str(value)
    return value
