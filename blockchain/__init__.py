"""
Blockchain Interaction Package
Handles artifacts, accounts, transaction building and contract deployment
"""

from .models import DeploymentRequest, DeploymentResult
from .artifact_loader import ArtifactLoader, ContractArtifact, BuildInfo
from .account_manager import AccountManager
from .transaction_builder import TransactionBuilder
from .deployment_store import DeploymentStore
from .contract_deployer import ContractDeployer

__all__ = [
    'DeploymentRequest',
    'DeploymentResult',
    'ArtifactLoader',
    'ContractArtifact',
    'BuildInfo',
    'AccountManager',
    'TransactionBuilder',
    'DeploymentStore',
    'ContractDeployer'
]
