"""
Utilities Package
Configuration, RPC connection, gas handling and reporting
"""

from .exceptions import (
    RaffleDeployError,
    ConfigError,
    NetworkConnectionError,
    ArtifactNotFoundError,
    DeploymentError,
    DeploymentNotFoundError,
    VerificationError,
    AlreadyVerifiedError
)
from .config import DeployConfig, load_config
from .rpc_manager import RPCManager
from .gas_calculator import GasCalculator
from .gas_reporter import GasReporter

__all__ = [
    'RaffleDeployError',
    'ConfigError',
    'NetworkConnectionError',
    'ArtifactNotFoundError',
    'DeploymentError',
    'DeploymentNotFoundError',
    'VerificationError',
    'AlreadyVerifiedError',
    'DeployConfig',
    'load_config',
    'RPCManager',
    'GasCalculator',
    'GasReporter'
]
