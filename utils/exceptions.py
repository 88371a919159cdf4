"""
Exceptions
Error types raised by the deploy and verify workflow
"""


class RaffleDeployError(Exception):
    """Base exception for deployment tooling errors"""
    pass


class ConfigError(RaffleDeployError, ValueError):
    """Raised when configuration is missing or invalid"""
    pass


class NetworkConnectionError(RaffleDeployError, ConnectionError):
    """Raised when the RPC endpoint is unreachable or on the wrong chain"""
    pass


class ArtifactNotFoundError(RaffleDeployError, FileNotFoundError):
    """Raised when a compiled artifact or its build info is missing"""
    pass


class DeploymentError(RaffleDeployError):
    """Raised when a contract-creation transaction fails"""
    pass


class DeploymentNotFoundError(RaffleDeployError, LookupError):
    """Raised when no deployment record exists for a contract"""
    pass


class VerificationError(RaffleDeployError):
    """Raised when the block explorer rejects a verification"""
    pass


class AlreadyVerifiedError(VerificationError):
    """Raised when the block explorer reports the contract as already verified"""
    pass
