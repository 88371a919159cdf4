"""
Verification Models
Typed request and outcome of a block-explorer source verification
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from blockchain.models import DeploymentResult


class VerificationStatus(Enum):
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class VerificationRequest:
    """Address plus the exact constructor arguments used at deploy time"""
    address: str
    constructor_args: Tuple[Any, ...]
    contract_name: str

    @classmethod
    def from_deployment(cls, result: DeploymentResult) -> "VerificationRequest":
        return cls(
            address=result.address,
            constructor_args=tuple(result.constructor_args),
            contract_name=result.contract_name
        )


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    address: str
    message: str = ""
    guid: Optional[str] = None
    url: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (VerificationStatus.VERIFIED, VerificationStatus.ALREADY_VERIFIED)
