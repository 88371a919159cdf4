"""
Deployment Models
Request and result records passed between the deploy and verify steps
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from web3 import Web3

DEFAULT_CONFIRMATIONS = 1


@dataclass(frozen=True)
class DeploymentRequest:
    """A contract to create, with the exact arguments and sender to use"""
    contract_name: str
    constructor_args: Tuple[Any, ...]
    sender: str
    required_confirmations: int = DEFAULT_CONFIRMATIONS

    def __post_init__(self):
        if not self.contract_name:
            raise ValueError("contract_name must not be empty")

        if not Web3.is_address(self.sender):
            raise ValueError(f"Invalid sender address: {self.sender!r}")

        confirmations = self.required_confirmations
        if not isinstance(confirmations, int) or isinstance(confirmations, bool) or confirmations < 1:
            raise ValueError(f"required_confirmations must be an integer >= 1, got {confirmations!r}")

        # Lists would make the request mutable
        object.__setattr__(self, 'constructor_args', tuple(self.constructor_args))


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a confirmed contract-creation transaction"""
    contract_name: str
    address: str
    transaction_hash: str
    constructor_args: Tuple[Any, ...]
    block_number: int
    gas_used: int
    confirmations: int
    receipt: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    effective_gas_price: Optional[int] = None
