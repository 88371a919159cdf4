"""
Verification Package
Publishes contract source to block explorers
"""

from .models import VerificationRequest, VerificationResult, VerificationStatus
from .explorer_client import EtherscanClient, classify_explorer_message
from .verifier import ContractVerifier

__all__ = [
    'VerificationRequest',
    'VerificationResult',
    'VerificationStatus',
    'EtherscanClient',
    'classify_explorer_message',
    'ContractVerifier'
]
