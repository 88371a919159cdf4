"""
Contract Sizer
Reports runtime bytecode size of compiled contracts against the EIP-170 limit
"""

from typing import List, Tuple
from loguru import logger

from blockchain.artifact_loader import ArtifactLoader, MAX_CONTRACT_SIZE_BYTES


def contract_sizes(loader: ArtifactLoader) -> List[Tuple[str, float, bool]]:
    """
    Measure every compiled contract

    Returns:
        (fully qualified name, size in KiB, over the limit) per contract,
        largest first
    """
    sizes = [
        (artifact.fully_qualified_name, artifact.deployed_size / 1024, artifact.deployed_size > MAX_CONTRACT_SIZE_BYTES)
        for artifact in loader.list_artifacts()
    ]
    return sorted(sizes, key=lambda entry: entry[1], reverse=True)


def log_contract_sizes(loader: ArtifactLoader) -> bool:
    """
    Log the size table

    Returns:
        True if every contract fits under the limit
    """
    sizes = contract_sizes(loader)

    if not sizes:
        logger.warning(f"No artifacts found in {loader.contracts_dir}")
        return True

    for name, size_kib, oversized in sizes:
        if oversized:
            logger.warning(f"  {name}: {size_kib:.3f} KiB (exceeds {MAX_CONTRACT_SIZE_BYTES // 1024} KiB)")
        else:
            logger.info(f"  {name}: {size_kib:.3f} KiB")

    return not any(oversized for _, _, oversized in sizes)
