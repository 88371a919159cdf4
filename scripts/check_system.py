"""
System Check Script
Verifies configuration, connection, balance and artifacts before deploying

Usage: python scripts/check_system.py [network]
"""

import sys
from loguru import logger

from blockchain.account_manager import AccountManager
from blockchain.artifact_loader import ArtifactLoader
from utils.config import DeployConfig, load_config
from utils.contract_sizer import log_contract_sizes
from utils.exceptions import ConfigError, RaffleDeployError
from utils.rpc_manager import RPCManager

MIN_DEPLOYER_BALANCE_ETH = 0.01


def check_configuration(network_name=None):
    """Load and validate config/network_config.json plus .env"""
    logger.info("Checking configuration...")

    try:
        config = load_config(network_name)
    except ConfigError as e:
        logger.error(f"  ✗ {e}")
        return None

    logger.success(f"  ✓ Configuration valid for network {config.network.name}")

    if not config.network.is_local and not config.etherscan.enabled:
        logger.warning("  Explorer API key not set - verification will be skipped")

    return config


def check_rpc_connection(config: DeployConfig):
    """Check the RPC endpoint and chain id"""
    logger.info("Checking RPC connection...")

    try:
        w3 = RPCManager(config.network).connect()
    except RaffleDeployError as e:
        logger.error(f"  ✗ {e}")
        return None

    logger.success(f"  ✓ {config.network.name}: Connected (Block: {w3.eth.block_number})")
    return w3


def check_deployer_balance(config: DeployConfig, w3) -> bool:
    """Check the deployer account can pay for a deployment"""
    logger.info("Checking deployer balance...")

    accounts = AccountManager(w3, config.network, config.named_accounts)
    deployer = accounts.resolve('deployer')
    balance = accounts.get_balance(deployer)

    logger.info(f"  Deployer {deployer}: {balance:.4f} ETH")

    if balance < MIN_DEPLOYER_BALANCE_ETH:
        logger.error(f"  ✗ Deployer balance low (need at least {MIN_DEPLOYER_BALANCE_ETH} ETH)")
        return False

    logger.success("  ✓ Deployer balance sufficient")
    return True


def check_artifacts(config: DeployConfig) -> bool:
    """Check compiled artifacts exist, match the configured compiler, and fit the size limit"""
    logger.info("Checking contract artifacts...")

    loader = ArtifactLoader(config.paths.artifacts)
    artifacts = loader.list_artifacts()

    if not artifacts:
        logger.error(f"  ✗ No artifacts in {loader.contracts_dir}")
        logger.info("  Run 'npx hardhat compile' first")
        return False

    ok = True
    for artifact in artifacts:
        try:
            build_info = loader.load_build_info(artifact)
        except RaffleDeployError as e:
            logger.warning(f"  {artifact.contract_name}: {e}")
            continue

        if config.solidity and build_info.solc_version != config.solidity:
            logger.error(
                f"  ✗ {artifact.contract_name} compiled with {build_info.solc_version}, "
                f"config expects {config.solidity}"
            )
            ok = False

    return log_contract_sizes(loader) and ok


def main(network_name=None):
    """Run all system checks"""
    logger.info("=" * 70)
    logger.info("Raffle Deploy System Check")
    logger.info("=" * 70)

    results = []

    config = check_configuration(network_name)
    results.append(("Configuration", config is not None))

    if config is not None:
        logger.info("")
        results.append(("Contract Artifacts", check_artifacts(config)))

        logger.info("")
        w3 = check_rpc_connection(config)
        results.append(("RPC Connection", w3 is not None))

        if w3 is not None:
            logger.info("")
            try:
                results.append(("Deployer Balance", check_deployer_balance(config, w3)))
            except RaffleDeployError as e:
                logger.error(f"  ✗ {e}")
                results.append(("Deployer Balance", False))

    # Summary
    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)

    passed = sum(1 for _, result in results if result)
    total = len(results)

    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")

    if passed == total:
        logger.success("✅ Ready to deploy")
        logger.info("Deploy: python main.py deploy --network <name>")
        return 0

    logger.error("❌ Not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
