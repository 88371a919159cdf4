"""
Raffle Deploy - Main Entry Point
Deploy, verify and size the Raffle contract from the command line
"""

import asyncio
import sys
import click
from loguru import logger

from blockchain.artifact_loader import ArtifactLoader
from blockchain.deployment_store import DeploymentStore
from engine.deploy_engine import DeployEngine
from utils.config import DEFAULT_CONFIG_PATH, load_config
from utils.contract_sizer import log_contract_sizes
from utils.exceptions import ConfigError, RaffleDeployError
from verification.models import VerificationRequest
from verification.verifier import ContractVerifier


def configure_logging(verbose: bool = False):
    """Configure loguru sinks"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "INFO",
        diagnose=False
    )
    logger.add(
        "data/logs/deploy.log",
        rotation="1 day",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG",
        diagnose=False
    )


def run_or_exit(func, *args, **kwargs):
    """Run a command body; fatal errors are logged and exit with status 1"""
    try:
        return func(*args, **kwargs)
    except RaffleDeployError as e:
        logger.error(str(e))
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
    sys.exit(1)


@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Network configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    configure_logging(verbose)
    ctx.obj = {'config_path': config_path}


@cli.command()
@click.option("--network", "-n", default=None, help="Network name (default from config)")
@click.option("--tags", "-t", default="", help="Comma separated deploy script tags")
@click.pass_context
def deploy(ctx, network, tags):
    """Run deploy scripts"""
    def _deploy():
        config = load_config(network, ctx.obj['config_path'])
        engine = DeployEngine(config)
        selected = [tag.strip() for tag in tags.split(",") if tag.strip()]
        return asyncio.run(engine.run(selected))

    run_or_exit(_deploy)


@cli.command()
@click.option("--network", "-n", default=None, help="Network name (default from config)")
@click.option("--contract", "-c", default=None, help="Artifact name, e.g. Raffle or contracts/Raffle.sol:Raffle")
@click.option("--deployment", "-d", default=None, help="Verify a saved deployment by contract name")
@click.argument("address", required=False)
@click.argument("constructor_args", nargs=-1)
@click.pass_context
def verify(ctx, network, contract, deployment, address, constructor_args):
    """Verify a contract on the block explorer"""
    def _verify():
        config = load_config(network, ctx.obj['config_path'])

        if config.network.is_local:
            logger.warning(f"Verification is not available on local network {config.network.name}")
            return None

        if deployment:
            record = DeploymentStore(config.paths.deployments, config.network.name).get(deployment)
            request = VerificationRequest(record['address'], tuple(record.get('args', [])), deployment)
        elif address and contract:
            request = VerificationRequest(address, tuple(constructor_args), contract)
        else:
            raise ConfigError("Provide --deployment NAME, or --contract NAME with an ADDRESS")

        verifier = ContractVerifier(config.etherscan, config.network, ArtifactLoader(config.paths.artifacts))
        return asyncio.run(verifier.verify(request))

    run_or_exit(_verify)


@cli.command()
@click.option("--network", "-n", default=None, help="Network name (default from config)")
@click.pass_context
def size(ctx, network):
    """Report compiled contract sizes"""
    def _size():
        config = load_config(network, ctx.obj['config_path'])
        logger.info("Contract sizes:")
        return log_contract_sizes(ArtifactLoader(config.paths.artifacts))

    run_or_exit(_size)


if __name__ == "__main__":
    cli()
