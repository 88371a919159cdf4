"""
Unit Tests for Contract Deployment
"""

import os
from unittest.mock import Mock, PropertyMock

import pytest
from web3.exceptions import TimeExhausted

from blockchain.artifact_loader import ArtifactLoader
from blockchain.contract_deployer import ContractDeployer, count_confirmations
from blockchain.models import DeploymentRequest
from utils.exceptions import ArtifactNotFoundError, DeploymentError

from conftest import CONTRACT_ADDRESS, DEV_ADDRESS


@pytest.fixture
def account_manager():
    manager = Mock()
    manager.has_signer.return_value = True
    manager.sign_transaction.return_value = Mock(raw_transaction=b'\xf8\x6b')
    return manager


@pytest.fixture
def tx_builder():
    builder = Mock()
    builder.build_deployment_tx.return_value = {'from': DEV_ADDRESS, 'nonce': 0, 'data': '0x6080'}
    return builder


@pytest.fixture
def sleep():
    return Mock()


@pytest.fixture
def deployer(mock_w3, account_manager, artifacts_dir, tx_builder, tx_config, sleep):
    return ContractDeployer(
        mock_w3,
        account_manager,
        ArtifactLoader(artifacts_dir),
        tx_builder,
        tx_config,
        sleep=sleep
    )


class TestContractDeployer:
    """Test the deploy step"""

    def test_deploy_single_confirmation(self, deployer, mock_w3, tx_builder, sleep):
        """Test a one-confirmation deploy returns once the receipt is in"""
        request = DeploymentRequest("Raffle", (1000,) * 2, DEV_ADDRESS, 1)

        result = deployer.deploy(request)

        assert result.address == CONTRACT_ADDRESS
        assert result.transaction_hash == "0x" + "12" * 32
        assert result.constructor_args == (1000, 1000)
        assert result.block_number == 100
        assert result.gas_used == 812345
        assert result.confirmations == 1
        assert result.effective_gas_price == 2_000_000_000
        sleep.assert_not_called()

        artifact, args, sender = tx_builder.build_deployment_tx.call_args[0]
        assert artifact.contract_name == "Raffle"
        assert args == (1000, 1000)
        assert sender == DEV_ADDRESS
        mock_w3.eth.send_raw_transaction.assert_called_once_with(b'\xf8\x6b')

    def test_deploy_waits_for_required_confirmations(self, deployer, mock_w3, sleep):
        """Test the deploy blocks until six blocks confirm the transaction"""
        type(mock_w3.eth).block_number = PropertyMock(side_effect=[100, 103, 105])
        request = DeploymentRequest("Raffle", (10**15, "60"), DEV_ADDRESS, 6)

        result = deployer.deploy(request)

        assert result.confirmations == 6
        assert sleep.call_count == 2
        # Arguments are recorded exactly as given
        assert result.constructor_args == (10**15, "60")

    def test_normalized_args_sent_to_builder(self, deployer, tx_builder):
        """Test numeric strings reach the constructor as ints"""
        deployer.deploy(DeploymentRequest("Raffle", (10**15, "60"), DEV_ADDRESS))

        assert tx_builder.build_deployment_tx.call_args[0][1] == (10**15, 60)

    def test_node_signed_when_no_local_key(self, deployer, mock_w3, account_manager):
        """Test dev node accounts send unsigned transactions"""
        account_manager.has_signer.return_value = False

        deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS))

        mock_w3.eth.send_transaction.assert_called_once()
        mock_w3.eth.send_raw_transaction.assert_not_called()

    def test_reverted_deployment(self, deployer, receipt):
        """Test a failed receipt raises DeploymentError"""
        receipt['status'] = 0

        with pytest.raises(DeploymentError, match="reverted"):
            deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS))

    def test_missing_contract_address(self, deployer, receipt):
        receipt['contractAddress'] = None

        with pytest.raises(DeploymentError, match="No contract address"):
            deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS))

    def test_missing_artifact_sends_nothing(self, deployer, mock_w3):
        """Test nothing is submitted when the contract was never compiled"""
        with pytest.raises(ArtifactNotFoundError):
            deployer.deploy(DeploymentRequest("Lottery", (), DEV_ADDRESS))

        mock_w3.eth.send_raw_transaction.assert_not_called()
        mock_w3.eth.send_transaction.assert_not_called()

    def test_submission_error_propagates(self, deployer, mock_w3):
        """Test RPC errors such as insufficient funds are not swallowed"""
        mock_w3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds for gas * price + value")

        with pytest.raises(ValueError, match="insufficient funds"):
            deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS))

    def test_confirmation_timeout(self, mock_w3, account_manager, artifacts_dir, tx_builder, sleep):
        """Test a stalled chain raises TimeExhausted"""
        config = Mock(receipt_timeout=5, confirmation_timeout=0, poll_interval=0)
        deployer = ContractDeployer(
            mock_w3, account_manager, ArtifactLoader(artifacts_dir), tx_builder, config, sleep=sleep
        )

        with pytest.raises(TimeExhausted):
            deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS, 6))

    def test_store_and_callback(self, mock_w3, account_manager, artifacts_dir, tx_builder, tx_config):
        """Test confirmed deployments are saved and reported"""
        store = Mock()
        on_deployed = Mock()
        deployer = ContractDeployer(
            mock_w3, account_manager, ArtifactLoader(artifacts_dir), tx_builder, tx_config,
            deployment_store=store, on_deployed=on_deployed
        )

        result = deployer.deploy(DeploymentRequest("Raffle", (1000, 1000), DEV_ADDRESS))

        assert store.save.call_args[0][0] == result
        assert on_deployed.call_args[0][0] == result
        assert on_deployed.call_args[0][1] >= 0


class TestCountConfirmations:
    """Test confirmation arithmetic"""

    @pytest.mark.parametrize("tx_block,latest,expected", [
        (100, 100, 1),
        (100, 105, 6),
        (100, 99, 0)
    ])
    def test_count(self, tx_block, latest, expected):
        assert count_confirmations(tx_block, latest) == expected


class TestDeploymentRequest:
    """Test request validation"""

    def test_zero_confirmations_rejected(self):
        with pytest.raises(ValueError, match="required_confirmations"):
            DeploymentRequest("Raffle", (), DEV_ADDRESS, 0)

    def test_invalid_sender_rejected(self):
        with pytest.raises(ValueError, match="Invalid sender"):
            DeploymentRequest("Raffle", (), "deployer")

    def test_args_frozen_as_tuple(self):
        request = DeploymentRequest("Raffle", [1000], DEV_ADDRESS)

        assert request.constructor_args == (1000,)


@pytest.mark.skipif(not os.getenv("LOCAL_NODE_URL"), reason="requires a running local node")
class TestLocalNodeDeployment:
    """Integration test against a Hardhat or Anvil node"""

    def test_deploy_raffle(self):
        from blockchain.account_manager import AccountManager
        from blockchain.transaction_builder import TransactionBuilder
        from utils.config import NetworkConfig, TransactionConfig
        from utils.gas_calculator import GasCalculator
        from utils.rpc_manager import RPCManager

        network = NetworkConfig(name="localhost", url=os.getenv("LOCAL_NODE_URL"))
        w3 = RPCManager(network).connect()
        tx_config = TransactionConfig(poll_interval=0.1)
        accounts = AccountManager(w3, network, {"deployer": 0})
        deployer = ContractDeployer(
            w3,
            accounts,
            ArtifactLoader(os.getenv("ARTIFACTS_DIR", "artifacts")),
            TransactionBuilder(w3, GasCalculator(w3, tx_config)),
            tx_config
        )

        result = deployer.deploy(DeploymentRequest("Raffle", (10**15, "60"), accounts.resolve("deployer")))

        assert w3.eth.get_code(result.address) != b''
