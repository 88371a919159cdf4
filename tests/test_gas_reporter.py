"""
Unit Tests for Gas Reporting and Contract Sizes
"""

import pytest

from blockchain.artifact_loader import ArtifactLoader, MAX_CONTRACT_SIZE_BYTES
from blockchain.models import DeploymentResult
from utils.config import GasReporterConfig
from utils.contract_sizer import contract_sizes, log_contract_sizes
from utils.gas_reporter import GasReporter

from conftest import CONTRACT_ADDRESS, FakeResponse, FakeSession, write_artifact


@pytest.fixture
def result():
    return DeploymentResult(
        contract_name="Raffle",
        address=CONTRACT_ADDRESS,
        transaction_hash="0x" + "12" * 32,
        constructor_args=(10**15, "60"),
        block_number=100,
        gas_used=1_000_000,
        confirmations=1,
        effective_gas_price=2_000_000_000
    )


class TestGasReporter:
    """Test gas records and the text report"""

    def test_disabled_records_nothing(self, result):
        reporter = GasReporter(GasReporterConfig(enabled=False))

        reporter.record(result, 1.5)

        assert reporter.records == []

    def test_render(self, result):
        """Test the table shows gas, price, cost and converted cost"""
        reporter = GasReporter(GasReporterConfig(enabled=True, currency="EUR"))
        reporter.record(result, 1.5)

        report = reporter.render(token_price=2000.0)

        assert "Raffle" in report
        assert "1000000" in report
        assert "2.00" in report
        assert "0.002000" in report
        assert "4.00" in report
        assert "Time (s)" in report
        assert "ETH price: 2000.00 EUR" in report

    def test_render_without_time(self, result):
        reporter = GasReporter(GasReporterConfig(enabled=True, show_time_spent=False))
        reporter.record(result, 1.5)

        assert "Time (s)" not in reporter.render()

    @pytest.mark.asyncio
    async def test_fetch_token_price(self):
        """Test the CoinMarketCap quote is read for the configured currency"""
        session = FakeSession(get_responses=[FakeResponse({
            'data': {'ETH': [{'quote': {'USD': {'price': 3150.5}}}]}
        })])
        reporter = GasReporter(
            GasReporterConfig(enabled=True, coinmarketcap_key="cmc"),
            session=session
        )

        assert await reporter.fetch_token_price() == 3150.5
        assert session.requests[0][2] == {'symbol': 'ETH', 'convert': 'USD'}

    @pytest.mark.asyncio
    async def test_fetch_token_price_bad_payload(self):
        """Test an unexpected payload degrades to no price"""
        session = FakeSession(get_responses=[FakeResponse({'status': {'error_code': 1002}})])
        reporter = GasReporter(GasReporterConfig(enabled=True, coinmarketcap_key="cmc"), session=session)

        assert await reporter.fetch_token_price() is None

    @pytest.mark.asyncio
    async def test_no_price_without_key(self):
        assert await GasReporter(GasReporterConfig(enabled=True)).fetch_token_price() is None

    @pytest.mark.asyncio
    async def test_finalize_writes_file(self, result, tmp_path):
        output = tmp_path / "gas-report.txt"
        reporter = GasReporter(GasReporterConfig(enabled=True, output_file=str(output)))
        reporter.record(result, 0.5)

        path = await reporter.finalize()

        assert path == output
        assert "Raffle" in output.read_text()

    @pytest.mark.asyncio
    async def test_finalize_without_records(self, tmp_path):
        reporter = GasReporter(GasReporterConfig(enabled=True, output_file=str(tmp_path / "gas.txt")))

        assert await reporter.finalize() is None
        assert not (tmp_path / "gas.txt").exists()


class TestContractSizer:
    """Test runtime size reporting"""

    def test_sizes_largest_first(self, artifacts_dir):
        path = write_artifact(artifacts_dir, "Big", [])
        path.write_text(path.read_text().replace('"0x60806040"', '"0x' + "60" * 2048 + '"'))

        sizes = contract_sizes(ArtifactLoader(artifacts_dir))

        assert sizes[0] == ("contracts/Big.sol:Big", 2.0, False)
        assert sizes[1][0] == "contracts/Raffle.sol:Raffle"

    def test_oversized_contract(self, artifacts_dir):
        path = write_artifact(artifacts_dir, "Huge", [])
        code = "60" * (MAX_CONTRACT_SIZE_BYTES + 1)
        path.write_text(path.read_text().replace('"0x60806040"', f'"0x{code}"'))

        loader = ArtifactLoader(artifacts_dir)

        assert contract_sizes(loader)[0][2] is True
        assert log_contract_sizes(loader) is False

    def test_all_fit(self, artifacts_dir):
        assert log_contract_sizes(ArtifactLoader(artifacts_dir)) is True
