"""
Gas Reporter
Records deployment gas usage and writes a plain-text report
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import aiohttp
from web3 import Web3
from loguru import logger

from .config import GasReporterConfig

COINMARKETCAP_API = "https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest"


@dataclass
class GasRecord:
    contract_name: str
    gas_used: int
    gas_price_wei: Optional[int]
    elapsed_seconds: float

    @property
    def cost_ether(self) -> Optional[float]:
        if self.gas_price_wei is None:
            return None
        return float(Web3.from_wei(self.gas_used * self.gas_price_wei, 'ether'))


class GasReporter:
    """
    Collects one record per deployment, written out by finalize()
    """

    def __init__(self, config: GasReporterConfig, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize Gas Reporter

        Args:
            config: Gas reporter settings
            session: aiohttp session for price lookups (None = open one when needed)
        """
        self.config = config
        self.session = session
        self.records: List[GasRecord] = []

        if config.enabled:
            logger.info(f"Gas Reporter enabled - writing to {config.output_file}")

    def record(self, result, elapsed_seconds: float):
        """Record a confirmed deployment (DeploymentResult)"""
        if not self.config.enabled:
            return

        self.records.append(GasRecord(
            contract_name=result.contract_name,
            gas_used=result.gas_used,
            gas_price_wei=result.effective_gas_price,
            elapsed_seconds=elapsed_seconds
        ))

    async def fetch_token_price(self) -> Optional[float]:
        """
        Fetch the native token price in the configured currency (CoinMarketCap)

        Returns:
            Price or None if no API key is set or the lookup fails
        """
        if not self.config.coinmarketcap_key:
            return None

        params = {'symbol': self.config.token, 'convert': self.config.currency}
        headers = {'X-CMC_PRO_API_KEY': self.config.coinmarketcap_key}

        try:
            if self.session is not None:
                return await self._fetch_price(self.session, params, headers)

            async with aiohttp.ClientSession() as session:
                return await self._fetch_price(session, params, headers)

        except (aiohttp.ClientError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Token price lookup failed: {e}")
            return None

    async def _fetch_price(self, session, params, headers) -> Optional[float]:
        async with session.get(COINMARKETCAP_API, params=params, headers=headers, timeout=10) as response:
            if response.status != 200:
                logger.warning(f"CoinMarketCap returned HTTP {response.status}")
                return None

            data = await response.json()
            quote = data['data'][self.config.token]
            # Newer API versions return a list per symbol
            if isinstance(quote, list):
                quote = quote[0]
            return float(quote['quote'][self.config.currency]['price'])

    def render(self, token_price: Optional[float] = None) -> str:
        """Format the collected records as a text table"""
        currency = self.config.currency
        headers = ['Deployments', 'Gas', 'Gwei', f'Cost ({self.config.token})', currency]
        if self.config.show_time_spent:
            headers.append('Time (s)')

        rows = []
        for rec in self.records:
            cost = rec.cost_ether
            row = [
                rec.contract_name,
                str(rec.gas_used),
                '-' if rec.gas_price_wei is None else f"{Web3.from_wei(rec.gas_price_wei, 'gwei'):.2f}",
                '-' if cost is None else f"{cost:.6f}",
                '-' if cost is None or token_price is None else f"{cost * token_price:.2f}"
            ]
            if self.config.show_time_spent:
                row.append(f"{rec.elapsed_seconds:.1f}")
            rows.append(row)

        widths = [
            max(len(headers[i]), *(len(row[i]) for row in rows)) if rows else len(headers[i])
            for i in range(len(headers))
        ]

        def line(cells):
            return "| " + " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)) + " |"

        separator = "|" + "|".join("-" * (w + 2) for w in widths) + "|"

        lines = [line(headers), separator]
        lines.extend(line(row) for row in rows)

        if token_price is not None:
            lines.append("")
            lines.append(f"{self.config.token} price: {token_price:.2f} {currency}")

        return "\n".join(lines) + "\n"

    async def finalize(self) -> Optional[Path]:
        """
        Write the report file

        Returns:
            Report path, or None when disabled or nothing was deployed
        """
        if not self.config.enabled or not self.records:
            return None

        token_price = await self.fetch_token_price()

        path = Path(self.config.output_file)
        path.write_text(self.render(token_price))

        logger.info(f"Gas report written to {path}")
        return path
