from __future__ import annotations
import logging
import httpx
from token_aggregator.config import Settings
from token_aggregator.exceptions import UnsupportedChainError
from token_aggregator.schemas.token import MarketSnapshot, PriceChange

logger = logging.getLogger(__name__)

COINGECKO_BASE = "https://api.coingecko.com/api/v3"
COINGECKO_PRO_BASE = "https://pro-api.coingecko.com/api/v3"


def _usd(section: dict, key: str) -> float:
    amounts = section.get(key)
    if not isinstance(amounts, dict):
        return 0
    value = amounts.get("usd")
    return float(value) if value else 0


class CoinGeckoClient:
    """CoinGecko contract lookup. Optional source: failures yield an empty snapshot."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient, platforms: dict[str, str]):
        self.api_key = settings.coingecko_api_key
        self.base_url = COINGECKO_PRO_BASE if settings.coingecko_pro else COINGECKO_BASE
        self.timeout = settings.coingecko_timeout_seconds
        self.platforms = platforms
        self.headers = {"Accept": "application/json"}
        if self.api_key:
            key_header = "x-cg-pro-api-key" if settings.coingecko_pro else "x-cg-demo-api-key"
            self.headers[key_header] = self.api_key
        self._http = http

    async def _get(self, path: str, params: dict) -> dict:
        resp = await self._http.get(
            f"{self.base_url}{path}",
            params=params,
            headers=self.headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    async def fetch_market_data(self, address: str, chain: str) -> MarketSnapshot:
        try:
            platform = self.platforms.get(chain)
            if not platform:
                raise UnsupportedChainError(chain, "coingecko")

            # base58 mints are case-sensitive
            contract = address if chain == "solana" else address.lower()
            data = await self._get(
                f"/coins/{platform}/contract/{contract}",
                params={
                    "localization": "false",
                    "tickers": "true",
                    "market_data": "true",
                    "community_data": "false",
                    "developer_data": "false",
                },
            )
            return self.parse_market_data(data)
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"CoinGecko fetch failed for {address} on {chain}: "
                f"HTTP {e.response.status_code} {e.response.text[:200]}"
            )
        except Exception as e:
            logger.warning(f"CoinGecko fetch failed for {address} on {chain}: {e}")
        return MarketSnapshot.empty()

    @staticmethod
    def parse_market_data(data: dict) -> MarketSnapshot:
        market = data.get("market_data") or {}
        return MarketSnapshot(
            name=data.get("name") or "",
            symbol=(data.get("symbol") or "").upper(),
            price=_usd(market, "current_price"),
            market_cap=_usd(market, "market_cap"),
            liquidity=_usd(market, "total_value_locked"),
            total_volume=_usd(market, "total_volume"),
            price_change_percentage=PriceChange(
                h24=market.get("price_change_percentage_24h") or 0,
                d7=market.get("price_change_percentage_7d") or 0,
                d30=market.get("price_change_percentage_30d") or 0,
            ),
            market_cap_rank=data.get("market_cap_rank") or None,
            last_updated=data.get("last_updated") or None,
        )
