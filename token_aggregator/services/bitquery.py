from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
import httpx
from token_aggregator.config import Settings
from token_aggregator.exceptions import ProviderError, UnsupportedChainError
from token_aggregator.schemas.token import WINDOWS, AnalyticsSnapshot, WindowMetrics
from token_aggregator.services.queries import TIME_BASED_METRICS_QUERY, TOKEN_DATA_QUERY

logger = logging.getLogger(__name__)

PROVIDER = "bitquery"

WINDOW_DELTAS = {
    "6h": timedelta(hours=6),
    "12h": timedelta(hours=12),
    "24h": timedelta(hours=24),
    "48h": timedelta(hours=48),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def lookback_windows(now: datetime) -> dict[str, datetime]:
    """Start time of each window, ordered shortest first."""
    return {w: now - WINDOW_DELTAS[w] for w in WINDOWS}


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _num(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first(rows) -> dict:
    if isinstance(rows, list) and rows and isinstance(rows[0], dict):
        return rows[0]
    return {}


def calculate_market_cap(total_supply, price) -> float:
    supply = _num(total_supply)
    last_price = _num(price)
    if not supply or not last_price:
        return 0
    return supply * last_price


class BitqueryClient:
    """Bitquery v1 GraphQL client for windowed DEX and transfer metrics.

    Mandatory source: every failure is raised as ``ProviderError``.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.api_key = settings.bitquery_api_key
        self.url = settings.bitquery_url
        self.networks = {k.lower(): v for k, v in settings.bitquery_networks.items()}
        self._http = http

    def network_for(self, chain: str) -> str:
        network = self.networks.get(chain.lower())
        if not network:
            raise UnsupportedChainError(chain, PROVIDER)
        return network

    # ── low-level helpers ──────────────────────────────────────────

    async def _graphql(self, query: str, variables: dict) -> dict:
        """POST a GraphQL document and return the ``ethereum`` payload."""
        try:
            resp = await self._http.post(
                self.url,
                json={"query": query, "variables": variables},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"request failed: {e}", PROVIDER) from e
        except ValueError as e:
            raise ProviderError(f"response is not JSON: {e}", PROVIDER) from e

        if not isinstance(data, dict):
            raise ProviderError("malformed response body", PROVIDER)
        if data.get("errors"):
            raise ProviderError(f"GraphQL error: {data['errors']}", PROVIDER)
        payload = (data.get("data") or {}).get("ethereum")
        if not isinstance(payload, dict):
            raise ProviderError("malformed response: missing 'ethereum'", PROVIDER)
        return payload

    async def _window_metrics(self, network: str, address: str, since: datetime) -> tuple[float, float]:
        payload = await self._graphql(
            TIME_BASED_METRICS_QUERY,
            {"network": network, "token": address, "from": _iso(since)},
        )
        trades = payload.get("dexTrades")
        if trades is not None and not isinstance(trades, list):
            raise ProviderError("malformed response: 'dexTrades' is not a list", PROVIDER)
        row = _first(trades)
        return _num(row.get("volumeUSD")) or 0, _num(row.get("transactions")) or 0

    # ── analytics snapshot ─────────────────────────────────────────

    async def fetch_analytics(
        self, address: str, chain: str, now: Optional[datetime] = None
    ) -> AnalyticsSnapshot:
        if not self.api_key:
            raise ProviderError("API key not found (set BITQUERY_API_KEY)", PROVIDER)
        network = self.network_for(chain)

        now = now or datetime.now(timezone.utc)
        windows = lookback_windows(now)

        try:
            basic = await self._graphql(
                TOKEN_DATA_QUERY,
                {
                    "network": network,
                    "token": address,
                    "from": _iso(windows["30d"]),
                    "till": _iso(now),
                },
            )
            # All windows must succeed; one failure fails the snapshot
            metrics = await asyncio.gather(
                *(self._window_metrics(network, address, since) for since in windows.values())
            )
        except ProviderError as e:
            logger.error(f"Bitquery fetch failed for {address} on {chain}: {e}")
            raise

        transfers = basic.get("transfers")
        if transfers is not None and not isinstance(transfers, list):
            raise ProviderError("malformed response: 'transfers' is not a list", PROVIDER)

        transfer = _first(transfers)
        token_info = transfer.get("currency") or {}
        dex_info = _first(basic.get("dexTrades"))
        supply_info = _first(basic.get("supply"))

        trade_amount = _num(dex_info.get("tradeAmount"))
        base_amount = _num(dex_info.get("baseAmount"))
        trade_price = trade_amount / base_amount if trade_amount and base_amount else 0

        liquidity = _num(dex_info.get("liquidity"))
        if liquidity is None:
            liquidity = trade_price

        volumes = {w: m[0] for w, m in zip(windows, metrics)}
        transactions = {w: m[1] for w, m in zip(windows, metrics)}

        launch_block = None
        first_block = transfer.get("firstTransaction")
        if first_block not in (None, ""):
            try:
                launch_block = int(first_block)
            except (TypeError, ValueError):
                logger.warning(f"Bitquery returned unparseable first block {first_block!r} for {address}")

        return AnalyticsSnapshot(
            name=token_info.get("name") or "",
            symbol=token_info.get("symbol") or "",
            price=trade_price,
            market_cap=calculate_market_cap(supply_info.get("totalSupply"), dex_info.get("lastPrice")),
            liquidity=liquidity or 0,
            volume=WindowMetrics.from_windows(volumes),
            transactions=WindowMetrics.from_windows(transactions),
            launch_block=launch_block,
        )
