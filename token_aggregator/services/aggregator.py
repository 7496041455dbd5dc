from __future__ import annotations
import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional
import httpx
from cachetools import TTLCache
from token_aggregator.config import Settings, build_chain_profiles, get_settings
from token_aggregator.schemas.token import TokenRecord
from token_aggregator.services.bitquery import BitqueryClient
from token_aggregator.services.coingecko import CoinGeckoClient
from token_aggregator.services.holders import HolderEstimator
from token_aggregator.services.reconcile import reconcile
from token_aggregator.services.rpc import EvmRpcClient, SolanaRpcClient
from token_aggregator.validation import validate_address

logger = logging.getLogger(__name__)


def format_timestamp(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TokenAggregator:
    """Bitquery (mandatory) + CoinGecko (optional) + RPC holder estimate, cached.

    Records are cached for ``cache_ttl_seconds`` under ``f"{chain}-{address}"``.
    The key is not normalised, so ``0xABC`` and ``0xabc`` are cached separately.
    Only Bitquery and address-validation failures reach the caller; market data,
    holder counts and launch dates degrade to empty values.

    The aggregator owns one ``httpx.AsyncClient`` shared by every provider
    unless one is passed in; close it with ``aclose()`` or ``async with``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http: Optional[httpx.AsyncClient] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or get_settings()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=self.settings.http_timeout_seconds)

        self.chains = build_chain_profiles(self.settings)
        self.cache: TTLCache = TTLCache(
            maxsize=self.settings.cache_max_entries or math.inf,
            ttl=self.settings.cache_ttl_seconds,
            timer=timer,
        )

        self.bitquery = BitqueryClient(self.settings, self._http)
        self.coingecko = CoinGeckoClient(
            self.settings,
            self._http,
            platforms={name: profile.coingecko_id for name, profile in self.chains.items()},
        )
        self.evm_clients = {
            name: EvmRpcClient(profile.rpc_url, self._http, name=name)
            for name, profile in self.chains.items()
            if not profile.is_solana and profile.rpc_url
        }
        solana = self.chains["solana"]
        self.solana_client = (
            SolanaRpcClient(solana.rpc_url, self._http, name="solana") if solana.rpc_url else None
        )
        self.holders = HolderEstimator(self.settings, self.evm_clients, self.solana_client)

    async def __aenter__(self) -> "TokenAggregator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_http:
            await self._http.aclose()

    # ── public API ─────────────────────────────────────────────────

    async def get_token_data(self, token_address: str, chain: str = "ethereum") -> TokenRecord:
        cache_key = f"{chain}-{token_address}"
        try:
            validate_address(token_address, chain)

            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for {cache_key}")
                return cached

            logger.info(f"Cache miss for {cache_key}, fetching")
            record = await self._fetch_token_data(token_address, chain)
            self.cache[cache_key] = record
            return record
        except Exception as e:
            logger.error(f"Error fetching token data for {cache_key}: {e}")
            raise

    async def get_token_data_batch(
        self, token_addresses: list[str], chain: str = "ethereum"
    ) -> dict[str, TokenRecord]:
        """Sequential ``get_token_data`` for several tokens; failures are skipped."""
        results = {}
        for address in token_addresses:
            try:
                results[address] = await self.get_token_data(address, chain)
            except Exception:
                continue
        return results

    # ── pipeline ───────────────────────────────────────────────────

    async def _fetch_token_data(self, token_address: str, chain: str) -> TokenRecord:
        analytics = await self.bitquery.fetch_analytics(token_address, chain)
        market = await self.coingecko.fetch_market_data(token_address, chain)
        holders = await self.holders.fetch_holders_count(token_address, chain)

        launch_date = None
        if analytics.launch_block is not None:
            launch_date = await self._resolve_launch_date(analytics.launch_block, chain)

        return reconcile(token_address, chain, analytics, market, holders, launch_date)

    async def _resolve_launch_date(self, block: int, chain: str) -> Optional[str]:
        """Timestamp of ``block`` on the token's own chain, or None."""
        try:
            if chain == "solana":
                if self.solana_client is None:
                    return None
                ts = await self.solana_client.get_block_time(block)
            else:
                client = self.evm_clients.get(chain)
                if client is None:
                    logger.warning(f"No RPC configured for {chain}, launch date unavailable")
                    return None
                ts = await client.get_block_timestamp(block)
        except Exception as e:
            logger.warning(f"Error fetching block timestamp for launch date ({chain} #{block}): {e}")
            return None
        return format_timestamp(ts) if ts else None
