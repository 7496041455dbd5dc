from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings

DEFAULT_SOLANA_RPC = "https://api.mainnet-beta.solana.com"

# Sampled by the EVM holder estimator: burn address and zero address
DEFAULT_HOLDER_SAMPLE = [
    "0x000000000000000000000000000000000000dead",
    "0x0000000000000000000000000000000000000000",
]

# Bitquery v1 `EthereumNetwork` identifiers
DEFAULT_BITQUERY_NETWORKS = {
    "ethereum": "ethereum",
    "bsc": "bsc",
    "polygon": "matic",
    "avalanche": "avalanche",
    "arbitrum": "arbitrum",
    "optimism": "optimism",
}

# CoinGecko asset platform ids
COINGECKO_PLATFORMS = {
    "ethereum": "ethereum",
    "bsc": "binance-smart-chain",
    "polygon": "polygon-pos",
    "avalanche": "avalanche",
    "solana": "solana",
}


class Settings(BaseSettings):
    eth_rpc_url: str = ""
    bsc_rpc_url: str = ""
    polygon_rpc_url: str = ""
    avalanche_rpc_url: str = ""
    solana_rpc_url: str = DEFAULT_SOLANA_RPC

    bitquery_api_key: str = ""
    bitquery_url: str = "https://graphql.bitquery.io"
    bitquery_networks: dict[str, str] = DEFAULT_BITQUERY_NETWORKS

    coingecko_api_key: str = ""
    coingecko_pro: bool = False  # pro keys use pro-api.coingecko.com
    coingecko_timeout_seconds: float = 30

    http_timeout_seconds: float = 30

    cache_ttl_seconds: int = 300
    cache_max_entries: Optional[int] = None  # unbounded; entries leave only by TTL

    # Holder sampling (EVM)
    holder_sample_addresses: list[str] = DEFAULT_HOLDER_SAMPLE
    holder_batch_size: int = 100
    holder_concurrent_batches: int = 5
    holder_batch_pause_seconds: float = 0.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class ChainProfile:
    name: str
    kind: str  # "evm" or "solana"
    rpc_url: Optional[str]
    coingecko_id: str

    @property
    def is_solana(self) -> bool:
        return self.kind == "solana"


def _with_scheme(url: str) -> str:
    if not url:
        return url
    return url if url.startswith("http") else f"https://{url}"


def build_chain_profiles(settings: Settings) -> dict[str, ChainProfile]:
    """Per-chain RPC endpoints and market-data ids, keyed by chain name.

    Chains without a configured RPC URL are still listed (market data works
    without RPC); their ``rpc_url`` is ``None``.
    """
    rpc_urls = {
        "ethereum": settings.eth_rpc_url,
        "bsc": settings.bsc_rpc_url,
        "polygon": settings.polygon_rpc_url,
        "avalanche": settings.avalanche_rpc_url,
        "solana": _with_scheme(settings.solana_rpc_url),
    }
    profiles = {}
    for chain, platform in COINGECKO_PLATFORMS.items():
        profiles[chain] = ChainProfile(
            name=chain,
            kind="solana" if chain == "solana" else "evm",
            rpc_url=rpc_urls.get(chain) or None,
            coingecko_id=platform,
        )
    return profiles
