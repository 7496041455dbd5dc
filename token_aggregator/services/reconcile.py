from __future__ import annotations
import math
from typing import Optional
from token_aggregator.schemas.token import AnalyticsSnapshot, MarketSnapshot, TokenRecord


def _positive(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def pick_price(analytics_price, market_price) -> float:
    if not analytics_price or math.isnan(analytics_price):
        return market_price
    return analytics_price


def pick_market_cap(analytics_cap, market_cap) -> float:
    return analytics_cap if analytics_cap else market_cap


def pick_liquidity(analytics_liquidity, market_liquidity) -> float:
    if _positive(analytics_liquidity):
        return analytics_liquidity
    if _positive(market_liquidity):
        return market_liquidity
    return 0


def reconcile(
    address: str,
    chain: str,
    analytics: AnalyticsSnapshot,
    market: MarketSnapshot,
    holders: int,
    launch_date: Optional[str] = None,
) -> TokenRecord:
    """Merge both sources, analytics first, market data as the fallback."""
    return TokenRecord(
        address=address,
        chain=chain,
        name=analytics.name or market.name,
        symbol=analytics.symbol or market.symbol,
        price=pick_price(analytics.price, market.price),
        market_cap=pick_market_cap(analytics.market_cap, market.market_cap),
        liquidity=pick_liquidity(analytics.liquidity, market.liquidity),
        volume=analytics.volume,
        transactions=analytics.transactions,
        holders=max(0, int(holders)),
        launch_date=launch_date,
    )
