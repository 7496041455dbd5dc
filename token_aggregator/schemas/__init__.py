from token_aggregator.schemas.token import (
    WINDOWS,
    AnalyticsSnapshot,
    MarketSnapshot,
    PriceChange,
    TokenRecord,
    WindowMetrics,
)

__all__ = [
    "WINDOWS",
    "AnalyticsSnapshot",
    "MarketSnapshot",
    "PriceChange",
    "TokenRecord",
    "WindowMetrics",
]
