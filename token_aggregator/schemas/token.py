from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

WINDOWS = ("6h", "12h", "24h", "48h", "7d", "30d")


class WindowMetrics(BaseModel):
    """One value per lookback window, serialised under the window label."""

    h6: float = Field(0, alias="6h")
    h12: float = Field(0, alias="12h")
    h24: float = Field(0, alias="24h")
    h48: float = Field(0, alias="48h")
    d7: float = Field(0, alias="7d")
    d30: float = Field(0, alias="30d")

    model_config = {"frozen": True, "populate_by_name": True}

    @classmethod
    def from_windows(cls, values: dict[str, float]) -> "WindowMetrics":
        return cls.model_validate({w: values.get(w) or 0 for w in WINDOWS})

    def get(self, window: str) -> float:
        return self.model_dump(by_alias=True)[window]


class PriceChange(BaseModel):
    h24: float = Field(0, alias="24h")
    d7: float = Field(0, alias="7d")
    d30: float = Field(0, alias="30d")

    model_config = {"frozen": True, "populate_by_name": True}


class AnalyticsSnapshot(BaseModel):
    name: str = ""
    symbol: str = ""
    price: float = 0
    market_cap: float = 0
    liquidity: float = 0
    volume: WindowMetrics = WindowMetrics()
    transactions: WindowMetrics = WindowMetrics()
    launch_block: Optional[int] = None

    model_config = {"frozen": True}


class MarketSnapshot(BaseModel):
    name: str = ""
    symbol: str = ""
    price: float = 0
    market_cap: float = 0
    liquidity: float = 0
    total_volume: float = 0
    price_change_percentage: PriceChange = PriceChange()
    market_cap_rank: Optional[int] = None
    last_updated: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def empty(cls) -> "MarketSnapshot":
        return cls()


class TokenRecord(BaseModel):
    address: str
    chain: str
    name: str
    symbol: str
    price: float
    market_cap: float = Field(alias="marketCap")
    liquidity: float
    volume: WindowMetrics
    transactions: WindowMetrics
    holders: int = Field(ge=0)
    launch_date: Optional[str] = Field(None, alias="launchDate")

    model_config = {"frozen": True, "populate_by_name": True}
