from token_aggregator.exceptions import (
    InvalidAddressError,
    ProviderError,
    TokenAggregatorError,
    UnsupportedChainError,
)
from token_aggregator.schemas.token import TokenRecord
from token_aggregator.services.aggregator import TokenAggregator

__all__ = [
    "InvalidAddressError",
    "ProviderError",
    "TokenAggregator",
    "TokenAggregatorError",
    "TokenRecord",
    "UnsupportedChainError",
]
