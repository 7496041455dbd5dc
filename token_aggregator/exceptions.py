from __future__ import annotations
from typing import Optional


class TokenAggregatorError(Exception):
    """Base class for everything this package raises."""


class InvalidAddressError(TokenAggregatorError, ValueError):
    def __init__(self, address: str, chain: str, reason: str = ""):
        self.address = address
        self.chain = chain
        message = f"Invalid {chain} address: {address!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProviderError(TokenAggregatorError):
    """An upstream data provider failed or returned unusable data."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(f"{provider}: {message}" if provider else message)


class UnsupportedChainError(ProviderError):
    def __init__(self, chain: str, provider: Optional[str] = None):
        self.chain = chain
        super().__init__(f"Unsupported blockchain: {chain}", provider)
