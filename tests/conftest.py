"""Shared fixtures: a fake upstream behind ``httpx.MockTransport``.

Every provider the aggregator talks to (Bitquery, CoinGecko, EVM RPC,
Solana RPC) is served from one handler so tests can count calls per
provider and swap responses per test.
"""
from __future__ import annotations
import base64
import json
from collections import Counter
import httpx
import pytest
import pytest_asyncio
from token_aggregator.config import Settings

ETH_RPC = "http://eth.rpc.test"
BSC_RPC = "http://bsc.rpc.test"
SOLANA_RPC = "http://sol.rpc.test"

USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def token_account(amount: int) -> dict:
    """Base64-encoded SPL token account holding ``amount`` raw units."""
    raw = bytes(32) + bytes(32) + amount.to_bytes(8, "little") + bytes(165 - 72)
    return {
        "pubkey": "11111111111111111111111111111111",
        "account": {"data": [base64.b64encode(raw).decode(), "base64"]},
    }


def basic_payload(**overrides) -> dict:
    payload = {
        "transfers": [
            {
                "currency": {"name": "Tether USD", "symbol": "USDT", "decimals": 6},
                "firstTransaction": "4634748",
            }
        ],
        "supply": [{"totalSupply": "1000000"}],
        "dexTrades": [
            {"tradeAmount": 500.0, "baseAmount": 250.0, "lastPrice": 2.0, "liquidity": 1200.0}
        ],
    }
    payload.update(overrides)
    return payload


class FakeUpstream:
    def __init__(self):
        self.calls: Counter = Counter()
        self.requests: list[httpx.Request] = []

        self.bitquery_basic = basic_payload()
        self.bitquery_window = {"dexTrades": [{"volumeUSD": 100.0, "transactions": 7}]}
        self.bitquery_status = 200
        self.bitquery_window_failures = 0  # window queries to answer with 500
        self.bitquery_errors = None

        self.coingecko_status = 200
        self.coingecko_body = {
            "name": "Tether",
            "symbol": "usdt",
            "market_cap_rank": 3,
            "last_updated": "2024-05-01T00:00:00.000Z",
            "market_data": {
                "current_price": {"usd": 1.0},
                "market_cap": {"usd": 110000000000},
                "total_volume": {"usd": 50000000},
                "total_value_locked": None,
                "price_change_percentage_24h": 0.01,
                "price_change_percentage_7d": -0.02,
                "price_change_percentage_30d": 0.03,
            },
        }

        self.evm_balances: dict[str, int] = {}
        self.evm_block_timestamp: int | None = 1_510_000_000
        self.evm_error = False

        self.solana_accounts: list[dict] = []
        self.solana_block_time: int | None = 1_600_000_000

    # ── routing ────────────────────────────────────────────────────

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if "bitquery" in url:
            self.calls["bitquery"] += 1
            return self._bitquery(request)
        if "coingecko" in url:
            self.calls["coingecko"] += 1
            return httpx.Response(self.coingecko_status, json=self.coingecko_body)
        if url.startswith(SOLANA_RPC):
            self.calls["solana"] += 1
            return self._solana(request)
        self.calls["evm"] += 1
        return self._evm(request)

    def _bitquery(self, request: httpx.Request) -> httpx.Response:
        if self.bitquery_status != 200:
            return httpx.Response(self.bitquery_status, text="upstream down")
        if self.bitquery_errors:
            return httpx.Response(200, json={"errors": self.bitquery_errors})
        body = json.loads(request.content)
        if "supply:" in body["query"]:
            return httpx.Response(200, json={"data": {"ethereum": self.bitquery_basic}})
        if self.bitquery_window_failures:
            self.bitquery_window_failures -= 1
            return httpx.Response(500, text="window query failed")
        return httpx.Response(200, json={"data": {"ethereum": self.bitquery_window}})

    def _evm(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if self.evm_error:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})
        if body["method"] == "eth_call":
            holder = "0x" + body["params"][0]["data"][-40:]
            balance = self.evm_balances.get(holder, 0)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": hex(balance)})
        if body["method"] == "eth_getBlockByNumber":
            block = None
            if self.evm_block_timestamp is not None:
                block = {"number": body["params"][0], "timestamp": hex(self.evm_block_timestamp)}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": block})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "unknown method"}})

    def _solana(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["method"] == "getProgramAccounts":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": self.solana_accounts})
        if body["method"] == "getBlockTime":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": self.solana_block_time})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "unknown method"}})


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def http(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        bitquery_api_key="test-key",
        eth_rpc_url=ETH_RPC,
        bsc_rpc_url=BSC_RPC,
        polygon_rpc_url="",
        avalanche_rpc_url="",
        solana_rpc_url=SOLANA_RPC,
        coingecko_api_key="",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
