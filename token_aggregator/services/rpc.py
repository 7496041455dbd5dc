from __future__ import annotations
import base64
import logging
from typing import Optional
import httpx
from eth_utils import function_signature_to_4byte_selector
from token_aggregator.exceptions import ProviderError

logger = logging.getLogger(__name__)

BALANCE_OF_SELECTOR = "0x" + function_signature_to_4byte_selector("balanceOf(address)").hex()

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGqPXTXsK9uBDY5PfWRjSYe"
TOKEN_ACCOUNT_SIZE = 165
TOKEN_AMOUNT_OFFSET = 64  # mint (32) + owner (32)


class JsonRpcClient:
    def __init__(self, url: str, http: httpx.AsyncClient, name: str = "rpc"):
        self.url = url
        self.name = name
        self._http = http

    async def _rpc(self, method: str, params: list | dict):
        """JSON-RPC 2.0 call; returns ``result`` or raises ``ProviderError``."""
        resp = await self._http.post(
            self.url,
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "method": method,
                "params": params,
            },
        )
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise ProviderError(f"{method} error: {data['error']}", self.name)
        return data.get("result")


class EvmRpcClient(JsonRpcClient):
    async def balance_of(self, token: str, holder: str) -> int:
        calldata = BALANCE_OF_SELECTOR + holder.lower().removeprefix("0x").rjust(64, "0")
        result = await self._rpc("eth_call", [{"to": token, "data": calldata}, "latest"])
        if not result or result == "0x":
            return 0
        return int(result, 16)

    async def get_block_timestamp(self, number: int) -> Optional[int]:
        block = await self._rpc("eth_getBlockByNumber", [hex(number), False])
        if not block or not block.get("timestamp"):
            return None
        return int(block["timestamp"], 16)


class SolanaRpcClient(JsonRpcClient):
    async def get_token_accounts_for_mint(self, mint: str) -> list[dict]:
        """All SPL token accounts of ``mint``. Unpaginated."""
        result = await self._rpc(
            "getProgramAccounts",
            [
                TOKEN_PROGRAM_ID,
                {
                    "encoding": "base64",
                    "filters": [
                        {"dataSize": TOKEN_ACCOUNT_SIZE},
                        {"memcmp": {"offset": 0, "bytes": mint}},
                    ],
                },
            ],
        )
        return result or []

    async def get_block_time(self, slot: int) -> Optional[int]:
        return await self._rpc("getBlockTime", [slot])


def token_account_amount(account: dict) -> int:
    """Raw token amount (little-endian u64 at offset 64) of a base64 account."""
    data = account["account"]["data"]
    raw = base64.b64decode(data[0] if isinstance(data, list) else data)
    return int.from_bytes(raw[TOKEN_AMOUNT_OFFSET:TOKEN_AMOUNT_OFFSET + 8], "little")
