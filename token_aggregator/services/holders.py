from __future__ import annotations
import asyncio
import logging
from token_aggregator.config import Settings
from token_aggregator.services.rpc import EvmRpcClient, SolanaRpcClient, token_account_amount

logger = logging.getLogger(__name__)


class HolderEstimator:
    """Holder counts per chain.

    Solana enumerates every SPL token account of the mint, which is a real
    count. The EVM path only checks ``holder_sample_addresses`` (burn and zero
    address by default) and reports how many of them hold a balance; treat it
    as a diagnostic, not a holder count.
    """

    def __init__(
        self,
        settings: Settings,
        evm_clients: dict[str, EvmRpcClient],
        solana_client: SolanaRpcClient | None,
    ):
        self.sample_addresses = list(settings.holder_sample_addresses)
        self.batch_size = max(1, settings.holder_batch_size)
        self.concurrent_batches = max(1, settings.holder_concurrent_batches)
        self.batch_pause = settings.holder_batch_pause_seconds
        self.evm_clients = evm_clients
        self.solana_client = solana_client

    async def fetch_holders_count(self, address: str, chain: str) -> int:
        try:
            if chain == "solana":
                return await self._fetch_solana_holders(address)
            return await self._fetch_evm_holders(address, chain)
        except Exception as e:
            logger.error(f"Error fetching holders count ({chain}) for {address}: {e}")
            return 0

    # ── EVM sampling ───────────────────────────────────────────────

    async def _fetch_evm_holders(self, address: str, chain: str) -> int:
        client = self.evm_clients.get(chain)
        if client is None:
            logger.warning(f"No RPC configured for {chain}, holder count is 0")
            return 0

        batches = [
            self.sample_addresses[i:i + self.batch_size]
            for i in range(0, len(self.sample_addresses), self.batch_size)
        ]
        semaphore = asyncio.Semaphore(self.concurrent_batches)

        async def has_balance(holder: str) -> int:
            try:
                return 1 if await client.balance_of(address, holder) > 0 else 0
            except Exception as e:
                logger.debug(f"balanceOf({holder}) failed on {chain}: {e}")
                return 0

        async def run_batch(index: int, batch: list[str]) -> int:
            async with semaphore:
                try:
                    found = sum(await asyncio.gather(*(has_balance(h) for h in batch)))
                except Exception as e:
                    logger.warning(f"Holder batch {index + 1} failed on {chain}: {e}")
                    found = 0
                if self.batch_pause:
                    await asyncio.sleep(self.batch_pause)
                return found

        results = await asyncio.gather(*(run_batch(i, b) for i, b in enumerate(batches)))
        return sum(results)

    # ── Solana scan ────────────────────────────────────────────────

    async def _fetch_solana_holders(self, mint: str) -> int:
        if self.solana_client is None:
            logger.warning("No Solana RPC configured, holder count is 0")
            return 0
        accounts = await self.solana_client.get_token_accounts_for_mint(mint)
        holders = sum(1 for account in accounts if token_account_amount(account) > 0)
        logger.info(f"Solana mint {mint}: {holders} holders across {len(accounts)} token accounts")
        return holders
