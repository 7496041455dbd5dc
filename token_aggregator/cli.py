from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional
from token_aggregator.config import get_settings
from token_aggregator.exceptions import TokenAggregatorError
from token_aggregator.services.aggregator import TokenAggregator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="token-aggregator",
        description="Fetch aggregated on-chain and market data for a token",
    )
    parser.add_argument("address", help="token contract address or Solana mint")
    parser.add_argument(
        "--chain",
        default="ethereum",
        help=(
            "chain name (default: ethereum). Solana has no default analytics "
            "network; map it in BITQUERY_NETWORKS, e.g. "
            '\'{"ethereum": "ethereum", "solana": "solana"}\''
        ),
    )
    return parser


async def _run(address: str, chain: str) -> dict:
    async with TokenAggregator() as aggregator:
        record = await aggregator.get_token_data(address, chain)
    return record.model_dump(by_alias=True)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        data = asyncio.run(_run(args.address, args.chain))
    except TokenAggregatorError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(data, indent=2))
    return 0
