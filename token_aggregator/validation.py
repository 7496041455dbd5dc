from __future__ import annotations
from eth_utils import is_checksum_address, is_checksum_formatted_address, is_hex_address
from solders.pubkey import Pubkey
from token_aggregator.exceptions import InvalidAddressError


def validate_evm_address(address: str, chain: str = "ethereum") -> str:
    if not isinstance(address, str) or not address.startswith("0x") or not is_hex_address(address):
        raise InvalidAddressError(address, chain, "expected 0x-prefixed 20-byte hex")
    if is_checksum_formatted_address(address) and not is_checksum_address(address):
        raise InvalidAddressError(address, chain, "bad EIP-55 checksum")
    return address


def validate_solana_address(address: str) -> str:
    if not isinstance(address, str) or not 32 <= len(address) <= 44:
        raise InvalidAddressError(address, "solana", "expected base58 public key")
    try:
        Pubkey.from_string(address)
    except Exception as e:
        raise InvalidAddressError(address, "solana", str(e)) from e
    return address


def validate_address(address: str, chain: str) -> str:
    """Check ``address`` against the native format of ``chain``.

    Solana mints must decode to a 32-byte public key; every other chain is
    treated as EVM.
    """
    if chain == "solana":
        return validate_solana_address(address)
    return validate_evm_address(address, chain)
