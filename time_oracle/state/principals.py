"""
Principal (address) handling.

Principals are 20-byte account addresses rendered as lowercase, 0x-prefixed
hex. Every address is canonicalized at the kernel boundary so membership
checks compare one spelling per account.
"""

from __future__ import annotations

from typing import Iterable

from .canonical import decode_hex


Address = str

ADDRESS_NBYTES = 20
ZERO_ADDRESS: Address = "0x" + "00" * ADDRESS_NBYTES


def canonical_address(address: str, *, name: str = "address") -> Address:
    """Return the canonical spelling of `address`; raises TypeError/ValueError if malformed."""
    return "0x" + decode_hex(address, name=name, nbytes=ADDRESS_NBYTES).hex()


def is_null_principal(address: object) -> bool:
    """True for the empty string (null principal) and for the all-zero address."""
    if not isinstance(address, str):
        return False
    s = address.strip()
    if not s or s.lower() in ("0x", "0x0"):
        return True
    try:
        return canonical_address(s) == ZERO_ADDRESS
    except ValueError:
        return False


def is_canonical_nonzero(address: object) -> bool:
    if not isinstance(address, str):
        return False
    try:
        return canonical_address(address) == address and address != ZERO_ADDRESS
    except ValueError:
        return False


def sorted_addresses(addresses: Iterable[Address]) -> list[Address]:
    # Canonical spellings are fixed-width lowercase hex, so str order == numeric order.
    return sorted(addresses)
