"""
State primitives for the time oracle
"""

from .canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from .principals import (
    ADDRESS_NBYTES,
    ZERO_ADDRESS,
    Address,
    canonical_address,
    is_canonical_nonzero,
    is_null_principal,
)

__all__ = [
    "canonical_json_bytes",
    "domain_sep_bytes",
    "sha256_hex",
    "ADDRESS_NBYTES",
    "ZERO_ADDRESS",
    "Address",
    "canonical_address",
    "is_canonical_nonzero",
    "is_null_principal",
]
