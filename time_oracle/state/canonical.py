"""
Canonical encodings shared by the kernel and the shell.

- canonical JSON, used for the state digest that replicas compare;
- hex decoding for addresses and raw calldata supplied from outside.

Integers stay exact end to end: a float anywhere in a digested value is a bug,
so encoding fails instead of rounding.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any, Optional


_HEX_RE = re.compile(r"[0-9a-fA-F]*")

DIGEST_PREFIX = b"time-oracle:"


def _check_exact(value: Any, path: str = "$") -> None:
    if isinstance(value, float):
        raise TypeError(f"float at {path} cannot be canonically encoded")
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"non-str key {key!r} at {path}")
            _check_exact(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_exact(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """Sorted-key, whitespace-free UTF-8 JSON. Floats and non-str keys raise TypeError."""
    _check_exact(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`time-oracle:<label>:v<version>` followed by NUL, so a digest of one kind can never collide with another."""
    if not isinstance(label, str) or not label:
        raise TypeError("domain label must be a non-empty str")
    if not label.isascii() or "\x00" in label:
        raise ValueError(f"domain label must be printable ASCII without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise ValueError(f"domain version must be a positive int: {version!r}")
    return DIGEST_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def decode_hex(hex_str: str, *, name: str, nbytes: Optional[int] = None) -> bytes:
    """
    Decode hex with an optional `0x`/`0X` prefix and surrounding whitespace.

    When `nbytes` is given the decoded value must be exactly that long.
    Raises TypeError for non-str input and ValueError for anything else malformed.
    """
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str, got {type(hex_str).__name__}")
    digits = hex_str.strip()
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    if not _HEX_RE.fullmatch(digits):
        raise ValueError(f"{name} is not valid hex")
    if len(digits) % 2:
        raise ValueError(f"{name} has an odd number of hex digits")
    raw = bytes.fromhex(digits)
    if nbytes is not None and len(raw) != nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes, got {len(raw)}")
    return raw
