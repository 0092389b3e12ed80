"""
ABI calldata codec for `updateTimestamp(uint256)`.

The off-chain submitter sends 36 bytes: the 4-byte selector `0x51ab28a9`
followed by the value as one 32-byte big-endian word. Only this entry point is
exposed over calldata; admin operations are called directly by the owner.
"""

from __future__ import annotations

from typing import Union

from ..core.errors import CalldataError
from ..core.types import MAX_U256
from ..state.canonical import decode_hex


UPDATE_TIMESTAMP_SIGNATURE = "updateTimestamp(uint256)"
UPDATE_TIMESTAMP_SELECTOR = bytes.fromhex("51ab28a9")

WORD_BYTES = 32
UPDATE_TIMESTAMP_CALLDATA_LEN = len(UPDATE_TIMESTAMP_SELECTOR) + WORD_BYTES


def encode_uint256(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise CalldataError("uint256 value must be an int")
    if value < 0 or value > MAX_U256:
        raise CalldataError(f"value does not fit in uint256: {value}")
    return value.to_bytes(WORD_BYTES, "big")


def encode_update_timestamp(value: int) -> bytes:
    """Encode `updateTimestamp(value)` calldata."""
    return UPDATE_TIMESTAMP_SELECTOR + encode_uint256(value)


def decode_update_timestamp(data: Union[bytes, bytearray, str]) -> int:
    """
    Decode `updateTimestamp(uint256)` calldata and return the value.

    Accepts raw bytes or a hex string (with or without 0x). Raises CalldataError
    on a wrong selector, a wrong length or undecodable hex.
    """
    if isinstance(data, str):
        try:
            raw = decode_hex(data, name="calldata")
        except ValueError as exc:
            raise CalldataError(str(exc)) from exc
    elif isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    else:
        raise CalldataError(f"calldata must be bytes or hex str, got {type(data).__name__}")

    if len(raw) < len(UPDATE_TIMESTAMP_SELECTOR):
        raise CalldataError("calldata shorter than a function selector")
    selector = raw[: len(UPDATE_TIMESTAMP_SELECTOR)]
    if selector != UPDATE_TIMESTAMP_SELECTOR:
        raise CalldataError(f"unknown selector 0x{selector.hex()}")
    if len(raw) != UPDATE_TIMESTAMP_CALLDATA_LEN:
        raise CalldataError(
            f"updateTimestamp calldata must be {UPDATE_TIMESTAMP_CALLDATA_LEN} bytes, got {len(raw)}"
        )
    return int.from_bytes(raw[len(UPDATE_TIMESTAMP_SELECTOR):], "big")
