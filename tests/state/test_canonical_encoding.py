from __future__ import annotations

import pytest

from time_oracle.state.canonical import (
    canonical_json_bytes,
    decode_hex,
    domain_sep_bytes,
    sha256_hex,
)


def test_canonical_json_is_sorted_and_compact() -> None:
    assert canonical_json_bytes({"b": 1, "a": [True, None]}) == b'{"a":[true,null],"b":1}'


def test_canonical_json_keeps_u256_exact() -> None:
    big = 2**256 - 1
    assert canonical_json_bytes({"v": big}) == ('{"v":%d}' % big).encode("ascii")


@pytest.mark.parametrize("value", [1.5, {"x": 0.1}, [1, 2.0]])
def test_canonical_json_rejects_floats(value) -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes(value)


def test_canonical_json_rejects_non_str_keys() -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes({1: "a"})


def test_domain_sep_is_nul_terminated() -> None:
    assert domain_sep_bytes("oracle-state") == b"time-oracle:oracle-state:v1\x00"
    assert domain_sep_bytes("oracle-state", 2) != domain_sep_bytes("oracle-state", 1)


@pytest.mark.parametrize("label", ["", "a\x00b", "é"])
def test_domain_sep_rejects_bad_labels(label) -> None:
    with pytest.raises((TypeError, ValueError)):
        domain_sep_bytes(label)


def test_sha256_hex_prefix() -> None:
    h = sha256_hex(b"")
    assert h == "0xe3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_decode_hex() -> None:
    assert decode_hex("0x51AB28a9", name="x") == b"\x51\xab\x28\xa9"
    assert decode_hex(" 0X51ab28a9 ", name="x", nbytes=4) == b"\x51\xab\x28\xa9"
    assert decode_hex("", name="x") == b""


@pytest.mark.parametrize("raw,nbytes", [("0x123", None), ("zz", None), ("51 ab", None), ("0x51ab", 4)])
def test_decode_hex_rejects(raw, nbytes) -> None:
    with pytest.raises(ValueError):
        decode_hex(raw, name="x", nbytes=nbytes)
