"""Tests for WeightedPool ABI encoding."""

import pytest
from eth_abi import decode, encode  # type: ignore[attr-defined]

from launchpool.math import ONE
from launchpool.pool import encode_swap, encode_swap_exact_out
from launchpool.pool.encoding import (
    GET_BALANCES_SELECTOR,
    GET_SWAP_FEE_SELECTOR,
    GET_TOKENS_SELECTOR,
    GET_WEIGHTS_SELECTOR,
    SWAP_EXACT_OUT_SELECTOR,
    SWAP_SELECTOR,
    decode_address_array,
    decode_uint,
    decode_uint_array,
    encode_view_call,
)
from tests.helpers import PEPE, POOL, TRADER, WBNB

SWAP_TYPES = ["address", "address", "uint256", "uint256", "address"]


def split_calldata(calldata: str) -> tuple[bytes, tuple]:
    raw = bytes.fromhex(calldata[2:])
    return raw[:4], decode(SWAP_TYPES, raw[4:])


class TestSelectors:
    """Function selectors."""

    def test_selectors_are_distinct_four_bytes(self) -> None:
        selectors = [
            GET_TOKENS_SELECTOR,
            GET_BALANCES_SELECTOR,
            GET_WEIGHTS_SELECTOR,
            GET_SWAP_FEE_SELECTOR,
            SWAP_SELECTOR,
            SWAP_EXACT_OUT_SELECTOR,
        ]
        assert all(len(s) == 4 for s in selectors)
        assert len(set(selectors)) == len(selectors)

    def test_view_call_is_selector_only(self) -> None:
        assert encode_view_call(GET_TOKENS_SELECTOR) == "0x" + GET_TOKENS_SELECTOR.hex()


class TestEncodeSwap:
    """swap / swapExactOut calldata."""

    def test_encode_swap(self) -> None:
        target, calldata = encode_swap(POOL, WBNB, PEPE, ONE, 990 * ONE, TRADER)
        selector, args = split_calldata(calldata)

        assert target == POOL
        assert selector == SWAP_SELECTOR
        assert len(calldata) == 2 + 2 * (4 + 5 * 32)
        assert args[0].lower() == WBNB
        assert args[1].lower() == PEPE
        assert args[2] == ONE
        assert args[3] == 990 * ONE
        assert args[4].lower() == TRADER

    def test_encode_swap_exact_out(self) -> None:
        target, calldata = encode_swap_exact_out(POOL, WBNB, PEPE, 1_000 * ONE, 2 * ONE, TRADER)
        selector, args = split_calldata(calldata)

        assert target == POOL
        assert selector == SWAP_EXACT_OUT_SELECTOR
        assert args[2] == 1_000 * ONE
        assert args[3] == 2 * ONE

    def test_invalid_address_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid address"):
            encode_swap(POOL, "0x1234", PEPE, ONE, 0, TRADER)


class TestDecode:
    """Decoding eth_call results."""

    def test_decode_address_array(self) -> None:
        data = encode(["address[]"], [[bytes.fromhex(PEPE[2:]), bytes.fromhex(WBNB[2:])]])
        assert decode_address_array("0x" + data.hex()) == [PEPE, WBNB]

    def test_decode_uint_array(self) -> None:
        data = encode(["uint256[]"], [[ONE, 2 * ONE]])
        assert decode_uint_array("0x" + data.hex()) == [ONE, 2 * ONE]

    def test_decode_uint_without_prefix(self) -> None:
        data = encode(["uint256"], [3 * 10**15])
        assert decode_uint(data.hex()) == 3 * 10**15
