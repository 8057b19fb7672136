"""ABI encoding for the launchpad WeightedPool contract.

Read calls (getTokens, getBalances, getWeights, getSwapFee) feed the RPC pool
source; swap calldata is handed back to the front-end, which signs and
submits it. Nothing here talks to the network.
"""

from __future__ import annotations

from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_utils import function_signature_to_4byte_selector

from launchpool.models.types import is_valid_address, normalize_address

GET_TOKENS_SELECTOR = function_signature_to_4byte_selector("getTokens()")
GET_BALANCES_SELECTOR = function_signature_to_4byte_selector("getBalances()")
GET_WEIGHTS_SELECTOR = function_signature_to_4byte_selector("getWeights()")
GET_SWAP_FEE_SELECTOR = function_signature_to_4byte_selector("getSwapFee()")

# swap(tokenIn, tokenOut, amountIn, minAmountOut, recipient)
SWAP_SELECTOR = function_signature_to_4byte_selector(
    "swap(address,address,uint256,uint256,address)"
)
# swapExactOut(tokenIn, tokenOut, amountOut, maxAmountIn, recipient)
SWAP_EXACT_OUT_SELECTOR = function_signature_to_4byte_selector(
    "swapExactOut(address,address,uint256,uint256,address)"
)

_SWAP_ARG_TYPES = ["address", "address", "uint256", "uint256", "address"]


def _address_bytes(address: str) -> bytes:
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address}")
    return bytes.fromhex(normalize_address(address)[2:])


def _calldata(selector: bytes, payload: bytes = b"") -> str:
    return "0x" + (selector + payload).hex()


def encode_swap(
    pool_address: str,
    token_in: str,
    token_out: str,
    amount_in: int,
    min_amount_out: int,
    recipient: str,
) -> tuple[str, str]:
    """Encode WeightedPool.swap as calldata.

    Returns:
        Tuple of (pool_address, calldata)

    Raises:
        ValueError: If any address is invalid
    """
    payload = encode(
        _SWAP_ARG_TYPES,
        [
            _address_bytes(token_in),
            _address_bytes(token_out),
            amount_in,
            min_amount_out,
            _address_bytes(recipient),
        ],
    )
    return normalize_address(pool_address), _calldata(SWAP_SELECTOR, payload)


def encode_swap_exact_out(
    pool_address: str,
    token_in: str,
    token_out: str,
    amount_out: int,
    max_amount_in: int,
    recipient: str,
) -> tuple[str, str]:
    """Encode WeightedPool.swapExactOut as calldata.

    Returns:
        Tuple of (pool_address, calldata)
    """
    payload = encode(
        _SWAP_ARG_TYPES,
        [
            _address_bytes(token_in),
            _address_bytes(token_out),
            amount_out,
            max_amount_in,
            _address_bytes(recipient),
        ],
    )
    return normalize_address(pool_address), _calldata(SWAP_EXACT_OUT_SELECTOR, payload)


def encode_view_call(selector: bytes) -> str:
    """Calldata for an argument-less view function."""
    return _calldata(selector)


def _hex_bytes(result: str) -> bytes:
    data = result[2:] if result.startswith("0x") else result
    return bytes.fromhex(data)


def decode_address_array(result: str) -> list[str]:
    (values,) = decode(["address[]"], _hex_bytes(result))
    return [normalize_address(v) for v in values]


def decode_uint_array(result: str) -> list[int]:
    (values,) = decode(["uint256[]"], _hex_bytes(result))
    return [int(v) for v in values]


def decode_uint(result: str) -> int:
    (value,) = decode(["uint256"], _hex_bytes(result))
    return int(value)
