"""Tests for pool sources."""

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import httpx
import pytest
from eth_abi import encode  # type: ignore[attr-defined]

from launchpool.math import ONE
from launchpool.pool import (
    InMemoryPoolSource,
    InvalidAmount,
    PoolNotFound,
    PoolSourceError,
    RpcPoolSource,
    SlippageExceeded,
    WeightedPool,
    calc_out_given_in,
)
from launchpool.pool.encoding import (
    GET_BALANCES_SELECTOR,
    GET_SWAP_FEE_SELECTOR,
    GET_TOKENS_SELECTOR,
    GET_WEIGHTS_SELECTOR,
)
from tests.helpers import DOGE, MISSING_POOL, PEPE, POOL, WBNB, WEIGHT_20, WEIGHT_80, make_pool

RPC_URL = "http://rpc.test"


class TestInMemoryPoolSource:
    """Tests for InMemoryPoolSource."""

    def test_get_pool(self, source: InMemoryPoolSource, pool: WeightedPool) -> None:
        assert source.get_pool(POOL) == pool
        assert source.get_pool(POOL.upper().replace("0X", "0x")) == pool

    def test_unknown_pool(self, source: InMemoryPoolSource) -> None:
        with pytest.raises(PoolNotFound):
            source.get_pool(MISSING_POOL)

    def test_register_replaces(self, source: InMemoryPoolSource) -> None:
        replacement = make_pool(balances=(ONE, ONE))
        source.register(replacement)
        assert source.get_pool(POOL).balances == (ONE, ONE)

    def test_apply_swap_moves_balances(self, source: InMemoryPoolSource, pool: WeightedPool) -> None:
        expected = calc_out_given_in(10 * ONE, WEIGHT_20, 1_000_000 * ONE, WEIGHT_80, ONE, 30)

        amount_out = source.apply_swap(POOL, WBNB, PEPE, ONE)

        assert amount_out == expected
        assert source.get_pool(POOL).balances == (1_000_000 * ONE - amount_out, 11 * ONE)
        # the snapshot handed out earlier is unchanged
        assert pool.balances == (1_000_000 * ONE, 10 * ONE)

    def test_apply_swap_slippage_is_all_or_nothing(self, source: InMemoryPoolSource) -> None:
        before = source.get_pool(POOL)
        with pytest.raises(SlippageExceeded):
            source.apply_swap(POOL, WBNB, PEPE, ONE, min_amount_out=1_000_000 * ONE)
        assert source.get_pool(POOL) == before

    def test_apply_swap_rejects_zero(self, source: InMemoryPoolSource) -> None:
        with pytest.raises(InvalidAmount):
            source.apply_swap(POOL, WBNB, PEPE, 0)

    def test_concurrent_swaps_serialize(self, source: InMemoryPoolSource) -> None:
        """Every swap sees the balances the previous one left behind."""
        with ThreadPoolExecutor(max_workers=8) as executor:
            outputs = list(executor.map(lambda _: source.apply_swap(POOL, WBNB, PEPE, ONE // 10), range(40)))

        final = source.get_pool(POOL)
        assert final.balances == (1_000_000 * ONE - sum(outputs), 14 * ONE)
        # each later buy gets fewer tokens for the same input, so no two match
        assert len(set(outputs)) == len(outputs)


def _result(data: bytes) -> str:
    return "0x" + data.hex()


def _address(address: str) -> bytes:
    return bytes.fromhex(address[2:])


POOL_STATE = {
    GET_TOKENS_SELECTOR: _result(encode(["address[]"], [[_address(PEPE), _address(WBNB)]])),
    GET_BALANCES_SELECTOR: _result(encode(["uint256[]"], [[1_000_000 * ONE, 10 * ONE]])),
    GET_WEIGHTS_SELECTOR: _result(encode(["uint256[]"], [[WEIGHT_80, WEIGHT_20]])),
    GET_SWAP_FEE_SELECTOR: _result(encode(["uint256"], [3 * 10**15])),
}


class FakeNode:
    """Answers eth_blockNumber and batched eth_call requests from a fixed state."""

    def __init__(self, state: dict[bytes, str] | None = None, block: int = 0x10) -> None:
        self.state = dict(POOL_STATE if state is None else state)
        self.block = block
        self.requests: list[Any] = []
        self.item_overrides: dict[bytes, dict[str, Any]] = {}

    def _answer(self, call: dict[str, Any]) -> dict[str, Any]:
        if call["method"] == "eth_blockNumber":
            return {"jsonrpc": "2.0", "id": call["id"], "result": hex(self.block)}
        selector = bytes.fromhex(call["params"][0]["data"][2:])
        if selector in self.item_overrides:
            return {"jsonrpc": "2.0", "id": call["id"], **self.item_overrides[selector]}
        return {"jsonrpc": "2.0", "id": call["id"], "result": self.state.get(selector, "0x")}

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if isinstance(payload, list):
            # answer out of order: responses are matched by id
            return httpx.Response(200, json=[self._answer(call) for call in reversed(payload)])
        return httpx.Response(200, json=self._answer(payload))

    def source(self) -> RpcPoolSource:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return RpcPoolSource(RPC_URL, client=client)


class TestRpcPoolSource:
    """Tests for RpcPoolSource against a fake JSON-RPC node."""

    def test_reads_pool(self) -> None:
        pool = FakeNode().source().get_pool(POOL)

        assert pool.address == POOL
        assert pool.tokens == (PEPE, WBNB)
        assert pool.balances == (1_000_000 * ONE, 10 * ONE)
        assert pool.weights == (WEIGHT_80, WEIGHT_20)
        assert pool.fee_bps == 30

    def test_calls_pinned_to_one_block(self) -> None:
        node = FakeNode(block=0x1234)
        node.source().get_pool(POOL)

        block_request, batch = node.requests
        assert block_request["method"] == "eth_blockNumber"
        assert len(batch) == 4
        assert {call["params"][1] for call in batch} == {"0x1234"}
        assert {call["params"][0]["to"] for call in batch} == {POOL}

    def test_block_number(self) -> None:
        assert FakeNode(block=99).source().block_number() == 99

    def test_no_contract_is_not_found(self) -> None:
        with pytest.raises(PoolNotFound):
            FakeNode(state={}).source().get_pool(MISSING_POOL)

    def test_call_error_raises_source_error(self) -> None:
        node = FakeNode()
        node.item_overrides[GET_WEIGHTS_SELECTOR] = {"error": {"code": -32000, "message": "execution reverted"}}
        with pytest.raises(PoolSourceError, match="eth_call failed"):
            node.source().get_pool(POOL)

    def test_undecodable_result_raises_source_error(self) -> None:
        state = dict(POOL_STATE)
        state[GET_BALANCES_SELECTOR] = "0x1234"
        with pytest.raises(PoolSourceError, match="could not decode"):
            FakeNode(state=state).source().get_pool(POOL)

    def test_three_token_pool_rejected(self) -> None:
        state = dict(POOL_STATE)
        state[GET_TOKENS_SELECTOR] = _result(
            encode(["address[]"], [[_address(PEPE), _address(WBNB), _address(DOGE)]])
        )
        with pytest.raises(PoolSourceError, match="two-token"):
            FakeNode(state=state).source().get_pool(POOL)

    def test_http_error_raises_source_error(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        with pytest.raises(PoolSourceError, match="RPC request failed"):
            RpcPoolSource(RPC_URL, client=client).get_pool(POOL)

    def test_transport_error_raises_source_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(refuse))
        with pytest.raises(PoolSourceError):
            RpcPoolSource(RPC_URL, client=client).block_number()
