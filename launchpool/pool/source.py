"""Pool state sources.

The authoritative pool state lives on-chain. A `PoolSource` hands out
consistent `WeightedPool` snapshots: both balances, both weights and the fee
are read together, never interleaved with an update to the same pool.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

import httpx
import structlog
from eth_abi.exceptions import DecodingError

from launchpool.models.types import normalize_address

from . import encoding
from .errors import InvalidAmount, PoolNotFound, PoolSourceError, SlippageExceeded
from .pools import WeightedPool, fee_bps_from_wei
from .weighted_math import calc_out_given_in, enforce_min_out

logger = structlog.get_logger()


class PoolSource(Protocol):
    """Anything that can produce a consistent snapshot of a pool."""

    def get_pool(self, address: str) -> WeightedPool:
        """Snapshot of the pool at address.

        Raises:
            PoolNotFound: If no pool exists at address
            PoolSourceError: If state could not be read
        """
        ...


class InMemoryPoolSource:
    """Pool source backed by a dict, with swaps serialized under a lock.

    Stands in for the ledger in tests and simulations: `apply_swap` performs
    the check-then-update of an on-chain swap atomically, so concurrent
    callers always see whole snapshots.
    """

    def __init__(self, pools: list[WeightedPool] | None = None) -> None:
        self._lock = threading.Lock()
        self._pools: dict[str, WeightedPool] = {}
        for pool in pools or []:
            self.register(pool)

    def register(self, pool: WeightedPool) -> None:
        with self._lock:
            self._pools[normalize_address(pool.address)] = pool
        logger.debug("pool_registered", pool=pool.address, tokens=list(pool.tokens))

    def get_pool(self, address: str) -> WeightedPool:
        with self._lock:
            pool = self._pools.get(normalize_address(address))
        if pool is None:
            raise PoolNotFound(f"no pool at {address}")
        return pool

    def apply_swap(
        self,
        address: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> int:
        """Execute a swap against the stored reserves; all-or-nothing.

        Returns:
            Amount of token_out paid out

        Raises:
            InvalidAmount: If amount_in is not positive
            SlippageExceeded: If the output is below min_amount_out
        """
        if amount_in <= 0:
            raise InvalidAmount(f"amount_in must be positive, got {amount_in}")
        with self._lock:
            pool = self._pools.get(normalize_address(address))
            if pool is None:
                raise PoolNotFound(f"no pool at {address}")
            reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
            amount_out = calc_out_given_in(
                reserve_in.balance,
                reserve_in.weight,
                reserve_out.balance,
                reserve_out.weight,
                amount_in,
                pool.fee_bps,
            )
            try:
                enforce_min_out(amount_out, min_amount_out)
            except SlippageExceeded:
                logger.info(
                    "swap_rejected_slippage",
                    pool=pool.address,
                    amount_out=amount_out,
                    min_amount_out=min_amount_out,
                )
                raise
            self._pools[pool.address] = pool.with_balances(
                {
                    reserve_in.token: reserve_in.balance + amount_in,
                    reserve_out.token: reserve_out.balance - amount_out,
                }
            )
        return amount_out


class RpcPoolSource:
    """Pool source that reads WeightedPool contracts over JSON-RPC.

    The four view calls go out as one JSON-RPC batch pinned to a single block
    number, so the snapshot reflects one ledger state.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = client or httpx.Client(timeout=timeout)
        self._request_id = 0
        self._id_lock = threading.Lock()

    def close(self) -> None:
        self._client.close()

    def _next_id(self) -> int:
        with self._id_lock:
            self._request_id += 1
            return self._request_id

    def _post(self, payload: Any) -> Any:
        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as err:
            logger.warning("rpc_call_failed", rpc_url=self.rpc_url, error=str(err))
            raise PoolSourceError(f"RPC request failed: {err}") from err

    def block_number(self) -> int:
        body = self._post(
            {"jsonrpc": "2.0", "id": self._next_id(), "method": "eth_blockNumber", "params": []}
        )
        if "error" in body:
            raise PoolSourceError(f"eth_blockNumber failed: {body['error']}")
        return int(body["result"], 16)

    def _batch_call(self, address: str, selectors: list[bytes], block: int) -> list[str]:
        ids = [self._next_id() for _ in selectors]
        batch = [
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "method": "eth_call",
                "params": [
                    {"to": address, "data": encoding.encode_view_call(selector)},
                    hex(block),
                ],
            }
            for request_id, selector in zip(ids, selectors)
        ]
        body = self._post(batch)
        if not isinstance(body, list):
            raise PoolSourceError(f"expected batch response, got {type(body).__name__}")

        by_id = {item.get("id"): item for item in body}
        results = []
        for request_id in ids:
            item = by_id.get(request_id)
            if item is None:
                raise PoolSourceError(f"missing response for request {request_id}")
            if "error" in item:
                raise PoolSourceError(f"eth_call failed: {item['error']}")
            results.append(item["result"])
        return results

    def get_pool(self, address: str) -> WeightedPool:
        address = normalize_address(address)
        block = self.block_number()
        tokens_raw, balances_raw, weights_raw, fee_raw = self._batch_call(
            address,
            [
                encoding.GET_TOKENS_SELECTOR,
                encoding.GET_BALANCES_SELECTOR,
                encoding.GET_WEIGHTS_SELECTOR,
                encoding.GET_SWAP_FEE_SELECTOR,
            ],
            block,
        )
        # eth_call against an address without code returns empty data
        if tokens_raw in ("0x", ""):
            raise PoolNotFound(f"no pool contract at {address}")

        try:
            tokens = encoding.decode_address_array(tokens_raw)
            balances = encoding.decode_uint_array(balances_raw)
            weights = encoding.decode_uint_array(weights_raw)
            swap_fee = encoding.decode_uint(fee_raw)
        except (DecodingError, ValueError) as err:
            raise PoolSourceError(f"could not decode pool state at {address}: {err}") from err

        if not len(tokens) == len(balances) == len(weights) == 2:
            raise PoolSourceError(f"pool {address} is not a two-token pool")

        pool = WeightedPool.create(
            address=address,
            tokens=(tokens[0], tokens[1]),
            balances=(balances[0], balances[1]),
            weights=(weights[0], weights[1]),
            fee_bps=fee_bps_from_wei(swap_fee),
        )
        logger.debug("pool_loaded", pool=address, block=block, balances=list(pool.balances))
        return pool
