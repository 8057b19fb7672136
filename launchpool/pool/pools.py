"""Weighted pool snapshot.

A `WeightedPool` is an immutable copy of one pool's on-chain state taken at a
single point in time. Swaps never mutate it; `with_balances` returns a new
snapshot instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from launchpool.math.fixed_point import BPS, ONE
from launchpool.models.types import normalize_address

from .errors import InvalidFee, InvalidToken, InvalidWeight, PoolEmpty
from .weighted_math import invariant

# Limits enforced by the pool contract at creation
MIN_WEIGHT = ONE // 100  # 1%
MAX_WEIGHT = ONE - MIN_WEIGHT  # 99%
MAX_FEE_BPS = 1_000  # 10%


@dataclass(frozen=True)
class PoolReserve:
    """One side of a pool.

    Attributes:
        token: Token address, lowercase
        balance: Reserve balance (18 decimals)
        weight: Normalized weight (18 decimals, both weights sum to 1e18)
    """

    token: str
    balance: int
    weight: int


@dataclass(frozen=True)
class WeightedPool:
    """Two-token weighted pool.

    Attributes:
        address: Pool contract address, lowercase
        reserves: The two reserves, in the contract's token order
        fee_bps: Swap fee in basis points (30 = 0.3%)
    """

    address: str
    reserves: tuple[PoolReserve, PoolReserve]
    fee_bps: int

    def __post_init__(self) -> None:
        if len(self.reserves) != 2:
            raise InvalidToken(f"pool must hold exactly two tokens, got {len(self.reserves)}")
        a, b = self.reserves
        if normalize_address(a.token) == normalize_address(b.token):
            raise InvalidToken(f"pool tokens must differ, got {a.token} twice")
        for reserve in self.reserves:
            if not MIN_WEIGHT <= reserve.weight <= MAX_WEIGHT:
                raise InvalidWeight(f"weight {reserve.weight} of {reserve.token} outside [1%, 99%]")
            if reserve.balance < 0:
                raise PoolEmpty(f"negative balance {reserve.balance} for {reserve.token}")
        if a.weight + b.weight != ONE:
            raise InvalidWeight(f"weights sum to {a.weight + b.weight}, expected {ONE}")
        if not 0 <= self.fee_bps <= MAX_FEE_BPS:
            raise InvalidFee(f"fee {self.fee_bps} bps outside [0, {MAX_FEE_BPS}]")

    @classmethod
    def create(
        cls,
        address: str,
        tokens: tuple[str, str],
        balances: tuple[int, int],
        weights: tuple[int, int],
        fee_bps: int,
    ) -> WeightedPool:
        """Build a pool from the parallel arrays the contract returns."""
        reserves = tuple(
            PoolReserve(token=normalize_address(token), balance=balance, weight=weight)
            for token, balance, weight in zip(tokens, balances, weights, strict=True)
        )
        return cls(address=normalize_address(address), reserves=reserves, fee_bps=fee_bps)  # type: ignore[arg-type]

    @property
    def tokens(self) -> tuple[str, str]:
        return (self.reserves[0].token, self.reserves[1].token)

    @property
    def balances(self) -> tuple[int, int]:
        return (self.reserves[0].balance, self.reserves[1].balance)

    @property
    def weights(self) -> tuple[int, int]:
        return (self.reserves[0].weight, self.reserves[1].weight)

    @property
    def is_empty(self) -> bool:
        """True when either side has been drained to zero."""
        return any(reserve.balance == 0 for reserve in self.reserves)

    @property
    def has_liquidity(self) -> bool:
        return not self.is_empty

    def get_reserve(self, token: str) -> PoolReserve | None:
        """Reserve for a token (case-insensitive), or None."""
        token = normalize_address(token)
        for reserve in self.reserves:
            if normalize_address(reserve.token) == token:
                return reserve
        return None

    def reserves_for(self, token_in: str, token_out: str) -> tuple[PoolReserve, PoolReserve]:
        """(reserve_in, reserve_out) for a swap direction.

        Raises:
            InvalidToken: If either token is not in the pool, or both are the same
        """
        if normalize_address(token_in) == normalize_address(token_out):
            raise InvalidToken(f"cannot swap {token_in} for itself")
        reserve_in = self.get_reserve(token_in)
        reserve_out = self.get_reserve(token_out)
        if reserve_in is None:
            raise InvalidToken(f"{token_in} is not in pool {self.address}")
        if reserve_out is None:
            raise InvalidToken(f"{token_out} is not in pool {self.address}")
        return reserve_in, reserve_out

    def with_balances(self, balances: Mapping[str, int]) -> WeightedPool:
        """Copy of this pool with some balances replaced, keyed by token."""
        updates = {normalize_address(token): balance for token, balance in balances.items()}
        unknown = set(updates) - {normalize_address(t) for t in self.tokens}
        if unknown:
            raise InvalidToken(f"{sorted(unknown)} not in pool {self.address}")
        reserves = tuple(
            PoolReserve(
                token=r.token,
                balance=updates.get(normalize_address(r.token), r.balance),
                weight=r.weight,
            )
            for r in self.reserves
        )
        return WeightedPool(address=self.address, reserves=reserves, fee_bps=self.fee_bps)  # type: ignore[arg-type]

    def invariant(self) -> int:
        """balance_a^weight_a * balance_b^weight_b (18 decimals)."""
        return invariant(self.balances, self.weights)


def fee_bps_from_wei(swap_fee: int) -> int:
    """Convert an 18-decimal fee fraction (as getSwapFee returns it) to basis points."""
    if swap_fee < 0 or swap_fee % (ONE // BPS) != 0:
        raise InvalidFee(f"swap fee {swap_fee} is not a whole number of basis points")
    return swap_fee // (ONE // BPS)
