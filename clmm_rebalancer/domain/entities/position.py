from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import Pool
from clmm_rebalancer.domain.exceptions import InvalidDataError
from clmm_rebalancer.domain.services.tick_math import (
    MAX_TICK,
    MIN_TICK,
    TokenAmounts,
    get_amounts_for_liquidity,
    max_liquidity_for_amount_x,
    max_liquidity_for_amount_y,
    tick_to_sqrt_price_x64,
)


@dataclass(frozen=True)
class PositionRewardInfo:
    coins_owed_reward: int
    reward_growth_inside_last: int


@dataclass(frozen=True)
class Position:
    """Snapshot of a liquidity position.

    An empty ``id`` marks a projected position: one sized for planning that
    does not exist on the ledger yet.
    """

    id: str
    liquidity: int
    owner: str
    pool: Pool
    tick_lower: int
    tick_upper: int
    fee_growth_inside_x_last: int = 0
    fee_growth_inside_y_last: int = 0
    coins_owed_x: int = 0
    coins_owed_y: int = 0
    reward_infos: tuple[PositionRewardInfo, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "reward_infos", tuple(self.reward_infos))
        spacing = self.pool.tick_spacing
        if self.tick_lower >= self.tick_upper:
            raise InvalidDataError(self.id, "tick_lower", "tick_lower must be below tick_upper")
        for field_name, tick in (("tick_lower", self.tick_lower), ("tick_upper", self.tick_upper)):
            if tick < MIN_TICK or tick > MAX_TICK:
                raise InvalidDataError(self.id, field_name, f"tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
            if tick % spacing != 0:
                raise InvalidDataError(self.id, field_name, f"tick {tick} not aligned to spacing {spacing}")
        if self.liquidity < 0:
            raise InvalidDataError(self.id, "liquidity", "liquidity must be non-negative")

    @property
    def is_projected(self) -> bool:
        return self.id == ""

    @property
    def coin_x(self) -> Coin:
        return self.pool.coin_x

    @property
    def coin_y(self) -> Coin:
        return self.pool.coin_y

    @property
    def mint_amounts(self) -> TokenAmounts:
        return get_amounts_for_liquidity(
            self.pool.sqrt_price_x64,
            tick_to_sqrt_price_x64(self.tick_lower),
            tick_to_sqrt_price_x64(self.tick_upper),
            self.liquidity,
            True,
        )

    @property
    def pending_fees(self) -> TokenAmounts:
        return TokenAmounts(amount_x=self.coins_owed_x, amount_y=self.coins_owed_y)

    @property
    def pending_rewards(self) -> list[int]:
        return [info.coins_owed_reward for info in self.reward_infos]

    def contains_tick(self, tick: int) -> bool:
        return self.tick_lower <= tick <= self.tick_upper

    @classmethod
    def from_amounts(
        cls,
        *,
        owner: str,
        pool: Pool,
        tick_lower: int,
        tick_upper: int,
        amount_x: int,
        amount_y: int,
    ) -> Position:
        sqrt_price_current = pool.sqrt_price_x64
        sqrt_price_lower = tick_to_sqrt_price_x64(tick_lower)
        sqrt_price_upper = tick_to_sqrt_price_x64(tick_upper)

        if sqrt_price_current < sqrt_price_lower:
            liquidity = max_liquidity_for_amount_x(sqrt_price_lower, sqrt_price_upper, amount_x)
        elif sqrt_price_current >= sqrt_price_upper:
            liquidity = max_liquidity_for_amount_y(sqrt_price_lower, sqrt_price_upper, amount_y)
        else:
            liquidity = min(
                max_liquidity_for_amount_x(sqrt_price_current, sqrt_price_upper, amount_x),
                max_liquidity_for_amount_y(sqrt_price_lower, sqrt_price_current, amount_y),
            )

        return cls(
            id="",
            liquidity=liquidity,
            owner=owner,
            pool=pool,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
        )
