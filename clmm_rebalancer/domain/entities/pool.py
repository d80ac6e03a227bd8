from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from clmm_rebalancer.domain.entities.coin import Coin, normalize_object_id
from clmm_rebalancer.domain.exceptions import InvalidDataError
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.tick_math import Q64, tick_to_sqrt_price_x64


class ClmmProtocol(str, Enum):
    CETUS = "CETUS"
    FLOWX_V3 = "FLOWX_V3"


@dataclass(frozen=True)
class PoolReward:
    coin: Coin
    ended_at_seconds: int
    last_update_time: int
    reward_per_seconds: int
    total_reward: int
    reward_growth_global: int


@dataclass(frozen=True)
class Pool:
    id: str
    coins: tuple[Coin, Coin]
    pool_rewards: tuple[PoolReward, ...]
    reserves: tuple[int, int]
    fee: int
    sqrt_price_x64: int
    tick_current: int
    tick_spacing: int
    liquidity: int
    fee_growth_global_x: int
    fee_growth_global_y: int
    protocol: ClmmProtocol

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", normalize_object_id(self.id))
        object.__setattr__(self, "coins", tuple(self.coins))
        object.__setattr__(self, "pool_rewards", tuple(self.pool_rewards))
        object.__setattr__(self, "reserves", tuple(self.reserves))
        if len(self.coins) != 2:
            raise InvalidDataError(self.id, "coins", "pool must hold exactly two coins")
        if self.tick_spacing <= 0:
            raise InvalidDataError(self.id, "tick_spacing", "tick spacing must be positive")
        if self.sqrt_price_x64 <= 0:
            raise InvalidDataError(self.id, "sqrt_price_x64", "sqrt price must be positive")
        if self.liquidity < 0:
            raise InvalidDataError(self.id, "liquidity", "liquidity must be non-negative")

    @staticmethod
    def tick_spacing_for_fee(fee: int) -> int:
        return fee // 50

    @property
    def coin_x(self) -> Coin:
        return self.coins[0]

    @property
    def coin_y(self) -> Coin:
        return self.coins[1]

    def get_ratio(self, tick_lower: int, tick_upper: int) -> Fraction:
        """Value ratio X:Y a position on [tick_lower, tick_upper] holds at the current price."""
        sqrt_price_lower = tick_to_sqrt_price_x64(tick_lower)
        sqrt_price_upper = tick_to_sqrt_price_x64(tick_upper)
        current = self.sqrt_price_x64

        if current <= sqrt_price_lower:
            return Fraction(Q64 * Q64, 1)
        if current >= sqrt_price_upper:
            return Fraction(1, Q64 * Q64)

        numerator = (sqrt_price_upper - current) * Q64 * Q64
        denominator = current * sqrt_price_upper * (current - sqrt_price_lower)
        return Fraction(numerator, denominator)
