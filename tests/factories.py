from __future__ import annotations

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import ClmmProtocol, Pool, PoolReward
from clmm_rebalancer.domain.entities.position import Position, PositionRewardInfo
from clmm_rebalancer.domain.services.tick_math import tick_to_sqrt_price_x64


OWNER = "0x" + "a1" * 32
POOL_ID = "0x" + "b2" * 32
SUI = Coin("0x2::sui::SUI", decimals=9, symbol="SUI", name="Sui")
USDC = Coin("0x" + "dd" * 32 + "::usdc::USDC", decimals=6, symbol="USDC", name="USD Coin")
CETUS_TOKEN = Coin("0x" + "ce" * 32 + "::cetus::CETUS", decimals=9, symbol="CETUS", name="Cetus")


def make_reward(coin: Coin) -> PoolReward:
    return PoolReward(
        coin=coin,
        ended_at_seconds=0,
        last_update_time=0,
        reward_per_seconds=0,
        total_reward=0,
        reward_growth_global=0,
    )


def make_pool(
    *,
    tick_current: int = 0,
    tick_spacing: int = 60,
    sqrt_price_x64: int | None = None,
    rewards: tuple[PoolReward, ...] = (),
    protocol: ClmmProtocol = ClmmProtocol.CETUS,
    pool_id: str = POOL_ID,
) -> Pool:
    return Pool(
        id=pool_id,
        coins=(SUI, USDC),
        pool_rewards=rewards,
        reserves=(10**15, 10**12),
        fee=3000,
        sqrt_price_x64=sqrt_price_x64 if sqrt_price_x64 is not None else tick_to_sqrt_price_x64(tick_current),
        tick_current=tick_current,
        tick_spacing=tick_spacing,
        liquidity=10**12,
        fee_growth_global_x=0,
        fee_growth_global_y=0,
        protocol=protocol,
    )


def make_position(
    *,
    pool: Pool,
    tick_lower: int,
    tick_upper: int,
    liquidity: int = 10**10,
    position_id: str = "0x" + "c3" * 32,
    coins_owed_x: int = 0,
    coins_owed_y: int = 0,
    reward_amounts: tuple[int, ...] = (),
) -> Position:
    return Position(
        id=position_id,
        liquidity=liquidity,
        owner=OWNER,
        pool=pool,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        coins_owed_x=coins_owed_x,
        coins_owed_y=coins_owed_y,
        reward_infos=tuple(PositionRewardInfo(amount, 0) for amount in reward_amounts),
    )
