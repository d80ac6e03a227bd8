from __future__ import annotations

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import ClmmProtocol, Pool
from clmm_rebalancer.domain.entities.position import Position, PositionRewardInfo
from clmm_rebalancer.domain.services.range_selector import align_tick_to_spacing, clamp_tick_to_range
from clmm_rebalancer.domain.services.tick_math import MAX_TICK
from clmm_rebalancer.infrastructure.mappers.common import map_pool_rewards, move_fields, resolve_coin_types
from clmm_rebalancer.infrastructure.mappers.type_helper import extract_tick_index, owner_address, parse_fields
from clmm_rebalancer.infrastructure.protocols.constants import (
    FLOWX_V3_POOL_OBJECT_TYPE,
    FLOWX_V3_POSITION_OBJECT_TYPE,
)
from clmm_rebalancer.infrastructure.schemas.move_objects import (
    FlowXPoolFields,
    FlowXPositionFields,
    SuiObjectData,
)


def align_position_ticks(tick_lower: int, tick_upper: int, tick_spacing: int) -> tuple[int, int]:
    """Snap raw ticks outward onto the spacing grid, keeping lower < upper."""
    lower = clamp_tick_to_range(align_tick_to_spacing(tick_lower, tick_spacing, round_up=False), tick_spacing)
    upper = clamp_tick_to_range(align_tick_to_spacing(tick_upper, tick_spacing, round_up=True), tick_spacing)

    if lower >= upper:
        aligned_max = align_tick_to_spacing(MAX_TICK, tick_spacing, round_up=False)
        if lower + tick_spacing <= aligned_max:
            upper = lower + tick_spacing
        else:
            upper = aligned_max
            lower = aligned_max - tick_spacing
    return lower, upper


class FlowXObjectMapper:
    protocol = ClmmProtocol.FLOWX_V3
    pool_object_type = FLOWX_V3_POOL_OBJECT_TYPE
    position_object_type = FLOWX_V3_POSITION_OBJECT_TYPE

    def pool_coin_types(self, data: SuiObjectData) -> tuple[str, str]:
        raw = parse_fields(FlowXPoolFields, move_fields(data), data.object_id)
        return resolve_coin_types(data, raw.coin_type_x, raw.coin_type_y)

    def map_pool(self, data: SuiObjectData, *, coins: tuple[Coin, Coin]) -> Pool:
        raw = parse_fields(FlowXPoolFields, move_fields(data), data.object_id)
        return Pool(
            id=data.object_id,
            coins=coins,
            pool_rewards=map_pool_rewards(raw.reward_infos),
            reserves=(raw.reserve_x, raw.reserve_y),
            fee=raw.swap_fee_rate,
            sqrt_price_x64=raw.sqrt_price,
            tick_current=extract_tick_index(raw.tick_index, data.object_id, "tick_index"),
            tick_spacing=raw.tick_spacing or Pool.tick_spacing_for_fee(raw.swap_fee_rate),
            liquidity=raw.liquidity,
            fee_growth_global_x=raw.fee_growth_global_x,
            fee_growth_global_y=raw.fee_growth_global_y,
            protocol=self.protocol,
        )

    def position_pool_id(self, data: SuiObjectData) -> str:
        return parse_fields(FlowXPositionFields, move_fields(data), data.object_id).pool_id

    def map_position(self, data: SuiObjectData, *, pool: Pool) -> Position:
        raw = parse_fields(FlowXPositionFields, move_fields(data), data.object_id)
        tick_lower, tick_upper = align_position_ticks(
            extract_tick_index(raw.tick_lower_index, data.object_id, "tick_lower_index"),
            extract_tick_index(raw.tick_upper_index, data.object_id, "tick_upper_index"),
            pool.tick_spacing,
        )
        return Position(
            id=data.object_id,
            liquidity=raw.liquidity,
            owner=owner_address(data.owner),
            pool=pool,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            fee_growth_inside_x_last=raw.fee_growth_inside_x_last,
            fee_growth_inside_y_last=raw.fee_growth_inside_y_last,
            coins_owed_x=raw.coins_owed_x,
            coins_owed_y=raw.coins_owed_y,
            reward_infos=tuple(
                PositionRewardInfo(
                    coins_owed_reward=info.fields.coins_owed_reward,
                    reward_growth_inside_last=info.fields.reward_growth_inside_last,
                )
                for info in raw.reward_infos
            ),
        )
