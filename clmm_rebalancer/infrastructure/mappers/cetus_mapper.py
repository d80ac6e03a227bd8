from __future__ import annotations

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import ClmmProtocol, Pool
from clmm_rebalancer.domain.entities.position import Position, PositionRewardInfo
from clmm_rebalancer.infrastructure.mappers.common import map_pool_rewards, move_fields, resolve_coin_types
from clmm_rebalancer.infrastructure.mappers.type_helper import extract_tick_index, owner_address, parse_fields
from clmm_rebalancer.infrastructure.protocols.constants import (
    CETUS_POOL_OBJECT_TYPE,
    CETUS_POSITION_OBJECT_TYPE,
)
from clmm_rebalancer.infrastructure.schemas.move_objects import (
    CetusPoolFields,
    CetusPositionFields,
    SuiObjectData,
)


class CetusObjectMapper:
    protocol = ClmmProtocol.CETUS
    pool_object_type = CETUS_POOL_OBJECT_TYPE
    position_object_type = CETUS_POSITION_OBJECT_TYPE

    def pool_coin_types(self, data: SuiObjectData) -> tuple[str, str]:
        raw = parse_fields(CetusPoolFields, move_fields(data), data.object_id)
        return resolve_coin_types(data, raw.coin_type_a, raw.coin_type_b)

    def map_pool(self, data: SuiObjectData, *, coins: tuple[Coin, Coin]) -> Pool:
        raw = parse_fields(CetusPoolFields, move_fields(data), data.object_id)
        return Pool(
            id=data.object_id,
            coins=coins,
            pool_rewards=map_pool_rewards(raw.reward_infos),
            reserves=(raw.coin_a, raw.coin_b),
            fee=raw.fee_rate,
            sqrt_price_x64=raw.current_sqrt_price,
            tick_current=extract_tick_index(raw.current_tick_index, data.object_id, "current_tick_index"),
            tick_spacing=raw.tick_spacing or Pool.tick_spacing_for_fee(raw.fee_rate),
            liquidity=raw.liquidity,
            fee_growth_global_x=raw.fee_growth_global_a,
            fee_growth_global_y=raw.fee_growth_global_b,
            protocol=self.protocol,
        )

    def position_pool_id(self, data: SuiObjectData) -> str:
        return parse_fields(CetusPositionFields, move_fields(data), data.object_id).pool

    def map_position(self, data: SuiObjectData, *, pool: Pool) -> Position:
        raw = parse_fields(CetusPositionFields, move_fields(data), data.object_id)
        return Position(
            id=data.object_id,
            liquidity=raw.liquidity,
            owner=owner_address(data.owner),
            pool=pool,
            tick_lower=extract_tick_index(raw.tick_lower_index, data.object_id, "tick_lower_index"),
            tick_upper=extract_tick_index(raw.tick_upper_index, data.object_id, "tick_upper_index"),
            fee_growth_inside_x_last=raw.fee_growth_inside_a,
            fee_growth_inside_y_last=raw.fee_growth_inside_b,
            coins_owed_x=raw.fee_owed_a,
            coins_owed_y=raw.fee_owed_b,
            reward_infos=(
                PositionRewardInfo(raw.reward_amount_owed_0, raw.reward_growth_inside_0),
                PositionRewardInfo(raw.reward_amount_owed_1, raw.reward_growth_inside_1),
                PositionRewardInfo(raw.reward_amount_owed_2, raw.reward_growth_inside_2),
            ),
        )
