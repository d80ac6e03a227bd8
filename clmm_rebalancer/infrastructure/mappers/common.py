from __future__ import annotations

from typing import Any

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import PoolReward
from clmm_rebalancer.domain.exceptions import InvalidDataError
from clmm_rebalancer.infrastructure.mappers.type_helper import coin_type_from_name, extract_type_arguments
from clmm_rebalancer.infrastructure.schemas.move_objects import MoveTypeNameObject, RewardInfoObject, SuiObjectData


def move_fields(data: SuiObjectData) -> dict[str, Any]:
    if data.content is None or data.content.data_type != "moveObject":
        raise InvalidDataError(data.object_id, "content", "object content must be a move object")
    return data.content.fields


def resolve_coin_types(
    data: SuiObjectData,
    coin_a: MoveTypeNameObject | None,
    coin_b: MoveTypeNameObject | None,
) -> tuple[str, str]:
    if coin_a is not None and coin_b is not None:
        return coin_type_from_name(coin_a.fields.name), coin_type_from_name(coin_b.fields.name)

    type_args = extract_type_arguments(data.type or "")
    if not type_args or len(type_args) < 2:
        raise InvalidDataError(
            data.object_id,
            "type",
            f"unable to extract coin types from fields or type parameters: {data.type}",
        )
    return type_args[0], type_args[1]


def map_pool_rewards(reward_infos: list[RewardInfoObject]) -> tuple[PoolReward, ...]:
    return tuple(
        PoolReward(
            coin=Coin(coin_type_from_name(info.fields.reward_coin_type.fields.name)),
            ended_at_seconds=info.fields.ended_at_seconds,
            last_update_time=info.fields.last_update_time,
            reward_per_seconds=info.fields.reward_per_seconds,
            total_reward=info.fields.total_reward,
            reward_growth_global=info.fields.reward_growth_global,
        )
        for info in reward_infos
    )
