from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _parse_u256(value: Any) -> Any:
    if isinstance(value, str):
        return int(value.strip())
    return value


MoveInt = Annotated[int, BeforeValidator(_parse_u256)]


class MoveTypeName(BaseModel):
    name: str


class MoveTypeNameObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    fields: MoveTypeName


class RewardInfoFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reward_coin_type: MoveTypeNameObject
    ended_at_seconds: MoveInt = 0
    last_update_time: MoveInt = 0
    reward_per_seconds: MoveInt = 0
    total_reward: MoveInt = 0
    reward_growth_global: MoveInt = 0


class RewardInfoObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fields: RewardInfoFields


class PositionRewardInfoFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    coins_owed_reward: MoveInt = 0
    reward_growth_inside_last: MoveInt = 0


class PositionRewardInfoObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fields: PositionRewardInfoFields


class CetusPoolFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    coin_type_a: MoveTypeNameObject | None = None
    coin_type_b: MoveTypeNameObject | None = None
    liquidity: MoveInt
    coin_a: MoveInt
    coin_b: MoveInt
    current_sqrt_price: MoveInt
    current_tick_index: Any = None
    tick_spacing: MoveInt | None = None
    fee_growth_global_a: MoveInt = 0
    fee_growth_global_b: MoveInt = 0
    fee_rate: MoveInt
    reward_infos: list[RewardInfoObject] = Field(default_factory=list)


class CetusPositionFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pool: str
    liquidity: MoveInt
    tick_lower_index: Any = None
    tick_upper_index: Any = None
    fee_growth_inside_a: MoveInt = 0
    fee_growth_inside_b: MoveInt = 0
    fee_owed_a: MoveInt = 0
    fee_owed_b: MoveInt = 0
    reward_amount_owed_0: MoveInt = 0
    reward_amount_owed_1: MoveInt = 0
    reward_amount_owed_2: MoveInt = 0
    reward_growth_inside_0: MoveInt = 0
    reward_growth_inside_1: MoveInt = 0
    reward_growth_inside_2: MoveInt = 0


class FlowXPoolFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    coin_type_x: MoveTypeNameObject | None = None
    coin_type_y: MoveTypeNameObject | None = None
    liquidity: MoveInt
    reserve_x: MoveInt
    reserve_y: MoveInt
    sqrt_price: MoveInt
    swap_fee_rate: MoveInt
    tick_index: Any = None
    tick_spacing: MoveInt | None = None
    fee_growth_global_x: MoveInt = 0
    fee_growth_global_y: MoveInt = 0
    reward_infos: list[RewardInfoObject] = Field(default_factory=list)


class FlowXPositionFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pool_id: str
    liquidity: MoveInt
    tick_lower_index: Any = None
    tick_upper_index: Any = None
    coins_owed_x: MoveInt = 0
    coins_owed_y: MoveInt = 0
    fee_growth_inside_x_last: MoveInt = 0
    fee_growth_inside_y_last: MoveInt = 0
    reward_infos: list[PositionRewardInfoObject] = Field(default_factory=list)


class MoveObjectContent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    data_type: str = Field(alias="dataType")
    type: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)


class SuiObjectData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    object_id: str = Field(alias="objectId")
    type: str | None = None
    owner: Any = None
    content: MoveObjectContent | None = None


class SuiObjectError(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: str
    object_id: str | None = None


class SuiObjectResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: SuiObjectData | None = None
    error: SuiObjectError | None = None


class OwnedObjectsPage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    data: list[SuiObjectResponse] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")


class CoinMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    decimals: MoveInt
    symbol: str = ""
    name: str = ""
