from __future__ import annotations

import logging

from clmm_rebalancer.application.dto.liquidity_options import (
    CollectRewardOptions,
    DecreaseLiquidityOptions,
    IncreaseLiquidityOptions,
)
from clmm_rebalancer.domain.entities.pool import ClmmProtocol
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.transaction_plan import ResultRef, TransactionPlan
from clmm_rebalancer.infrastructure.protocols.cetus_operations import tick_to_u32_bits
from clmm_rebalancer.infrastructure.protocols.constants import (
    FLOWX_V3_CONFIG,
    FLOWX_V3_POSITION_OBJECT_TYPE,
    SUI_CLOCK_OBJECT_ID,
    FlowXV3Config,
)
from clmm_rebalancer.infrastructure.protocols.plan_helpers import (
    coin_input,
    existing_position_arg,
    minimum_amounts,
    pool_type_arguments,
    require_materialized,
)


logger = logging.getLogger(__name__)


class FlowXOperations:
    protocol = ClmmProtocol.FLOWX_V3
    position_object_type = FLOWX_V3_POSITION_OBJECT_TYPE

    def __init__(self, config: FlowXV3Config = FLOWX_V3_CONFIG):
        self._config = config

    def _target(self, function: str) -> str:
        return f"{self._config.package_id}::position_manager::{function}"

    def _i32(self, plan: TransactionPlan, tick: int) -> ResultRef:
        # FlowX takes ticks as i32 structs built from their u32 bit pattern
        return plan.move_call(
            target=f"{self._config.package_id}::i32::from_u32",
            arguments=[plan.pure(tick_to_u32_bits(tick), "u32")],
        )

    def open_position(self, *, plan: TransactionPlan, position: Position) -> ResultRef:
        tick_lower = self._i32(plan, position.tick_lower)
        tick_upper = self._i32(plan, position.tick_upper)
        return plan.move_call(
            target=self._target("open_position"),
            type_arguments=pool_type_arguments(position),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                tick_lower,
                tick_upper,
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )

    def close_position(self, *, plan: TransactionPlan, position: Position) -> None:
        require_materialized(position, "close_position")
        plan.move_call(
            target=self._target("close_position"),
            type_arguments=pool_type_arguments(position),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                plan.object(position.id),
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )

    def increase_liquidity(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: IncreaseLiquidityOptions,
    ) -> ResultRef | None:
        desired = position.mint_amounts
        minimum = minimum_amounts(desired, options.slippage_tolerance)

        if options.create_position:
            position_arg = self.open_position(plan=plan, position=position)
        else:
            position_arg = existing_position_arg(plan, position=position, options=options)

        coin_x = coin_input(plan, coin=position.coin_x, balance=desired.amount_x, provided=options.coin_x_in)
        coin_y = coin_input(plan, coin=position.coin_y, balance=desired.amount_y, provided=options.coin_y_in)

        plan.move_call(
            target=self._target("add_liquidity"),
            type_arguments=pool_type_arguments(position),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                position_arg,
                coin_x,
                coin_y,
                plan.pure(minimum.amount_x, "u64"),
                plan.pure(minimum.amount_y, "u64"),
                plan.pure(True, "bool"),
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )

        if options.create_position:
            return position_arg
        return None

    def decrease_liquidity(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: DecreaseLiquidityOptions,
    ) -> tuple[ResultRef, ResultRef]:
        require_materialized(position, "decrease_liquidity")
        logger.debug(
            "flowx_operations: decrease_liquidity position_id=%s liquidity=%s",
            position.id,
            position.liquidity,
        )
        minimum = minimum_amounts(position.mint_amounts, options.slippage_tolerance)

        plan.move_call(
            target=self._target("remove_liquidity"),
            type_arguments=pool_type_arguments(position),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                plan.object(position.id),
                plan.pure(position.liquidity, "u128"),
                plan.pure(minimum.amount_x, "u64"),
                plan.pure(minimum.amount_y, "u64"),
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )
        return self.collect(plan=plan, position=position)

    def collect(self, *, plan: TransactionPlan, position: Position) -> tuple[ResultRef, ResultRef]:
        require_materialized(position, "collect")
        result = plan.move_call(
            target=self._target("collect"),
            type_arguments=pool_type_arguments(position),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                plan.object(position.id),
                plan.pure(True, "bool"),
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )
        return result.at(0), result.at(1)

    def collect_reward(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: CollectRewardOptions,
    ) -> ResultRef:
        require_materialized(position, "collect_reward")
        return plan.move_call(
            target=self._target("collect_reward"),
            type_arguments=(*pool_type_arguments(position), options.reward_coin.coin_type),
            arguments=[
                plan.object(self._config.version_object),
                plan.object(position.pool.id),
                plan.object(position.id),
                plan.pure(True, "bool"),
                plan.object(SUI_CLOCK_OBJECT_ID),
            ],
        )
