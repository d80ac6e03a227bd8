from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

from clmm_rebalancer.application.dto.liquidity_options import (
    CollectRewardOptions,
    DecreaseLiquidityOptions,
    IncreaseLiquidityOptions,
)
from clmm_rebalancer.application.dto.liquidity_plan import LiquidityPlan, SetAsideReward
from clmm_rebalancer.application.ports.pending_yield_port import PendingYieldPort
from clmm_rebalancer.application.ports.protocol_operations_port import ProtocolOperations
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.transaction_plan import ResultRef, TransactionPlan
from clmm_rebalancer.domain.exceptions import InvalidSlippageToleranceError, UnsupportedProtocolError
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.slippage import is_valid_tolerance


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionManagerOptions:
    slippage_tolerance: Fraction


class PositionManager:
    """Builds one-shot migrate and compound plans for a position."""

    def __init__(
        self,
        *,
        options: PositionManagerOptions,
        operations: ProtocolOperations,
        yield_reader: PendingYieldPort,
    ):
        if not is_valid_tolerance(options.slippage_tolerance):
            raise InvalidSlippageToleranceError("slippage_tolerance must be between 0 and 1.")
        self._options = options
        self._operations = operations
        self._yield_reader = yield_reader

    @property
    def options(self) -> PositionManagerOptions:
        return self._options

    async def migrate(self, position: Position, tick_lower: int, tick_upper: int) -> LiquidityPlan:
        self._ensure_supported(position)
        fees, rewards = await asyncio.gather(
            self._yield_reader.get_fees(position=position),
            self._yield_reader.get_rewards(position=position),
        )

        plan = TransactionPlan(sender=position.owner)
        removed_x, removed_y = self._operations.decrease_liquidity(
            plan=plan,
            position=position,
            options=DecreaseLiquidityOptions(slippage_tolerance=self._options.slippage_tolerance),
        )
        set_aside = self._sweep_rewards(plan, position, rewards, removed_x, removed_y)
        self._operations.close_position(plan=plan, position=position)

        mint = position.mint_amounts
        projected = Position.from_amounts(
            owner=position.owner,
            pool=position.pool,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            amount_x=mint.amount_x + fees.amount_x,
            amount_y=mint.amount_y + fees.amount_y,
        )
        new_position = self._operations.increase_liquidity(
            plan=plan,
            position=projected,
            options=IncreaseLiquidityOptions(
                slippage_tolerance=self._options.slippage_tolerance,
                coin_x_in=removed_x,
                coin_y_in=removed_y,
                create_position=True,
            ),
        )
        if new_position is None:
            raise RuntimeError("increase_liquidity did not return the created position handle.")

        plan.transfer_objects([new_position], position.owner)
        for reward in set_aside:
            plan.transfer_objects([reward.handle], position.owner)

        logger.info(
            "position_manager: migrate_planned position_id=%s from=[%s,%s] to=[%s,%s] liquidity=%s steps=%s",
            position.id,
            position.tick_lower,
            position.tick_upper,
            tick_lower,
            tick_upper,
            projected.liquidity,
            len(plan.steps),
        )
        return LiquidityPlan(transaction=plan, projected_position=projected, set_aside_rewards=set_aside)

    async def compound(self, position: Position) -> LiquidityPlan:
        self._ensure_supported(position)
        fees, rewards = await asyncio.gather(
            self._yield_reader.get_fees(position=position),
            self._yield_reader.get_rewards(position=position),
        )

        plan = TransactionPlan(sender=position.owner)
        collected_x, collected_y = self._operations.collect(plan=plan, position=position)
        set_aside = self._sweep_rewards(plan, position, rewards, collected_x, collected_y)

        projected = Position.from_amounts(
            owner=position.owner,
            pool=position.pool,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            amount_x=fees.amount_x,
            amount_y=fees.amount_y,
        )
        self._operations.increase_liquidity(
            plan=plan,
            position=projected,
            options=IncreaseLiquidityOptions(
                slippage_tolerance=self._options.slippage_tolerance,
                coin_x_in=collected_x,
                coin_y_in=collected_y,
                existing_position_id=position.id,
            ),
        )
        for reward in set_aside:
            plan.transfer_objects([reward.handle], position.owner)

        logger.info(
            "position_manager: compound_planned position_id=%s fee_x=%s fee_y=%s added_liquidity=%s",
            position.id,
            fees.amount_x,
            fees.amount_y,
            projected.liquidity,
        )
        return LiquidityPlan(transaction=plan, projected_position=projected, set_aside_rewards=set_aside)

    def _sweep_rewards(
        self,
        plan: TransactionPlan,
        position: Position,
        rewards: list[int],
        bucket_x: ResultRef,
        bucket_y: ResultRef,
    ) -> tuple[SetAsideReward, ...]:
        set_aside: list[SetAsideReward] = []
        for idx, reward_info in enumerate(position.pool.pool_rewards):
            pending = rewards[idx] if idx < len(rewards) else 0
            if pending <= 0:
                continue

            collected = self._operations.collect_reward(
                plan=plan,
                position=position,
                options=CollectRewardOptions(reward_coin=reward_info.coin),
            )
            if reward_info.coin == position.coin_x:
                plan.merge_coins(bucket_x, [collected])
            elif reward_info.coin == position.coin_y:
                plan.merge_coins(bucket_y, [collected])
            else:
                set_aside.append(SetAsideReward(coin=reward_info.coin, handle=collected))
        return tuple(set_aside)

    def _ensure_supported(self, position: Position) -> None:
        if position.is_projected:
            raise ValueError("Cannot plan operations for a projected position.")
        if position.pool.protocol != self._operations.protocol:
            raise UnsupportedProtocolError(
                f"Position protocol {position.pool.protocol.value} does not match "
                f"operations protocol {self._operations.protocol.value}."
            )
