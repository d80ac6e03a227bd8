from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.transaction_plan import ResultRef, TransactionPlan


@dataclass(frozen=True)
class SetAsideReward:
    coin: Coin
    handle: ResultRef


@dataclass(frozen=True)
class LiquidityPlan:
    transaction: TransactionPlan
    projected_position: Position
    set_aside_rewards: tuple[SetAsideReward, ...] = ()
