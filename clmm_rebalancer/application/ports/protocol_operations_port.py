from __future__ import annotations

from typing import Protocol

from clmm_rebalancer.application.dto.liquidity_options import (
    CollectRewardOptions,
    DecreaseLiquidityOptions,
    IncreaseLiquidityOptions,
)
from clmm_rebalancer.domain.entities.pool import ClmmProtocol
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.transaction_plan import ResultRef, TransactionPlan


class ProtocolOperations(Protocol):
    protocol: ClmmProtocol
    position_object_type: str

    def open_position(self, *, plan: TransactionPlan, position: Position) -> ResultRef:
        ...

    def close_position(self, *, plan: TransactionPlan, position: Position) -> None:
        ...

    def increase_liquidity(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: IncreaseLiquidityOptions,
    ) -> ResultRef | None:
        ...

    def decrease_liquidity(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: DecreaseLiquidityOptions,
    ) -> tuple[ResultRef, ResultRef]:
        ...

    def collect(self, *, plan: TransactionPlan, position: Position) -> tuple[ResultRef, ResultRef]:
        ...

    def collect_reward(
        self,
        *,
        plan: TransactionPlan,
        position: Position,
        options: CollectRewardOptions,
    ) -> ResultRef:
        ...
