from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.transaction_plan import ResultRef
from clmm_rebalancer.domain.services.fraction import Fraction


@dataclass(frozen=True)
class IncreaseLiquidityOptions:
    slippage_tolerance: Fraction
    coin_x_in: ResultRef | None = None
    coin_y_in: ResultRef | None = None
    create_position: bool = False
    existing_position_id: str | None = None


@dataclass(frozen=True)
class DecreaseLiquidityOptions:
    slippage_tolerance: Fraction


@dataclass(frozen=True)
class CollectRewardOptions:
    reward_coin: Coin
