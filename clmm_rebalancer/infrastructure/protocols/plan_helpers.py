from __future__ import annotations

from clmm_rebalancer.application.dto.liquidity_options import IncreaseLiquidityOptions
from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.transaction_plan import PlanArgument, ResultRef, TransactionPlan
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.slippage import minimum_amount
from clmm_rebalancer.domain.services.tick_math import TokenAmounts


def minimum_amounts(desired: TokenAmounts, slippage_tolerance: Fraction) -> TokenAmounts:
    return TokenAmounts(
        amount_x=minimum_amount(desired.amount_x, slippage_tolerance),
        amount_y=minimum_amount(desired.amount_y, slippage_tolerance),
    )


def coin_input(
    plan: TransactionPlan,
    *,
    coin: Coin,
    balance: int,
    provided: ResultRef | None,
) -> PlanArgument:
    if provided is not None:
        return provided
    return plan.coin_with_balance(coin_type=coin.coin_type, balance=balance, use_gas_coin=coin.is_sui)


def existing_position_arg(
    plan: TransactionPlan,
    *,
    position: Position,
    options: IncreaseLiquidityOptions,
) -> PlanArgument:
    if options.existing_position_id:
        return plan.object(options.existing_position_id)
    if position.is_projected:
        raise ValueError("Projected position needs create_position or existing_position_id.")
    return plan.object(position.id)


def require_materialized(position: Position, operation: str) -> None:
    if position.is_projected:
        raise ValueError(f"{operation} requires a position that exists on the ledger.")


def pool_type_arguments(position: Position) -> tuple[str, str]:
    return position.coin_x.coin_type, position.coin_y.coin_type
