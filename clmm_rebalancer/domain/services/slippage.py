from __future__ import annotations

from clmm_rebalancer.domain.services.fraction import Fraction, Percent


def minimum_amount(amount: int, slippage_tolerance: Fraction) -> int:
    return int(Percent(1).subtract(slippage_tolerance).multiply(amount).as_fraction.to_fixed(0))


def is_valid_tolerance(value: Fraction) -> bool:
    return not value.lt(0) and not value.gt(1)
