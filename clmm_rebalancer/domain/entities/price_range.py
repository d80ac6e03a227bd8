from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.tick_math import tick_to_sqrt_price_x64


@dataclass(frozen=True)
class PriceRange:
    """Base and target sqrt-price bands inside a tick range.

    Bands that were not computed because an earlier check failed are None.
    Callers must check ``valid`` before reading the band bounds.
    """

    price_lower: int
    price_upper: int
    b_price_lower: int | None
    b_price_upper: int | None
    t_price_lower: int | None
    t_price_upper: int | None
    valid: bool

    @classmethod
    def from_ticks(
        cls,
        tick_lower: int,
        tick_upper: int,
        b_price_percent: Fraction,
        t_price_percent: Fraction,
    ) -> PriceRange:
        price_lower = tick_to_sqrt_price_x64(tick_lower)
        price_upper = tick_to_sqrt_price_x64(tick_upper)
        if price_upper <= price_lower:
            price_lower, price_upper = price_upper, price_lower

        price_diff = price_upper - price_lower

        b_diff = b_price_percent.multiply(price_diff).quotient
        b_price_lower = price_lower + b_diff
        b_price_upper = price_upper - b_diff
        if b_price_upper <= b_price_lower:
            return cls(price_lower, price_upper, b_price_lower, b_price_upper, None, None, False)

        t_diff = t_price_percent.multiply(price_diff).quotient
        t_price_lower = price_lower + t_diff
        t_price_upper = price_upper - t_diff
        valid = t_price_lower < t_price_upper and t_price_upper < b_price_upper

        return cls(
            price_lower=price_lower,
            price_upper=price_upper,
            b_price_lower=b_price_lower,
            b_price_upper=b_price_upper,
            t_price_lower=t_price_lower,
            t_price_upper=t_price_upper,
            valid=valid,
        )
