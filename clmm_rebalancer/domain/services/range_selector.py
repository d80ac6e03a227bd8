from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.entities.pool import Pool
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.entities.price_range import PriceRange
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.tick_math import MAX_TICK, MIN_TICK, tick_to_sqrt_price_x64


@dataclass(frozen=True)
class TargetRange:
    tick_lower: int
    tick_upper: int
    active_range: tuple[int, int]
    out_of_range: bool
    widened: str | None = None

    def differs_from(self, position: Position) -> bool:
        return self.tick_lower != position.tick_lower or self.tick_upper != position.tick_upper


def closest_active_range(pool: Pool, multiplier: int = 1) -> tuple[int, int]:
    """Range of ``multiplier`` spacings centred on the current tick.

    The lower bound is snapped to the spacing with round-half-up. When it
    lands exactly on the current tick while the price sits below that tick,
    it moves down one spacing so the range still holds the price.
    """
    spacing = pool.tick_spacing
    width = multiplier * spacing
    # round((tick - width / 2) / spacing), half toward +inf, on integers
    lower = (2 * pool.tick_current - width + spacing) // (2 * spacing) * spacing

    if lower == pool.tick_current and pool.sqrt_price_x64 < tick_to_sqrt_price_x64(pool.tick_current):
        lower -= spacing

    return lower, lower + width


def is_out_of_range(position: Position, multiplier: int) -> bool:
    lower, upper = closest_active_range(position.pool, multiplier)
    return position.tick_lower != lower or position.tick_upper != upper


def align_tick_to_spacing(tick: int, tick_spacing: int, round_up: bool | None = None) -> int:
    if round_up is True:
        return -(-tick // tick_spacing) * tick_spacing
    if round_up is False:
        return tick // tick_spacing * tick_spacing
    return (2 * tick + tick_spacing) // (2 * tick_spacing) * tick_spacing


def clamp_tick_to_range(
    tick: int,
    tick_spacing: int,
    min_tick: int = MIN_TICK,
    max_tick: int = MAX_TICK,
) -> int:
    aligned_min = align_tick_to_spacing(min_tick, tick_spacing, round_up=True)
    aligned_max = align_tick_to_spacing(max_tick, tick_spacing, round_up=False)
    return max(aligned_min, min(aligned_max, tick))


def select_target_range(
    position: Position,
    *,
    multiplier: int,
    b_price_percent: Fraction,
    t_price_percent: Fraction,
    widening_spacings: int = 1,
) -> TargetRange:
    pool = position.pool
    active_lower, active_upper = closest_active_range(pool, multiplier)
    out_of_range = position.tick_lower != active_lower or position.tick_upper != active_upper

    if not out_of_range:
        return TargetRange(
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            active_range=(active_lower, active_upper),
            out_of_range=False,
        )

    band = PriceRange.from_ticks(active_lower, active_upper, b_price_percent, t_price_percent)
    widen_by = widening_spacings * pool.tick_spacing
    tick_lower, tick_upper, widened = active_lower, active_upper, None

    if band.valid and widen_by > 0:
        if pool.sqrt_price_x64 < band.b_price_lower:
            tick_lower = clamp_tick_to_range(active_lower - widen_by, pool.tick_spacing)
            widened = "lower"
        elif pool.sqrt_price_x64 > band.b_price_upper:
            tick_upper = clamp_tick_to_range(active_upper + widen_by, pool.tick_spacing)
            widened = "upper"

    return TargetRange(
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        active_range=(active_lower, active_upper),
        out_of_range=True,
        widened=widened,
    )
