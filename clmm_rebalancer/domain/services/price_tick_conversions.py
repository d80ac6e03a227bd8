from __future__ import annotations

from clmm_rebalancer.domain.entities.coin import Coin
from clmm_rebalancer.domain.entities.pool import Pool
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.tick_math import Q128, tick_to_sqrt_price_x64


def sqrt_price_x64_to_price(base_coin: Coin, quote_coin: Coin, sqrt_price_x64: int) -> Fraction:
    ratio_x128 = sqrt_price_x64 * sqrt_price_x64
    if base_coin.sorts_before(quote_coin):
        return Fraction(ratio_x128, Q128)
    return Fraction(Q128, ratio_x128)


def tick_to_price(base_coin: Coin, quote_coin: Coin, tick: int) -> Fraction:
    return sqrt_price_x64_to_price(base_coin, quote_coin, tick_to_sqrt_price_x64(tick))


def pool_display_price(pool: Pool) -> Fraction:
    """Price of coin X in units of coin Y, adjusted by coin decimals."""
    raw = Fraction(pool.sqrt_price_x64 * pool.sqrt_price_x64, Q128)
    return raw.multiply(Fraction(10**pool.coin_x.decimals, 10**pool.coin_y.decimals))
