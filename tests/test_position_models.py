from __future__ import annotations

import pytest

from clmm_rebalancer.domain.entities.coin import Coin, SUI_COIN_TYPE, normalize_object_id
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.exceptions import InvalidDataError
from clmm_rebalancer.domain.services.fraction import Fraction
from clmm_rebalancer.domain.services.price_tick_conversions import pool_display_price, tick_to_price
from clmm_rebalancer.domain.services.tick_math import (
    Q64,
    max_liquidity_for_amount_x,
    max_liquidity_for_amount_y,
    tick_to_sqrt_price_x64,
)

from tests.factories import OWNER, SUI, USDC, make_pool, make_position


def test_coin_type_is_normalized():
    coin = Coin("0x2::sui::SUI")
    assert coin.coin_type == SUI_COIN_TYPE
    assert coin.coin_type.startswith("0x" + "0" * 63 + "2::")
    assert coin.is_sui
    assert Coin("0x2::sui::SUI", decimals=9) == Coin("0x0002::sui::SUI")


def test_normalize_object_id_pads_and_lowercases():
    assert normalize_object_id("0xABC") == "0x" + "0" * 61 + "abc"


def test_pool_requires_positive_spacing():
    with pytest.raises(InvalidDataError) as exc_info:
        make_pool(tick_spacing=0)
    assert exc_info.value.field == "tick_spacing"


def test_tick_spacing_for_fee():
    pool = make_pool()
    assert pool.tick_spacing_for_fee(3000) == 60
    assert pool.tick_spacing_for_fee(500) == 10


@pytest.mark.parametrize(
    ("tick_lower", "tick_upper", "field"),
    [
        (120, 60, "tick_lower"),
        (61, 120, "tick_lower"),
        (60, 121, "tick_upper"),
        (-443640, 60, "tick_lower"),
    ],
)
def test_position_rejects_invalid_ticks(tick_lower, tick_upper, field):
    with pytest.raises(InvalidDataError) as exc_info:
        make_position(pool=make_pool(), tick_lower=tick_lower, tick_upper=tick_upper)
    assert exc_info.value.field == field


def test_position_rejects_negative_liquidity():
    with pytest.raises(InvalidDataError):
        make_position(pool=make_pool(), tick_lower=-60, tick_upper=60, liquidity=-1)


def test_contains_tick_is_inclusive():
    position = make_position(pool=make_pool(tick_current=1000), tick_lower=900, tick_upper=1020)
    assert position.contains_tick(900)
    assert position.contains_tick(1000)
    assert position.contains_tick(1020)
    assert not position.contains_tick(1021)


def test_pending_values_come_from_snapshot():
    position = make_position(
        pool=make_pool(),
        tick_lower=-60,
        tick_upper=60,
        coins_owed_x=11,
        coins_owed_y=22,
        reward_amounts=(5, 0, 7),
    )
    assert position.pending_fees.amount_x == 11
    assert position.pending_fees.amount_y == 22
    assert position.pending_rewards == [5, 0, 7]


def test_from_amounts_inside_range_uses_min_of_both_sides():
    pool = make_pool(tick_current=0)
    amount_x, amount_y = 10**9, 3 * 10**9

    position = Position.from_amounts(
        owner=OWNER,
        pool=pool,
        tick_lower=-120,
        tick_upper=120,
        amount_x=amount_x,
        amount_y=amount_y,
    )

    expected = min(
        max_liquidity_for_amount_x(Q64, tick_to_sqrt_price_x64(120), amount_x),
        max_liquidity_for_amount_y(tick_to_sqrt_price_x64(-120), Q64, amount_y),
    )
    assert position.liquidity == expected
    assert position.is_projected
    assert position.tick_lower == -120 and position.tick_upper == 120


def test_from_amounts_below_range_uses_x_only():
    pool = make_pool(tick_current=0)
    position = Position.from_amounts(
        owner=OWNER,
        pool=pool,
        tick_lower=600,
        tick_upper=720,
        amount_x=10**9,
        amount_y=10**9,
    )

    assert position.liquidity == max_liquidity_for_amount_x(
        tick_to_sqrt_price_x64(600), tick_to_sqrt_price_x64(720), 10**9
    )
    assert position.mint_amounts.amount_y == 0
    assert position.mint_amounts.amount_x > 0


def test_from_amounts_above_range_uses_y_only():
    pool = make_pool(tick_current=1000)
    position = Position.from_amounts(
        owner=OWNER,
        pool=pool,
        tick_lower=600,
        tick_upper=720,
        amount_x=10**9,
        amount_y=10**9,
    )

    assert position.liquidity == max_liquidity_for_amount_y(
        tick_to_sqrt_price_x64(600), tick_to_sqrt_price_x64(720), 10**9
    )
    assert position.mint_amounts.amount_x == 0


def test_from_amounts_with_zero_amounts_has_zero_liquidity():
    position = Position.from_amounts(
        owner=OWNER,
        pool=make_pool(),
        tick_lower=-60,
        tick_upper=60,
        amount_x=0,
        amount_y=0,
    )
    assert position.liquidity == 0


def test_pool_ratio_sentinels_outside_range():
    pool = make_pool(tick_current=0)
    assert pool.get_ratio(600, 720) == Fraction(Q64 * Q64)
    assert pool.get_ratio(-720, -600) == Fraction(1, Q64 * Q64)
    assert pool.get_ratio(-120, 120).gt(0)


def test_display_price_adjusts_decimals():
    pool = make_pool(tick_current=0)
    assert pool_display_price(pool).to_fixed(6) == "1000.000000"


def test_tick_price_orientation_follows_coin_order():
    forward = tick_to_price(SUI, USDC, 0)
    backward = tick_to_price(USDC, SUI, 0)
    assert forward == Fraction(1)
    assert backward == Fraction(1)
    assert tick_to_price(SUI, USDC, 600).multiply(tick_to_price(USDC, SUI, 600)) == Fraction(1)
