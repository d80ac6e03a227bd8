from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.domain.exceptions import TickOutOfRangeError


MIN_TICK = -443636
MAX_TICK = 443636
MIN_SQRT_RATIO = 4295048016
MAX_SQRT_RATIO = 79226673515401279992447579055
Q64 = 1 << 64
Q128 = 1 << 128

BIT_PRECISION = 14
LOG_B_2_X32 = 59543866431248
LOG_B_P_ERR_MARGIN_LOWER_X64 = 184467440737095516
LOG_B_P_ERR_MARGIN_UPPER_X64 = 15793534762490258745

# sqrt(1.0001^(2^k)) scaled by 2^96, k = 1..18
_POSITIVE_TICK_FACTORS = (
    79236085330515764027303304731,
    79244008939048815603706035061,
    79259858533276714757314932305,
    79291567232598584799939703904,
    79355022692464371645785046466,
    79482085999252804386437311141,
    79736823300114093921829183326,
    80248749790819932309965073892,
    81282483887344747381513967011,
    83390072131320151908154831281,
    87770609709833776024991924138,
    97234110755111693312479820773,
    119332217159966728226237229890,
    179736315981702064433883588727,
    407748233172238350107850275304,
    2098478828474011932436660412517,
    55581415166113811149459800483533,
    38992368544603139932233054999993551,
)

# 1 / sqrt(1.0001^(2^k)) scaled by 2^64, k = 1..18
_NEGATIVE_TICK_FACTORS = (
    18444899583751176498,
    18443055278223354162,
    18439367220385604838,
    18431993317065449817,
    18417254355718160513,
    18387811781193591352,
    18329067761203520168,
    18212142134806087854,
    17980523815641551639,
    17526086738831147013,
    16651378430235024244,
    15030750278693429944,
    12247334978882834399,
    8131365268884726200,
    3584323654723342297,
    696457651847595233,
    26294789957452057,
    37481735321082,
)


@dataclass(frozen=True)
class TokenAmounts:
    amount_x: int
    amount_y: int


def _to_twos(n: int, bit_width: int) -> int:
    return n + (1 << bit_width) if n < 0 else n


def _from_twos(n: int, bit_width: int) -> int:
    if (n >> (bit_width - 1)) & 1:
        return (n & ((1 << bit_width) - 1)) - (1 << bit_width)
    return n


def signed_shift_left(n: int, shift_by: int, bit_width: int) -> int:
    shifted = _to_twos(n, bit_width) << shift_by
    shifted &= (1 << (bit_width + 1)) - 1
    return _from_twos(shifted, bit_width)


def signed_shift_right(n: int, shift_by: int, bit_width: int) -> int:
    shifted = _to_twos(n, bit_width) >> shift_by
    shifted &= (1 << (bit_width - shift_by + 1)) - 1
    return _from_twos(shifted, bit_width - shift_by)


def _sqrt_price_positive(tick: int) -> int:
    ratio = 79232123823359799118286999567 if tick & 1 else 79228162514264337593543950336
    for bit, factor in enumerate(_POSITIVE_TICK_FACTORS, start=1):
        if tick & (1 << bit):
            ratio = signed_shift_right(ratio * factor, 96, 256)
    return signed_shift_right(ratio, 32, 256)


def _sqrt_price_negative(tick: int) -> int:
    tick = abs(tick)
    ratio = 18445821805675392311 if tick & 1 else Q64
    for bit, factor in enumerate(_NEGATIVE_TICK_FACTORS, start=1):
        if tick & (1 << bit):
            ratio = signed_shift_right(ratio * factor, 64, 256)
    return ratio


def tick_to_sqrt_price_x64(tick: int) -> int:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRangeError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}].")
    if tick > 0:
        return _sqrt_price_positive(tick)
    return _sqrt_price_negative(tick)


def sqrt_price_x64_to_tick(sqrt_price_x64: int) -> int:
    """Largest tick whose sqrt price does not exceed ``sqrt_price_x64``."""
    if sqrt_price_x64 < MIN_SQRT_RATIO or sqrt_price_x64 > MAX_SQRT_RATIO:
        raise TickOutOfRangeError(
            f"sqrt price {sqrt_price_x64} outside [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO}]."
        )

    msb = sqrt_price_x64.bit_length() - 1
    log2p_integer_x32 = signed_shift_left(msb - 64, 32, 128)

    bit = 0x8000000000000000
    precision = 0
    log2p_fraction_x64 = 0
    r = sqrt_price_x64 >> (msb - 63) if msb >= 64 else sqrt_price_x64 << (63 - msb)

    while bit > 0 and precision < BIT_PRECISION:
        r = r * r
        r_more_than_two = r >> 127
        r >>= 63 + r_more_than_two
        log2p_fraction_x64 += bit * r_more_than_two
        bit >>= 1
        precision += 1

    log2p_x32 = log2p_integer_x32 + (log2p_fraction_x64 >> 32)
    logbp_x64 = log2p_x32 * LOG_B_2_X32

    tick_low = signed_shift_right(logbp_x64 - LOG_B_P_ERR_MARGIN_LOWER_X64, 64, 128)
    tick_high = signed_shift_right(logbp_x64 + LOG_B_P_ERR_MARGIN_UPPER_X64, 64, 128)

    if tick_low == tick_high:
        return tick_low
    if tick_to_sqrt_price_x64(tick_high) <= sqrt_price_x64:
        return tick_high
    return tick_low


def max_liquidity_for_amount_x(sqrt_price_a: int, sqrt_price_b: int, amount_x: int) -> int:
    lower = min(sqrt_price_a, sqrt_price_b)
    upper = max(sqrt_price_a, sqrt_price_b)
    num = amount_x * upper * lower // Q64
    dem = upper - lower
    if num == 0 or dem == 0:
        return 0
    return num // dem


def max_liquidity_for_amount_y(sqrt_price_a: int, sqrt_price_b: int, amount_y: int) -> int:
    lower = min(sqrt_price_a, sqrt_price_b)
    upper = max(sqrt_price_a, sqrt_price_b)
    delta = upper - lower
    if delta == 0:
        return 0
    return (amount_y << 64) // delta


def _amount_x(liquidity: int, sqrt_price_lower: int, sqrt_price_upper: int, round_up: bool) -> int:
    num = (liquidity << 64) * (sqrt_price_upper - sqrt_price_lower)
    den = sqrt_price_lower * sqrt_price_upper
    if den == 0:
        return 0
    if round_up:
        return -(-num // den)
    return num // den


def _amount_y(liquidity: int, sqrt_price_lower: int, sqrt_price_upper: int, round_up: bool) -> int:
    num = liquidity * (sqrt_price_upper - sqrt_price_lower)
    if round_up and num % Q64:
        return (num >> 64) + 1
    return num >> 64


def get_amounts_for_liquidity(
    sqrt_price_current: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    liquidity: int,
    round_up: bool,
) -> TokenAmounts:
    if sqrt_price_current < sqrt_price_lower:
        return TokenAmounts(
            amount_x=_amount_x(liquidity, sqrt_price_lower, sqrt_price_upper, round_up),
            amount_y=0,
        )
    if sqrt_price_current < sqrt_price_upper:
        return TokenAmounts(
            amount_x=_amount_x(liquidity, sqrt_price_current, sqrt_price_upper, round_up),
            amount_y=_amount_y(liquidity, sqrt_price_lower, sqrt_price_current, round_up),
        )
    return TokenAmounts(
        amount_x=0,
        amount_y=_amount_y(liquidity, sqrt_price_lower, sqrt_price_upper, round_up),
    )
