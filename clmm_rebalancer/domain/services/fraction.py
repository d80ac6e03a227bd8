from __future__ import annotations

from decimal import Decimal
from math import gcd
from typing import Union

from clmm_rebalancer.domain.exceptions import CannotInvertZeroError, DivisionByZeroError


IntLike = Union[int, str]
FractionLike = Union["Fraction", int, str]


def _to_int(value: IntLike) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid fraction component.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"Unsupported fraction component: {type(value).__name__}")


def _group_digits(digits: str, separator: str) -> str:
    if not separator:
        return digits
    return format(int(digits), ",").replace(",", separator)


class Fraction:
    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: IntLike, denominator: IntLike = 1):
        num = _to_int(numerator)
        den = _to_int(denominator)
        if den == 0:
            raise DivisionByZeroError("Division by zero.")
        if den < 0:
            num, den = -num, -den
        self._numerator = num
        self._denominator = den

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def quotient(self) -> int:
        """Integer part, truncated toward zero."""
        q = abs(self._numerator) // self._denominator
        return -q if self._numerator < 0 else q

    @property
    def remainder(self) -> int:
        return self._numerator - self.quotient * self._denominator

    @property
    def as_fraction(self) -> Fraction:
        return self

    def invert(self) -> Fraction:
        if self._numerator == 0:
            raise CannotInvertZeroError("Cannot invert zero.")
        return Fraction(self._denominator, self._numerator)

    def add(self, other: FractionLike) -> Fraction:
        o = _coerce(other)
        num = self._numerator * o.denominator + o.numerator * self._denominator
        return _reduced(num, self._denominator * o.denominator)

    def subtract(self, other: FractionLike) -> Fraction:
        o = _coerce(other)
        num = self._numerator * o.denominator - o.numerator * self._denominator
        return _reduced(num, self._denominator * o.denominator)

    def multiply(self, other: FractionLike) -> Fraction:
        o = _coerce(other)
        return _reduced(self._numerator * o.numerator, self._denominator * o.denominator)

    def divide(self, other: FractionLike) -> Fraction:
        return self.multiply(_coerce(other).invert())

    def lt(self, other: FractionLike) -> bool:
        o = _coerce(other)
        return self._numerator * o.denominator < o.numerator * self._denominator

    def eq(self, other: FractionLike) -> bool:
        o = _coerce(other)
        return self._numerator * o.denominator == o.numerator * self._denominator

    def gt(self, other: FractionLike) -> bool:
        o = _coerce(other)
        return self._numerator * o.denominator > o.numerator * self._denominator

    def to_fixed(
        self,
        decimals: int,
        decimal_separator: str = ".",
        group_separator: str = "",
    ) -> str:
        """Render with round-half-up at the requested scale.

        Rounding is applied to the magnitude and the sign is prefixed
        afterwards, so halves round away from zero for negative values.
        """
        if decimals < 0:
            raise ValueError("decimals must be non-negative.")

        negative = self._numerator < 0
        magnitude = abs(self._numerator)
        quotient, remainder = divmod(magnitude, self._denominator)

        if decimals == 0:
            rounded = quotient + 1 if remainder * 2 >= self._denominator else quotient
            rendered = _group_digits(str(rounded), group_separator)
        else:
            scale = 10**decimals
            frac_raw = remainder * scale * 10 // self._denominator
            frac_rounded = (frac_raw + 5) // 10
            if frac_rounded >= scale:
                integer_part = _group_digits(str(quotient + 1), group_separator)
                rendered = integer_part + decimal_separator + "0" * decimals
            else:
                integer_part = _group_digits(str(quotient), group_separator)
                rendered = integer_part + decimal_separator + str(frac_rounded).zfill(decimals)

        if negative and any(char in "123456789" for char in rendered):
            return "-" + rendered
        return rendered

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Fraction, int)) and not isinstance(other, bool):
            return self.eq(other)
        return NotImplemented

    def __hash__(self) -> int:
        g = gcd(self._numerator, self._denominator)
        return hash((self._numerator // g, self._denominator // g))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._numerator}, {self._denominator})"


class Percent(Fraction):
    """Fraction whose add/subtract keep the original scale unreduced."""

    __slots__ = ()

    @classmethod
    def from_decimal(cls, value: Decimal | str) -> Percent:
        numerator, denominator = Decimal(value).as_integer_ratio()
        return cls(numerator, denominator)

    def add(self, other: FractionLike) -> Percent:
        o = _coerce(other)
        num = self.numerator * o.denominator + o.numerator * self.denominator
        return Percent(num, self.denominator * o.denominator)

    def subtract(self, other: FractionLike) -> Percent:
        o = _coerce(other)
        num = self.numerator * o.denominator - o.numerator * self.denominator
        return Percent(num, self.denominator * o.denominator)

    @property
    def as_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def to_fixed(
        self,
        decimals: int,
        decimal_separator: str = ".",
        group_separator: str = "",
    ) -> str:
        return Fraction(self.numerator * 100, self.denominator).to_fixed(
            decimals,
            decimal_separator=decimal_separator,
            group_separator=group_separator,
        )


def _coerce(value: FractionLike) -> Fraction:
    if isinstance(value, Fraction):
        return value
    return Fraction(value)


def _reduced(numerator: int, denominator: int) -> Fraction:
    fraction = Fraction(numerator, denominator)
    g = gcd(fraction.numerator, fraction.denominator)
    if g <= 1:
        return fraction
    return Fraction(fraction.numerator // g, fraction.denominator // g)
