from __future__ import annotations

from dataclasses import dataclass, field


SUI_ADDRESS_LENGTH = 64


def normalize_object_id(value: str) -> str:
    normalized = value.strip().lower()
    if normalized.startswith("0x"):
        normalized = normalized[2:]
    return "0x" + normalized.rjust(SUI_ADDRESS_LENGTH, "0")


def normalize_coin_type(coin_type: str) -> str:
    address, sep, rest = coin_type.strip().partition("::")
    if not sep:
        return normalize_object_id(address)
    return normalize_object_id(address) + sep + rest


@dataclass(frozen=True)
class Coin:
    coin_type: str
    decimals: int = field(default=0, compare=False)
    symbol: str = field(default="", compare=False)
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "coin_type", normalize_coin_type(self.coin_type))

    def sorts_before(self, other: Coin) -> bool:
        return self.coin_type < other.coin_type

    @property
    def is_sui(self) -> bool:
        return self.coin_type == SUI_COIN_TYPE


SUI_COIN_TYPE = normalize_coin_type("0x2::sui::SUI")
