from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from clmm_rebalancer.domain.exceptions import InvalidDataError
from clmm_rebalancer.infrastructure.protocols.constants import TICK_INDEX_BITS


ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_type_arguments(type_str: str) -> list[str] | None:
    """Generic arguments of a Move type, e.g. ``Pool<A, B>`` -> ``[A, B]``."""
    start = type_str.find("<")
    if start == -1 or not type_str.endswith(">"):
        return None

    args: list[str] = []
    current = ""
    depth = 0
    for char in type_str[start + 1 : -1]:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif char == "," and depth == 0:
            args.append(current.strip())
            current = ""
            continue
        current += char

    if current.strip():
        args.append(current.strip())
    return args or None


def to_signed_i32(bits: int) -> int:
    bits &= (1 << TICK_INDEX_BITS) - 1
    if bits >= 1 << (TICK_INDEX_BITS - 1):
        return bits - (1 << TICK_INDEX_BITS)
    return bits


def extract_tick_index(value: Any, object_id: str, field_name: str) -> int:
    if isinstance(value, Mapping):
        fields = value.get("fields")
        if isinstance(fields, Mapping) and fields.get("bits") is not None:
            return _parse_bits(fields["bits"], object_id, field_name)
    elif isinstance(value, (int, str)) and not isinstance(value, bool):
        return _parse_bits(value, object_id, field_name)

    raise InvalidDataError(
        object_id,
        field_name,
        "expected a Move integer struct or a primitive value",
    )


def _parse_bits(value: int | str, object_id: str, field_name: str) -> int:
    try:
        return to_signed_i32(int(value))
    except (TypeError, ValueError) as exc:
        raise InvalidDataError(object_id, field_name, f"not an integer: {value!r}") from exc


def owner_address(owner: Any) -> str:
    if isinstance(owner, Mapping):
        return str(owner.get("AddressOwner") or "")
    return ""


def coin_type_from_name(name: str) -> str:
    return name if name.startswith("0x") else f"0x{name}"


def parse_fields(model: Type[ModelT], fields: Mapping[str, Any], object_id: str) -> ModelT:
    try:
        return model.model_validate(dict(fields))
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "fields"
        raise InvalidDataError(object_id, location, first.get("msg")) from exc
