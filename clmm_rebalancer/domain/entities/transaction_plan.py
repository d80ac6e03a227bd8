from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union


@dataclass(frozen=True)
class ObjectArg:
    object_id: str


@dataclass(frozen=True)
class PureArg:
    value: Union[int, bool, str]
    type_tag: str


@dataclass(frozen=True)
class ResultRef:
    """Handle to the output of an earlier step in the same plan."""

    step_index: int
    result_index: int | None = None

    def at(self, index: int) -> ResultRef:
        return ResultRef(step_index=self.step_index, result_index=index)


PlanArgument = Union[ObjectArg, PureArg, ResultRef]


@dataclass(frozen=True)
class MoveCallStep:
    target: str
    type_arguments: tuple[str, ...]
    arguments: tuple[PlanArgument, ...]


@dataclass(frozen=True)
class MergeCoinsStep:
    destination: PlanArgument
    sources: tuple[PlanArgument, ...]


@dataclass(frozen=True)
class TransferObjectsStep:
    objects: tuple[PlanArgument, ...]
    recipient: PureArg


@dataclass(frozen=True)
class CoinWithBalanceStep:
    coin_type: str
    balance: int
    use_gas_coin: bool


PlanStep = Union[MoveCallStep, MergeCoinsStep, TransferObjectsStep, CoinWithBalanceStep]


class TransactionPlan:
    """Ordered steps submitted and validated as one atomic request."""

    def __init__(self, *, sender: str | None = None):
        self.sender = sender
        self._steps: list[PlanStep] = []

    @property
    def steps(self) -> tuple[PlanStep, ...]:
        return tuple(self._steps)

    def object(self, object_id: str) -> ObjectArg:
        return ObjectArg(object_id=object_id)

    def pure(self, value: Union[int, bool, str], type_tag: str) -> PureArg:
        return PureArg(value=value, type_tag=type_tag)

    def move_call(
        self,
        *,
        target: str,
        type_arguments: Sequence[str] = (),
        arguments: Sequence[PlanArgument] = (),
    ) -> ResultRef:
        return self._append(
            MoveCallStep(target=target, type_arguments=tuple(type_arguments), arguments=tuple(arguments))
        )

    def merge_coins(self, destination: PlanArgument, sources: Sequence[PlanArgument]) -> None:
        self._append(MergeCoinsStep(destination=destination, sources=tuple(sources)))

    def transfer_objects(self, objects: Sequence[PlanArgument], recipient: str) -> None:
        self._append(
            TransferObjectsStep(objects=tuple(objects), recipient=self.pure(recipient, "address"))
        )

    def coin_with_balance(self, *, coin_type: str, balance: int, use_gas_coin: bool = False) -> ResultRef:
        return self._append(
            CoinWithBalanceStep(coin_type=coin_type, balance=balance, use_gas_coin=use_gas_coin)
        )

    def move_calls(self, target_suffix: str = "") -> list[MoveCallStep]:
        return [
            step
            for step in self._steps
            if isinstance(step, MoveCallStep) and step.target.endswith(target_suffix)
        ]

    def to_payload(self) -> dict:
        return {
            "sender": self.sender,
            "steps": [_step_payload(step) for step in self._steps],
        }

    def _append(self, step: PlanStep) -> ResultRef:
        self._steps.append(step)
        return ResultRef(step_index=len(self._steps) - 1)


def _argument_payload(argument: PlanArgument) -> dict:
    if isinstance(argument, ObjectArg):
        return {"kind": "object", "objectId": argument.object_id}
    if isinstance(argument, PureArg):
        value = argument.value
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        return {"kind": "pure", "type": argument.type_tag, "value": value}
    if argument.result_index is None:
        return {"kind": "result", "index": argument.step_index}
    return {"kind": "nestedResult", "index": argument.step_index, "resultIndex": argument.result_index}


def _step_payload(step: PlanStep) -> dict:
    if isinstance(step, MoveCallStep):
        return {
            "kind": "moveCall",
            "target": step.target,
            "typeArguments": list(step.type_arguments),
            "arguments": [_argument_payload(arg) for arg in step.arguments],
        }
    if isinstance(step, MergeCoinsStep):
        return {
            "kind": "mergeCoins",
            "destination": _argument_payload(step.destination),
            "sources": [_argument_payload(arg) for arg in step.sources],
        }
    if isinstance(step, TransferObjectsStep):
        return {
            "kind": "transferObjects",
            "objects": [_argument_payload(arg) for arg in step.objects],
            "recipient": _argument_payload(step.recipient),
        }
    return {
        "kind": "coinWithBalance",
        "coinType": step.coin_type,
        "balance": str(step.balance),
        "useGasCoin": step.use_gas_coin,
    }
