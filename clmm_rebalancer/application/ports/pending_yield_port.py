from __future__ import annotations

from typing import Protocol

from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.services.tick_math import TokenAmounts


class PendingYieldPort(Protocol):
    async def get_fees(self, *, position: Position) -> TokenAmounts:
        ...

    async def get_rewards(self, *, position: Position) -> list[int]:
        ...
