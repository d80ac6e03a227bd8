from __future__ import annotations

from typing import Protocol

from clmm_rebalancer.domain.entities.pool import Pool
from clmm_rebalancer.domain.entities.position import Position


class LedgerReadPort(Protocol):
    async def get_position_by_id(self, *, position_id: str) -> Position:
        ...

    async def get_largest_position(self, *, owner: str, pool_id: str) -> Position | None:
        ...

    async def get_pool_by_id(self, *, pool_id: str) -> Pool:
        ...
