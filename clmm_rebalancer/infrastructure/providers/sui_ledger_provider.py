from __future__ import annotations

import logging
from typing import Protocol

from clmm_rebalancer.application.ports.ledger_read_port import LedgerReadPort
from clmm_rebalancer.application.ports.pending_yield_port import PendingYieldPort
from clmm_rebalancer.domain.entities.coin import Coin, normalize_coin_type, normalize_object_id
from clmm_rebalancer.domain.entities.pool import ClmmProtocol, Pool
from clmm_rebalancer.domain.entities.position import Position
from clmm_rebalancer.domain.exceptions import (
    InvalidDataError,
    PoolNotFoundError,
    PositionNotFoundError,
)
from clmm_rebalancer.domain.services.tick_math import TokenAmounts
from clmm_rebalancer.infrastructure.clients.sui_rpc_client import SuiRpcClient
from clmm_rebalancer.infrastructure.schemas.move_objects import SuiObjectData


logger = logging.getLogger(__name__)


class ClmmObjectMapper(Protocol):
    protocol: ClmmProtocol
    pool_object_type: str
    position_object_type: str

    def pool_coin_types(self, data: SuiObjectData) -> tuple[str, str]:
        ...

    def map_pool(self, data: SuiObjectData, *, coins: tuple[Coin, Coin]) -> Pool:
        ...

    def position_pool_id(self, data: SuiObjectData) -> str:
        ...

    def map_position(self, data: SuiObjectData, *, pool: Pool) -> Position:
        ...


class SuiLedgerProvider(LedgerReadPort, PendingYieldPort):
    def __init__(self, *, rpc_client: SuiRpcClient, mapper: ClmmObjectMapper, page_size: int = 50):
        self._rpc = rpc_client
        self._mapper = mapper
        self._page_size = page_size
        self._coin_cache: dict[str, Coin] = {}

    async def get_pool_by_id(self, *, pool_id: str) -> Pool:
        response = await self._rpc.get_object(pool_id)
        if response.data is None:
            raise PoolNotFoundError(f"Pool {pool_id} not found.")
        data = response.data
        if not (data.type or "").startswith(self._mapper.pool_object_type):
            raise InvalidDataError(data.object_id, "type", f"expected {self._mapper.pool_object_type}, got {data.type}")

        coin_type_x, coin_type_y = self._mapper.pool_coin_types(data)
        coins = (await self._get_coin(coin_type_x), await self._get_coin(coin_type_y))
        return self._mapper.map_pool(data, coins=coins)

    async def get_position_by_id(self, *, position_id: str) -> Position:
        response = await self._rpc.get_object(position_id)
        if response.data is None:
            raise PositionNotFoundError(f"Position {position_id} not found.")
        data = response.data
        if data.type != self._mapper.position_object_type:
            raise InvalidDataError(
                data.object_id,
                "type",
                f"expected {self._mapper.position_object_type}, got {data.type}",
            )
        pool = await self.get_pool_by_id(pool_id=self._mapper.position_pool_id(data))
        return self._mapper.map_position(data, pool=pool)

    async def get_largest_position(self, *, owner: str, pool_id: str) -> Position | None:
        target_pool = normalize_object_id(pool_id)
        pool: Pool | None = None
        largest: Position | None = None
        scanned = 0
        cursor: str | None = None

        while True:
            page = await self._rpc.get_owned_objects(
                owner,
                struct_type=self._mapper.position_object_type,
                cursor=cursor,
                limit=self._page_size,
            )
            for item in page.data:
                if item.data is None:
                    continue
                scanned += 1
                try:
                    if normalize_object_id(self._mapper.position_pool_id(item.data)) != target_pool:
                        continue
                    if pool is None:
                        pool = await self.get_pool_by_id(pool_id=target_pool)
                    position = self._mapper.map_position(item.data, pool=pool)
                except InvalidDataError as exc:
                    logger.warning(
                        "sui_ledger_provider: skip_invalid_position object_id=%s field=%s error=%s",
                        exc.object_id,
                        exc.field,
                        exc,
                    )
                    continue
                if largest is None or position.liquidity > largest.liquidity:
                    largest = position

            if not page.has_next_page or not page.next_cursor:
                break
            cursor = page.next_cursor

        logger.info(
            "sui_ledger_provider: largest_position owner=%s pool_id=%s scanned=%s position_id=%s",
            owner,
            target_pool,
            scanned,
            largest.id if largest else None,
        )
        return largest

    async def get_fees(self, *, position: Position) -> TokenAmounts:
        return position.pending_fees

    async def get_rewards(self, *, position: Position) -> list[int]:
        return position.pending_rewards

    async def _get_coin(self, coin_type: str) -> Coin:
        key = normalize_coin_type(coin_type)
        cached = self._coin_cache.get(key)
        if cached is not None:
            return cached

        metadata = await self._rpc.get_coin_metadata(coin_type)
        if metadata is None:
            logger.warning("sui_ledger_provider: coin_metadata_missing coin_type=%s", coin_type)
            coin = Coin(coin_type)
        else:
            coin = Coin(coin_type, decimals=metadata.decimals, symbol=metadata.symbol, name=metadata.name)
        self._coin_cache[key] = coin
        return coin
