from __future__ import annotations

import asyncio
from dataclasses import dataclass
import itertools
import logging
from typing import Any

import httpx

from clmm_rebalancer.infrastructure.schemas.move_objects import (
    CoinMetadata,
    OwnedObjectsPage,
    SuiObjectResponse,
)


logger = logging.getLogger(__name__)


class SuiRpcError(RuntimeError):
    pass


@dataclass(frozen=True)
class SuiRpcClientSettings:
    rpc_url: str
    timeout_seconds: float
    max_retries: int


_OBJECT_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showContent": True,
}


class SuiRpcClient:
    def __init__(
        self,
        settings: SuiRpcClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport
        self._request_ids = itertools.count(1)

    async def get_object(self, object_id: str) -> SuiObjectResponse:
        result = await self._call("sui_getObject", [object_id, _OBJECT_OPTIONS])
        return SuiObjectResponse.model_validate(result or {})

    async def get_owned_objects(
        self,
        owner: str,
        *,
        struct_type: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> OwnedObjectsPage:
        query: dict[str, Any] = {"options": _OBJECT_OPTIONS}
        if struct_type:
            query["filter"] = {"StructType": struct_type}
        result = await self._call("suix_getOwnedObjects", [owner, query, cursor, limit])
        return OwnedObjectsPage.model_validate(result or {})

    async def get_coin_metadata(self, coin_type: str) -> CoinMetadata | None:
        result = await self._call("suix_getCoinMetadata", [coin_type])
        if not result:
            return None
        return CoinMetadata.model_validate(result)

    async def _call(self, method: str, params: list[Any]) -> Any:
        attempts = max(1, self._settings.max_retries)
        delay = 0.25
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            body = {
                "jsonrpc": "2.0",
                "id": next(self._request_ids),
                "method": method,
                "params": params,
            }
            try:
                async with httpx.AsyncClient(
                    timeout=self._settings.timeout_seconds,
                    transport=self._transport,
                ) as client:
                    response = await client.post(self._settings.rpc_url, json=body)
                    response.raise_for_status()
                    payload = response.json()

                error = payload.get("error")
                if error:
                    message = error.get("message", error) if isinstance(error, dict) else error
                    raise SuiRpcError(f"{method}: {message}")
                return payload.get("result")
            except (httpx.HTTPError, RuntimeError, ValueError) as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "sui_rpc_client: rpc_retry method=%s attempt=%s/%s error=%s",
                    method,
                    attempt,
                    attempts,
                    exc,
                )
                await asyncio.sleep(delay)
                delay *= 2

        raise SuiRpcError(f"RPC request {method} failed after retries: {last_exc}") from last_exc
