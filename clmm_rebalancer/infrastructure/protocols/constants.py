from __future__ import annotations

from dataclasses import dataclass


SUI_CLOCK_OBJECT_ID = "0x6"
TICK_INDEX_BITS = 32


@dataclass(frozen=True)
class CetusConfig:
    package_id: str
    global_config_id: str


@dataclass(frozen=True)
class FlowXV3Config:
    package_id: str
    version_object: str


CETUS_CONFIG = CetusConfig(
    package_id="0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb",
    global_config_id="0xdaa46292632c3c4d8f31f23ea0f9b36a28ff3677e9684980e4438403a67a3d8f",
)

FLOWX_V3_CONFIG = FlowXV3Config(
    package_id="0xde2c47eb0da8c74e4d0f6a220c41619681221b9c2590518095f0f0c2d3f3c772",
    version_object="0xf7b8c3e41cde89b0f5c6e5e2e3e0e1e2e3e4e5e6e7e8e9e0e1e2e3e4e5e6e7e8",
)

CETUS_POSITION_OBJECT_TYPE = (
    "0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb::position::Position"
)
CETUS_POOL_OBJECT_TYPE = "0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb::pool::Pool"

FLOWX_V3_POSITION_OBJECT_TYPE = (
    "0x25929e7f29e0a30eb4e692952ba1b5b65a3a4d65ab5f2a32e1ba3edcb587f26d::position::Position"
)
FLOWX_V3_POOL_OBJECT_TYPE = (
    "0x25929e7f29e0a30eb4e692952ba1b5b65a3a4d65ab5f2a32e1ba3edcb587f26d::pool::Pool"
)
