from __future__ import annotations

from dataclasses import dataclass

from clmm_rebalancer.application.ports.protocol_operations_port import ProtocolOperations
from clmm_rebalancer.domain.entities.pool import ClmmProtocol
from clmm_rebalancer.domain.exceptions import UnsupportedProtocolError
from clmm_rebalancer.infrastructure.mappers.cetus_mapper import CetusObjectMapper
from clmm_rebalancer.infrastructure.mappers.flowx_mapper import FlowXObjectMapper
from clmm_rebalancer.infrastructure.protocols.cetus_operations import CetusOperations
from clmm_rebalancer.infrastructure.protocols.flowx_operations import FlowXOperations
from clmm_rebalancer.infrastructure.providers.sui_ledger_provider import ClmmObjectMapper


@dataclass(frozen=True)
class ProtocolBinding:
    operations: ProtocolOperations
    mapper: ClmmObjectMapper


def create_protocol_operations(protocol: ClmmProtocol) -> ProtocolOperations:
    return get_protocol_binding(protocol).operations


def get_protocol_binding(protocol: ClmmProtocol) -> ProtocolBinding:
    if protocol == ClmmProtocol.CETUS:
        return ProtocolBinding(operations=CetusOperations(), mapper=CetusObjectMapper())
    if protocol == ClmmProtocol.FLOWX_V3:
        return ProtocolBinding(operations=FlowXOperations(), mapper=FlowXObjectMapper())
    raise UnsupportedProtocolError(f"Unsupported CLMM protocol: {protocol}")
