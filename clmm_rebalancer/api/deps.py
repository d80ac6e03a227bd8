from __future__ import annotations

from fastapi import HTTPException, Request

from clmm_rebalancer.application.use_cases.position_manager import PositionManager, PositionManagerOptions
from clmm_rebalancer.application.use_cases.rebalance_worker import RebalanceWorker, RebalanceWorkerOptions
from clmm_rebalancer.core.config import Settings
from clmm_rebalancer.core.db import get_engine
from clmm_rebalancer.infrastructure.clients.signer_sidecar_client import (
    SignerSidecarClient,
    SignerSidecarClientSettings,
)
from clmm_rebalancer.infrastructure.clients.sui_rpc_client import SuiRpcClient, SuiRpcClientSettings
from clmm_rebalancer.infrastructure.db.repositories.worker_state_repository import SqlWorkerStateRepository
from clmm_rebalancer.infrastructure.protocols.registry import get_protocol_binding
from clmm_rebalancer.infrastructure.providers.sui_ledger_provider import SuiLedgerProvider


def get_rebalance_worker(request: Request) -> RebalanceWorker:
    worker = getattr(request.app.state, "rebalance_worker", None)
    if worker is None:
        raise HTTPException(status_code=503, detail="Rebalance worker is not running.")
    return worker


def build_rebalance_worker(settings: Settings) -> RebalanceWorker:
    binding = get_protocol_binding(settings.protocol)
    ledger = SuiLedgerProvider(
        rpc_client=SuiRpcClient(
            SuiRpcClientSettings(
                rpc_url=settings.sui_rpc_url,
                timeout_seconds=settings.sui_rpc_timeout_seconds,
                max_retries=settings.sui_rpc_max_retries,
            )
        ),
        mapper=binding.mapper,
    )
    position_manager = PositionManager(
        options=PositionManagerOptions(slippage_tolerance=settings.slippage_tolerance),
        operations=binding.operations,
        yield_reader=ledger,
    )
    submitter = SignerSidecarClient(
        SignerSidecarClientSettings(
            base_url=settings.signer_sidecar_url,
            timeout_seconds=settings.signer_timeout_seconds,
        )
    )
    state_store = SqlWorkerStateRepository(get_engine(settings.state_dsn))
    state_store.ensure_schema()

    return RebalanceWorker(
        options=RebalanceWorkerOptions(
            pool_id=settings.pool_id,
            owner=settings.operator_address,
            multiplier=settings.multiplier,
            b_price_percent=settings.b_price_percent,
            t_price_percent=settings.t_price_percent,
            compound_interval_seconds=settings.compound_rewards_schedule_seconds,
            cycle_delay_seconds=settings.cycle_delay_seconds,
            cycle_timeout_seconds=settings.cycle_timeout_seconds,
            settle_delay_seconds=settings.settle_delay_seconds,
            widening_spacings=settings.range_widening_spacings,
        ),
        ledger=ledger,
        position_manager=position_manager,
        submitter=submitter,
        position_object_type=binding.operations.position_object_type,
        state_store=state_store,
    )
