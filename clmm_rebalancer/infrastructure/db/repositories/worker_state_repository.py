from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import DateTime, bindparam, text

from clmm_rebalancer.application.dto.worker import WorkerState
from clmm_rebalancer.application.ports.worker_state_port import WorkerStatePort
from clmm_rebalancer.infrastructure.db.mappers.worker_state_mapper import map_row_to_worker_state
from clmm_rebalancer.infrastructure.db.models.worker_state import WorkerStateModel


logger = logging.getLogger(__name__)


class SqlWorkerStateRepository(WorkerStatePort):
    def __init__(self, engine):
        self._engine = engine

    def ensure_schema(self) -> None:
        WorkerStateModel.metadata.create_all(self._engine, tables=[WorkerStateModel.__table__])

    def load(self, *, pool_id: str) -> WorkerState | None:
        sql = text(
            """
            SELECT pool_id, position_id, last_compound_at, updated_at
            FROM worker_state
            WHERE pool_id = :pool_id
            """
        ).columns(updated_at=DateTime(timezone=True))
        with self._engine.connect() as conn:
            row = conn.execute(sql, {"pool_id": pool_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_worker_state(row)

    def save(self, *, state: WorkerState) -> None:
        sql = text(
            """
            INSERT INTO worker_state (pool_id, position_id, last_compound_at, updated_at)
            VALUES (:pool_id, :position_id, :last_compound_at, :updated_at)
            ON CONFLICT (pool_id)
            DO UPDATE SET
                position_id = excluded.position_id,
                last_compound_at = excluded.last_compound_at,
                updated_at = excluded.updated_at
            """
        ).bindparams(bindparam("updated_at", type_=DateTime(timezone=True)))
        with self._engine.begin() as conn:
            conn.execute(
                sql,
                {
                    "pool_id": state.pool_id,
                    "position_id": state.position_id,
                    "last_compound_at": state.last_compound_at,
                    "updated_at": state.updated_at or datetime.now(timezone.utc),
                },
            )
        logger.debug(
            "worker_state_repo: saved pool_id=%s position_id=%s last_compound_at=%s",
            state.pool_id,
            state.position_id,
            state.last_compound_at,
        )
