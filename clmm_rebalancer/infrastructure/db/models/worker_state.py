from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Text
from sqlalchemy.orm import Mapped, mapped_column

from clmm_rebalancer.core.db import Base


class WorkerStateModel(Base):
    __tablename__ = "worker_state"

    pool_id: Mapped[str] = mapped_column(Text, primary_key=True)
    position_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_compound_at: Mapped[float | None] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
