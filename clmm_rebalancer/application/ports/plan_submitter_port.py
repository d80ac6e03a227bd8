from __future__ import annotations

from typing import Protocol

from clmm_rebalancer.application.dto.submission import SubmissionResult
from clmm_rebalancer.domain.entities.transaction_plan import TransactionPlan


class PlanSubmitterPort(Protocol):
    async def submit(self, *, plan: TransactionPlan) -> SubmissionResult:
        ...
