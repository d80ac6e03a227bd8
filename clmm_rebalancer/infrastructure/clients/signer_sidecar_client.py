from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from clmm_rebalancer.application.dto.submission import CreatedObject, SubmissionResult
from clmm_rebalancer.application.ports.plan_submitter_port import PlanSubmitterPort
from clmm_rebalancer.domain.entities.transaction_plan import TransactionPlan


logger = logging.getLogger(__name__)


class SignerError(RuntimeError):
    pass


@dataclass(frozen=True)
class SignerSidecarClientSettings:
    base_url: str
    timeout_seconds: float


class SignerSidecarClient(PlanSubmitterPort):
    """Hands plans to the signing sidecar, which owns the operator key.

    Submissions are never retried here: a timed-out request may still have
    landed, and the next worker cycle re-reads the ledger anyway.
    """

    def __init__(
        self,
        settings: SignerSidecarClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport

    async def submit(self, *, plan: TransactionPlan) -> SubmissionResult:
        url = f"{self._settings.base_url.rstrip('/')}/v1/transactions/execute"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=plan.to_payload())
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SignerError(f"Signer request failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise SignerError("Signer returned an unexpected payload.")

        result = map_submission_result(payload)
        logger.info(
            "signer_sidecar_client: submitted digest=%s success=%s steps=%s created=%s",
            result.digest,
            result.success,
            len(plan.steps),
            len(result.created_objects),
        )
        return result


def map_submission_result(payload: dict) -> SubmissionResult:
    status = payload.get("status")
    if isinstance(status, dict):
        status = status.get("status")
    created = tuple(
        CreatedObject(object_id=str(change["objectId"]), object_type=str(change.get("objectType", "")))
        for change in payload.get("objectChanges") or []
        if isinstance(change, dict) and change.get("type") == "created" and change.get("objectId")
    )
    return SubmissionResult(
        digest=str(payload.get("digest") or ""),
        success=status == "success",
        created_objects=created,
        error=payload.get("error"),
    )
