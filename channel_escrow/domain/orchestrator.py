"""Transfer orchestrator: sequences the transfer steps as a state machine.

States: idle -> joining -> verifying_ownership -> revoking_admins
        -> transferring_creator -> leaving -> completed
Any non-terminal state may move to failed.

Every step opens and closes its own platform session. A run that fails
after transferring_creator has already moved ownership to the buyer; the
run reports this through ``ownership_moved`` and the ledger records the
job as completed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from channel_escrow.config import AppConfig
from channel_escrow.domain.handoff import CreatorHandoff
from channel_escrow.domain.leave import EscrowExit
from channel_escrow.domain.membership import MembershipGate
from channel_escrow.domain.models import (
    JobStatus,
    OwnershipCheck,
    RevocationResult,
    TransferRequest,
    TransferSteps,
)
from channel_escrow.domain.revoker import AdminRightsRevoker
from channel_escrow.domain.roles import RoleClassifier
from channel_escrow.errors import PlatformApiError, PreconditionError, TransferFailed

if TYPE_CHECKING:
    from channel_escrow.ports.outbound import LedgerPort, SessionProvider

logger = logging.getLogger(__name__)

NOT_OWNER_INSTRUCTION = "Seller must first transfer channel ownership to admin account"
LISTING_SOLD = "sold"


class TransferState(str, Enum):
    IDLE = "idle"
    JOINING = "joining"
    VERIFYING_OWNERSHIP = "verifying_ownership"
    REVOKING_ADMINS = "revoking_admins"
    TRANSFERRING_CREATOR = "transferring_creator"
    LEAVING = "leaving"
    COMPLETED = "completed"
    FAILED = "failed"


_NEXT = {
    TransferState.IDLE: TransferState.JOINING,
    TransferState.JOINING: TransferState.VERIFYING_OWNERSHIP,
    TransferState.VERIFYING_OWNERSHIP: TransferState.REVOKING_ADMINS,
    TransferState.REVOKING_ADMINS: TransferState.TRANSFERRING_CREATOR,
    TransferState.TRANSFERRING_CREATOR: TransferState.LEAVING,
    TransferState.LEAVING: TransferState.COMPLETED,
}

TERMINAL_STATES = frozenset({TransferState.COMPLETED, TransferState.FAILED})


@dataclass
class TransferRun:
    request: TransferRequest
    state: TransferState = TransferState.IDLE
    history: List[TransferState] = field(default_factory=lambda: [TransferState.IDLE])
    steps: TransferSteps = field(default_factory=TransferSteps)
    ownership_check: Optional[OwnershipCheck] = None
    revocation: Optional[RevocationResult] = None
    failed_state: Optional[TransferState] = None
    error: Optional[BaseException] = None

    @property
    def ownership_moved(self) -> bool:
        return self.steps.ownership_transferred

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: TransferState) -> None:
        expected = _NEXT.get(self.state)
        if target is not expected:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def fail(self, error: BaseException) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Run already terminal ({self.state.value})")
        self.failed_state = self.state
        self.error = error
        self.state = TransferState.FAILED
        self.history.append(TransferState.FAILED)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TransferOrchestrator:
    """Runs the join -> verify -> revoke -> handoff -> leave workflow."""

    def __init__(
        self,
        sessions: "SessionProvider",
        config: AppConfig,
        ledger: Optional["LedgerPort"] = None,
        *,
        gate: Optional[MembershipGate] = None,
        classifier: Optional[RoleClassifier] = None,
        revoker: Optional[AdminRightsRevoker] = None,
        handoff: Optional[CreatorHandoff] = None,
        escrow_exit: Optional[EscrowExit] = None,
    ):
        self._config = config
        self._ledger = ledger
        self.gate = gate or MembershipGate(sessions)
        self.classifier = classifier or RoleClassifier(sessions)
        self.revoker = revoker or AdminRightsRevoker(
            sessions, page_limit=config.policy.admin_page_limit
        )
        self.handoff = handoff or CreatorHandoff(sessions, config.telegram.two_factor_password)
        self.escrow_exit = escrow_exit or EscrowExit(sessions)

    async def run(self, request: TransferRequest) -> TransferRun:
        """Execute one transfer. Raises ValidationError or TransferFailed."""
        request.validate()
        run = TransferRun(request=request)
        channel = request.channel_username
        logger.info(
            "Transfer %s: channel=%s buyer=%s", request.job_id, channel, request.buyer_username
        )

        try:
            run.advance(TransferState.JOINING)
            membership = await self.gate.ensure_member(channel)
            run.steps.joined = membership.joined

            run.advance(TransferState.VERIFYING_OWNERSHIP)
            check = await self.classifier.classify(channel)
            run.ownership_check = check
            if not check.is_owner:
                raise PreconditionError(check, NOT_OWNER_INSTRUCTION)
            # No admin may be revoked while the handoff secret is missing.
            self.handoff.check_ready()

            await self._update_job(request.job_id, {"status": JobStatus.IN_PROGRESS.value})

            run.advance(TransferState.REVOKING_ADMINS)
            revocation = await self.revoker.revoke_other_admins(channel)
            run.revocation = revocation
            run.steps.admins_removed = len(revocation.revoked)
            self._check_revocation_policy(revocation)

            run.advance(TransferState.TRANSFERRING_CREATOR)
            await self.handoff.transfer_creator(channel, request.buyer_username)
            run.steps.ownership_transferred = True

            run.advance(TransferState.LEAVING)
            await self.escrow_exit.leave(channel)
            run.steps.escrow_left = True

            run.advance(TransferState.COMPLETED)
        except Exception as e:
            run.fail(e)
            if isinstance(e, PreconditionError):
                logger.warning("Transfer %s not ready: escrow role is %s", request.job_id, e.check.current_role.value)
            elif run.ownership_moved:
                logger.exception(
                    "Transfer %s: ownership moved but cleanup failed in %s",
                    request.job_id, run.failed_state.value,
                )
                await self._record_completed(request.job_id)
            else:
                logger.exception(
                    "Transfer %s failed in %s", request.job_id, run.failed_state.value
                )
                await self._update_job(request.job_id, {"status": JobStatus.FAILED.value})
            raise TransferFailed(run, e) from e

        await self._record_completed(request.job_id)
        logger.info("Transfer %s completed: %s", request.job_id, run.steps.to_dict())
        return run

    def _check_revocation_policy(self, revocation: RevocationResult) -> None:
        limit = self._config.policy.max_revocation_failures
        if limit is None or len(revocation.failed) <= limit:
            return
        raise PlatformApiError(
            f"{len(revocation.failed)} admin revocations failed (allowed: {limit})"
        )

    # --- Ledger side effects (best-effort, never change the run outcome) ---

    def _ledger_ready(self) -> bool:
        if self._ledger is None or not self._ledger.is_configured:
            logger.info("Ledger not configured, skipping job update")
            return False
        return True

    async def _update_job(self, job_id: str, values: Dict[str, Any]) -> None:
        if not self._ledger_ready():
            return
        try:
            await self._ledger.update_job(job_id, values)
        except Exception as e:
            logger.error("Failed to update job %s with %s: %s", job_id, values, e)

    async def _record_completed(self, job_id: str) -> None:
        if not self._ledger_ready():
            return
        try:
            await self._ledger.update_job(
                job_id, {"status": JobStatus.COMPLETED.value, "completed_at": _now_iso()}
            )
            logger.info("Job %s marked completed", job_id)
            job = await self._ledger.get_job(job_id)
            if job and job.listing_id:
                await self._ledger.update_listing(job.listing_id, {"status": LISTING_SOLD})
                logger.info("Listing %s marked as sold", job.listing_id)
        except Exception as e:
            logger.error("Failed to record completion of job %s: %s", job_id, e)
