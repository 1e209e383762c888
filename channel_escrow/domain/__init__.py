"""Domain layer: pure Python, no framework dependencies."""

from channel_escrow.domain.handoff import CreatorHandoff
from channel_escrow.domain.leave import EscrowExit
from channel_escrow.domain.membership import MembershipGate
from channel_escrow.domain.models import (
    REVOKED_RANK,
    REVOKED_RIGHTS,
    AdminRights,
    Channel,
    Identity,
    JobStatus,
    MembershipResult,
    OwnershipCheck,
    Participant,
    RevocationResult,
    Role,
    TransferJob,
    TransferRequest,
    TransferSteps,
)
from channel_escrow.domain.orchestrator import (
    TransferOrchestrator,
    TransferRun,
    TransferState,
)
from channel_escrow.domain.resolver import normalize_handle
from channel_escrow.domain.revoker import AdminRightsRevoker
from channel_escrow.domain.roles import RoleClassifier

__all__ = [
    "REVOKED_RANK",
    "REVOKED_RIGHTS",
    "AdminRights",
    "AdminRightsRevoker",
    "Channel",
    "CreatorHandoff",
    "EscrowExit",
    "Identity",
    "JobStatus",
    "MembershipGate",
    "MembershipResult",
    "OwnershipCheck",
    "Participant",
    "RevocationResult",
    "Role",
    "RoleClassifier",
    "TransferJob",
    "TransferOrchestrator",
    "TransferRequest",
    "TransferRun",
    "TransferState",
    "TransferSteps",
    "normalize_handle",
]
