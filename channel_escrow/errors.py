"""Error taxonomy shared by the domain, adapters and HTTP layer."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from channel_escrow.domain.models import OwnershipCheck
    from channel_escrow.domain.orchestrator import TransferRun


class TransferServiceError(Exception):
    """Base class for every error the service raises on purpose."""


class ValidationError(TransferServiceError):
    """A required request field is missing."""


class AuthError(TransferServiceError):
    """The shared-secret header did not match."""


class PreconditionError(TransferServiceError):
    """The escrow account is not the channel creator yet."""

    def __init__(self, check: "OwnershipCheck", instruction: str):
        super().__init__("Transfer not ready")
        self.check = check
        self.instruction = instruction


class NotFoundError(TransferServiceError):
    """A handle did not resolve to a platform entity."""


class PlatformConnectionError(TransferServiceError, ConnectionError):
    """A platform session could not be established."""


class PlatformApiError(TransferServiceError):
    """The platform rejected a call."""


class AuthProofError(TransferServiceError):
    """The two-factor secret is missing or the password proof was rejected."""


class LedgerError(TransferServiceError):
    """The ledger store rejected a read or update."""


class TransferFailed(TransferServiceError):
    """A transfer run ended in the failed state. The step error is the __cause__."""

    def __init__(self, run: "TransferRun", cause: Optional[BaseException] = None):
        self.run = run
        self.cause = cause if cause is not None else run.error
        super().__init__(str(self.cause) if self.cause is not None else "Transfer failed")
